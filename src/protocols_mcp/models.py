"""
Protocol Models - Data classes shared across scanner, search and tools.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

DEFAULT_CATEGORY = "General"
DEFAULT_DIFFICULTY = "intermediate"
DEFAULT_VERSION = "1.0.0"
DEFAULT_FILE_PATH = "BRAIN/"


class TaskType(str, Enum):
    """Task intent classes, in tie-break order."""

    DEBUG = "debug"
    BUILD = "build"
    REFACTOR = "refactor"
    AUDIT = "audit"
    OPTIMIZE = "optimize"
    TEST = "test"
    SETUP = "setup"
    DOCUMENT = "document"
    UNKNOWN = "unknown"


@dataclass
class ProtocolMetadata:
    """Structured record for one protocol document."""

    id: str
    file_name: str
    name: str
    title: str
    triggers: list[str] = field(default_factory=list)
    category: str = DEFAULT_CATEGORY
    purpose: str = ""
    file_path: str = DEFAULT_FILE_PATH
    tags: list[str] = field(default_factory=list)
    difficulty: str = DEFAULT_DIFFICULTY
    time_estimate: str | None = None
    version: str = DEFAULT_VERSION
    prerequisites: list[str] = field(default_factory=list)
    works_well_with: list[str] = field(default_factory=list)
    platform_tags: list[str] = field(default_factory=list)
    stack_specific: dict[str, bool] = field(default_factory=dict)
    has_frontmatter: bool = False

    def summary(self) -> dict[str, Any]:
        """Short form used by list_protocols."""
        return {
            "name": self.name,
            "title": self.title,
            "triggers": list(self.triggers),
            "category": self.category,
            "purpose": self.purpose,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class ProjectContext:
    """Technology stack of the caller's project."""

    language: str = "unknown"
    framework: str = "unknown"
    project_type: str = "unknown"
    test_framework: str = "unknown"
    package_manager: str = "unknown"
    has_docker: bool = False
    has_ci: bool = False
    has_git: bool = False
    dependencies: list[str] = field(default_factory=list)
    dev_dependencies: list[str] = field(default_factory=list)
    detected: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class SearchResult:
    """A scored full-text search hit."""

    protocol: str
    score: int
    matches: list[str] = field(default_factory=list)
    excerpt: str = ""
    context_relevance: str | None = None  # high, medium, low

    def to_dict(self, match_limit: int | None = None) -> dict[str, Any]:
        """Convert to dictionary, optionally trimming the match lines."""
        result: dict[str, Any] = {
            "protocol": self.protocol,
            "score": self.score,
            "excerpt": self.excerpt,
            "matches": (
                self.matches[:match_limit] if match_limit is not None else self.matches
            ),
        }
        if self.context_relevance:
            result["context_relevance"] = self.context_relevance
        return result


@dataclass
class FuzzyMatch:
    """A protocol name within fuzzy distance of the query."""

    protocol: str
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        return {"protocol": self.protocol, "similarity": self.similarity}


@dataclass
class WorkflowStep:
    """One recommended protocol in a workflow."""

    order: int
    protocol_name: str
    trigger: str
    reason: str
    optional: bool
    prerequisite: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Workflow:
    """Complete routed workflow for a task type."""

    name: str
    task_type: TaskType
    description: str
    estimated_time: str
    difficulty: str
    steps: list[WorkflowStep] = field(default_factory=list)
    shortcuts: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "task_type": self.task_type.value,
            "description": self.description,
            "estimated_time": self.estimated_time,
            "difficulty": self.difficulty,
            "steps": [step.to_dict() for step in self.steps],
            "shortcuts": self.shortcuts,
        }
