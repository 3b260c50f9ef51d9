"""
Task Intent Analysis

Classifies a free-text task description into a TaskType by counting
keyword hits. Each distinct keyword counts once; the first type in
enumeration order with the highest count wins.
"""

from types import MappingProxyType

from ..models import TaskType

# Enumeration order of this table is the tie-break order
TASK_KEYWORDS = MappingProxyType(
    {
        TaskType.DEBUG: (
            "bug", "fix", "error", "broken", "crash", "fail", "issue",
            "problem", "debug", "deepdive", "trace", "investigate",
        ),
        TaskType.BUILD: (
            "build", "create", "new", "feature", "implement", "develop", "add",
            "make", "write component", "design", "architecture",
        ),
        TaskType.REFACTOR: (
            "refactor", "restructure", "reorganize", "rewrite", "clean",
            "cleanup", "improve", "modernize", "upgrade", "deprecate",
        ),
        TaskType.AUDIT: (
            "audit", "review", "check", "inspect", "analyze", "examine",
            "assess", "evaluate", "scan", "verify",
        ),
        TaskType.OPTIMIZE: (
            "optimize", "performance", "slow", "fast", "speed", "efficient",
            "bottleneck", "profile", "bench", "scale",
        ),
        TaskType.TEST: (
            "test", "coverage", "suite", "spec", "unit test",
            "integration test", "e2e", "mock", "stub",
        ),
        TaskType.SETUP: (
            "setup", "set up", "configure", "init", "initialize", "install",
            "provision", "scaffold", "template",
        ),
        TaskType.DOCUMENT: (
            "document", "doc", "readme", "comment", "example", "guide",
            "tutorial", "jsdoc",
        ),
        TaskType.UNKNOWN: (),
    }
)

TASK_DIFFICULTY = MappingProxyType(
    {
        TaskType.DEBUG: "intermediate",
        TaskType.BUILD: "intermediate",
        TaskType.REFACTOR: "advanced",
        TaskType.AUDIT: "advanced",
        TaskType.OPTIMIZE: "advanced",
        TaskType.TEST: "intermediate",
        TaskType.SETUP: "beginner",
        TaskType.DOCUMENT: "beginner",
        TaskType.UNKNOWN: "intermediate",
    }
)

TASK_TIME_ESTIMATE = MappingProxyType(
    {
        TaskType.DEBUG: "30-60m",
        TaskType.BUILD: "2-4 hours",
        TaskType.REFACTOR: "1-3 hours",
        TaskType.AUDIT: "2-4 hours",
        TaskType.OPTIMIZE: "2-4 hours",
        TaskType.TEST: "1-2 hours",
        TaskType.SETUP: "30-45m",
        TaskType.DOCUMENT: "1-2 hours",
        TaskType.UNKNOWN: "1-2 hours",
    }
)

TASK_TAGS = MappingProxyType(
    {
        TaskType.DEBUG: ("troubleshooting", "error-analysis", "root-cause", "reproduction"),
        TaskType.BUILD: ("feature-development", "architecture", "design", "implementation"),
        TaskType.REFACTOR: ("code-quality", "technical-debt", "modernization", "safety"),
        TaskType.AUDIT: ("code-review", "quality-assurance", "compliance", "assessment"),
        TaskType.OPTIMIZE: ("performance", "efficiency", "scalability", "bottleneck-analysis"),
        TaskType.TEST: ("coverage", "automation", "validation", "verification"),
        TaskType.SETUP: ("configuration", "initialization", "installation", "provisioning"),
        TaskType.DOCUMENT: ("documentation", "clarity", "examples", "guides"),
        TaskType.UNKNOWN: ("general", "miscellaneous"),
    }
)


def score_task_types(description: str) -> dict[TaskType, int]:
    """Count distinct keyword hits per task type."""
    lower = description.lower()
    return {
        task_type: sum(1 for keyword in keywords if keyword in lower)
        for task_type, keywords in TASK_KEYWORDS.items()
    }


def analyze_task_intent(description: str) -> TaskType:
    """
    Analyze a task description and infer its task type.

    Args:
        description: Free-text task description

    Returns:
        Best scoring TaskType, or TaskType.UNKNOWN if nothing matched
    """
    best_type = TaskType.UNKNOWN
    best_score = 0

    for task_type, score in score_task_types(description).items():
        if score > best_score:
            best_type = task_type
            best_score = score

    return best_type


def parse_task_type(value: str | None) -> TaskType | None:
    """Parse a task type name (case-insensitive); None if not a known type."""
    if not value:
        return None
    try:
        return TaskType(value.strip().lower())
    except ValueError:
        return None


def get_task_difficulty(task_type: TaskType) -> str:
    return TASK_DIFFICULTY[task_type]


def get_task_time_estimate(task_type: TaskType) -> str:
    return TASK_TIME_ESTIMATE[task_type]


def get_task_tags(task_type: TaskType) -> list[str]:
    return list(TASK_TAGS[task_type])
