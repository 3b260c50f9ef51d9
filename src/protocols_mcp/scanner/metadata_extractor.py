"""Protocol Metadata Extractor

Parses one protocol document into a ProtocolMetadata record.

Documents may start with a YAML front matter block:
---
id: debug_protocol
version: 1.0.0
triggers: [DEEPDIVE]
category: Debugging
tags: [troubleshooting]
difficulty: intermediate
timeEstimate: 30-60m
worksWellWith: [error_fix_protocol]
---

# Debug Protocol

Anything the block does not provide (or everything, when the block is
absent or malformed) is inferred from the file name, title and body.
Extraction never raises.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

import yaml

from ..models import (
    DEFAULT_CATEGORY,
    DEFAULT_DIFFICULTY,
    DEFAULT_FILE_PATH,
    DEFAULT_VERSION,
    ProtocolMetadata,
)
from ..schemas import is_valid_frontmatter

logger = logging.getLogger(__name__)

DOCUMENT_EXTENSION = ".md"
PURPOSE_MAX_LENGTH = 200
PURPOSE_MAX_LINES = 2

VALID_DIFFICULTIES = ("beginner", "intermediate", "advanced")

FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*\r?$\n?(.*)\Z", re.DOTALL | re.MULTILINE
)
TITLE_PATTERN = re.compile(r"^#[ \t]+(.+?)\s*$", re.MULTILINE)
TRIGGER_LABEL_PATTERN = re.compile(
    r"(?:Trigger|Command):\s*['\"]?([A-Z0-9]+)['\"]?", re.IGNORECASE
)

# Known triggers keyed by protocol base name (from QUICK_REFERENCE.md)
KNOWN_TRIGGERS = MappingProxyType(
    {
        "MASTER_PROTOCOL": ("MASTER",),
        "code_review_protocol": ("COMPREHENSIVE",),
        "debug_protocol": ("DEEPDIVE",),
        "error_fix_protocol": ("AUTODEBUG",),
        "test_automation_protocol": ("FULLSPEC",),
        "moreFRONTend-PROTOCOL": ("ULTRATHINK",),
        "FRONTandBACKend-PROTOCOL": ("ANTI-GENERIC",),
        "bigpappa_protocol_reviewANDfixes": ("BIGPAPPA",),
        "codebase_indexing_protocol": ("FULLINDEX",),
        "security_audit_protocol": ("SECAUDIT",),
        "accessibility_protocol": ("A11YCHECK",),
        "git_workflow_protocol": ("GITFLOW",),
        "api_design_protocol": ("APIDESIGN",),
        "performance_protocol": ("PERFAUDIT",),
        "mdap_protocol": ("MDAP", "MILLIONSTEP"),
        "refactor_protocol": ("REFACTOR",),
        "aria_accessibility_protocol": ("FULLARIA",),
        "best_practices_protocol": ("BESTPRACTICES",),
    }
)

# Ordered: first substring of the lowercase name wins
CATEGORY_RULES: tuple[tuple[str, str], ...] = (
    ("code_review", "Quality"),
    ("debug", "Debugging"),
    ("error_fix", "Debugging"),
    ("test", "Testing"),
    ("security", "Security"),
    ("accessibility", "Accessibility"),
    ("performance", "Performance"),
    ("git", "Version Control"),
    ("api", "Architecture"),
    ("frontend", "Frontend"),
    ("backend", "Backend"),
    ("mdap", "Core"),
    ("refactor", "Refactoring"),
    ("codebase", "Architecture"),
    ("master", "Core"),
    ("bigpappa", "Audit"),
    ("optimized", "Configuration"),
)

TAG_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("debug", ("debugging", "troubleshooting")),
    ("error", ("error-handling", "troubleshooting")),
    ("test", ("testing", "automation")),
    ("security", ("security", "vulnerabilities")),
    ("accessibility", ("accessibility", "a11y")),
    ("aria", ("aria", "a11y")),
    ("performance", ("performance", "optimization")),
    ("git", ("git", "version-control")),
    ("api", ("api", "design")),
    ("frontend", ("frontend", "ui-ux")),
    ("backend", ("backend",)),
    ("refactor", ("refactoring", "code-quality")),
    ("review", ("code-review", "quality")),
    ("index", ("codebase", "architecture")),
    ("mdap", ("planning", "decomposition")),
    ("master", ("routing", "core")),
    ("best", ("best-practices",)),
)

FRONTEND_SIGNALS = ("frontend", "react", "aria", "accessibility")
BACKEND_SIGNALS = ("backend", "api", "database", "performance")

ALL_STACKS = MappingProxyType(
    {"node": True, "python": True, "go": True, "rust": True, "java": True}
)
FRONTEND_STACKS = MappingProxyType(
    {"react": True, "vue": True, "svelte": True, "node": True}
)


class FrontmatterStatus(str, Enum):
    """Outcome of looking for a front matter block."""

    PARSED = "parsed"
    ABSENT = "absent"
    MALFORMED = "malformed"


@dataclass
class FrontmatterResult:
    """Tagged result of parse_frontmatter()."""

    status: FrontmatterStatus
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


def strip_extension(file_name: str) -> str:
    """Remove exactly one trailing .md from a file name."""
    if file_name.endswith(DOCUMENT_EXTENSION):
        return file_name[: -len(DOCUMENT_EXTENSION)]
    return file_name


def parse_frontmatter(content: str) -> FrontmatterResult:
    """
    Split a document into front matter data and markdown body.

    Args:
        content: Raw document text (LF or CRLF line endings)

    Returns:
        FrontmatterResult; MALFORMED carries the whole content as body
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return FrontmatterResult(FrontmatterStatus.ABSENT, body=content)

    yaml_block, body = match.group(1), match.group(2)
    try:
        data = yaml.safe_load(yaml_block)
    except yaml.YAMLError as e:
        return FrontmatterResult(
            FrontmatterStatus.MALFORMED, body=content, error=str(e)
        )

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return FrontmatterResult(
            FrontmatterStatus.MALFORMED,
            body=content,
            error=f"expected a mapping, got {type(data).__name__}",
        )

    return FrontmatterResult(FrontmatterStatus.PARSED, body=body, data=data)


def extract_metadata(
    file_name: str, content: str, file_path: str = DEFAULT_FILE_PATH
) -> ProtocolMetadata:
    """
    Extract metadata from a protocol markdown file.

    Front matter fields win; inference fills whatever is missing.

    Args:
        file_name: File name including extension (e.g., "debug_protocol.md")
        content: Raw file content
        file_path: Directory of the file relative to the protocols root

    Returns:
        ProtocolMetadata record
    """
    name = strip_extension(file_name)

    frontmatter = parse_frontmatter(content)
    if frontmatter.status is FrontmatterStatus.MALFORMED:
        logger.warning(
            f"Invalid front matter in {file_name} (falling back to inference): "
            f"{frontmatter.error}"
        )
    data = frontmatter.data
    body = frontmatter.body

    title = _extract_title(body) or name

    triggers = [t.upper() for t in _string_list(data, "triggers")]
    if not triggers:
        triggers = extract_triggers(body, title)
    else:
        triggers = _dedupe(triggers)

    difficulty = _string_field(data, "difficulty")
    if difficulty not in VALID_DIFFICULTIES:
        difficulty = DEFAULT_DIFFICULTY

    stack_specific = data.get("stackSpecific")
    if isinstance(stack_specific, dict) and stack_specific:
        stack_flags = {
            str(k): v for k, v in stack_specific.items() if isinstance(v, bool)
        }
    else:
        stack_flags = infer_stack_specific(name)

    return ProtocolMetadata(
        id=_string_field(data, "id") or name,
        file_name=file_name,
        name=name,
        title=title,
        triggers=triggers,
        category=_string_field(data, "category") or infer_category(name),
        purpose=(_string_field(data, "purpose") or extract_purpose(body))[
            :PURPOSE_MAX_LENGTH
        ],
        file_path=file_path,
        tags=_string_list(data, "tags") or infer_tags(name, title),
        difficulty=difficulty,
        time_estimate=_string_field(data, "timeEstimate"),
        version=_string_field(data, "version") or DEFAULT_VERSION,
        prerequisites=_string_list(data, "prerequisites"),
        works_well_with=_string_list(data, "worksWellWith"),
        platform_tags=_string_list(data, "platformTags") or infer_platform_tags(name),
        stack_specific=stack_flags,
        has_frontmatter=(
            frontmatter.status is FrontmatterStatus.PARSED
            and is_valid_frontmatter(data)
        ),
    )


def extract_triggers(content: str, title: str = "") -> list[str]:
    """
    Infer trigger keywords from labels in the text and the known trigger table.

    Args:
        content: Markdown body
        title: Document title used for known-trigger lookup

    Returns:
        Deduplicated uppercase triggers in discovery order
    """
    triggers = [m.upper() for m in TRIGGER_LABEL_PATTERN.findall(content)]

    normalized_title = _normalize_title(title)
    if normalized_title:
        for key, known in KNOWN_TRIGGERS.items():
            if _normalize_key(key) in normalized_title:
                triggers.extend(known)

    return _dedupe(triggers)


def infer_category(name: str) -> str:
    lower_name = name.lower()
    for key, category in CATEGORY_RULES:
        if key in lower_name:
            return category
    return DEFAULT_CATEGORY


def extract_purpose(content: str) -> str:
    """First two prose lines after the first H1, joined and truncated."""
    purpose_lines: list[str] = []
    found_title = False

    for line in content.split("\n"):
        if not found_title:
            if re.match(r"^#\s", line):
                found_title = True
            continue

        stripped = line.strip()
        if stripped and not line.startswith("#") and not line.startswith("---"):
            purpose_lines.append(stripped)
            if len(purpose_lines) >= PURPOSE_MAX_LINES:
                break

    return " ".join(purpose_lines)[:PURPOSE_MAX_LENGTH]


def infer_tags(name: str, title: str = "") -> list[str]:
    haystack = f"{name} {title}".lower()
    tags: list[str] = []
    for key, rule_tags in TAG_RULES:
        if key in haystack:
            tags.extend(rule_tags)
    return _dedupe(tags)


def infer_platform_tags(name: str) -> list[str]:
    """
    Infer platform tags from the protocol name.

    Names with no platform signal apply everywhere and get "fullstack".
    """
    lower_name = name.lower()
    platforms = []
    if any(signal in lower_name for signal in FRONTEND_SIGNALS):
        platforms.append("frontend")
    if any(signal in lower_name for signal in BACKEND_SIGNALS):
        platforms.append("backend")
    if len(platforms) != 1:
        platforms.append("fullstack")
    return platforms


def infer_stack_specific(name: str) -> dict[str, bool]:
    """Frontend-only documents apply to frontend stacks; others to all."""
    if infer_platform_tags(name) == ["frontend"]:
        return dict(FRONTEND_STACKS)
    return dict(ALL_STACKS)


def _extract_title(content: str) -> str | None:
    match = TITLE_PATTERN.search(content)
    return match.group(1) if match else None


def _normalize_title(title: str) -> str:
    stripped = re.sub(r"[^a-z0-9\s]", "", title.lower())
    return re.sub(r"\s+", " ", stripped).strip()


def _normalize(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


def _normalize_key(key: str) -> str:
    return _normalize(re.sub(r"(_protocol|-protocol)$", "", key.lower()))


def _string_field(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or isinstance(value, (dict, list)):
        return None
    value = str(value).strip()
    return value or None


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))
