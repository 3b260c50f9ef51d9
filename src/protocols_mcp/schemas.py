"""
Pydantic schemas for protocol front matter and MCP tool inputs.

These schemas provide validation and JSON Schema generation
for MCP tool definitions.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

Difficulty = Literal["beginner", "intermediate", "advanced"]

Category = Literal[
    "Debugging",
    "Testing",
    "Architecture",
    "Frontend",
    "Accessibility",
    "Security",
    "Performance",
    "Quality",
    "Refactoring",
    "VersionControl",
    "Auditing",
    "Configuration",
    "Core",
]


# =============================================================================
# Front Matter Schema
# =============================================================================


class ProtocolFrontmatter(BaseModel):
    """YAML front matter block at the top of a protocol document."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Unique identifier for the protocol")
    version: str = Field(..., description="Semantic version (e.g., 1.0.0)")
    triggers: list[str] = Field(
        ..., min_length=1, description="Uppercase trigger commands"
    )
    category: Category = Field(..., description="Primary category for the protocol")
    tags: list[str] = Field(..., description="Searchable tags for the protocol")
    difficulty: Difficulty = Field(..., description="Difficulty level for users")
    time_estimate: Optional[str] = Field(
        default=None,
        alias="timeEstimate",
        description='Estimated time to complete (e.g., "30-60m")',
    )
    prerequisites: list[str] = Field(default_factory=list)
    works_well_with: list[str] = Field(default_factory=list, alias="worksWellWith")
    platform_tags: list[str] = Field(default_factory=list, alias="platformTags")
    stack_specific: dict[str, bool] = Field(
        default_factory=dict, alias="stackSpecific"
    )


# =============================================================================
# Tool Input Schemas
# =============================================================================


class GetProtocolInput(BaseModel):
    """Input for fetching a protocol by name."""

    name: str = Field(
        ...,
        min_length=1,
        description="Protocol name or filename (e.g., 'MASTER_PROTOCOL', 'debug_protocol')",
    )


class ListProtocolsInput(BaseModel):
    """Input for listing protocols."""

    category: Optional[str] = Field(default=None, description="Filter by category")


class GetProtocolByTriggerInput(BaseModel):
    """Input for fetching a protocol by trigger command."""

    trigger: str = Field(
        ...,
        min_length=1,
        description="Trigger command (e.g., 'DEEPDIVE', 'FULLINDEX')",
    )


class SearchProtocolsInput(BaseModel):
    """Input for keyword search."""

    query: str = Field(..., description="Search query")
    category: Optional[str] = Field(default=None, description="Filter by category")
    use_context: bool = Field(
        default=True,
        description="Re-rank results using the detected project context",
    )


class FuzzyMatchProtocolInput(BaseModel):
    """Input for approximate name lookup."""

    name: str = Field(..., description="Approximate protocol name")


class RouteTaskInput(BaseModel):
    """Input for task routing."""

    description: str = Field(
        ...,
        description="Free-text description of the task (e.g., 'fix this crash')",
    )
    task_type: Optional[str] = Field(
        default=None,
        description="Override the inferred task type (debug, build, refactor, audit, "
        "optimize, test, setup, document, unknown)",
    )


def format_validation_errors(error: ValidationError) -> dict[str, list[str]]:
    """
    Group pydantic validation errors by field.

    Args:
        error: ValidationError raised by model_validate()

    Returns:
        Dict mapping dotted field path to its error messages
    """
    fields: dict[str, list[str]] = {}
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        fields.setdefault(location, []).append(item.get("msg", "invalid value"))
    return fields


def is_valid_frontmatter(data: Any) -> bool:
    """Check whether data satisfies the full front matter schema."""
    try:
        ProtocolFrontmatter.model_validate(data)
        return True
    except ValidationError:
        return False
