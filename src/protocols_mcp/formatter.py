"""
Tool Output Formatter

Renders protocols and workflows as the text payloads returned to the
AI assistant.
"""

import json
from typing import Any

from .models import ProtocolMetadata, TaskType, WorkflowStep

MANDATORY_MARKER = "✅"
OPTIONAL_MARKER = "📋"


def to_json(data: Any) -> str:
    """Serialize tool payloads (2-space indent, UTF-8 kept readable)."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_protocol(protocol: ProtocolMetadata, content: str) -> str:
    """
    Format a protocol for get_protocol.

    Args:
        protocol: Protocol metadata
        content: Raw document content

    Returns:
        Title, triggers and category header followed by the raw content
    """
    triggers = ", ".join(protocol.triggers) or "None"
    return (
        f"# {protocol.title}\n\n"
        f"**Triggers:** {triggers}\n"
        f"**Category:** {protocol.category}\n\n"
        f"---\n\n"
        f"{content}"
    )


def format_protocol_by_trigger(
    protocol: ProtocolMetadata, trigger: str, content: str
) -> str:
    """Format a protocol for get_protocol_by_trigger."""
    triggers = ", ".join(protocol.triggers) or "None"
    return (
        f"# {protocol.title}\n\n"
        f"**Trigger:** {trigger.upper()}\n"
        f"**All Triggers:** {triggers}\n"
        f"**Category:** {protocol.category}\n\n"
        f"---\n\n"
        f"{content}"
    )


def format_workflow(steps: list[WorkflowStep], task_type: TaskType) -> str:
    """
    Format workflow steps as markdown.

    Mandatory steps are marked with a check, optional ones with a clipboard.
    """
    lines = [f"## Workflow: {task_type.value.upper()}", ""]

    for step in steps:
        marker = OPTIONAL_MARKER if step.optional else MANDATORY_MARKER
        lines.append(f"{marker} **Step {step.order}:** {step.protocol_name}")
        lines.append(f"   **Trigger:** `{step.trigger}`")
        lines.append(f"   **Purpose:** {step.reason}")
        if step.prerequisite:
            lines.append(f"   **Prerequisite:** {step.prerequisite}")
        lines.append("")

    return "\n".join(lines)
