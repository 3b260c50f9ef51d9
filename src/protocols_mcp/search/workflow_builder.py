"""
Workflow Builder

Maps a task type to an ordered list of recommended protocols with
rationale, mandatory/optional flags and prerequisites.
"""

from types import MappingProxyType

from ..models import ProjectContext, TaskType, Workflow, WorkflowStep
from .task_analyzer import get_task_difficulty, get_task_time_estimate

TASK_WORKFLOWS = MappingProxyType(
    {
        TaskType.DEBUG: (
            "debug_protocol",
            "error_fix_protocol",
            "test_automation_protocol",
            "code_review_protocol",
        ),
        TaskType.BUILD: (
            "codebase_indexing_protocol",
            "best_practices_protocol",
            "test_automation_protocol",
            "code_review_protocol",
        ),
        TaskType.REFACTOR: (
            "codebase_indexing_protocol",
            "mdap_protocol",
            "refactor_protocol",
            "test_automation_protocol",
            "code_review_protocol",
        ),
        TaskType.AUDIT: (
            "bigpappa_protocol_reviewANDfixes",
            "security_audit_protocol",
            "code_review_protocol",
            "performance_protocol",
        ),
        TaskType.OPTIMIZE: (
            "codebase_indexing_protocol",
            "performance_protocol",
            "test_automation_protocol",
            "code_review_protocol",
        ),
        TaskType.TEST: ("test_automation_protocol", "code_review_protocol"),
        TaskType.SETUP: ("best_practices_protocol", "git_workflow_protocol"),
        TaskType.DOCUMENT: ("best_practices_protocol", "code_review_protocol"),
        TaskType.UNKNOWN: ("MASTER_PROTOCOL",),
    }
)

PROTOCOL_TRIGGERS = MappingProxyType(
    {
        "debug_protocol": "DEEPDIVE",
        "error_fix_protocol": "AUTODEBUG",
        "test_automation_protocol": "FULLSPEC",
        "codebase_indexing_protocol": "FULLINDEX",
        "mdap_protocol": "MDAP",
        "refactor_protocol": "REFACTOR",
        "code_review_protocol": "COMPREHENSIVE",
        "security_audit_protocol": "SECAUDIT",
        "performance_protocol": "PERFAUDIT",
        "best_practices_protocol": "BESTPRACTICES",
        "bigpappa_protocol_reviewANDfixes": "BIGPAPPA",
        "MASTER_PROTOCOL": "MASTER",
        "git_workflow_protocol": "GITFLOW",
        "api_design_protocol": "APIDESIGN",
        "accessibility_protocol": "A11YCHECK",
        "aria_accessibility_protocol": "FULLARIA",
        "moreFRONTend-PROTOCOL": "ULTRATHINK",
        "FRONTandBACKend-PROTOCOL": "ANTI-GENERIC",
    }
)

# Rationale per task type, indexed by step position
STEP_REASONS = MappingProxyType(
    {
        TaskType.DEBUG: (
            "Use scientific method to find and fix the bug",
            "Quick fix for simple errors",
            "Add tests to prevent regression",
            "Review fix before merging",
        ),
        TaskType.BUILD: (
            "Understand existing codebase structure",
            "Follow best practices for this tech stack",
            "Ensure test coverage for new code",
            "Review code quality before merge",
        ),
        TaskType.REFACTOR: (
            "Map the codebase before refactoring",
            "Plan the refactoring in detail",
            "Execute refactoring safely",
            "Verify new code passes tests",
            "Final review before merge",
        ),
        TaskType.AUDIT: (
            "Comprehensive system audit",
            "Security vulnerability scan",
            "Code quality review",
            "Performance analysis",
        ),
        TaskType.OPTIMIZE: (
            "Find performance bottlenecks",
            "Optimize and measure impact",
            "Verify performance improvements",
            "Code review of optimizations",
        ),
        TaskType.TEST: ("Plan test coverage strategy", "Review tests for quality"),
        TaskType.SETUP: ("Follow best practices for setup", "Configure git workflow"),
        TaskType.DOCUMENT: (
            "Follow documentation best practices",
            "Review documentation quality",
        ),
        TaskType.UNKNOWN: ("Start with master protocol routing",),
    }
)

PREREQUISITES = MappingProxyType(
    {
        "mdap_protocol": "codebase_indexing_protocol",
        "performance_protocol": "codebase_indexing_protocol",
        "test_automation_protocol": "codebase_indexing_protocol",
        "bigpappa_protocol_reviewANDfixes": "codebase_indexing_protocol",
    }
)

WORKFLOW_SHORTCUTS = MappingProxyType(
    {
        TaskType.DEBUG: {
            "Quick fix": ("error_fix_protocol",),
            "Full investigation": (
                "debug_protocol",
                "test_automation_protocol",
                "code_review_protocol",
            ),
        },
        TaskType.BUILD: {
            "Familiar codebase": ("test_automation_protocol", "code_review_protocol"),
            "New project": (
                "codebase_indexing_protocol",
                "best_practices_protocol",
                "test_automation_protocol",
            ),
        },
        TaskType.REFACTOR: {
            "Small refactor": (
                "refactor_protocol",
                "test_automation_protocol",
                "code_review_protocol",
            ),
            "Large refactor": (
                "codebase_indexing_protocol",
                "mdap_protocol",
                "refactor_protocol",
                "test_automation_protocol",
            ),
        },
        TaskType.AUDIT: {
            "Security focus": ("security_audit_protocol",),
            "Performance focus": ("performance_protocol",),
            "Full audit": ("bigpappa_protocol_reviewANDfixes",),
        },
        TaskType.OPTIMIZE: {
            "Quick optimization": ("performance_protocol",),
            "Thorough analysis": (
                "codebase_indexing_protocol",
                "performance_protocol",
                "test_automation_protocol",
            ),
        },
        TaskType.TEST: {
            "Unit tests only": ("test_automation_protocol",),
            "Full coverage": ("test_automation_protocol", "code_review_protocol"),
        },
        TaskType.SETUP: {
            "Minimal setup": ("best_practices_protocol",),
            "Complete setup": ("best_practices_protocol", "git_workflow_protocol"),
        },
        TaskType.DOCUMENT: {
            "Quick docs": ("best_practices_protocol",),
            "Comprehensive": ("best_practices_protocol", "code_review_protocol"),
        },
        TaskType.UNKNOWN: {
            "Get started": ("MASTER_PROTOCOL",),
        },
    }
)


def build_workflow(
    task_type: TaskType, context: ProjectContext | None = None
) -> list[WorkflowStep]:
    """
    Build the ordered workflow for a task type.

    Args:
        task_type: Classified task type
        context: Optional project context (passed to prioritize_by_context)

    Returns:
        Steps numbered from 1; only the first step is mandatory
    """
    protocol_names = TASK_WORKFLOWS.get(task_type) or TASK_WORKFLOWS[TaskType.UNKNOWN]

    steps = [
        WorkflowStep(
            order=index + 1,
            protocol_name=name,
            trigger=PROTOCOL_TRIGGERS.get(name, name),
            reason=_reason_for_step(task_type, name, index),
            optional=index > 0,
            prerequisite=PREREQUISITES.get(name),
        )
        for index, name in enumerate(protocol_names)
    ]

    if context is not None:
        return prioritize_by_context(steps, context)
    return steps


def prioritize_by_context(
    steps: list[WorkflowStep], context: ProjectContext
) -> list[WorkflowStep]:
    """Reorder steps for a project context. Currently keeps the given order."""
    return steps


def get_workflow_shortcuts(task_type: TaskType) -> dict[str, list[str]]:
    """Named protocol subsets for a task type ({} if none defined)."""
    shortcuts = WORKFLOW_SHORTCUTS.get(task_type, {})
    return {label: list(names) for label, names in shortcuts.items()}


def assemble_workflow(
    task_type: TaskType, context: ProjectContext | None = None
) -> Workflow:
    """Build the complete Workflow (steps, shortcuts, estimates) for a task type."""
    steps = build_workflow(task_type, context)
    return Workflow(
        name=f"{task_type.value.capitalize()} workflow",
        task_type=task_type,
        description=" -> ".join(step.trigger for step in steps),
        estimated_time=get_task_time_estimate(task_type),
        difficulty=get_task_difficulty(task_type),
        steps=steps,
        shortcuts=get_workflow_shortcuts(task_type),
    )


def _reason_for_step(task_type: TaskType, protocol_name: str, index: int) -> str:
    reasons = STEP_REASONS.get(task_type, ())
    if index < len(reasons):
        return reasons[index]
    return f"Execute {protocol_name}"
