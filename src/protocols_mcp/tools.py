"""Protocol Tool Dispatch

Validates tool arguments and routes tool calls to the scanner, search
engine and workflow builder. Every failure is returned as an error
response; nothing raised by a tool escapes call_tool().

Tools:
    get_protocol(name)
    list_protocols(category?)
    get_protocol_by_trigger(trigger)
    search_protocols(query, category?, use_context?)
    fuzzy_match_protocol(name)
    route_task(description, task_type?)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from .catalog import ProtocolCatalog
from .context_detector import describe_context
from .errors import (
    PROTOCOL_NOT_FOUND,
    TRIGGER_NOT_FOUND,
    UNKNOWN_TOOL,
    VALIDATION_ERROR,
    ProtocolError,
    format_error,
    handle_error,
)
from .formatter import format_protocol, format_protocol_by_trigger, format_workflow, to_json
from .models import ProjectContext
from .schemas import (
    FuzzyMatchProtocolInput,
    GetProtocolByTriggerInput,
    GetProtocolInput,
    ListProtocolsInput,
    RouteTaskInput,
    SearchProtocolsInput,
    format_validation_errors,
)
from .search.matcher import SearchMatcher
from .search.task_analyzer import analyze_task_intent, get_task_tags, parse_task_type
from .search.workflow_builder import assemble_workflow

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_LIMIT = 5
DEFAULT_MATCH_LINES = 2

TOOL_DEFINITIONS: dict[str, tuple[type[BaseModel], str]] = {
    "get_protocol": (
        GetProtocolInput,
        "Retrieve a specific protocol by name (e.g., 'MASTER_PROTOCOL', 'debug_protocol')",
    ),
    "list_protocols": (
        ListProtocolsInput,
        "List all available protocols with metadata",
    ),
    "get_protocol_by_trigger": (
        GetProtocolByTriggerInput,
        "Find protocol by trigger command (e.g., 'DEEPDIVE', 'FULLINDEX')",
    ),
    "search_protocols": (
        SearchProtocolsInput,
        "Search protocols by keywords with relevance scoring",
    ),
    "fuzzy_match_protocol": (
        FuzzyMatchProtocolInput,
        "Find protocol by approximate name (handles typos)",
    ),
    "route_task": (
        RouteTaskInput,
        "Classify a task description and recommend an ordered protocol workflow",
    ),
}


@dataclass
class ToolResponse:
    """Text payload or structured error returned by a tool."""

    text: str
    is_error: bool = False
    error: dict[str, Any] | None = None
    data: Any = field(default=None, repr=False)

    @classmethod
    def from_error(cls, error: ProtocolError) -> "ToolResponse":
        return cls(text=format_error(error), is_error=True, error=error.to_dict())

    def to_dict(self) -> dict[str, Any]:
        """Convert to the dictionary returned by MCP tool handlers."""
        result: dict[str, Any] = {"success": not self.is_error, "text": self.text}
        if self.error:
            result["error"] = self.error
        return result


def list_tools() -> list[dict[str, Any]]:
    """Tool definitions with JSON Schemas generated from the input models."""
    return [
        {
            "name": name,
            "description": description,
            "inputSchema": model.model_json_schema(),
        }
        for name, (model, description) in TOOL_DEFINITIONS.items()
    ]


class ProtocolTools:
    """Routes validated tool calls to the protocol engine."""

    def __init__(
        self,
        catalog: ProtocolCatalog,
        matcher: SearchMatcher | None = None,
        context: ProjectContext | None = None,
        search_config: dict[str, Any] | None = None,
    ):
        """
        Initialize dispatcher.

        Args:
            catalog: Built ProtocolCatalog
            matcher: SearchMatcher (a new one by default)
            context: Project context detected at startup, if any
            search_config: "search" section of the server config
        """
        self.catalog = catalog
        self.matcher = matcher or SearchMatcher()
        self.context = context
        self.search_config = search_config or {}

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> ToolResponse:
        """
        Validate arguments and execute a tool.

        Args:
            name: Tool name
            arguments: Raw tool arguments

        Returns:
            ToolResponse (is_error=True for every failure)
        """
        logger.info(f"{name} called: {arguments}")
        try:
            if name not in TOOL_DEFINITIONS:
                raise ProtocolError(f"Unknown tool: {name}", UNKNOWN_TOOL)

            model, _ = TOOL_DEFINITIONS[name]
            params = model.model_validate(arguments or {})
            handler = getattr(self, f"_{name}")
            return await handler(params)

        except ValidationError as e:
            fields = format_validation_errors(e)
            summary = "; ".join(
                f"{field_name}: {', '.join(messages)}"
                for field_name, messages in fields.items()
            )
            logger.warning(f"Invalid arguments for {name}: {summary}")
            return ToolResponse.from_error(
                ProtocolError(
                    f"Invalid arguments: {summary}",
                    VALIDATION_ERROR,
                    {"fields": fields},
                )
            )
        except ProtocolError as e:
            logger.warning(f"{name} failed: [{e.code}] {e.message}")
            return ToolResponse.from_error(e)
        except Exception as e:
            logger.error(f"Error in {name}: {e}", exc_info=True)
            return ToolResponse.from_error(handle_error(e, f"Tool '{name}' failed"))

    async def _get_protocol(self, params: GetProtocolInput) -> ToolResponse:
        protocol = self.catalog.scanner.get_by_name(params.name)
        if protocol is None:
            raise ProtocolError(
                f"Protocol '{params.name}' not found",
                PROTOCOL_NOT_FOUND,
                {
                    "available_protocols": [
                        p.name for p in self.catalog.scanner.scan()
                    ]
                },
            )

        content = await asyncio.to_thread(self.catalog.read_content, protocol)
        return ToolResponse(text=format_protocol(protocol, content), data=protocol)

    async def _list_protocols(self, params: ListProtocolsInput) -> ToolResponse:
        protocols = self.catalog.scanner.scan()
        if params.category:
            protocols = [p for p in protocols if p.category == params.category]

        summaries = [p.summary() for p in protocols]
        return ToolResponse(text=to_json(summaries), data=summaries)

    async def _get_protocol_by_trigger(
        self, params: GetProtocolByTriggerInput
    ) -> ToolResponse:
        protocol = self.catalog.scanner.get_by_trigger(params.trigger)
        if protocol is None:
            raise ProtocolError(
                f"No protocol found for trigger '{params.trigger}'",
                TRIGGER_NOT_FOUND,
                {"trigger": params.trigger},
            )

        content = await asyncio.to_thread(self.catalog.read_content, protocol)
        return ToolResponse(
            text=format_protocol_by_trigger(protocol, params.trigger, content),
            data=protocol,
        )

    async def _search_protocols(self, params: SearchProtocolsInput) -> ToolResponse:
        index = self.catalog.indexer.require_index()
        results = self.matcher.search(
            index,
            params.query,
            category=params.category,
            min_score=self.search_config.get("min_score", 0),
        )

        use_context = params.use_context and self.search_config.get("use_context", True)
        if use_context and self.context is not None:
            results = self.matcher.contextualize_results(results, self.context)

        if not results:
            return ToolResponse(
                text=f'No results found for query: "{params.query}"', data=[]
            )

        match_lines = self.search_config.get("match_lines", DEFAULT_MATCH_LINES)
        formatted = [r.to_dict(match_limit=match_lines) for r in results]
        return ToolResponse(text=to_json(formatted), data=results)

    async def _fuzzy_match_protocol(self, params: FuzzyMatchProtocolInput) -> ToolResponse:
        index = self.catalog.indexer.require_index()
        results = self.matcher.fuzzy_match(index, params.name)

        if not results:
            return ToolResponse(
                text=f'No similar protocols found for: "{params.name}"', data=[]
            )

        limit = self.search_config.get("fuzzy_limit", DEFAULT_FUZZY_LIMIT)
        top = results[:limit]
        return ToolResponse(text=to_json([r.to_dict() for r in top]), data=top)

    async def _route_task(self, params: RouteTaskInput) -> ToolResponse:
        inferred = analyze_task_intent(params.description)
        task_type = inferred
        overridden = False
        warnings = []

        if params.task_type:
            override = parse_task_type(params.task_type)
            if override is None:
                warning = (
                    f"Unknown task type '{params.task_type}', "
                    f"using inferred type '{inferred.value}'"
                )
                logger.warning(warning)
                warnings.append(warning)
            else:
                task_type = override
                overridden = True

        workflow = assemble_workflow(task_type, self.context)
        missing = [
            step.protocol_name
            for step in workflow.steps
            if self.catalog.scanner.get_by_name(step.protocol_name) is None
        ]

        payload: dict[str, Any] = {
            "task_description": params.description,
            "task_type": task_type.value,
            "inferred_task_type": inferred.value,
            "task_type_source": "override" if overridden else "inferred",
            "difficulty": workflow.difficulty,
            "estimated_time": workflow.estimated_time,
            "tags": get_task_tags(task_type),
            "workflow": [step.to_dict() for step in workflow.steps],
            "shortcuts": workflow.shortcuts,
            "missing_protocols": missing,
            "formatted": format_workflow(workflow.steps, task_type),
        }
        if self.context is not None and self.context.detected:
            payload["project_context"] = describe_context(self.context)
        if warnings:
            payload["warnings"] = warnings

        return ToolResponse(text=to_json(payload), data=workflow)
