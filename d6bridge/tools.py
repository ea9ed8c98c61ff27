"""
Tool-call surface for the assistant integration.

Routing only: each tool name maps to exactly one resource request (or to a
diagnostic on the context). Argument validation lives here; the resolver
assumes well-formed requests.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from d6bridge.context import BridgeContext
from d6bridge.data.resources import (
    LearnersRequest,
    LookupRequest,
    MarksRequest,
    ParentsRequest,
    ResourceRequest,
    SchoolsRequest,
    StaffRequest,
)
from d6bridge.data.service import ExhaustedFallback


logger = logging.getLogger(__name__)

MAX_LIMIT = 200


class UnknownToolError(KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        # KeyError would render the repr of the name
        return f"Unknown tool: {self.name}"


class ToolArgumentError(ValueError):
    def __init__(self, tool: str, error: ValidationError):
        problems = "; ".join(f"{'.'.join(str(p) for p in e['loc']) or 'arguments'}: {e['msg']}" for e in error.errors())
        super().__init__(f"Invalid arguments for {tool}: {problems}")
        self.tool = tool
        self.errors = error.errors()


class ToolName(str, Enum):
    GET_SCHOOLS = "get_schools"
    GET_LEARNERS = "get_learners"
    GET_STAFF = "get_staff"
    GET_PARENTS = "get_parents"
    GET_LEARNER_MARKS = "get_learner_marks"
    GET_LOOKUP_DATA = "get_lookup_data"
    GET_SYSTEM_HEALTH = "get_system_health"
    GET_INTEGRATION_INFO = "get_integration_info"


class _Args(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, str_strip_whitespace=True)


class NoArgs(_Args):
    pass


class SchoolArgs(_Args):
    school_id: int = Field(alias="schoolId", description="D6 school login id")


class LearnersArgs(SchoolArgs):
    limit: int = Field(default=50, ge=1, le=MAX_LIMIT, description="Page size")
    offset: int = Field(default=0, ge=0, description="Records to skip")


class MarksArgs(_Args):
    learner_id: int = Field(alias="learnerId", description="The learner to get marks for")
    term: Optional[int] = Field(default=None, ge=1, le=4)
    year: Optional[int] = Field(default=None, ge=2000, le=2100)


class LookupArgs(_Args):
    lookup_type: str = Field(
        default="genders", alias="type", min_length=1, description="genders, grades, languages, ethnicgroups, subjects"
    )


TOOL_SPECS: dict[ToolName, tuple[str, type[_Args]]] = {
    ToolName.GET_SCHOOLS: ("Get the schools that authorised this D6 integration", NoArgs),
    ToolName.GET_LEARNERS: ("Get learners of a school, paged", LearnersArgs),
    ToolName.GET_STAFF: ("Get staff members of a school", SchoolArgs),
    ToolName.GET_PARENTS: ("Get parents / guardians of a school", SchoolArgs),
    ToolName.GET_LEARNER_MARKS: ("Get academic marks for a learner, optionally by term and year", MarksArgs),
    ToolName.GET_LOOKUP_DATA: ("Get system lookup data (genders, grades, languages, ...)", LookupArgs),
    ToolName.GET_SYSTEM_HEALTH: ("Check D6 API connectivity and system health", NoArgs),
    ToolName.GET_INTEGRATION_INFO: ("Describe the current D6 integration setup", NoArgs),
}


@dataclass(frozen=True)
class ToolResponse:
    ok: bool
    text: str  # JSON payload handed back to the assistant
    raw: Optional[dict] = None


def list_tools() -> list[dict[str, Any]]:
    return [
        {"name": name.value, "description": desc, "inputSchema": model.model_json_schema(by_alias=True)}
        for name, (desc, model) in TOOL_SPECS.items()
    ]


def parse_tool_name(name: str) -> ToolName:
    try:
        return ToolName(name)
    except ValueError:
        raise UnknownToolError(name) from None


def parse_arguments(tool: ToolName, arguments: Optional[dict[str, Any]]) -> _Args:
    _, model = TOOL_SPECS[tool]
    try:
        return model.model_validate(arguments or {})
    except ValidationError as e:
        raise ToolArgumentError(tool.value, e) from e


def build_request(tool: ToolName, args: _Args) -> ResourceRequest:
    if tool == ToolName.GET_SCHOOLS:
        return SchoolsRequest()
    elif tool == ToolName.GET_LEARNERS:
        return LearnersRequest(args.school_id, limit=args.limit, offset=args.offset)
    elif tool == ToolName.GET_STAFF:
        return StaffRequest(args.school_id)
    elif tool == ToolName.GET_PARENTS:
        return ParentsRequest(args.school_id)
    elif tool == ToolName.GET_LEARNER_MARKS:
        return MarksRequest(args.learner_id, term=args.term, year=args.year)
    elif tool == ToolName.GET_LOOKUP_DATA:
        return LookupRequest(args.lookup_type)
    raise ValueError(f"{tool.value} is not a resource tool")


def _respond(payload: dict[str, Any], ok: bool = True) -> ToolResponse:
    return ToolResponse(ok=ok, text=json.dumps(payload, indent=2, default=str), raw=payload)


def call_tool(ctx: BridgeContext, name: str, arguments: Optional[dict[str, Any]] = None) -> ToolResponse:
    """
    Dispatch one tool call.
    Raises UnknownToolError / ToolArgumentError for caller mistakes; an exhausted
    fallback comes back as ok=False with the diagnostic payload.
    """
    tool = parse_tool_name(name)
    args = parse_arguments(tool, arguments)
    logger.info("Tool called: %s (mode: %s)", tool.value, ctx.availability.mode)

    if tool == ToolName.GET_SYSTEM_HEALTH:
        return _respond({"tool": tool.value, **ctx.health.snapshot().to_dict()})
    if tool == ToolName.GET_INTEGRATION_INFO:
        return _respond({"tool": tool.value, **ctx.integration_info()})

    request = build_request(tool, args)
    try:
        result = ctx.resolver.resolve(request)
    except ExhaustedFallback as e:
        return _respond({"tool": tool.value, **e.to_dict()}, ok=False)

    count = len(result.data) if isinstance(result.data, list) else None
    return _respond({"tool": tool.value, "source": result.source, "count": count, "data": result.data})
