from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from d6bridge.data.resources import (
    LearnersRequest,
    LookupRequest,
    MarksRequest,
    ParentsRequest,
    ResourceRequest,
    SchoolsRequest,
    StaffRequest,
)


@dataclass(frozen=True)
class UpstreamQuery:
    path: str
    params: dict[str, Any] = field(default_factory=dict)


def q_schools() -> UpstreamQuery:
    # Client integrations = schools that authorised this integrator
    return UpstreamQuery("/settings/clients")


def q_learners(req: LearnersRequest) -> UpstreamQuery:
    # School login id goes in the path; paging in the query string
    return UpstreamQuery(
        f"/adminplus/learners/{req.school_id}",
        {"limit": req.limit, "offset": req.offset},
    )


def q_staff(req: StaffRequest) -> UpstreamQuery:
    return UpstreamQuery(f"/adminplus/staffmembers/{req.school_id}")


def q_parents(req: ParentsRequest) -> UpstreamQuery:
    return UpstreamQuery(f"/adminplus/parents/{req.school_id}")


def q_marks(req: MarksRequest) -> UpstreamQuery:
    params: dict[str, Any] = {"learner_id": req.learner_id}
    if req.term is not None:
        params["term"] = req.term
    if req.year is not None:
        params["year"] = req.year
    return UpstreamQuery("/currplus/learnersubjects", params)


def q_lookup(req: LookupRequest) -> UpstreamQuery:
    return UpstreamQuery(f"/adminplus/lookup/{req.params()['type']}")


def upstream_query(req: ResourceRequest) -> UpstreamQuery:
    if isinstance(req, SchoolsRequest):
        return q_schools()
    elif isinstance(req, LearnersRequest):
        return q_learners(req)
    elif isinstance(req, StaffRequest):
        return q_staff(req)
    elif isinstance(req, ParentsRequest):
        return q_parents(req)
    elif isinstance(req, MarksRequest):
        return q_marks(req)
    elif isinstance(req, LookupRequest):
        return q_lookup(req)
    raise TypeError(f"Unsupported resource request: {type(req).__name__}")
