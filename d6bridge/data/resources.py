"""
Resource kinds and the typed request for each.

A request is the logical ask ("learners of school 1000, first 5"), independent
of which tier ends up answering it. The set of kinds is closed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class ResourceKind(str, Enum):
    SCHOOLS = "schools"
    LEARNERS = "learners"
    STAFF = "staff"
    PARENTS = "parents"
    MARKS = "marks"
    LOOKUP = "lookup"


@dataclass(frozen=True)
class SchoolsRequest:
    kind = ResourceKind.SCHOOLS

    def params(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class LearnersRequest:
    school_id: int
    limit: int = 50
    offset: int = 0

    kind = ResourceKind.LEARNERS

    def params(self) -> dict[str, Any]:
        return {"school_id": self.school_id, "limit": self.limit, "offset": self.offset}


@dataclass(frozen=True)
class StaffRequest:
    school_id: int

    kind = ResourceKind.STAFF

    def params(self) -> dict[str, Any]:
        return {"school_id": self.school_id}


@dataclass(frozen=True)
class ParentsRequest:
    school_id: int

    kind = ResourceKind.PARENTS

    def params(self) -> dict[str, Any]:
        return {"school_id": self.school_id}


@dataclass(frozen=True)
class MarksRequest:
    learner_id: int
    term: Optional[int] = None
    year: Optional[int] = None

    kind = ResourceKind.MARKS

    def params(self) -> dict[str, Any]:
        return {"learner_id": self.learner_id, "term": self.term, "year": self.year}


@dataclass(frozen=True)
class LookupRequest:
    lookup_type: str

    kind = ResourceKind.LOOKUP

    def params(self) -> dict[str, Any]:
        return {"type": self.lookup_type.strip().lower()}


ResourceRequest = Union[
    SchoolsRequest,
    LearnersRequest,
    StaffRequest,
    ParentsRequest,
    MarksRequest,
    LookupRequest,
]


def cache_key(request: ResourceRequest, prefix: str = "d6:") -> str:
    """
    Deterministic key: prefix + kind + sorted non-null params.

    >>> cache_key(LookupRequest("genders"))
    'd6:lookup:type=genders'
    """
    params = {k: v for k, v in request.params().items() if v is not None}
    flat = "&".join(f"{k}={params[k]}" for k in sorted(params))
    return f"{prefix}{request.kind.value}:{flat}"


def kind_prefix(kind: ResourceKind, prefix: str = "d6:") -> str:
    return f"{prefix}{kind.value}:"
