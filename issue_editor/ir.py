from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Optional, Any, Iterator, Literal

from issue_editor.errors import EngineError, SpanNotFound, SpanConflict, SPAN_CONFLICT

IssueStatus = Literal["pending", "applying", "applied", "rejected", "failed"]
ISSUE_STATUSES = ("pending", "applying", "applied", "rejected", "failed")


@dataclass(frozen=True)
class Span:
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "Span") -> bool:
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> Dict[str, int]:
        return {"start": self.start, "end": self.end}


@dataclass(frozen=True)
class ResolvedSpan(Span):
    method: str = "position"  # position|search


@dataclass(frozen=True)
class TrackedChange:
    id: str
    type: str
    original_text: str
    new_text: str
    comment: str
    position: Span
    status: IssueStatus
    created_at: str
    updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "originalText": self.original_text,
            "newText": self.new_text,
            "comment": self.comment,
            "position": {"start": self.position.start, "end": self.position.end},
            "status": self.status,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class Decoration:
    issue_id: str
    start: int
    end: int
    style: str


@dataclass
class DecorationSet:
    by_id: Dict[str, Decoration] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.by_id)

    def __contains__(self, issue_id: object) -> bool:
        return issue_id in self.by_id

    def __getitem__(self, issue_id: str) -> Decoration:
        return self.by_id[issue_id]

    def __iter__(self) -> Iterator[Decoration]:
        return iter(sorted(self.by_id.values(), key=lambda d: (d.start, d.end)))

    def get(self, issue_id: str) -> Optional[Decoration]:
        return self.by_id.get(issue_id)

    def to_list(self) -> List[Dict[str, Any]]:
        return [asdict(d) for d in self]


@dataclass(frozen=True)
class SkippedIssue:
    issue_id: str
    reason: str   # span_not_found|span_conflict
    detail: str = ""

    def to_error(self) -> EngineError:
        if self.reason == SPAN_CONFLICT:
            return SpanConflict(self.issue_id, self.detail)
        return SpanNotFound(self.issue_id, self.detail)


@dataclass
class ApplyResult:
    new_content: str
    applied: List[TrackedChange] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    not_found: List[str] = field(default_factory=list)
    skipped: List[SkippedIssue] = field(default_factory=list)

    @property
    def applied_ids(self) -> List[str]:
        return [c.id for c in self.applied]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "newContent": self.new_content,
            "applied": [c.to_dict() for c in self.applied],
            "conflicts": list(self.conflicts),
            "notFound": list(self.not_found),
            "skipped": [asdict(s) for s in self.skipped],
        }


@dataclass
class Finding:
    rule_id: str
    severity: str  # info|warning|critical
    message: str
    category: str = "general"
    details: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
