from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Dict, Any, List, Mapping

from issue_editor.errors import IssueValidationError
from issue_editor.ir import Span, IssueStatus, ISSUE_STATUSES


@dataclass(frozen=True)
class Issue:
    id: str
    type: str
    original_text: str
    recommended_text: str
    comment: str = ""
    position: Span = Span(0, 0)   # best-effort offsets at analysis time, may be stale
    status: IssueStatus = "pending"

    def __post_init__(self):
        if not self.id:
            raise IssueValidationError("issue id is required")
        if self.position.start < 0 or self.position.end < self.position.start:
            raise IssueValidationError(
                f"{self.id}: invalid position {self.position.start}..{self.position.end}"
            )
        if self.status not in ISSUE_STATUSES:
            raise IssueValidationError(f"{self.id}: unknown status {self.status!r}")

    def with_status(self, status: IssueStatus) -> "Issue":
        return replace(self, status=status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "originalText": self.original_text,
            "recommendedText": self.recommended_text,
            "comment": self.comment,
            "position": self.position.to_dict(),
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Issue":
        """Build an issue from the wire record.

        Accepts the camelCase wire keys as well as the snake_case keys emitted
        by the analysis endpoint (``original_text``, ``recommended_text``).
        """
        if not isinstance(data, Mapping):
            raise IssueValidationError(f"issue record must be a mapping, got {type(data).__name__}")
        pos = data.get("position") or {}
        try:
            start = int(pos.get("start", 0))
            end = int(pos.get("end", 0))
        except (TypeError, ValueError, AttributeError) as e:
            raise IssueValidationError(f"{data.get('id')}: position must hold integer start/end") from e
        return cls(
            id=str(data.get("id") or ""),
            type=str(data.get("type") or "general"),
            original_text=_pick(data, "originalText", "original_text"),
            recommended_text=_pick(data, "recommendedText", "recommended_text"),
            comment=str(data.get("comment") or ""),
            position=Span(start, end),
            status=data.get("status") or "pending",
        )


def _pick(data: Mapping[str, Any], camel: str, snake: str) -> str:
    value = data.get(camel)
    if value is None:
        value = data.get(snake)
    return "" if value is None else str(value)


def load_issues(records: List[Mapping[str, Any]]) -> List[Issue]:
    issues = [Issue.from_dict(r) for r in records]
    seen = set()
    for issue in issues:
        if issue.id in seen:
            raise IssueValidationError(f"duplicate issue id {issue.id!r}")
        seen.add(issue.id)
    return issues
