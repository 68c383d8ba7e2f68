from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple
import logging

from issue_editor.editops import Issue
from issue_editor.errors import SPAN_CONFLICT, SPAN_NOT_FOUND
from issue_editor.ir import ApplyResult, ResolvedSpan, SkippedIssue, Span, TrackedChange
from issue_editor.locate import locate

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _resolve_batch(content: str, issues: Sequence[Issue], result: ApplyResult) -> List[Tuple[int, Issue, ResolvedSpan]]:
    resolved: List[Tuple[int, Issue, ResolvedSpan]] = []
    for idx, issue in enumerate(issues):
        span = locate(content, issue)
        if span is None:
            result.not_found.append(issue.id)
            result.skipped.append(SkippedIssue(issue.id, SPAN_NOT_FOUND, "original text not present in content"))
            logger.info(f"Skipping {issue.id}: original text not found")
            continue
        resolved.append((idx, issue, span))
    return resolved


def _drop_conflicts(resolved: List[Tuple[int, Issue, ResolvedSpan]], result: ApplyResult) -> List[Tuple[Issue, ResolvedSpan]]:
    resolved.sort(key=lambda r: (r[2].start, r[0]))
    kept: List[Tuple[Issue, ResolvedSpan]] = []
    for _, issue, span in resolved:
        if kept and span.start < kept[-1][1].end:
            winner = kept[-1][0]
            result.conflicts.append(issue.id)
            result.skipped.append(SkippedIssue(
                issue.id, SPAN_CONFLICT,
                f"{span.start}..{span.end} overlaps {winner.id} at {kept[-1][1].start}..{kept[-1][1].end}",
            ))
            logger.info(f"Skipping {issue.id}: span overlaps {winner.id}")
            continue
        kept.append((issue, span))
    return kept


def apply_issues(content: str, issues: Sequence[Issue], clock: Optional[Clock] = None) -> ApplyResult:
    """
    Apply a batch of issues to `content`.

    Every issue is resolved against the unmodified content first, overlapping
    spans are reduced to the lowest-start issue, and the survivors are spliced
    right-to-left so spans still waiting to be applied keep their offsets.
    Issues that cannot be resolved or that conflict are reported, never raised.
    """
    result = ApplyResult(new_content=content)
    resolved = _resolve_batch(content, issues, result)
    kept = _drop_conflicts(resolved, result)

    now = (clock or _utcnow)().isoformat()
    text = content
    # sort spans descending so offsets remain valid
    for issue, span in sorted(kept, key=lambda k: k[1].start, reverse=True):
        text = text[:span.start] + issue.recommended_text + text[span.end:]

    for issue, span in kept:
        result.applied.append(TrackedChange(
            id=issue.id,
            type=issue.type,
            original_text=issue.original_text,
            new_text=issue.recommended_text,
            comment=issue.comment,
            position=Span(span.start, span.end),
            status="applied",
            created_at=now,
            updated_at=now,
        ))
    result.new_content = text

    logger.info(f"Applied {len(result.applied)}/{len(issues)} issues "
                f"({len(result.conflicts)} conflicts, {len(result.not_found)} not found)")
    return result


def apply_issue(content: str, issue: Issue, clock: Optional[Clock] = None) -> ApplyResult:
    return apply_issues(content, [issue], clock=clock)


def landed_offsets(changes: Sequence[TrackedChange]) -> List[int]:
    """Start offset of each change's new text in the resulting content (same order as `changes`)."""
    ordered = sorted(range(len(changes)), key=lambda i: changes[i].position.start)
    out = [0] * len(changes)
    shift = 0
    for i in ordered:
        c = changes[i]
        out[i] = c.position.start + shift
        shift += len(c.new_text) - c.position.length
    return out


def to_baseline(span: Span, prior: Sequence[TrackedChange]) -> Span:
    """
    Map a span in the current content back to baseline coordinates.

    `prior` are the changes already applied, each positioned against the
    baseline. Changes whose new text ends at or before an offset shift it by
    `len(new_text) - position.length`.
    """
    shift_start = shift_end = 0
    for change, landed in zip(prior, landed_offsets(prior)):
        delta = len(change.new_text) - change.position.length
        landed_end = landed + len(change.new_text)
        if landed_end <= span.start:
            shift_start += delta
        if landed_end <= span.end:
            shift_end += delta
    start = span.start - shift_start
    return Span(start, max(start, span.end - shift_end))
