from __future__ import annotations
from typing import Optional
import logging

from issue_editor.editops import Issue
from issue_editor.ir import ResolvedSpan, Span

logger = logging.getLogger(__name__)


def _clamp(value: int, upper: int) -> int:
    return max(0, min(value, upper))


def count_occurrences(content: str, text: str) -> int:
    if not text:
        return 0
    return content.count(text)


def locate_text(content: str, text: str, hint: Span) -> Optional[ResolvedSpan]:
    """
    Resolve `text` in `content`, trusting the recorded offsets first.

    - Clamp the hint into the content bounds; if that range holds exactly
      `text`, return it.
    - Otherwise fall back to a literal search and return the first match.
    - Empty text or zero occurrences resolve to None.
    """
    if not text:
        return None

    start = _clamp(hint.start, len(content))
    end = _clamp(hint.end, len(content))
    if start < end and content[start:end] == text:
        return ResolvedSpan(start, end, method="position")

    idx = content.find(text)
    if idx == -1:
        return None
    if logger.isEnabledFor(logging.DEBUG):
        n = count_occurrences(content, text)
        if n > 1:
            logger.debug(f"{text[:40]!r} occurs {n} times; using first match at {idx} (hint {hint.start}..{hint.end})")
    return ResolvedSpan(idx, idx + len(text), method="search")


def locate(content: str, issue: Issue) -> Optional[ResolvedSpan]:
    """Resolve an issue's original text against the current content (None = not found)."""
    span = locate_text(content, issue.original_text, issue.position)
    if span is None:
        logger.debug(f"Issue {issue.id}: original text not found")
    elif span.method == "search":
        logger.debug(f"Issue {issue.id}: stale position {issue.position.start}..{issue.position.end}, found at {span.start}..{span.end}")
    return span
