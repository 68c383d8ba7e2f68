from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from issue_editor.config import DEFAULT_DECORATION_STYLES
from issue_editor.editops import Issue
from issue_editor.ir import Decoration, DecorationSet, ResolvedSpan
from issue_editor.locate import locate, locate_text

logger = logging.getLogger(__name__)


def _resolve_for_display(content: str, issue: Issue) -> Optional[ResolvedSpan]:
    # applied issues no longer hold their original text; highlight the replacement
    if issue.status == "applied":
        return locate_text(content, issue.recommended_text, issue.position)
    return locate(content, issue)


def build_decorations(
    content: str,
    issues: Sequence[Issue],
    styles: Optional[Dict[str, str]] = None,
) -> DecorationSet:
    """
    Compute highlight ranges for every non-rejected issue.

    Recomputed from scratch on each call; ranges never overlap (the
    lowest-start decoration wins, ties go to input order). Issues that
    cannot be located are omitted.
    """
    styles = styles or DEFAULT_DECORATION_STYLES

    candidates: List[Tuple[int, int, Decoration]] = []
    for idx, issue in enumerate(issues):
        if issue.status == "rejected":
            continue
        span = _resolve_for_display(content, issue)
        if span is None:
            logger.debug(f"No decoration for {issue.id}: text not found in content")
            continue
        style = styles.get(issue.status, styles.get("pending", "suggestion-pending"))
        candidates.append((span.start, idx, Decoration(issue.id, span.start, span.end, style)))

    candidates.sort(key=lambda c: (c[0], c[1]))
    result = DecorationSet()
    last_end = -1
    for _, _, deco in candidates:
        if deco.start < last_end:
            logger.debug(f"Decoration for {deco.issue_id} overlaps a previous range; omitted")
            continue
        if deco.issue_id in result:
            continue
        result.by_id[deco.issue_id] = deco
        last_end = deco.end
    return result
