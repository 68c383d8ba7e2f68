"""
Document session

Ties the engine pieces together for one document:
1. Status tracker decides which issues may enter a batch
2. Edit applicator runs against the latest content snapshot
3. Tracker records applied/failed outcomes, content is swapped in
4. Decorations and exports are recomputed on demand

Writes are serialized per document with a lock. Applied changes are
recorded against the baseline so exports stay stable across batches.
"""
from __future__ import annotations
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence
import logging
import threading

from issue_editor.apply import Clock, apply_issues, landed_offsets, to_baseline
from issue_editor.changelog import summarize_changes
from issue_editor.config import EngineConfig
from issue_editor.decorate import build_decorations
from issue_editor.editops import Issue
from issue_editor.errors import IssueValidationError
from issue_editor.ir import ApplyResult, DecorationSet, Span, TrackedChange
from issue_editor.locate import locate
from issue_editor.redline import Artifact, render_markup, serialize
from issue_editor.status import IssueStatusTracker

logger = logging.getLogger(__name__)


class DocumentSession:
    """Single-writer editing session over one document's text and issue batch."""

    def __init__(
        self,
        content: str,
        issues: Sequence[Issue],
        config: Optional[EngineConfig] = None,
        source_name: str = "document",
        clock: Optional[Clock] = None,
    ):
        ids = [i.id for i in issues]
        if len(set(ids)) != len(ids):
            raise IssueValidationError("issue ids must be unique within a session")
        self.baseline = content
        self.config = config or EngineConfig()
        self.source_name = source_name
        self._clock = clock
        self._content = content
        self._issues: Dict[str, Issue] = {i.id: i for i in issues}
        self._order: List[str] = ids
        self._applied: Dict[str, TrackedChange] = {}
        self._write_lock = threading.Lock()
        self.tracker = IssueStatusTracker(issues)

    @property
    def content(self) -> str:
        return self._content

    def issues(self) -> List[Issue]:
        """Issues in their original order, carrying current tracker status."""
        return self.tracker.view(self._issues[i] for i in self._order)

    def issue(self, issue_id: str) -> Issue:
        return self._issues[issue_id].with_status(self.tracker.status(issue_id))

    def applied_changes(self) -> List[TrackedChange]:
        """Applied change records, positioned against the baseline."""
        return list(self._applied.values())

    def decorations(self) -> DecorationSet:
        with self._write_lock:
            content = self._content
            records = list(self._applied.values())
        # applied issues are highlighted where their new text landed
        landed = {c.id: Span(o, o + len(c.new_text)) for c, o in zip(records, landed_offsets(records))}
        views = [replace(i, position=landed[i.id]) if i.id in landed else i for i in self.issues()]
        return build_decorations(content, views, self.config.decoration_styles)

    def apply_issue(self, issue_id: str) -> ApplyResult:
        return self.apply([issue_id])

    def apply_all(self) -> ApplyResult:
        return self.apply(self._order)

    def apply(self, issue_ids: Iterable[str]) -> ApplyResult:
        """
        Apply the given issues to the current content.

        Only pending issues are sent to the applicator; ids already applied,
        rejected or in flight are left out, so repeating an apply is a no-op.
        Issues that cannot be located or that conflict end up `failed`.
        """
        started = self.tracker.begin(list(issue_ids))
        if not started:
            return ApplyResult(new_content=self._content)

        try:
            with self._write_lock:
                batch = [self._issues[i].with_status("applying") for i in started]
                result = apply_issues(self._content, batch, clock=self._clock)
                self._content = result.new_content
                prior = list(self._applied.values())
                for change in result.applied:
                    self._applied[change.id] = replace(change, position=to_baseline(change.position, prior))
        except Exception:
            for issue_id in started:
                self.tracker.fail(issue_id, "error")
            raise

        for change in result.applied:
            self.tracker.complete(change.id)
        for skipped in result.skipped:
            self.tracker.fail(skipped.issue_id, skipped.reason)
        return result

    def reject(self, issue_id: str) -> None:
        self.tracker.reject(issue_id)

    def retry(self, issue_id: str) -> None:
        self.tracker.retry(issue_id)

    def tracked_changes(self, include_pending: bool = True) -> List[TrackedChange]:
        """
        Change list positioned against the baseline text.

        Applied issues come from their tracked-change records; pending issues
        are added as previews when `include_pending` is set. Rejected issues
        are kept with status `rejected` so summaries can count them.
        """
        now = datetime.now(timezone.utc).isoformat() if self._clock is None else self._clock().isoformat()
        out: List[TrackedChange] = []
        for issue in self.issues():
            if issue.status == "applied":
                out.append(self._applied[issue.id])
                continue
            if issue.status != "rejected" and not include_pending:
                continue
            span = locate(self.baseline, issue) or issue.position
            out.append(TrackedChange(
                id=issue.id, type=issue.type, original_text=issue.original_text,
                new_text=issue.recommended_text, comment=issue.comment, position=Span(span.start, span.end),
                status=issue.status, created_at=now, updated_at=now,
            ))
        return out

    def preview(self, include_pending: bool = True) -> str:
        return render_markup(self.baseline, self.tracked_changes(include_pending))

    def export(self, filename: Optional[str] = None, preview: bool = True) -> Artifact:
        return serialize(
            self.baseline,
            self.tracked_changes(include_pending=preview),
            config=self.config,
            source_name=self.source_name,
            filename=filename,
        )

    def summary(self) -> Dict[str, int]:
        return summarize_changes(self.tracked_changes())
