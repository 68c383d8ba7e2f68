from __future__ import annotations
from typing import Dict, FrozenSet, Iterable, List, Optional
import logging
import threading

from issue_editor.editops import Issue
from issue_editor.errors import InvalidTransition
from issue_editor.ir import IssueStatus, ISSUE_STATUSES

logger = logging.getLogger(__name__)

# applied and rejected are terminal; failed issues may be retried
TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"applying", "rejected"}),
    "applying": frozenset({"applied", "failed"}),
    "failed": frozenset({"pending"}),
    "applied": frozenset(),
    "rejected": frozenset(),
}


class IssueStatusTracker:
    """
    Per-issue status state machine.

    The tracker only decides which issue ids may enter the next apply batch;
    it never touches document content. Several issues can be `applying` at
    the same time.
    """

    def __init__(self, issues: Iterable[Issue] = ()):
        self._lock = threading.Lock()
        self._status: Dict[str, IssueStatus] = {}
        self._reasons: Dict[str, str] = {}
        for issue in issues:
            self._status[issue.id] = issue.status

    def __contains__(self, issue_id: object) -> bool:
        return issue_id in self._status

    def add(self, issue: Issue) -> None:
        with self._lock:
            self._status.setdefault(issue.id, issue.status)

    def status(self, issue_id: str) -> IssueStatus:
        with self._lock:
            return self._status[issue_id]

    def reason(self, issue_id: str) -> Optional[str]:
        with self._lock:
            return self._reasons.get(issue_id)

    def _move(self, issue_id: str, target: IssueStatus) -> None:
        current = self._status[issue_id]
        if target not in TRANSITIONS[current]:
            raise InvalidTransition(issue_id, current, target)
        self._status[issue_id] = target
        logger.debug(f"{issue_id}: {current} -> {target}")

    def transition(self, issue_id: str, target: IssueStatus) -> None:
        with self._lock:
            self._move(issue_id, target)

    def eligible(self, issue_ids: Iterable[str]) -> List[str]:
        with self._lock:
            return [i for i in issue_ids if self._status.get(i) == "pending"]

    def begin(self, issue_ids: Iterable[str]) -> List[str]:
        """Move the pending ids to `applying` and return them; anything else is left out of the batch."""
        started: List[str] = []
        with self._lock:
            for issue_id in issue_ids:
                if issue_id not in self._status:
                    raise KeyError(issue_id)
                if self._status[issue_id] != "pending" or issue_id in started:
                    logger.debug(f"{issue_id}: not eligible ({self._status[issue_id]})")
                    continue
                self._move(issue_id, "applying")
                started.append(issue_id)
        return started

    def complete(self, issue_id: str) -> None:
        with self._lock:
            self._move(issue_id, "applied")
            self._reasons.pop(issue_id, None)

    def fail(self, issue_id: str, reason: str = "") -> None:
        with self._lock:
            self._move(issue_id, "failed")
            if reason:
                self._reasons[issue_id] = reason

    def retry(self, issue_id: str) -> None:
        with self._lock:
            self._move(issue_id, "pending")
            self._reasons.pop(issue_id, None)

    def reject(self, issue_id: str) -> None:
        with self._lock:
            self._move(issue_id, "rejected")

    def snapshot(self) -> Dict[str, IssueStatus]:
        with self._lock:
            return dict(self._status)

    def counts(self) -> Dict[str, int]:
        snap = self.snapshot()
        return {s: sum(1 for v in snap.values() if v == s) for s in ISSUE_STATUSES}

    def view(self, issues: Iterable[Issue]) -> List[Issue]:
        """Copies of `issues` carrying their tracked status."""
        snap = self.snapshot()
        return [i.with_status(snap.get(i.id, i.status)) for i in issues]
