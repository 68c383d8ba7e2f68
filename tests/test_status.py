import threading

import pytest

from issue_editor.editops import Issue
from issue_editor.errors import InvalidTransition
from issue_editor.ir import Span
from issue_editor.status import IssueStatusTracker


def _issues(*ids):
    return [Issue(id=i, type="t", original_text="x", recommended_text="y", position=Span(0, 1)) for i in ids]


def test_happy_path():
    t = IssueStatusTracker(_issues("a"))
    assert t.status("a") == "pending"
    assert t.begin(["a"]) == ["a"]
    assert t.status("a") == "applying"
    t.complete("a")
    assert t.status("a") == "applied"


def test_applied_is_terminal():
    t = IssueStatusTracker(_issues("a"))
    t.begin(["a"])
    t.complete("a")
    for target in ("pending", "applying", "rejected", "failed"):
        with pytest.raises(InvalidTransition):
            t.transition("a", target)


def test_reject_only_from_pending():
    t = IssueStatusTracker(_issues("a", "b"))
    t.reject("a")
    assert t.status("a") == "rejected"
    with pytest.raises(InvalidTransition):
        t.retry("a")
    t.begin(["b"])
    with pytest.raises(InvalidTransition):
        t.reject("b")


def test_fail_and_retry():
    t = IssueStatusTracker(_issues("a"))
    t.begin(["a"])
    t.fail("a", "span_not_found")
    assert t.status("a") == "failed"
    assert t.reason("a") == "span_not_found"
    assert t.begin(["a"]) == []
    t.retry("a")
    assert t.status("a") == "pending"
    assert t.reason("a") is None
    assert t.begin(["a"]) == ["a"]


def test_complete_requires_applying():
    t = IssueStatusTracker(_issues("a"))
    with pytest.raises(InvalidTransition):
        t.complete("a")


def test_begin_filters_ineligible_and_duplicates():
    t = IssueStatusTracker(_issues("a", "b", "c"))
    t.reject("c")
    t.begin(["b"])
    assert t.begin(["a", "b", "c", "a"]) == ["a"]
    assert t.eligible(["a", "b", "c"]) == []


def test_unknown_id_raises_key_error():
    t = IssueStatusTracker(_issues("a"))
    with pytest.raises(KeyError):
        t.begin(["nope"])
    with pytest.raises(KeyError):
        t.status("nope")


def test_multiple_issues_may_be_applying():
    t = IssueStatusTracker(_issues("a", "b"))
    t.begin(["a"])
    t.begin(["b"])
    assert t.counts()["applying"] == 2


def test_concurrent_begin_hands_each_id_out_once():
    ids = [f"i{n}" for n in range(50)]
    t = IssueStatusTracker(_issues(*ids))
    taken = []
    lock = threading.Lock()

    def worker():
        got = t.begin(ids)
        with lock:
            taken.extend(got)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()
    assert sorted(taken) == sorted(ids)


def test_view_carries_tracked_status():
    issues = _issues("a", "b")
    t = IssueStatusTracker(issues)
    t.reject("b")
    assert [i.status for i in t.view(issues)] == ["pending", "rejected"]
