import pytest

from issue_editor.editops import Issue, load_issues
from issue_editor.errors import IssueValidationError
from issue_editor.ir import Span


def test_from_camel_case_wire_record():
    issue = Issue.from_dict({
        "id": "1", "type": "Ambiguity", "originalText": "shall", "recommendedText": "must",
        "comment": "stronger", "position": {"start": 3, "end": 8}, "status": "pending",
    })
    assert issue.original_text == "shall"
    assert issue.recommended_text == "must"
    assert issue.position == Span(3, 8)
    assert issue.to_dict()["originalText"] == "shall"


def test_from_snake_case_record_with_defaults():
    issue = Issue.from_dict({"id": "2", "type": "Liability", "original_text": "may", "recommended_text": "shall"})
    assert issue.position == Span(0, 0)
    assert issue.status == "pending"
    assert issue.comment == ""


@pytest.mark.parametrize("record", [
    {"id": "x", "position": {"start": 5, "end": 2}},
    {"id": "x", "position": {"start": -1, "end": 2}},
    {"id": "x", "position": {"start": "a", "end": 2}},
    {"id": "x", "status": "done"},
    {"type": "no id"},
])
def test_invalid_records(record):
    with pytest.raises(IssueValidationError):
        Issue.from_dict(record)


def test_load_issues_rejects_duplicates():
    with pytest.raises(IssueValidationError):
        load_issues([{"id": "a"}, {"id": "a"}])


def test_with_status_returns_copy():
    issue = Issue(id="a", type="t", original_text="x", recommended_text="y")
    applied = issue.with_status("applied")
    assert issue.status == "pending"
    assert applied.status == "applied"
