from io import BytesIO

from docx import Document

from issue_editor.config import EngineConfig
from issue_editor.ir import Span, TrackedChange
from issue_editor.redline import build_segments, render_markup, serialize, artifact_filename, DOCX_MEDIA_TYPE


def _change(id, original, new, start, end, status, comment=""):
    return TrackedChange(id=id, type="style", original_text=original, new_text=new, comment=comment,
                         position=Span(start, end), status=status,
                         created_at="2024-01-01T00:00:00+00:00", updated_at="2024-01-01T00:00:00+00:00")


BASE = "A quick fox jumps."


def test_segments_for_each_status():
    changes = [
        _change("a", "quick", "slow", 2, 7, "applied"),
        _change("b", "fox", "dog", 8, 11, "pending", comment="animal"),
        _change("c", "jumps", "sits", 12, 17, "rejected"),
    ]
    segments, skipped = build_segments(BASE, changes)
    assert skipped == []
    assert [(s.kind, s.text) for s in segments] == [
        ("text", "A "),
        ("inserted", "slow"),
        ("text", " "),
        ("deleted", "fox"),
        ("proposed", "dog"),
        ("comment", "animal"),
        ("text", " jumps."),
    ]


def test_markup_rendering():
    changes = [_change("a", "quick", "slow", 2, 7, "applied"), _change("b", "fox", "dog", 8, 11, "pending", "why")]
    assert render_markup(BASE, changes) == "A {+slow+} [-fox-]{+dog+} [comment: why] jumps."


def test_stale_change_position_is_relocated():
    segments, skipped = build_segments(BASE, [_change("a", "fox", "dog", 0, 3, "applied")])
    assert skipped == []
    assert "".join(s.text for s in segments) == "A quick dog jumps."


def test_unplaceable_and_overlapping_changes_are_skipped():
    changes = [
        _change("a", "quick fox", "x", 2, 11, "applied"),
        _change("b", "fox", "y", 8, 11, "pending"),
        _change("c", "cat", "z", 0, 3, "pending"),
    ]
    segments, skipped = build_segments(BASE, changes)
    assert sorted(skipped) == ["b", "c"]
    assert "".join(s.text for s in segments) == "A x jumps."


def test_no_changes_passes_baseline_through():
    segments, _ = build_segments(BASE, [])
    assert [(s.kind, s.text) for s in segments] == [("text", BASE)]


def test_serialize_docx_runs():
    changes = [_change("a", "quick", "slow", 2, 7, "applied"), _change("b", "fox", "dog", 8, 11, "pending", "animal")]
    artifact = serialize(BASE, changes, config=EngineConfig(author="Reviewer"), filename="out.docx")
    assert artifact.filename == "out.docx"
    assert artifact.media_type == DOCX_MEDIA_TYPE

    doc = Document(BytesIO(artifact.data))
    assert doc.core_properties.author == "Reviewer"
    assert len(doc.paragraphs) == 1
    runs = doc.paragraphs[0].runs
    by_text = {r.text: r for r in runs}
    assert str(by_text["slow"].font.color.rgb) == "008000"
    assert by_text["fox"].font.strike
    assert str(by_text["fox"].font.color.rgb) == "FF0000"
    assert str(by_text["dog"].font.color.rgb) == "0000FF"
    assert by_text[" [animal]"].italic
    assert doc.paragraphs[0].text == "A slow foxdog [animal] jumps."


def test_serialize_splits_paragraphs_on_blank_lines():
    artifact = serialize("First para.\n\nSecond para.", [], filename="x.docx")
    doc = Document(BytesIO(artifact.data))
    assert [p.text for p in doc.paragraphs] == ["First para.", "Second para."]


def test_artifact_filename_template():
    from datetime import datetime, timezone
    name = artifact_filename("contract.docx", EngineConfig(), now=datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc))
    assert name == "edited_contract_20240506_070809Z.docx"
