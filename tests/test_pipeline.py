import json
from io import BytesIO
from pathlib import Path

from docx import Document

from issue_editor.adapters.artifact_store import ArtifactStore
from issue_editor.cli import main
from issue_editor.pipeline import load_issue_file, run_pipeline

ISSUES = [
    {"id": "1", "type": "Ambiguity", "originalText": "may", "recommendedText": "shall",
     "comment": "Make the obligation binding.", "position": {"start": 13, "end": 16}},
    {"id": "2", "type": "Liability", "originalText": "reasonable efforts", "recommendedText": "best efforts",
     "comment": "", "position": {"start": 0, "end": 0}},
    {"id": "3", "type": "Missing clause", "originalText": "indemnify", "recommendedText": "hold harmless",
     "comment": "", "position": {"start": 0, "end": 9}},
]


def _write_inputs(tmp_path):
    doc = tmp_path / "contract.txt"
    doc.write_text("The Supplier may use reasonable efforts to deliver.\n\nPayment is due in 30 days.", encoding="utf-8")
    issues = tmp_path / "issues.json"
    issues.write_text(json.dumps({"issues": ISSUES}), encoding="utf-8")
    return doc, issues


def test_load_issue_file_accepts_yaml_list(tmp_path):
    p = tmp_path / "issues.yml"
    p.write_text("- id: a\n  originalText: x\n  recommendedText: y\n", encoding="utf-8")
    issues = load_issue_file(str(p))
    assert [i.id for i in issues] == ["a"]


def test_run_pipeline_apply(tmp_path):
    doc, issues = _write_inputs(tmp_path)
    payload = run_pipeline(input_doc=str(doc), issues_path=str(issues), out_dir=str(tmp_path / "out"))

    edited = Path(payload["artifacts"]["edited_txt"]).read_text(encoding="utf-8")
    assert edited == "The Supplier shall use best efforts to deliver.\n\nPayment is due in 30 days."
    assert payload["stats"]["issues_applied"] == 2
    assert payload["stats"]["not_found"] == 1
    assert payload["skipped"][0]["issue_id"] == "3"
    assert payload["findings"] == []

    redline = Document(payload["artifacts"]["redline_docx"])
    assert [p.text for p in redline.paragraphs][1] == "Payment is due in 30 days."
    assert Path(payload["artifacts"]["redline_docx"]).name.startswith("edited_contract_")

    bundle = Path(payload["artifacts"]["edited_txt"]).parent
    assert (bundle / "contract.changelog.json").exists()
    assert "Skipped Issues" in (bundle / "contract.changelog.txt").read_text(encoding="utf-8")


def test_run_pipeline_preview_leaves_content(tmp_path):
    doc, issues = _write_inputs(tmp_path)
    payload = run_pipeline(input_doc=str(doc), issues_path=str(issues), out_dir=str(tmp_path / "out"), mode="preview")
    edited = Path(payload["artifacts"]["edited_txt"]).read_text(encoding="utf-8")
    assert edited.startswith("The Supplier may use reasonable efforts")
    assert payload["stats"]["issues_applied"] == 0
    assert "[-may-]{+shall+}" in payload["preview"]


def test_run_pipeline_store(tmp_path):
    doc, issues = _write_inputs(tmp_path)
    cfg = tmp_path / "engine.yml"
    cfg.write_text(f"artifact_dir: {tmp_path / 'store'}\n", encoding="utf-8")
    payload = run_pipeline(input_doc=str(doc), issues_path=str(issues), out_dir=str(tmp_path / "out"),
                           config_path=str(cfg), store_artifact=True)
    token = payload["download"]["token"]
    assert (tmp_path / "store" / token).exists()

    data, name = ArtifactStore(str(tmp_path / "store")).retrieve(token)
    assert name == payload["download"]["filename"]
    assert Document(BytesIO(data)).paragraphs
    assert not (tmp_path / "store" / token).exists()


def test_cli_prints_summary(tmp_path, capsys):
    doc, issues = _write_inputs(tmp_path)
    main([str(doc), "--issues", str(issues), "--out", str(tmp_path / "out")])
    out = json.loads(capsys.readouterr().out)
    assert out["issues_applied"] == 2
    assert out["not_found"] == ["3"]
    assert out["conflicts"] == []
    data = Path(out["redline_docx"]).read_bytes()
    assert Document(BytesIO(data)).paragraphs
