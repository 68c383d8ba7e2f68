from __future__ import annotations
from typing import Dict, Any, List, Optional
from pathlib import Path
from datetime import datetime, timezone
from shutil import copy2
import logging

import yaml

from issue_editor.adapters.artifact_store import ArtifactStore
from issue_editor.adapters.text_extraction import extract_file
from issue_editor.changelog import write_json, write_txt
from issue_editor.config import load_config
from issue_editor.editops import Issue, load_issues
from issue_editor.errors import IssueValidationError
from issue_editor.session import DocumentSession
from issue_editor.verify import verify_apply

logger = logging.getLogger(__name__)


def load_issue_file(path: str) -> List[Issue]:
    """Read issues from a JSON or YAML file: a list, or a mapping with an `issues` list."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get("issues")
    if not isinstance(data, list):
        raise IssueValidationError(f"{path}: expected a list of issues")
    return load_issues(data)


def run_pipeline(
    *,
    input_doc: str,
    issues_path: str,
    out_dir: str,
    mode: str = "apply",
    config_path: Optional[str] = None,
    author: Optional[str] = None,
    store_artifact: bool = False,
) -> Dict[str, Any]:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%SZ")
    out = Path(out_dir); out.mkdir(parents=True, exist_ok=True)

    stem = Path(input_doc).stem
    bundle = out / f"{stem}_{ts}"
    bundle.mkdir(parents=True, exist_ok=True)

    source_copy = str(bundle / f"{stem}.source{Path(input_doc).suffix}")
    edited_txt = str(bundle / f"{stem}.edited.txt")
    changelog_json = str(bundle / f"{stem}.changelog.json")
    changelog_txt = str(bundle / f"{stem}.changelog.txt")

    copy2(input_doc, source_copy)

    config = load_config(config_path)
    if author:
        config.author = author

    # Extract + load issues
    content = extract_file(input_doc)
    issues = load_issue_file(issues_path)
    logger.info(f"Loaded {len(issues)} issues for {Path(input_doc).name}")

    session = DocumentSession(content, issues, config=config, source_name=Path(input_doc).name)

    findings = []
    skipped = []
    if mode == "apply":
        result = session.apply_all()
        findings.extend(verify_apply(content, result))
        skipped = [{"issue_id": s.issue_id, "reason": s.reason, "detail": s.detail} for s in result.skipped]
        for s in result.skipped:
            logger.warning(f"Issue {s.issue_id} skipped: {s.reason} {s.detail}")

    Path(edited_txt).write_text(session.content, encoding="utf-8")

    # Redline
    artifact = session.export(preview=True)
    redline_path = str(bundle / artifact.filename)
    Path(redline_path).write_bytes(artifact.data)

    download = None
    if store_artifact:
        store = ArtifactStore(config.artifact_dir)
        handle = store.store(artifact.data, artifact.filename)
        download = {"token": handle.token, "filename": handle.filename, "root": str(store.root)}

    changes = session.tracked_changes()
    counts = session.tracker.counts()
    payload: Dict[str, Any] = {
        "timestamp_utc": ts,
        "mode": mode,
        "artifacts": {
            "source": source_copy,
            "edited_txt": edited_txt,
            "redline_docx": redline_path,
        },
        "download": download,
        "stats": {
            "issues_total": len(issues),
            "issues_applied": counts["applied"],
            "issues_pending": counts["pending"],
            "issues_failed": counts["failed"],
            "issues_rejected": counts["rejected"],
            "conflicts": sum(1 for s in skipped if s["reason"] == "span_conflict"),
            "not_found": sum(1 for s in skipped if s["reason"] == "span_not_found"),
            "redline_skipped": len(artifact.skipped),
            "findings_total": len(findings),
        },
        "skipped": skipped,
        "findings": [f.to_dict() for f in findings],
        "changes": [c.to_dict() for c in changes],
        "preview": session.preview(),
    }

    write_json(changelog_json, payload)
    write_txt(changelog_txt, payload)
    return payload
