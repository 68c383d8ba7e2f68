from __future__ import annotations
import argparse
import json
import logging
import os
from pathlib import Path

from issue_editor.config import CONFIG_ENV_VAR
from issue_editor.errors import EngineError
from issue_editor.pipeline import run_pipeline


def main(argv=None):
    ap = argparse.ArgumentParser(
        prog="issue-edit",
        description="Apply reviewer issues to a document and export a tracked-change rendering"
    )
    ap.add_argument("input_doc", help="Path to input document (.docx, .txt, .md)")
    ap.add_argument("--issues", required=True, help="JSON or YAML file with the issue batch")
    ap.add_argument("--out", default="./issue_out", help="Output directory")
    ap.add_argument(
        "--preview", action="store_true",
        help="Do not apply anything; render every issue as a pending change"
    )
    ap.add_argument(
        "--config",
        default=os.environ.get(CONFIG_ENV_VAR),
        help=f"Engine config YAML (or set {CONFIG_ENV_VAR} env var)"
    )
    ap.add_argument("--author", default=None, help="Author recorded on the redline document")
    ap.add_argument("--store", action="store_true", help="Also place the redline in the one-shot artifact store")
    ap.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    if not Path(args.input_doc).exists():
        ap.error(f"input document not found: {args.input_doc}")
    if not Path(args.issues).exists():
        ap.error(f"issues file not found: {args.issues}")

    try:
        payload = run_pipeline(
            input_doc=args.input_doc,
            issues_path=args.issues,
            out_dir=args.out,
            mode="preview" if args.preview else "apply",
            config_path=args.config,
            author=args.author,
            store_artifact=args.store,
        )
    except EngineError as e:
        ap.exit(2, f"issue-edit: error: {e}\n")

    output = {
        "bundle_dir": str(Path(payload["artifacts"]["edited_txt"]).parent),
        "mode": payload["mode"],
        "redline_docx": payload["artifacts"]["redline_docx"],
        "issues_total": payload["stats"]["issues_total"],
        "issues_applied": payload["stats"]["issues_applied"],
        "conflicts": [s["issue_id"] for s in payload["skipped"] if s["reason"] == "span_conflict"],
        "not_found": [s["issue_id"] for s in payload["skipped"] if s["reason"] == "span_not_found"],
        "findings_total": payload["stats"]["findings_total"],
    }
    if payload.get("download"):
        output["download_token"] = payload["download"]["token"]

    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
