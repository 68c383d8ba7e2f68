from __future__ import annotations
from typing import Dict, Any, List, Sequence
import json

from issue_editor.ir import TrackedChange


def summarize_changes(changes: Sequence[TrackedChange]) -> Dict[str, int]:
    return {
        "applied": sum(1 for c in changes if c.status == "applied"),
        "pending": sum(1 for c in changes if c.status in ("pending", "applying", "failed")),
        "rejected": sum(1 for c in changes if c.status == "rejected"),
        "total": len(changes),
    }


def render_summary(changes: Sequence[TrackedChange]) -> str:
    s = summarize_changes(changes)
    return "\n".join([
        "Document Review Summary:",
        f"- Applied Changes: {s['applied']}",
        f"- Pending Changes: {s['pending']}",
        f"- Rejected Changes: {s['rejected']}",
        f"- Total Changes: {s['total']}",
    ])


def write_json(path: str, payload: Dict[str, Any]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def write_txt(path: str, payload: Dict[str, Any]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_txt(payload))


def render_txt(payload: Dict[str, Any]) -> str:
    lines: List[str] = []
    lines.append(f"Review Bundle — {payload.get('timestamp_utc')}")
    lines.append("")
    a = payload.get("artifacts", {})
    lines.append("Artifacts")
    lines.append(f"- Source:   {a.get('source')}")
    lines.append(f"- Edited:   {a.get('edited_txt')}")
    lines.append(f"- Redline:  {a.get('redline_docx') or '[not generated]'}")
    lines.append("")
    stats = payload.get("stats", {})
    lines.append("Stats")
    for k, v in stats.items():
        lines.append(f"- {k}: {v}")
    lines.append("")
    skipped = payload.get("skipped", []) or []
    if skipped:
        lines.append("Skipped Issues")
        for s in skipped:
            lines.append(f"- {s['issue_id']}: {s['reason']} {s.get('detail') or ''}".rstrip())
        lines.append("")
    findings = payload.get("findings", []) or []
    if findings:
        lines.append("Findings")
        for fnd in findings[:60]:
            lines.append(f"- [{fnd['severity'].upper()}] {fnd['category']} {fnd['rule_id']}: {fnd['message']}")
        if len(findings) > 60:
            lines.append(f"... plus {len(findings)-60} more.")
        lines.append("")
    changes = payload.get("changes", []) or []
    if changes:
        lines.append("Changes (first 50)")
        for c in changes[:50]:
            lines.append(f"- {c['status']}: {c['id']} ({c['type']}) @ {c['position']['start']}..{c['position']['end']}")
    preview = payload.get("preview")
    if preview:
        lines.append("")
        lines.append("Preview")
        lines.append(preview)
    return "\n".join(lines)
