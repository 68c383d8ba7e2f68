from __future__ import annotations
from typing import List

from issue_editor.apply import landed_offsets
from issue_editor.ir import ApplyResult, Finding


def verify_apply(before: str, result: ApplyResult) -> List[Finding]:
    """Check that an ApplyResult is consistent with the content it was computed from."""
    findings: List[Finding] = []
    after = result.new_content
    changes = sorted(result.applied, key=lambda c: c.position.start)
    landed = landed_offsets(changes)

    # each replacement sits where the shifted offsets say it should
    for change, start in zip(changes, landed):
        if before[change.position.start:change.position.end] != change.original_text:
            findings.append(Finding(
                rule_id="inv.original_mismatch",
                severity="critical",
                category="invariant",
                message="Applied change does not match the original text at its resolved position.",
                details={"issue_id": change.id, "start": str(change.position.start)},
            ))
        if after[start:start + len(change.new_text)] != change.new_text:
            findings.append(Finding(
                rule_id="inv.replacement_missing",
                severity="critical",
                category="invariant",
                message="Replacement text not found at its expected offset.",
                details={"issue_id": change.id, "expected_start": str(start)},
            ))

    # text outside the changed spans is untouched
    cursor_before = 0
    cursor_after = 0
    for change, start in zip(changes, landed):
        gap = before[cursor_before:change.position.start]
        if after[cursor_after:cursor_after + len(gap)] != gap:
            findings.append(Finding(
                rule_id="inv.untouched_text_changed",
                severity="critical",
                category="invariant",
                message="Text outside applied spans was modified.",
                details={"before_offset": str(cursor_before), "after_offset": str(cursor_after)},
            ))
            break
        cursor_before = change.position.end
        cursor_after = start + len(change.new_text)
    else:
        if before[cursor_before:] != after[cursor_after:]:
            findings.append(Finding(
                rule_id="inv.untouched_text_changed",
                severity="critical",
                category="invariant",
                message="Text after the last applied span was modified.",
                details={"before_offset": str(cursor_before), "after_offset": str(cursor_after)},
            ))

    expected_delta = sum(len(c.new_text) - c.position.length for c in changes)
    if len(after) - len(before) != expected_delta:
        findings.append(Finding(
            rule_id="inv.length_delta",
            severity="critical",
            category="invariant",
            message="Content length change does not match the applied replacements.",
            details={"expected": str(expected_delta), "actual": str(len(after) - len(before))},
        ))

    return findings
