"""
Issue Editor

Locates reviewer issues in extracted document text, applies them without
corrupting the offsets of other pending issues, and renders tracked changes.
"""
from issue_editor.editops import Issue, load_issues
from issue_editor.ir import (
    Span,
    ResolvedSpan,
    TrackedChange,
    Decoration,
    DecorationSet,
    ApplyResult,
    SkippedIssue,
)
from issue_editor.locate import locate, locate_text
from issue_editor.decorate import build_decorations
from issue_editor.apply import apply_issues, apply_issue
from issue_editor.redline import Artifact, build_segments, render_markup, serialize
from issue_editor.status import IssueStatusTracker
from issue_editor.session import DocumentSession

__all__ = [
    "Issue",
    "load_issues",
    "Span",
    "ResolvedSpan",
    "TrackedChange",
    "Decoration",
    "DecorationSet",
    "ApplyResult",
    "SkippedIssue",
    "locate",
    "locate_text",
    "build_decorations",
    "apply_issues",
    "apply_issue",
    "Artifact",
    "build_segments",
    "render_markup",
    "serialize",
    "IssueStatusTracker",
    "DocumentSession",
]
