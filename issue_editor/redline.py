"""
Tracked-change rendering.

Turns a baseline text plus a list of tracked changes into an ordered list of
segments, then renders those segments as a .docx (python-docx) or as plain
text markup for previews:

- unmodified text passes through verbatim
- applied changes show the new text in the "inserted" colour
- pending changes show the struck original, the proposed text and the comment
- rejected changes are left out, so the baseline text shows instead
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import logging

from docx import Document
from docx.shared import RGBColor

from issue_editor.config import DEFAULT_COLORS, EngineConfig
from issue_editor.ir import Span, TrackedChange
from issue_editor.locate import locate_text

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@dataclass
class Segment:
    kind: str        # text|inserted|deleted|proposed|comment
    text: str
    change_id: Optional[str] = None


@dataclass
class Artifact:
    data: bytes
    filename: str
    media_type: str = DOCX_MEDIA_TYPE
    skipped: List[str] = field(default_factory=list)


def _verify_position(baseline: str, change: TrackedChange) -> Optional[Span]:
    pos = change.position
    if not change.original_text:
        # pure insertion point
        if 0 <= pos.start == pos.end <= len(baseline):
            return pos
        return None
    if baseline[pos.start:pos.end] == change.original_text:
        return pos
    return locate_text(baseline, change.original_text, pos)


def _place_changes(baseline: str, changes: Sequence[TrackedChange]) -> Tuple[List[Tuple[Span, TrackedChange]], List[str]]:
    placed: List[Tuple[int, Span, TrackedChange]] = []
    skipped: List[str] = []
    for idx, change in enumerate(changes):
        if change.status == "rejected":
            continue
        span = _verify_position(baseline, change)
        if span is None:
            logger.warning(f"Change {change.id}: original text not found in baseline; not rendered")
            skipped.append(change.id)
            continue
        placed.append((idx, span, change))

    placed.sort(key=lambda p: (p[1].start, p[0]))
    out: List[Tuple[Span, TrackedChange]] = []
    cursor = 0
    for _, span, change in placed:
        if span.start < cursor:
            logger.warning(f"Change {change.id}: overlaps a previous change; not rendered")
            skipped.append(change.id)
            continue
        out.append((span, change))
        cursor = span.end
    return out, skipped


def build_segments(baseline: str, changes: Sequence[TrackedChange]) -> Tuple[List[Segment], List[str]]:
    """Return (segments, ids of changes that could not be placed)."""
    placed, skipped = _place_changes(baseline, changes)
    segments: List[Segment] = []
    cursor = 0
    for span, change in placed:
        if span.start > cursor:
            segments.append(Segment("text", baseline[cursor:span.start]))
        if change.status == "applied":
            if change.new_text:
                segments.append(Segment("inserted", change.new_text, change.id))
        else:
            # pending, applying and failed changes are still proposals
            if change.original_text:
                segments.append(Segment("deleted", change.original_text, change.id))
            if change.new_text:
                segments.append(Segment("proposed", change.new_text, change.id))
            if change.comment:
                segments.append(Segment("comment", change.comment, change.id))
        cursor = span.end
    if cursor < len(baseline):
        segments.append(Segment("text", baseline[cursor:]))
    return segments, skipped


def render_markup(baseline: str, changes: Sequence[TrackedChange]) -> str:
    segments, _ = build_segments(baseline, changes)
    parts: List[str] = []
    for seg in segments:
        if seg.kind == "text":
            parts.append(seg.text)
        elif seg.kind == "deleted":
            parts.append(f"[-{seg.text}-]")
        elif seg.kind in ("inserted", "proposed"):
            parts.append(f"{{+{seg.text}+}}")
        elif seg.kind == "comment":
            parts.append(f" [comment: {seg.text}]")
    return "".join(parts)


class _DocxWriter:
    def __init__(self, doc):
        self.doc = doc
        self.paragraph = None

    def _current(self):
        if self.paragraph is None:
            self.paragraph = self.doc.add_paragraph()
        return self.paragraph

    def write(self, text: str, color: Optional[str] = None, strike: bool = False, italic: bool = False) -> None:
        # blank line = new paragraph, single newline = line break
        for bi, block in enumerate(text.split("\n\n")):
            if bi > 0:
                self.paragraph = None
            for li, line in enumerate(block.split("\n")):
                if li > 0:
                    self._current().add_run().add_break()
                if not line:
                    continue
                run = self._current().add_run(line)
                if color:
                    run.font.color.rgb = RGBColor.from_string(color)
                if strike:
                    run.font.strike = True
                if italic:
                    run.italic = True


def artifact_filename(source_name: str, config: EngineConfig, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    stem = Path(source_name).stem or "document"
    return config.filename_template.format(stem=stem, timestamp=now.strftime("%Y%m%d_%H%M%SZ"))


def serialize(
    baseline: str,
    changes: Sequence[TrackedChange],
    config: Optional[EngineConfig] = None,
    source_name: str = "document",
    filename: Optional[str] = None,
    title: Optional[str] = None,
) -> Artifact:
    """Render the tracked-change document as .docx bytes plus a suggested filename."""
    config = config or EngineConfig()
    segments, skipped = build_segments(baseline, changes)

    doc = Document()
    doc.core_properties.title = title or config.title
    doc.core_properties.author = config.author

    writer = _DocxWriter(doc)
    colors = {**DEFAULT_COLORS, **config.colors}
    for seg in segments:
        if seg.kind == "text":
            writer.write(seg.text)
        elif seg.kind == "inserted":
            writer.write(seg.text, color=colors["inserted"])
        elif seg.kind == "deleted":
            writer.write(seg.text, color=colors["deleted"], strike=True)
        elif seg.kind == "proposed":
            writer.write(seg.text, color=colors["proposed"])
        elif seg.kind == "comment":
            writer.write(f" [{seg.text}]", color=colors["comment"], italic=True)

    buf = BytesIO()
    doc.save(buf)
    name = filename or artifact_filename(source_name, config)
    logger.info(f"Rendered {name} ({len(segments)} segments, {len(skipped)} changes skipped)")
    return Artifact(data=buf.getvalue(), filename=name, skipped=skipped)
