from __future__ import annotations
from io import BytesIO
from pathlib import Path
import logging
import mimetypes
import re
import zipfile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from issue_editor.errors import UnsupportedSourceFormat

logger = logging.getLogger(__name__)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIMES = {"text/plain", "text/markdown", "text/x-markdown"}
TEXT_SUFFIXES = {".txt", ".md", ".markdown"}


def normalize_text(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _docx_text(data: bytes) -> str:
    try:
        doc = Document(BytesIO(data))
    except (zipfile.BadZipFile, PackageNotFoundError, KeyError, ValueError) as e:
        raise UnsupportedSourceFormat(DOCX_MIME, "not a readable .docx package") from e
    # one paragraph per block, separated by a blank line
    return "\n\n".join(p.text for p in doc.paragraphs)


def extract_plain_text(data: bytes, mime_type: str, filename: str = "") -> str:
    """
    Extract plain text from a source document.

    Supports .docx and plain text/markdown. Everything else (including legacy
    .doc and PDF) raises UnsupportedSourceFormat.
    """
    mime = (mime_type or "").split(";")[0].strip().lower()
    suffix = Path(filename).suffix.lower() if filename else ""

    if mime == DOCX_MIME or suffix == ".docx":
        text = _docx_text(data)
    elif mime in TEXT_MIMES or suffix in TEXT_SUFFIXES:
        text = data.decode("utf-8-sig", errors="replace")
    else:
        raise UnsupportedSourceFormat(mime_type, filename)

    text = normalize_text(text)
    logger.info(f"Extracted {len(text)} characters from {filename or mime}")
    return text


def extract_file(path: str) -> str:
    mime, _ = mimetypes.guess_type(path)
    with open(path, "rb") as f:
        data = f.read()
    return extract_plain_text(data, mime or "", filename=Path(path).name)
