from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
import logging
import os
import re
import tempfile
import uuid

from issue_editor.errors import DownloadExpired

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9._ -]+")
_TOKEN = re.compile(r"[0-9a-f]{32}")


@dataclass(frozen=True)
class DownloadHandle:
    token: str
    filename: str


def safe_filename(name: str) -> str:
    base = os.path.basename(name.replace("\\", "/")).strip()
    base = _UNSAFE.sub("_", base).lstrip(".")
    return base or "document.docx"


class ArtifactStore:
    """
    Temp-directory store handing out one-shot download handles.

    Each artifact lives as `<token>` next to a `<token>.name` file holding its
    download filename, so any store on the same root can redeem a token.
    Retrieval claims the file with an atomic rename and deletes it; any later
    retrieval of the same token raises DownloadExpired.
    """

    def __init__(self, root: Optional[str] = None):
        self.root = Path(root) if root else Path(tempfile.gettempdir()) / "issue_editor_artifacts"
        self.root.mkdir(parents=True, exist_ok=True)

    def store(self, data: bytes, suggested_filename: str) -> DownloadHandle:
        token = uuid.uuid4().hex
        filename = safe_filename(suggested_filename)
        (self.root / f"{token}.name").write_text(filename, encoding="utf-8")
        part = self.root / f"{token}.part"
        part.write_bytes(data)
        os.replace(part, self.root / token)
        logger.info(f"Stored artifact {filename} ({len(data)} bytes) as {token}")
        return DownloadHandle(token=token, filename=filename)

    def retrieve(self, token: str) -> Tuple[bytes, str]:
        if not _TOKEN.fullmatch(token or ""):
            raise DownloadExpired(token)
        claimed = self.root / f"{token}.claimed-{uuid.uuid4().hex}"
        try:
            os.replace(self.root / token, claimed)
        except FileNotFoundError as e:
            raise DownloadExpired(token) from e

        name_file = self.root / f"{token}.name"
        try:
            filename = name_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            filename = "document.docx"
        data = claimed.read_bytes()
        for path in (claimed, name_file):
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Failed to clean up artifact {path}: {e}")
        logger.info(f"Retrieved artifact {filename} ({len(data)} bytes) for {token}")
        return data, filename
