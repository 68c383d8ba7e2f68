from issue_editor.adapters.text_extraction import extract_plain_text, extract_file
from issue_editor.adapters.artifact_store import ArtifactStore, DownloadHandle

__all__ = ["extract_plain_text", "extract_file", "ArtifactStore", "DownloadHandle"]
