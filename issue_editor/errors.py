from __future__ import annotations


class EngineError(Exception):
    """Base class for issue_editor errors."""


class IssueValidationError(EngineError, ValueError):
    """An issue record is malformed (bad position, missing id, ...)."""


class SpanNotFound(EngineError):
    reason = "span_not_found"

    def __init__(self, issue_id: str, detail: str = ""):
        self.issue_id = issue_id
        self.detail = detail
        super().__init__(f"{issue_id}: original text not found in content" + (f" ({detail})" if detail else ""))


class SpanConflict(EngineError):
    reason = "span_conflict"

    def __init__(self, issue_id: str, detail: str = ""):
        self.issue_id = issue_id
        self.detail = detail
        super().__init__(f"{issue_id}: span overlaps another issue in the batch" + (f" ({detail})" if detail else ""))


class InvalidTransition(EngineError):
    def __init__(self, issue_id: str, current: str, target: str):
        self.issue_id = issue_id
        self.current = current
        self.target = target
        super().__init__(f"{issue_id}: cannot move from {current!r} to {target!r}")


class UnsupportedSourceFormat(EngineError):
    def __init__(self, mime_type: str, filename: str = ""):
        self.mime_type = mime_type
        self.filename = filename
        super().__init__(f"Unsupported file type: {mime_type or 'unknown'}" + (f" ({filename})" if filename else ""))


class DownloadExpired(EngineError):
    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Download {token!r} has expired or was already retrieved")


class ConfigError(EngineError):
    pass


SPAN_NOT_FOUND = SpanNotFound.reason
SPAN_CONFLICT = SpanConflict.reason
