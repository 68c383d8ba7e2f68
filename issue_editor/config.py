from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import logging
import os

import yaml

from issue_editor.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "rules" / "engine.yml"
CONFIG_ENV_VAR = "ISSUE_EDITOR_CONFIG"

DEFAULT_COLORS = {
    "inserted": "008000",
    "deleted": "FF0000",
    "proposed": "0000FF",
    "comment": "808080",
}

DEFAULT_DECORATION_STYLES = {
    "pending": "suggestion-pending",
    "applying": "suggestion-applying",
    "applied": "suggestion-applied",
    "failed": "suggestion-failed",
}


@dataclass
class EngineConfig:
    """Engine settings: rendering colours, highlight classes, artifact naming."""
    author: str = "Issue Editor"
    title: str = "Document with Tracked Changes"
    filename_template: str = "edited_{stem}_{timestamp}.docx"
    artifact_dir: Optional[str] = None
    colors: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_COLORS))
    decoration_styles: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_DECORATION_STYLES))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        cfg = cls()
        if "author" in data:
            cfg.author = str(data["author"])
        if "title" in data:
            cfg.title = str(data["title"])
        if "filename_template" in data:
            cfg.filename_template = str(data["filename_template"])
        if data.get("artifact_dir"):
            cfg.artifact_dir = str(data["artifact_dir"])

        colors = data.get("colors") or {}
        if not isinstance(colors, dict):
            raise ConfigError("'colors' must be a mapping")
        for key, value in colors.items():
            value = str(value).lstrip("#").upper()
            if len(value) != 6 or any(c not in "0123456789ABCDEF" for c in value):
                raise ConfigError(f"colour {key!r} must be a 6-digit hex RGB value, got {value!r}")
            cfg.colors[str(key)] = value

        styles = data.get("decoration_styles") or {}
        if not isinstance(styles, dict):
            raise ConfigError("'decoration_styles' must be a mapping")
        cfg.decoration_styles.update({str(k): str(v) for k, v in styles.items()})
        return cfg


def load_config(path: Optional[str] = None) -> EngineConfig:
    """Load configuration from `path`, $ISSUE_EDITOR_CONFIG, or the packaged defaults."""
    path = path or os.environ.get(CONFIG_ENV_VAR) or str(DEFAULT_CONFIG_PATH)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must be a mapping")
    logger.debug(f"Loaded engine config from {path}")
    return EngineConfig.from_dict(data)
