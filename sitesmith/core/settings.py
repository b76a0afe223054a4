"""Application settings stored as a small JSON document."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

APP_NAME = "Sitesmith"


def app_data_dir() -> Path:
    """Return the platform-specific application data directory."""
    override = os.getenv("SITESMITH_HOME")
    if override:
        target = Path(override)
    elif os.name == "nt":
        target = Path(os.getenv("LOCALAPPDATA", Path.home())) / APP_NAME
    else:
        target = Path.home() / ".local" / "share" / APP_NAME
    target.mkdir(parents=True, exist_ok=True)
    return target


def default_settings(base: Path) -> Dict[str, str]:
    return {
        "projects_dir": str(base / "Projects"),
        "default_viewport": "desktop",
        "default_output_folder": "pages",
        "api_base_url": "https://api.openai.com/v1",
        "model": "gpt-4o-mini",
        "log_level": "INFO",
        "site_url": "https://example.com",
    }


class SettingsManager:
    """Very small settings helper storing JSON data."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else app_data_dir() / "settings.json"
        self._settings: Dict[str, str] = {}
        self.load()

    def load(self) -> None:
        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                logger.warning("Ignoring unreadable settings file %s", self.path)
                loaded = {}
            self._settings = {str(k): str(v) for k, v in loaded.items()} if isinstance(loaded, dict) else {}
        else:
            self._settings = {}

        changed = False
        for key, value in default_settings(self.path.parent).items():
            if self._settings.get(key, "") == "":
                self._settings[key] = value
                changed = True

        if changed:
            try:
                self.save()
            except OSError:
                logger.warning("Could not write settings to %s", self.path)

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._settings, indent=2), encoding="utf-8")

    def get(self, key: str, default: str = "") -> str:
        return self._settings.get(key, default)

    def set(self, key: str, value: str) -> None:
        self._settings[key] = value
        self.save()

    @property
    def projects_dir(self) -> Path:
        return Path(self.get("projects_dir"))

    def log_level(self) -> str:
        return os.getenv("SITESMITH_LOG_LEVEL") or self.get("log_level", "INFO")
