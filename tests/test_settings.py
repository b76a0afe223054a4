from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from sitesmith.core.settings import SettingsManager, app_data_dir


def test_defaults_are_filled_and_persisted(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    settings = SettingsManager(path)
    assert settings.get("default_viewport") == "desktop"
    assert settings.get("default_output_folder") == "pages"
    assert settings.projects_dir == tmp_path / "Projects"
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored["model"] == "gpt-4o-mini"


def test_existing_values_survive_reload(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    SettingsManager(path).set("site_url", "https://clinica.example")
    assert SettingsManager(path).get("site_url") == "https://clinica.example"


def test_unreadable_file_falls_back_to_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{broken", encoding="utf-8")
    assert SettingsManager(path).get("log_level") == "INFO"


def test_environment_overrides(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("SITESMITH_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("SITESMITH_LOG_LEVEL", "DEBUG")
    assert app_data_dir() == tmp_path / "home"
    settings = SettingsManager()
    assert settings.path == tmp_path / "home" / "settings.json"
    assert settings.log_level() == "DEBUG"
