from __future__ import annotations

import json
from pathlib import Path

from fps_overlay import client_config as module
from fps_overlay.client_config import OverlaySettings, format_fps_text, load_settings


def test_missing_settings_file_returns_defaults(tmp_path):
    assert load_settings(tmp_path / "absent.json") == OverlaySettings()


def test_invalid_json_returns_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_settings(path) == OverlaySettings()
    path.write_text(json.dumps(["a", "list"]), encoding="utf-8")
    assert load_settings(path) == OverlaySettings()


def test_settings_values_are_read_and_clamped(tmp_path):
    path = tmp_path / "settings.json"
    payload = {
        "sample_path": "/tmp/fps_node",
        "text_template": "{fps} fps",
        "interval_ms": 10,
        "background_alpha": 400,
        "text_padding": -3,
        "bold": False,
        "log_retention": 0,
        "text_color": "",
    }
    path.write_text(json.dumps(payload), encoding="utf-8")
    settings = load_settings(path)
    assert settings.sample_path == "/tmp/fps_node"
    assert settings.text_template == "{fps} fps"
    assert settings.interval_ms == module.MIN_INTERVAL_MS
    assert settings.background_alpha == 255
    assert settings.text_padding == 0
    assert settings.bold is False
    assert settings.log_retention == 1
    assert settings.text_color == OverlaySettings().text_color


def test_non_numeric_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"interval_ms": "fast", "background_alpha": True}), encoding="utf-8")
    settings = load_settings(path)
    assert settings.interval_ms == 1000
    assert settings.background_alpha == 120


def test_sample_path_precedence(monkeypatch):
    settings = OverlaySettings(sample_path="/from/settings")
    monkeypatch.delenv(module.SAMPLE_PATH_ENV_VAR, raising=False)
    assert module.resolve_sample_path(None, settings) == Path("/from/settings")
    monkeypatch.setenv(module.SAMPLE_PATH_ENV_VAR, "/from/env")
    assert module.resolve_sample_path(None, settings) == Path("/from/env")
    assert module.resolve_sample_path("/from/cli", settings) == Path("/from/cli")


def test_settings_path_precedence(monkeypatch, tmp_path):
    monkeypatch.delenv(module.SETTINGS_PATH_ENV_VAR, raising=False)
    default_path = module.resolve_settings_path(None)
    assert default_path.name == module.SETTINGS_FILE_NAME
    monkeypatch.setenv(module.SETTINGS_PATH_ENV_VAR, str(tmp_path / "env.json"))
    assert module.resolve_settings_path(None) == (tmp_path / "env.json").resolve()
    assert module.resolve_settings_path(str(tmp_path / "cli.json")) == (tmp_path / "cli.json").resolve()


def test_format_fps_text():
    assert format_fps_text("FPS: {fps}", 58) == "FPS: 58"
    assert format_fps_text("{fps:>3}", 7) == "  7"
    assert format_fps_text("{0}", 7) == "FPS: 7"
    assert format_fps_text("{missing}", 7) == "FPS: 7"
