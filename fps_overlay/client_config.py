"""Configuration helpers for the FPS overlay."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

_LOGGER = logging.getLogger("FPSOverlay.Config")

PACKAGE_DIR = Path(__file__).resolve().parent
SETTINGS_FILE_NAME = "fps_overlay_settings.json"
SAMPLE_PATH_ENV_VAR = "FPS_OVERLAY_SAMPLE_PATH"
SETTINGS_PATH_ENV_VAR = "FPS_OVERLAY_SETTINGS"

DEFAULT_SAMPLE_PATH = "/sys/devices/virtual/graphics/fb0/measured_fps"
DEFAULT_TEXT_TEMPLATE = "FPS: {fps}"
MIN_INTERVAL_MS = 50


@dataclass(frozen=True)
class OverlaySettings:
    """Startup parameters for the overlay; theming values are passed through to Qt."""

    sample_path: str = DEFAULT_SAMPLE_PATH
    text_template: str = DEFAULT_TEXT_TEMPLATE
    interval_ms: int = 1000
    text_color: str = "#e0e3ff"
    background_color: str = "#000000"
    background_alpha: int = 120
    text_padding: int = 8
    bold: bool = True
    log_retention: int = 5


def format_fps_text(template: str, value: int) -> str:
    try:
        return template.format(fps=value)
    except (KeyError, IndexError, ValueError):
        return DEFAULT_TEXT_TEMPLATE.format(fps=value)


def _int(value: Any, fallback: int, *, minimum: Optional[int] = None, maximum: Optional[int] = None) -> int:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return fallback
    if minimum is not None:
        numeric = max(minimum, numeric)
    if maximum is not None:
        numeric = min(maximum, numeric)
    return numeric


def _str(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return fallback


def settings_from_mapping(data: Dict[str, Any]) -> OverlaySettings:
    defaults = OverlaySettings()
    return OverlaySettings(
        sample_path=_str(data.get("sample_path"), defaults.sample_path),
        text_template=_str(data.get("text_template"), defaults.text_template),
        interval_ms=_int(data.get("interval_ms"), defaults.interval_ms, minimum=MIN_INTERVAL_MS),
        text_color=_str(data.get("text_color"), defaults.text_color),
        background_color=_str(data.get("background_color"), defaults.background_color),
        background_alpha=_int(data.get("background_alpha"), defaults.background_alpha, minimum=0, maximum=255),
        text_padding=_int(data.get("text_padding"), defaults.text_padding, minimum=0),
        bold=bool(data.get("bold", defaults.bold)),
        log_retention=_int(data.get("log_retention"), defaults.log_retention, minimum=1),
    )


def load_settings(settings_path: Path) -> OverlaySettings:
    """Read startup parameters from the settings JSON, falling back to defaults."""
    try:
        raw = settings_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return OverlaySettings()
    except OSError as exc:
        _LOGGER.warning("Failed to read %s; using default settings (%s)", settings_path, exc)
        return OverlaySettings()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        _LOGGER.warning("Failed to parse %s; using default settings (%s)", settings_path, exc)
        return OverlaySettings()
    if not isinstance(data, dict):
        _LOGGER.warning("Settings at %s are not a JSON object; using defaults", settings_path)
        return OverlaySettings()
    return settings_from_mapping(data)


def resolve_settings_path(cli_value: Optional[str]) -> Path:
    if cli_value:
        return Path(cli_value).expanduser().resolve()
    env_override = os.getenv(SETTINGS_PATH_ENV_VAR)
    if env_override:
        return Path(env_override).expanduser().resolve()
    return (PACKAGE_DIR.parent / SETTINGS_FILE_NAME).resolve()


def resolve_sample_path(cli_value: Optional[str], settings: OverlaySettings) -> Path:
    if cli_value:
        return Path(cli_value).expanduser()
    env_override = os.getenv(SAMPLE_PATH_ENV_VAR)
    if env_override:
        return Path(env_override).expanduser()
    return Path(settings.sample_path).expanduser()
