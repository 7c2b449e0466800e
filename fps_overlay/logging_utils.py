from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "FPSOverlay"
LOG_DIR_NAME = "FPSOverlay"
LOG_FILE_NAME = "fps-overlay.log"
LOG_DIR_ENV_VAR = "FPS_OVERLAY_LOG_DIR"
_MAX_LOG_BYTES = 512 * 1024


class ReleaseLogLevelFilter(logging.Filter):
    """Promote debug logs to INFO in release builds so diagnostics stay visible."""

    def __init__(self, release_mode: bool) -> None:
        super().__init__()
        self._release_mode = release_mode

    def filter(self, record: logging.LogRecord) -> bool:
        if self._release_mode and record.levelno == logging.DEBUG:
            record.levelno = logging.INFO
            record.levelname = "INFO"
        return True


def resolve_logs_dir(log_dir_name: str = LOG_DIR_NAME) -> Path:
    """
    Resolve the directory to store overlay logs.

    Strategy:
    - Use FPS_OVERLAY_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / "logs")
    candidates.append(cache_home / "logs")
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        target = base / log_dir_name
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError:
            continue
        return target

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = _MAX_LOG_BYTES,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


def configure_client_logging(
    *,
    retention: int,
    debug_enabled: bool,
    log_dir: Optional[Path] = None,
) -> Optional[logging.Handler]:
    """Attach the rotating log file to the overlay logger tree (once)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug_enabled))
    for existing in logger.handlers:
        if isinstance(existing, RotatingFileHandler):
            return existing
    target_dir = log_dir or resolve_logs_dir()
    formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    try:
        handler = build_rotating_file_handler(target_dir, LOG_FILE_NAME, retention=retention, formatter=formatter)
    except OSError as exc:
        logger.warning("Unable to create log file in %s: %s", target_dir, exc)
        return None
    handler.addFilter(ReleaseLogLevelFilter(release_mode=not debug_enabled))
    logger.addHandler(handler)
    logger.debug("Logging to %s (retention=%d)", target_dir / LOG_FILE_NAME, max(1, retention))
    return handler
