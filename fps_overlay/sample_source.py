"""Read-only adapter over the counter node that publishes the latest FPS value."""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import BinaryIO, Optional, Union

from fps_overlay.errors import ProbeFailure, ResourceUnavailable

_LOGGER = logging.getLogger("FPSOverlay.Source")


class SampleSource:
    """Holds a single open handle to the counter node for the component's lifetime.

    The producer rewrites the node in place, so every probe rewinds to offset 0
    and reads the first line.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._handle: Optional[BinaryIO] = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def open(self) -> None:
        if self._handle is not None:
            return
        try:
            self._handle = open(self._path, "rb", buffering=0)
        except OSError as exc:
            raise ResourceUnavailable(str(self._path), exc.strerror or str(exc)) from exc
        _LOGGER.debug("Opened sample node %s", self._path)

    def probe(self) -> str:
        with self._lock:
            handle = self._handle
            if handle is None:
                raise ProbeFailure(f"{self._path} is not open")
            try:
                handle.seek(0)
                raw = handle.readline()
            except (OSError, ValueError) as exc:
                raise ProbeFailure(f"Failed to read {self._path}: {exc}") from exc
        return raw.decode("utf-8", errors="replace")

    def close(self) -> None:
        with self._lock:
            handle = self._handle
            self._handle = None
        if handle is None:
            return
        try:
            handle.close()
        except OSError as exc:
            _LOGGER.debug("Error closing sample node %s: %s", self._path, exc)

    def __enter__(self) -> "SampleSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"SampleSource({str(self._path)!r}, {state})"
