"""Periodic background sampler that feeds the overlay text."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from fps_overlay.errors import ProbeFailure
from fps_overlay.value_parser import SENTINEL_VALUE, parse_sample

_LOGGER = logging.getLogger("FPSOverlay.Sampler")

DEFAULT_INTERVAL_MS = 1000


class _Probe(Protocol):
    def probe(self) -> str: ...


PublishFn = Callable[[int], None]


class SamplingLoop:
    """Probe, parse and publish once per interval until cancelled.

    Cancellation is cooperative: the token is checked before each probe and
    again before publishing, and the inter-iteration wait returns as soon as the
    token is set. A probe that is already running is allowed to finish.
    """

    def __init__(
        self,
        source: _Probe,
        publish: PublishFn,
        *,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        name: str = "FPSOverlay-Sampler",
    ) -> None:
        self._source = source
        self._publish = publish
        self._interval = max(0, int(interval_ms)) / 1000.0
        self._name = name
        self._cancel_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._iterations = 0

    @property
    def thread(self) -> Optional[threading.Thread]:
        return self._thread

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def is_active(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and not self._cancel_event.is_set()

    def start(self) -> threading.Thread:
        if self._thread is not None:
            return self._thread
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        return self._thread

    def cancel(self) -> None:
        self._cancel_event.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout=timeout)
        return not thread.is_alive()

    def _run(self) -> None:
        _LOGGER.debug("Sampling loop started (interval=%.3fs)", self._interval)
        while not self._cancel_event.is_set():
            try:
                value = self.sample_once()
            except Exception:
                _LOGGER.exception("Unexpected error while sampling; publishing sentinel")
                value = SENTINEL_VALUE
            if self._cancel_event.is_set():
                break
            try:
                self._publish(value)
            except Exception:
                _LOGGER.exception("Failed to publish sample %s", value)
            self._iterations += 1
            if self._cancel_event.wait(self._interval):
                break
        _LOGGER.debug("Sampling loop exited after %d iteration(s)", self._iterations)

    def sample_once(self) -> int:
        try:
            raw = self._source.probe()
        except ProbeFailure as exc:
            _LOGGER.warning("Failed to parse fps, %s", exc)
            return SENTINEL_VALUE
        value = parse_sample(raw)
        if value is None:
            _LOGGER.warning("Failed to parse fps, unexpected sample %r", raw)
            return SENTINEL_VALUE
        return value
