"""Sampling lifecycle controller for the FPS overlay.

The service owns the sample source handle, the overlay descriptor and the single
sampling loop handle. Host calls (``start_reading``/``stop_reading``) and
power-state callbacks may arrive on different threads; every entry point
serializes on one re-entrant lock and the internal begin/end procedures are
idempotent, so a redundant request is a silent no-op.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional, Protocol

from fps_overlay.debug_config import DEBUG_CONFIG_ENABLED
from fps_overlay.display_sink import DisplaySink
from fps_overlay.errors import ResourceUnavailable
from fps_overlay.lifecycle import LifecycleTracker
from fps_overlay.overlay_descriptor import LayoutChange, OverlayDescriptor
from fps_overlay.power_state import PowerStateNotifier
from fps_overlay.sampling_loop import DEFAULT_INTERVAL_MS, SamplingLoop
from fps_overlay.value_parser import SENTINEL_VALUE

_LOGGER = logging.getLogger("FPSOverlay.Service")

LogFn = Callable[..., None]


def _noop_log(message: str, *args: object) -> None:
    return None


class SamplingState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


class _SampleSourceLike(Protocol):
    def open(self) -> None: ...
    def probe(self) -> str: ...
    def close(self) -> None: ...


class FpsInfoService:
    """Starts/stops FPS sampling and keeps the overlay mounted only while sampling."""

    def __init__(
        self,
        *,
        sample_source: _SampleSourceLike,
        display_sink: DisplaySink,
        power_notifier: PowerStateNotifier,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        log_fn: Optional[LogFn] = None,
        stop_self: Optional[Callable[[], None]] = None,
        loop_factory: Callable[..., SamplingLoop] = SamplingLoop,
        join_timeout: float = 2.0,
    ) -> None:
        self._source = sample_source
        self._sink = display_sink
        self._notifier = power_notifier
        self._interval_ms = interval_ms
        if log_fn is None:
            log_fn = _LOGGER.debug if DEBUG_CONFIG_ENABLED else _noop_log
        self._log = log_fn
        self._stop_self = stop_self or (lambda: None)
        self._loop_factory = loop_factory
        self._join_timeout = join_timeout
        self._tracker = LifecycleTracker(_LOGGER)
        self._lock = threading.RLock()
        self._descriptor = OverlayDescriptor()
        self._loop: Optional[SamplingLoop] = None
        self._state = SamplingState.IDLE
        self._subscribed = False
        self._terminated = False

    # Control surface ------------------------------------------------------

    @property
    def state(self) -> SamplingState:
        return self._state

    @property
    def is_reading(self) -> bool:
        loop = self._loop
        return loop is not None and loop.is_active

    @property
    def is_subscribed(self) -> bool:
        return self._subscribed

    @property
    def terminated(self) -> bool:
        return self._terminated

    @property
    def descriptor(self) -> OverlayDescriptor:
        return self._descriptor

    def on_create(self) -> bool:
        """Prepare the overlay and open the sample node; returns False when the service terminated."""
        self._log("onCreate")
        with self._lock:
            self._descriptor = self._descriptor.with_offset(self._resolve_top_inset(self._descriptor.y))
            self._sink.set_text(SENTINEL_VALUE)
            try:
                self._source.open()
            except ResourceUnavailable as exc:
                _LOGGER.error("%s", exc)
                self._terminated = True
            else:
                self._tracker.track_handle(self._source)
                return True
        self._stop_self()
        return False

    def on_configuration_changed(self, new_layout: Optional[LayoutChange] = None) -> None:
        self._log("onConfigurationChanged")
        with self._lock:
            if new_layout is not None and new_layout.top_inset is not None:
                inset = new_layout.top_inset
            else:
                inset = self._resolve_top_inset(self._descriptor.y)
            descriptor = self._descriptor.with_offset(inset)
            if descriptor == self._descriptor:
                return
            self._descriptor = descriptor
            self._sink.set_position(descriptor)

    def start_reading(self) -> None:
        with self._lock:
            if self._terminated:
                _LOGGER.warning("Ignoring start request; service is terminated")
                return
            if not self._subscribed:
                self._notifier.add_observer(self)
                self._subscribed = True
            self._start_reading_internal()

    def stop_reading(self) -> None:
        with self._lock:
            self._stop_reading_internal()
            if self._subscribed:
                self._notifier.remove_observer(self)
                self._subscribed = False

    def on_destroy(self) -> None:
        self._log("onDestroy")
        with self._lock:
            self._terminated = True
            self.stop_reading()
        self._tracker.log_state("before release")
        if not self._tracker.release_all(timeout=self._join_timeout):
            _LOGGER.warning("Sampler threads still running after shutdown")

    # Power-state observer -------------------------------------------------

    def on_going_to_sleep(self) -> None:
        self._log("onStartedGoingToSleep")
        with self._lock:
            self._stop_reading_internal()

    def on_finished_waking_up(self) -> None:
        self._log("onFinishedWakingUp")
        with self._lock:
            # A wake already in flight when stop_reading unsubscribed must not restart sampling.
            if self._terminated or not self._subscribed:
                return
            self._start_reading_internal()

    # Internal procedures --------------------------------------------------

    def _start_reading_internal(self) -> None:
        self._log("startReadingInternal, isReading = %s", self.is_reading)
        if self.is_reading:
            return
        self._sink.mount(self._descriptor)
        loop = self._loop_factory(self._source, self._sink.set_text, interval_ms=self._interval_ms)
        self._loop = loop
        self._state = SamplingState.ACTIVE
        self._tracker.track_thread(loop.start())

    def _stop_reading_internal(self) -> None:
        self._log("stopReadingInternal, isReading = %s", self.is_reading)
        loop = self._loop
        if loop is None:
            return
        loop.cancel()
        self._loop = None
        self._sink.unmount()
        self._state = SamplingState.IDLE

    def _resolve_top_inset(self, fallback: int) -> int:
        try:
            return int(self._sink.current_top_inset())
        except Exception as exc:
            _LOGGER.warning("Failed to query top inset; keeping offset %d (%s)", fallback, exc)
            return fallback
