"""Display sink that marshals every overlay mutation onto the UI context."""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from fps_overlay.client_config import DEFAULT_TEXT_TEMPLATE, format_fps_text
from fps_overlay.overlay_descriptor import OverlayDescriptor

_LOGGER = logging.getLogger("FPSOverlay.Surface")


class UiDispatcher(Protocol):
    def post(self, callback: Callable[[], None]) -> None: ...


class SurfaceHost(Protocol):
    def mount(self, descriptor: OverlayDescriptor) -> None: ...
    def update(self, descriptor: OverlayDescriptor) -> None: ...
    def unmount(self) -> None: ...
    def set_text(self, text: str) -> None: ...
    def current_top_inset(self) -> int: ...


class DisplaySink:
    """Routes overlay text/position/mount requests through a UI dispatcher.

    The mounted flag flips synchronously on the calling thread so callers can
    rely on ``is_mounted`` immediately; the matching host call runs later on the
    UI context, in posting order.
    """

    def __init__(
        self,
        host: SurfaceHost,
        dispatcher: UiDispatcher,
        *,
        text_template: str = DEFAULT_TEXT_TEMPLATE,
    ) -> None:
        self._host = host
        self._dispatcher = dispatcher
        self._text_template = text_template
        self._lock = threading.Lock()
        self._mounted = False
        self._last_value: Optional[int] = None

    @property
    def is_mounted(self) -> bool:
        with self._lock:
            return self._mounted

    @property
    def last_value(self) -> Optional[int]:
        return self._last_value

    def format_text(self, value: int) -> str:
        return format_fps_text(self._text_template, value)

    def set_text(self, value: int) -> None:
        self._last_value = value
        text = self.format_text(value)
        self._dispatcher.post(lambda: self._host.set_text(text))

    def set_position(self, descriptor: OverlayDescriptor) -> bool:
        with self._lock:
            if not self._mounted:
                return False
        self._dispatcher.post(lambda: self._host.update(descriptor))
        return True

    def mount(self, descriptor: OverlayDescriptor) -> bool:
        with self._lock:
            if self._mounted:
                return False
            self._mounted = True
        _LOGGER.debug("Mounting overlay at y=%d", descriptor.y)
        self._dispatcher.post(lambda: self._host.mount(descriptor))
        return True

    def unmount(self) -> bool:
        with self._lock:
            if not self._mounted:
                return False
            self._mounted = False
        _LOGGER.debug("Unmounting overlay")
        self._dispatcher.post(self._host.unmount)
        return True

    def current_top_inset(self) -> int:
        return self._host.current_top_inset()
