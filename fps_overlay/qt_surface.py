"""PyQt6 binding for the overlay surface and the UI-thread dispatcher."""
from __future__ import annotations

import logging
import sys
from typing import Callable, Optional

from PyQt6.QtCore import QObject, Qt, pyqtSignal, pyqtSlot
from PyQt6.QtGui import QColor, QFont, QGuiApplication, QScreen
from PyQt6.QtWidgets import QLabel

from fps_overlay.client_config import OverlaySettings, format_fps_text
from fps_overlay.overlay_descriptor import OverlayDescriptor
from fps_overlay.value_parser import SENTINEL_VALUE

_LOGGER = logging.getLogger("FPSOverlay.Surface")

ScreenFn = Callable[[], Optional[QScreen]]


class QtUiDispatcher(QObject):
    """Runs posted callbacks on the thread that owns this object (the GUI thread).

    Every post goes through a queued connection, so callbacks run after the
    current event finishes and in the order they were posted, whichever thread
    posted them.
    """

    _posted = pyqtSignal(object)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._posted.connect(self._run_posted, Qt.ConnectionType.QueuedConnection)

    def post(self, callback: Callable[[], None]) -> None:
        self._posted.emit(callback)

    @pyqtSlot(object)
    def _run_posted(self, callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            _LOGGER.exception("Overlay UI callback %r failed", callback)


def _overlay_window_flags() -> Qt.WindowType:
    flags = (
        Qt.WindowType.FramelessWindowHint
        | Qt.WindowType.WindowStaysOnTopHint
        | Qt.WindowType.Tool
        | Qt.WindowType.WindowDoesNotAcceptFocus
        | Qt.WindowType.WindowTransparentForInput
    )
    if sys.platform.startswith("linux"):
        flags |= Qt.WindowType.X11BypassWindowManagerHint
    return flags


def build_style_sheet(settings: OverlaySettings) -> str:
    background = QColor(settings.background_color)
    if not background.isValid():
        background = QColor(0, 0, 0)
    text = QColor(settings.text_color)
    if not text.isValid():
        text = QColor(255, 255, 255)
    return (
        f"color: {text.name()};"
        f" background-color: rgba({background.red()}, {background.green()}, {background.blue()}, {settings.background_alpha});"
        f" padding: {settings.text_padding}px;"
        " border-radius: 4px;"
    )


class QtSurfaceHost:
    """Frameless, click-through label pinned to the top-left of the primary screen."""

    def __init__(self, settings: OverlaySettings, *, screen_fn: Optional[ScreenFn] = None) -> None:
        self._screen_fn: ScreenFn = screen_fn or QGuiApplication.primaryScreen
        self._label = QLabel(format_fps_text(settings.text_template, SENTINEL_VALUE))
        self._label.setWindowFlags(_overlay_window_flags())
        self._label.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self._label.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self._label.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating, True)
        self._label.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        font = QFont(self._label.font())
        font.setBold(settings.bold)
        self._label.setFont(font)
        self._label.setStyleSheet(build_style_sheet(settings))
        self._label.adjustSize()

    @property
    def widget(self) -> QLabel:
        return self._label

    @property
    def is_mounted(self) -> bool:
        return self._label.isVisible()

    def mount(self, descriptor: OverlayDescriptor) -> None:
        if self._label.isVisible():
            return
        self._apply_layout(descriptor)
        self._label.show()
        self._label.raise_()
        _LOGGER.debug("Overlay shown at %s", self._label.pos())

    def update(self, descriptor: OverlayDescriptor) -> None:
        self._apply_layout(descriptor)

    def unmount(self) -> None:
        if not self._label.isVisible():
            return
        self._label.hide()
        _LOGGER.debug("Overlay hidden")

    def set_text(self, text: str) -> None:
        if self._label.text() == text:
            return
        self._label.setText(text)
        self._label.adjustSize()

    def current_top_inset(self) -> int:
        screen = self._screen_fn()
        if screen is None:
            return 0
        return max(0, screen.availableGeometry().top() - screen.geometry().top())

    def close(self) -> None:
        self._label.close()

    def _apply_layout(self, descriptor: OverlayDescriptor) -> None:
        screen = self._screen_fn()
        origin_x = 0
        origin_y = 0
        if screen is not None:
            geometry = screen.geometry()
            origin_x = geometry.left()
            origin_y = geometry.top()
        self._label.adjustSize()
        self._label.move(origin_x + descriptor.x, origin_y + descriptor.y)
