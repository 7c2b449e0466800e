from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from typing import Optional

from PyQt6.QtCore import QTimer
from PyQt6.QtGui import QGuiApplication, QScreen
from PyQt6.QtWidgets import QApplication

from fps_overlay import __version__
from fps_overlay.client_config import (
    MIN_INTERVAL_MS,
    load_settings,
    resolve_sample_path,
    resolve_settings_path,
)
from fps_overlay.debug_config import DEBUG_CONFIG_ENABLED, DEV_MODE_ENV_VAR
from fps_overlay.display_sink import DisplaySink
from fps_overlay.logging_utils import LOGGER_NAME, configure_client_logging
from fps_overlay.overlay_descriptor import LayoutChange
from fps_overlay.power_state import LogindSleepMonitor, WakefulnessLifecycle
from fps_overlay.qt_surface import QtSurfaceHost, QtUiDispatcher
from fps_overlay.sample_source import SampleSource
from fps_overlay.service import FpsInfoService

_LOGGER = logging.getLogger(LOGGER_NAME)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fps-overlay", description="On-screen FPS overlay")
    parser.add_argument("--sample-path", help="Path of the node that exposes the current FPS value")
    parser.add_argument("--settings", help="Path to fps_overlay_settings.json")
    parser.add_argument("--interval-ms", type=int, help="Sampling period in milliseconds")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


class _ScreenWatcher:
    """Forwards primary-screen geometry and orientation changes to the service."""

    def __init__(self, app: QGuiApplication, service: FpsInfoService) -> None:
        self._service = service
        self._screen: Optional[QScreen] = None
        app.primaryScreenChanged.connect(self._attach)
        self._attach(app.primaryScreen())

    def _attach(self, screen: Optional[QScreen]) -> None:
        if self._screen is not None:
            for screen_signal in (
                self._screen.geometryChanged,
                self._screen.availableGeometryChanged,
                self._screen.orientationChanged,
            ):
                try:
                    screen_signal.disconnect(self._on_changed)
                except TypeError:
                    pass
        self._screen = screen
        if screen is None:
            return
        screen.geometryChanged.connect(self._on_changed)
        screen.availableGeometryChanged.connect(self._on_changed)
        screen.orientationChanged.connect(self._on_changed)
        self._on_changed()

    def _on_changed(self, *_args: object) -> None:
        screen = self._screen
        if screen is None:
            self._service.on_configuration_changed()
            return
        # The inset itself is read back through the sink so the host stays its only source.
        self._service.on_configuration_changed(LayoutChange(orientation=screen.orientation().name))


def _install_quit_signals(app: QApplication) -> QTimer:
    """Quit the event loop on SIGINT/SIGTERM so teardown runs through aboutToQuit."""

    def _request_quit(signum, _frame) -> None:
        _LOGGER.info("Received signal %s; shutting down", signum)
        app.quit()

    signal.signal(signal.SIGINT, _request_quit)
    signal.signal(signal.SIGTERM, _request_quit)
    # Python only runs signal handlers between bytecodes; wake the interpreter periodically.
    timer = QTimer()
    timer.setInterval(250)
    timer.timeout.connect(lambda: None)
    timer.start()
    return timer


def main(argv: Optional[list[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    settings_path = resolve_settings_path(args.settings)
    settings = load_settings(settings_path)
    configure_client_logging(retention=settings.log_retention, debug_enabled=DEBUG_CONFIG_ENABLED)
    if not DEBUG_CONFIG_ENABLED:
        _LOGGER.debug("Debug tracing disabled. Export %s=1 to enable it.", DEV_MODE_ENV_VAR)
    sample_path = resolve_sample_path(args.sample_path, settings)
    interval_ms = settings.interval_ms
    if args.interval_ms is not None:
        interval_ms = max(MIN_INTERVAL_MS, args.interval_ms)

    _LOGGER.info("Starting FPS overlay %s (pid=%s)", __version__, os.getpid())
    _LOGGER.debug(
        "Loaded settings from %s: sample_path=%s interval_ms=%d template=%r",
        settings_path,
        sample_path,
        interval_ms,
        settings.text_template,
    )

    app = QApplication(sys.argv if argv is None else [sys.argv[0], *argv])
    app.setQuitOnLastWindowClosed(False)
    dispatcher = QtUiDispatcher()
    host = QtSurfaceHost(settings)
    sink = DisplaySink(host, dispatcher, text_template=settings.text_template)
    wakefulness = WakefulnessLifecycle()
    sleep_monitor = LogindSleepMonitor(wakefulness)
    sleep_monitor.connect_system_bus()

    service = FpsInfoService(
        sample_source=SampleSource(sample_path),
        display_sink=sink,
        power_notifier=wakefulness,
        interval_ms=interval_ms,
    )
    if not service.on_create():
        _LOGGER.error("FPS overlay terminated: sample node %s unavailable", sample_path)
        host.close()
        return 1

    screen_watcher = _ScreenWatcher(app, service)
    app.aboutToQuit.connect(service.on_destroy)
    signal_timer = _install_quit_signals(app)
    service.start_reading()

    exit_code = app.exec()
    signal_timer.stop()
    del screen_watcher
    host.close()
    _LOGGER.info("FPS overlay exiting with code %s", exit_code)
    return int(exit_code)
