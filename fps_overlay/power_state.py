"""Power-state (sleep/wake) notification for the overlay."""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import List, Optional, Protocol

from PyQt6.QtCore import QObject, pyqtSlot

_LOGGER = logging.getLogger("FPSOverlay.Power")

LOGIND_SERVICE = "org.freedesktop.login1"
LOGIND_PATH = "/org/freedesktop/login1"
LOGIND_INTERFACE = "org.freedesktop.login1.Manager"


class PowerStateObserver(Protocol):
    def on_going_to_sleep(self) -> None: ...
    def on_finished_waking_up(self) -> None: ...


class PowerStateNotifier(Protocol):
    def add_observer(self, observer: PowerStateObserver) -> None: ...
    def remove_observer(self, observer: PowerStateObserver) -> None: ...


class Wakefulness(str, Enum):
    AWAKE = "awake"
    ASLEEP = "asleep"


class WakefulnessLifecycle:
    """In-process notifier; each event reaches every observer before the next event is dispatched."""

    def __init__(self) -> None:
        self._observers: List[PowerStateObserver] = []
        self._lock = threading.Lock()
        self._dispatch_lock = threading.Lock()
        self._wakefulness = Wakefulness.AWAKE

    @property
    def wakefulness(self) -> Wakefulness:
        return self._wakefulness

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def add_observer(self, observer: PowerStateObserver) -> None:
        with self._lock:
            if any(existing is observer for existing in self._observers):
                return
            self._observers.append(observer)

    def remove_observer(self, observer: PowerStateObserver) -> None:
        with self._lock:
            self._observers = [existing for existing in self._observers if existing is not observer]

    def dispatch_going_to_sleep(self) -> None:
        with self._dispatch_lock:
            self._wakefulness = Wakefulness.ASLEEP
            for observer in self._snapshot():
                observer.on_going_to_sleep()

    def dispatch_finished_waking_up(self) -> None:
        with self._dispatch_lock:
            self._wakefulness = Wakefulness.AWAKE
            for observer in self._snapshot():
                observer.on_finished_waking_up()

    def _snapshot(self) -> List[PowerStateObserver]:
        with self._lock:
            return list(self._observers)


class LogindSleepMonitor(QObject):
    """Forward systemd-logind ``PrepareForSleep`` signals into a :class:`WakefulnessLifecycle`."""

    def __init__(self, lifecycle: WakefulnessLifecycle, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._lifecycle = lifecycle
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def connect_system_bus(self) -> bool:
        try:
            from PyQt6.QtDBus import QDBusConnection
        except ImportError as exc:
            _LOGGER.info("QtDBus unavailable (%s); sleep/wake tracking disabled", exc)
            return False
        bus = QDBusConnection.systemBus()
        if not bus.isConnected():
            _LOGGER.info("System bus not reachable; sleep/wake tracking disabled")
            return False
        self._connected = bool(
            bus.connect(LOGIND_SERVICE, LOGIND_PATH, LOGIND_INTERFACE, "PrepareForSleep", self.handle_prepare_for_sleep)
        )
        if not self._connected:
            _LOGGER.warning("Failed to subscribe to logind PrepareForSleep; sleep/wake tracking disabled")
        else:
            _LOGGER.debug("Subscribed to logind PrepareForSleep")
        return self._connected

    @pyqtSlot(bool)
    def handle_prepare_for_sleep(self, going_to_sleep: bool) -> None:
        _LOGGER.debug("PrepareForSleep(%s)", going_to_sleep)
        if going_to_sleep:
            self._lifecycle.dispatch_going_to_sleep()
        else:
            self._lifecycle.dispatch_finished_waking_up()
