"""Recording collaborators shared by the overlay tests."""
from __future__ import annotations

import queue
import threading
from typing import Callable, Iterable, List, Optional, Tuple

from fps_overlay.errors import ProbeFailure, ResourceUnavailable
from fps_overlay.overlay_descriptor import OverlayDescriptor


class QueueDispatcher:
    """UI dispatcher stand-in: callbacks run only when the test drains the queue."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[Callable[[], None]]" = queue.Queue()

    def post(self, callback: Callable[[], None]) -> None:
        self._queue.put(callback)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self) -> int:
        ran = 0
        while True:
            try:
                callback = self._queue.get_nowait()
            except queue.Empty:
                return ran
            callback()
            ran += 1


class RecordingHost:
    def __init__(self, top_inset: int = 0) -> None:
        self.top_inset = top_inset
        self.calls: List[Tuple[str, object]] = []
        self.threads: List[int] = []
        self.texts: List[str] = []

    def _record(self, name: str, arg: object = None) -> None:
        self.calls.append((name, arg))
        self.threads.append(threading.get_ident())

    def mount(self, descriptor: OverlayDescriptor) -> None:
        self._record("mount", descriptor)

    def update(self, descriptor: OverlayDescriptor) -> None:
        self._record("update", descriptor)

    def unmount(self) -> None:
        self._record("unmount")

    def set_text(self, text: str) -> None:
        self._record("set_text", text)
        self.texts.append(text)

    def current_top_inset(self) -> int:
        return self.top_inset

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


class ScriptedSource:
    """Sample source that replays raw values; ``None`` entries raise ProbeFailure."""

    def __init__(self, values: Iterable[Optional[str]] = (), *, repeat_last: bool = True, fail_open: bool = False) -> None:
        self._values = list(values)
        self._repeat_last = repeat_last
        self._fail_open = fail_open
        self._lock = threading.Lock()
        self.probes = 0
        self.opened = False
        self.closed = False

    def open(self) -> None:
        if self._fail_open:
            raise ResourceUnavailable("/missing/node", "No such file or directory")
        self.opened = True

    def probe(self) -> str:
        with self._lock:
            index = self.probes
            self.probes += 1
        if index < len(self._values):
            value = self._values[index]
        elif self._repeat_last and self._values:
            value = self._values[-1]
        else:
            value = ""
        if value is None:
            raise ProbeFailure("scripted failure")
        return value

    def close(self) -> None:
        self.closed = True


class FakeLoop:
    """Stand-in for SamplingLoop that never spawns a thread."""

    instances: List["FakeLoop"] = []

    def __init__(self, source, publish, *, interval_ms: int = 1000) -> None:
        self.source = source
        self.publish = publish
        self.interval_ms = interval_ms
        self.started = False
        self.cancelled = False
        FakeLoop.instances.append(self)

    @property
    def is_active(self) -> bool:
        return self.started and not self.cancelled

    def start(self):
        self.started = True
        return None

    def cancel(self) -> None:
        self.cancelled = True

    def tick(self) -> None:
        self.publish(int(self.source.probe() or 0))


class RecordingNotifier:
    def __init__(self) -> None:
        self.observers: List[object] = []
        self.added = 0
        self.removed = 0

    def add_observer(self, observer) -> None:
        self.added += 1
        if observer not in self.observers:
            self.observers.append(observer)

    def remove_observer(self, observer) -> None:
        self.removed += 1
        if observer in self.observers:
            self.observers.remove(observer)
