from __future__ import annotations

import threading
from typing import List

from fps_overlay.display_sink import DisplaySink
from fps_overlay.power_state import WakefulnessLifecycle
from fps_overlay.sampling_loop import SamplingLoop
from fps_overlay.service import FpsInfoService, SamplingState
from fps_overlay.tests.fakes import QueueDispatcher, RecordingHost


class _GatedSource:
    """Yields scripted values and blocks each probe until the test releases a tick."""

    def __init__(self, values: List[str]) -> None:
        self._values = list(values)
        self._tick = threading.Semaphore(0)
        self.probes = 0
        self.entered = 0
        self._entered_changed = threading.Condition()
        self.closed = False

    def open(self) -> None:
        return None

    def release_tick(self) -> None:
        self._tick.release()

    def wait_entered(self, count: int) -> bool:
        with self._entered_changed:
            return self._entered_changed.wait_for(lambda: self.entered >= count, timeout=5.0)

    def probe(self) -> str:
        with self._entered_changed:
            self.entered += 1
            self._entered_changed.notify_all()
        self._tick.acquire(timeout=5.0)
        index = self.probes
        self.probes += 1
        return self._values[index] if index < len(self._values) else ""

    def close(self) -> None:
        self.closed = True


class _CountingSink(DisplaySink):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.published: List[int] = []
        self.changed = threading.Condition()

    def set_text(self, value: int) -> None:
        super().set_text(value)
        with self.changed:
            self.published.append(value)
            self.changed.notify_all()

    def wait_for(self, count: int) -> bool:
        with self.changed:
            return self.changed.wait_for(lambda: len(self.published) >= count, timeout=5.0)


def _zero_interval_loop(source, publish, *, interval_ms: int = 1000) -> SamplingLoop:
    return SamplingLoop(source, publish, interval_ms=0)


def test_three_ticks_then_stop():
    source = _GatedSource(["10", "bad", "12", "13"])
    host = RecordingHost(top_inset=40)
    dispatcher = QueueDispatcher()
    sink = _CountingSink(host, dispatcher)
    service = FpsInfoService(
        sample_source=source,
        display_sink=sink,
        power_notifier=WakefulnessLifecycle(),
        loop_factory=_zero_interval_loop,
    )
    assert service.on_create() is True
    service.start_reading()
    assert service.state is SamplingState.ACTIVE

    # on_create publishes the placeholder value first.
    for expected in (2, 3, 4):
        source.release_tick()
        assert sink.wait_for(expected)

    service.stop_reading()
    assert service.is_reading is False
    source.release_tick()
    service.on_destroy()
    assert source.closed is True

    assert sink.published == [0, 10, 0, 12]
    assert source.probes <= 4
    dispatcher.drain()
    assert host.texts == ["FPS: 0", "FPS: 10", "FPS: 0", "FPS: 12"]
    assert [name for name, _ in host.calls if name != "set_text"] == ["mount", "unmount"]


def test_stop_during_probe_allows_no_further_probes():
    source = _GatedSource(["30", "31", "32"])
    host = RecordingHost()
    dispatcher = QueueDispatcher()
    sink = _CountingSink(host, dispatcher)
    service = FpsInfoService(
        sample_source=source,
        display_sink=sink,
        power_notifier=WakefulnessLifecycle(),
        loop_factory=_zero_interval_loop,
    )
    service.on_create()
    service.start_reading()
    source.release_tick()
    assert sink.wait_for(2)
    assert source.wait_entered(2)

    # The loop is now parked inside its second probe.
    service.stop_reading()
    source.release_tick()
    service.on_destroy()
    probes_after_stop = source.probes
    assert probes_after_stop == 2
    assert sink.published == [0, 30]
    for _ in range(3):
        source.release_tick()
    assert source.probes == probes_after_stop
