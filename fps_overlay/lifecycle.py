from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Set


class LifecycleTracker:
    """Tracks sampler threads and open handles so teardown can release them deterministically."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger
        self._lock = threading.Lock()
        self._threads: Set[threading.Thread] = set()
        self._handles: Dict[int, Any] = {}

    @property
    def threads(self) -> List[threading.Thread]:
        with self._lock:
            return list(self._threads)

    @property
    def handles(self) -> List[Any]:
        with self._lock:
            return list(self._handles.values())

    def track_thread(self, thread: Optional[threading.Thread]) -> None:
        if thread is None:
            return
        with self._lock:
            # Finished sampler threads pile up across sleep/wake cycles otherwise.
            self._threads = {thr for thr in self._threads if thr.is_alive()}
            self._threads.add(thread)

    def untrack_thread(self, thread: Optional[threading.Thread]) -> None:
        if thread is None:
            return
        with self._lock:
            self._threads.discard(thread)

    def track_handle(self, handle: Any) -> None:
        if handle is None:
            return
        with self._lock:
            self._handles[id(handle)] = handle

    def join_thread(self, thread: Optional[threading.Thread], *, timeout: float = 2.0) -> bool:
        if thread is None:
            return True
        if thread is not threading.current_thread():
            thread.join(timeout=timeout)
        alive = thread.is_alive()
        if alive:
            self._logger.warning("Thread %s did not exit cleanly within %.1fs", thread.name, timeout)
        self.untrack_thread(thread)
        return not alive

    def release_all(self, *, timeout: float = 2.0) -> bool:
        """Join tracked threads then close tracked handles; returns False if any thread lingers."""
        with self._lock:
            handles = list(self._handles.values())
            threads = list(self._threads)
            self._handles.clear()
        clean = True
        for thread in threads:
            clean = self.join_thread(thread, timeout=timeout) and clean
        for handle in handles:
            close = getattr(handle, "close", None)
            if close is None:
                continue
            try:
                close()
            except Exception as exc:
                self._logger.warning("Failed to release %r: %s", handle, exc)
        return clean

    def log_state(self, label: str) -> None:
        with self._lock:
            live_threads = [thr.name or repr(thr) for thr in self._threads if thr.is_alive()]
            handles = list(self._handles.values())
        if live_threads or handles:
            self._logger.debug("Tracked resources %s: threads=%s handles=%s", label, live_threads, handles)
