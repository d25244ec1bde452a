"""Debounced persistence of cluster state.

PersistenceDebouncer subscribes to state-changing events.  Each one re-arms
a single timer; when the quiet window elapses the whole current snapshot is
saved under one key.  A burst of K mutations inside the window produces
exactly one save, reflecting all K.

Timer-driven save failures are logged and kept in ``last_error``; they are
never raised into the command that caused the mutation.  ``flush()`` is the
synchronous path used at shutdown and raises StorageError to its caller.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from kubesim.cluster.bus import EventBus, Unsubscribe
from kubesim.cluster.filters import by_mutations
from kubesim.errors import StorageError
from kubesim.models.events import PERSISTED_MUTATIONS, ClusterEvent
from kubesim.storage.adapter import StorageAdapter
from kubesim.storage.scheduler import DebounceTimer, Scheduler

_log = structlog.get_logger(component="storage.autosave")

DEFAULT_DEBOUNCE_SECONDS = 0.5


class PersistenceDebouncer:
    """Coalesces bursts of mutation events into one delayed save."""

    def __init__(
        self,
        bus: EventBus,
        storage: StorageAdapter,
        snapshot: Callable[[], dict[str, Any]],
        scheduler: Scheduler,
        key: str = "cluster-state",
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._storage = storage
        self._snapshot = snapshot
        self._key = key
        self._timer = DebounceTimer(scheduler, delay, self._on_timer)
        self._unsubscribe: Unsubscribe = bus.subscribe(by_mutations(PERSISTED_MUTATIONS), self._on_event)
        self.save_count = 0
        self.last_error: StorageError | None = None

    @property
    def pending(self) -> bool:
        return self._timer.pending

    def _on_event(self, event: ClusterEvent) -> None:
        self._timer.arm()

    def _save(self) -> None:
        self._storage.save(self._key, self._snapshot())
        self.save_count += 1
        self.last_error = None
        _log.info("state_persisted", key=self._key, saves=self.save_count)

    def _on_timer(self) -> None:
        try:
            self._save()
        except StorageError as exc:
            self.last_error = exc
            _log.error("autosave_failed", key=self._key, error=exc.message)

    def flush(self) -> bool:
        """Save now if a save is pending or the last one failed.  Raises StorageError."""
        if self._timer.flush():
            if self.last_error is not None:
                raise self.last_error
            return True
        if self.last_error is None:
            return False
        self._save()
        return True

    def close(self) -> None:
        """Stop listening and drop any pending save."""
        self._unsubscribe()
        self._timer.cancel()
