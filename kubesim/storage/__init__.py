"""Persistence: adapters, timers and the autosave debouncer."""

from kubesim.storage.adapter import JsonFileStorage, MemoryStorage, StorageAdapter
from kubesim.storage.autosave import PersistenceDebouncer
from kubesim.storage.scheduler import AsyncioScheduler, DebounceTimer, ManualScheduler, Scheduler

__all__ = [
    "AsyncioScheduler",
    "DebounceTimer",
    "JsonFileStorage",
    "ManualScheduler",
    "MemoryStorage",
    "PersistenceDebouncer",
    "Scheduler",
    "StorageAdapter",
]
