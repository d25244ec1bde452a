"""Application bootstrap for kubesim.

Wires all components in dependency order.
Startup order: config → logging → storage → event bus → store
              → audit log → autosave → filesystem → executors → session

The store subscribes to the bus before anything else, so every later
subscriber observes state that already includes the event it is handling.
``stop()`` flushes any pending autosave, then detaches subscribers in
reverse order.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from kubesim import __version__
from kubesim.cluster.bus import EventBus
from kubesim.cluster.seed import seed_cluster
from kubesim.cluster.state import ClusterStateData, ClusterStore, state_from_dict
from kubesim.config import load_config
from kubesim.errors import FileSystemError, StorageError
from kubesim.filesystem import VirtualFileSystem
from kubesim.kubectl.context import CommandContext
from kubesim.kubectl.executor import KubectlExecutor
from kubesim.models.commands import ExecutionResult
from kubesim.models.config import KubeSimConfig
from kubesim.observability.audit import AuditCategory, AuditLog
from kubesim.observability.logging import get_logger, setup_logging
from kubesim.session import Session
from kubesim.shell.executor import ShellExecutor
from kubesim.storage.adapter import JsonFileStorage, MemoryStorage, StorageAdapter
from kubesim.storage.autosave import PersistenceDebouncer
from kubesim.storage.scheduler import AsyncioScheduler, Scheduler

if TYPE_CHECKING:
    import structlog

MANIFEST_SUFFIXES = (".yaml", ".yml", ".json")
MANIFEST_DIR = "/manifests"


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class KubeSimApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    ``storage`` and ``scheduler`` may be injected; otherwise they are built
    from config (file or memory storage, asyncio timers).  Calling ``stop()``
    on an app that was never started is safe.
    """

    def __init__(
        self,
        config: KubeSimConfig | None = None,
        storage: StorageAdapter | None = None,
        scheduler: Scheduler | None = None,
        reset: bool = False,
    ) -> None:
        self.config = config
        self.storage = storage
        self._scheduler = scheduler
        self._reset = reset

        self.bus: EventBus | None = None
        self.store: ClusterStore | None = None
        self.audit: AuditLog | None = None
        self.autosave: PersistenceDebouncer | None = None
        self.filesystem: VirtualFileSystem | None = None
        self.session: Session | None = None

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start all components in dependency order.  Raises _ComponentError."""
        # --- 1. Configuration -------------------------------------------
        if self.config is None:
            self.config = load_config()

        # --- 2. Logging -------------------------------------------------
        setup_logging(self.config.log.level, self.config.log.format)
        self._log = get_logger("app")
        self._log.info("kubesim starting", version=__version__)

        # --- 3. Storage -------------------------------------------------
        self._start_storage()

        # --- 4. Event bus -----------------------------------------------
        self.bus = EventBus(
            history_size=self.config.event_bus.history_size,
            history_enabled=self.config.event_bus.history_enabled,
        )

        # --- 5. Store (first subscriber) --------------------------------
        self.store = ClusterStore(self.bus, self._initial_state())

        # --- 6. Audit log -----------------------------------------------
        self.audit = AuditLog(max_entries=self.config.audit.max_entries)
        self.audit.attach(self.bus)

        # --- 7. Autosave ------------------------------------------------
        self._start_autosave()

        # --- 8. Filesystem, executors, session --------------------------
        self.filesystem = VirtualFileSystem()
        ctx = CommandContext(store=self.store, bus=self.bus, filesystem=self.filesystem)
        self.session = Session(
            kubectl=KubectlExecutor(ctx, self.audit),
            shell=ShellExecutor(self.filesystem, self.audit),
            audit=self.audit,
        )

        self._running = True
        self._log.info("kubesim started", resources=len(self.store.snapshot()))

    def _start_storage(self) -> None:
        assert self.config is not None and self._log is not None
        if self.storage is None:
            if self.config.storage.backend == "memory":
                self.storage = MemoryStorage()
            else:
                self.storage = JsonFileStorage(self.config.storage.state_dir)
        if self._reset:
            try:
                self.storage.clear(self.config.storage.key)
            except StorageError as exc:
                raise _ComponentError("storage", exc) from exc
            self._log.info("persisted state cleared", key=self.config.storage.key)

    def _initial_state(self) -> ClusterStateData:
        assert self.config is not None and self.storage is not None and self._log is not None
        key = self.config.storage.key
        try:
            state = state_from_dict(self.storage.load(key)) if self.storage.exists(key) else None
        except StorageError as exc:
            raise _ComponentError("store", exc) from exc
        if state is not None:
            self._log.info("state restored", key=key, resources=len(state))
            return state
        if self.config.seed:
            self._log.info("no persisted state, seeding cluster", key=key)
            return seed_cluster()
        return ClusterStateData()

    def _start_autosave(self) -> None:
        assert self.config is not None and self._log is not None
        if not self.config.autosave.enabled:
            self._log.info("autosave disabled")
            return
        assert self.bus is not None and self.store is not None and self.storage is not None
        self.autosave = PersistenceDebouncer(
            bus=self.bus,
            storage=self.storage,
            snapshot=self.store.to_dict,
            scheduler=self._scheduler or AsyncioScheduler(),
            key=self.config.storage.key,
            delay=self.config.autosave.debounce_ms / 1000,
        )

    # ------------------------------------------------------------------
    # Operation
    # ------------------------------------------------------------------

    def execute(self, line: str) -> ExecutionResult:
        if self.session is None:
            raise RuntimeError("KubeSimApp.execute() called before start()")
        return self.session.execute(line)

    def import_manifests(self, source: str | os.PathLike[str]) -> list[str]:
        """Copy host manifest files into the virtual ``/manifests`` directory."""
        assert self.filesystem is not None and self.audit is not None
        path = Path(source).expanduser()
        files = sorted(p for p in path.iterdir() if p.suffix in MANIFEST_SUFFIXES) if path.is_dir() else [path]
        imported: list[str] = []
        for file in files:
            try:
                target = self.filesystem.write_file(f"{MANIFEST_DIR}/{file.name}", file.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, FileSystemError) as exc:
                self.audit.warn(AuditCategory.FILESYSTEM, f"skipped {file}: {exc}")
                continue
            imported.append(target)
        self.audit.info(AuditCategory.FILESYSTEM, f"imported {len(imported)} manifest(s) from {path}")
        return imported

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def stop(self) -> None:
        """Flush pending state and detach subscribers.  Raises StorageError if the final save fails."""
        if not self._running:
            return
        self._running = False
        assert self._log is not None
        try:
            if self.autosave is not None and self.autosave.flush():
                self._log.info("pending state flushed")
        finally:
            if self.autosave is not None:
                self.autosave.close()
            if self.audit is not None:
                self.audit.detach()
            if self.store is not None:
                self.store.detach()
            self._log.info("kubesim stopped")
