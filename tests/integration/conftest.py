"""Shared fixtures for kubesim integration tests.

Provides a bus, store, virtual filesystem and executors wired together the
same way KubeSimApp wires them, with a fixed clock so ages and timestamps
are deterministic.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from kubesim.cluster.bus import EventBus
from kubesim.cluster.seed import seed_cluster
from kubesim.cluster.state import ClusterStore
from kubesim.filesystem import VirtualFileSystem
from kubesim.kubectl.context import CommandContext
from kubesim.kubectl.executor import KubectlExecutor
from kubesim.models.events import ClusterEvent
from kubesim.observability.audit import AuditLog
from kubesim.session import Session
from kubesim.shell.executor import ShellExecutor

NOW = datetime(2026, 6, 1, 12, 0, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Manifest factories
# ---------------------------------------------------------------------------


def pod_manifest(
    name: str = "web",
    image: str = "nginx:1.25",
    namespace: str | None = None,
    phase: str | None = None,
    containers: list[str] | None = None,
) -> str:
    """Pod manifest text with one container per entry in *containers*."""
    lines = ["apiVersion: v1", "kind: Pod", "metadata:", f"  name: {name}"]
    if namespace is not None:
        lines.append(f"  namespace: {namespace}")
    lines += ["spec:", "  containers:"]
    for container in containers or ["app"]:
        lines += [f"    - name: {container}", f"      image: {image}"]
    if phase is not None:
        lines += ["status:", f"  phase: {phase}"]
    return "\n".join(lines) + "\n"


def config_map_manifest(name: str = "settings", **data: str) -> str:
    lines = ["apiVersion: v1", "kind: ConfigMap", "metadata:", f"  name: {name}", "data:"]
    lines += [f"  {k}: {v!r}" for k, v in data.items()] or ["  {}"]
    return "\n".join(lines) + "\n"


WritePod = Callable[..., str]
WriteManifest = Callable[[str, str], str]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def store(bus: EventBus) -> ClusterStore:
    return ClusterStore(bus)


@pytest.fixture
def events(bus: EventBus, store: ClusterStore) -> list[ClusterEvent]:
    """Every event emitted on the bus, in order."""
    seen: list[ClusterEvent] = []
    bus.subscribe_all(seen.append)
    return seen


@pytest.fixture
def filesystem() -> VirtualFileSystem:
    return VirtualFileSystem()


@pytest.fixture
def ctx(store: ClusterStore, bus: EventBus, filesystem: VirtualFileSystem) -> CommandContext:
    return CommandContext(store=store, bus=bus, filesystem=filesystem, clock=lambda: NOW)


@pytest.fixture
def audit(bus: EventBus) -> AuditLog:
    log = AuditLog(max_entries=100)
    log.attach(bus)
    return log


@pytest.fixture
def kubectl(ctx: CommandContext, audit: AuditLog) -> KubectlExecutor:
    return KubectlExecutor(ctx, audit)


@pytest.fixture
def seeded(store: ClusterStore) -> ClusterStore:
    store.load(seed_cluster(now=NOW))
    return store


@pytest.fixture
def session(kubectl: KubectlExecutor, filesystem: VirtualFileSystem, audit: AuditLog) -> Session:
    return Session(kubectl=kubectl, shell=ShellExecutor(filesystem, audit), audit=audit)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def write_manifest(filesystem: VirtualFileSystem) -> WriteManifest:
    """Write manifest text to ``/manifests/<filename>`` and return the path."""

    def _write(filename: str, text: str) -> str:
        return filesystem.write_file(f"/manifests/{filename}", text)

    return _write


@pytest.fixture
def write_pod(write_manifest: WriteManifest) -> WritePod:
    """Write a pod manifest (see ``pod_manifest``) and return its path."""

    def _write(filename: str = "pod.yaml", **kwargs: Any) -> str:
        return write_manifest(filename, pod_manifest(**kwargs))

    return _write


@pytest.fixture
def write_config_map(write_manifest: WriteManifest) -> Callable[..., str]:
    def _write(filename: str = "cm.yaml", name: str = "settings", **data: str) -> str:
        return write_manifest(filename, config_map_manifest(name, **data))

    return _write
