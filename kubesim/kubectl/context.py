"""Dependencies handed to every kubectl handler."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from kubesim.cluster.bus import EventBus
from kubesim.cluster.state import ClusterStore
from kubesim.filesystem import VirtualFileSystem
from kubesim.models.commands import Command
from kubesim.models.events import ClusterEvent, Mutation
from kubesim.models.resources import DEFAULT_NAMESPACE, Resource


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class CommandContext:
    """Store, bus and filesystem for one session.

    Handlers read through ``store`` and change state only through ``emit``.
    """

    store: ClusterStore
    bus: EventBus
    filesystem: VirtualFileSystem
    clock: Callable[[], datetime] = field(default=_utcnow)
    source: str = "kubectl"

    def emit(self, mutation: Mutation, resource: Resource, previous: Resource | None = None) -> ClusterEvent:
        event = ClusterEvent(
            mutation=mutation,
            resource=resource,
            previous=previous,
            source=self.source,
            timestamp=self.clock(),
        )
        self.bus.emit(event)
        return event


def target_namespace(command: Command) -> str:
    """Namespace for single-object operations; ``-A`` falls back to default."""
    return command.namespace or DEFAULT_NAMESPACE
