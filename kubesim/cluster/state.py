"""Event-sourced resource store.

ClusterStateData holds one insertion-ordered tuple per resource kind.  The
only way it changes is ``apply_event_to_state``, a pure reducer keyed on the
event's mutation.  ClusterStore owns the current state, subscribes the
reducer to the bus, and exposes read-only queries.  It never emits.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

import structlog
from pydantic import ValidationError

from kubesim.cluster.bus import EventBus, Unsubscribe
from kubesim.errors import NotFoundError, StorageError
from kubesim.models.events import ClusterEvent, Mutation
from kubesim.models.resources import ConfigMap, Pod, Resource, ResourceKind, Secret
from kubesim.models.schemas import ManifestSchema

_log = structlog.get_logger(component="cluster.state")

# Serialized collection names, in output order.
_STATE_KEYS: dict[ResourceKind, str] = {
    ResourceKind.POD: "pods",
    ResourceKind.CONFIG_MAP: "configMaps",
    ResourceKind.SECRET: "secrets",
}


@dataclass(frozen=True)
class ClusterStateData:
    """Immutable snapshot of every resource in the cluster."""

    pods: tuple[Pod, ...] = ()
    config_maps: tuple[ConfigMap, ...] = ()
    secrets: tuple[Secret, ...] = ()

    def collection(self, kind: ResourceKind) -> tuple[Resource, ...]:
        match kind:
            case ResourceKind.POD:
                return self.pods
            case ResourceKind.CONFIG_MAP:
                return self.config_maps
            case ResourceKind.SECRET:
                return self.secrets

    def with_collection(self, kind: ResourceKind, items: tuple[Resource, ...]) -> ClusterStateData:
        match kind:
            case ResourceKind.POD:
                return replace(self, pods=items)
            case ResourceKind.CONFIG_MAP:
                return replace(self, config_maps=items)
            case ResourceKind.SECRET:
                return replace(self, secrets=items)

    def __len__(self) -> int:
        return len(self.pods) + len(self.config_maps) + len(self.secrets)


def _same(resource: Resource, name: str, namespace: str) -> bool:
    return resource.metadata.name == name and resource.metadata.namespace == namespace


def _append(items: tuple[Resource, ...], event: ClusterEvent) -> tuple[Resource, ...]:
    return (*items, event.resource)


def _replace(items: tuple[Resource, ...], event: ClusterEvent) -> tuple[Resource, ...]:
    return tuple(event.resource if _same(r, event.name, event.namespace) else r for r in items)


def _remove(items: tuple[Resource, ...], event: ClusterEvent) -> tuple[Resource, ...]:
    return tuple(r for r in items if not _same(r, event.name, event.namespace))


def apply_event_to_state(state: ClusterStateData, event: ClusterEvent) -> ClusterStateData:
    """Return the state after *event*.  Pure; *state* is not modified.

    Replacing or removing a resource that is not present is a no-op.
    """
    items = state.collection(event.kind)
    match event.mutation:
        case Mutation.CREATED:
            updated = _append(items, event)
        case Mutation.UPDATED | Mutation.LABELED | Mutation.ANNOTATED:
            updated = _replace(items, event)
        case Mutation.DELETED:
            updated = _remove(items, event)
    return state.with_collection(event.kind, updated)


def state_to_dict(state: ClusterStateData) -> dict[str, Any]:
    return {key: [r.to_manifest() for r in state.collection(kind)] for kind, key in _STATE_KEYS.items()}


def state_from_dict(data: dict[str, Any]) -> ClusterStateData:
    """Rebuild a snapshot written by ``state_to_dict``.  Raises StorageError."""
    state = ClusterStateData()
    for kind, key in _STATE_KEYS.items():
        raw_items = data.get(key, [])
        if not isinstance(raw_items, list):
            raise StorageError(f"invalid persisted state: {key} is not a list")
        items: list[Resource] = []
        for raw in raw_items:
            try:
                resource = ManifestSchema.model_validate(raw).to_resource()
            except ValidationError as exc:
                raise StorageError(f"invalid persisted {kind}: {exc.error_count()} validation error(s)") from exc
            if resource.kind is not kind:
                raise StorageError(f"invalid persisted state: {resource.kind} found in {key}")
            items.append(resource)
        state = state.with_collection(kind, tuple(items))
    return state


class ClusterStore:
    """Owns the current ClusterStateData and keeps it in step with the bus."""

    def __init__(self, bus: EventBus, initial: ClusterStateData | None = None) -> None:
        self._state = initial or ClusterStateData()
        self._unsubscribe: Unsubscribe = bus.subscribe_all(self._on_event)

    def _on_event(self, event: ClusterEvent) -> None:
        self._state = apply_event_to_state(self._state, event)
        _log.debug("state_reduced", type=event.type, name=event.name, namespace=event.namespace)

    def detach(self) -> None:
        self._unsubscribe()

    def load(self, state: ClusterStateData) -> None:
        """Replace the whole state.  Start-up only; bypasses the bus."""
        self._state = state
        _log.info("state_loaded", pods=len(state.pods), config_maps=len(state.config_maps), secrets=len(state.secrets))

    def snapshot(self) -> ClusterStateData:
        return self._state

    def to_dict(self) -> dict[str, Any]:
        return state_to_dict(self._state)

    def get(self, kind: ResourceKind, name: str, namespace: str) -> Resource | None:
        for resource in self._state.collection(kind):
            if _same(resource, name, namespace):
                return resource
        return None

    def find(self, kind: ResourceKind, name: str, namespace: str) -> Resource:
        """Like ``get`` but raises NotFoundError."""
        resource = self.get(kind, name, namespace)
        if resource is None:
            raise NotFoundError(f'{kind.plural} "{name}" not found')
        return resource

    def list(self, kind: ResourceKind, namespace: str | None = None) -> list[Resource]:
        """Resources of *kind* in insertion order; every namespace when *namespace* is None."""
        return [r for r in self._state.collection(kind) if namespace is None or r.metadata.namespace == namespace]
