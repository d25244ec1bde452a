"""Event predicates for ``EventBus.subscribe``."""

from __future__ import annotations

from collections.abc import Collection

from kubesim.cluster.bus import EventPredicate
from kubesim.models.events import ClusterEvent, Mutation
from kubesim.models.resources import ResourceKind


def by_namespace(namespace: str) -> EventPredicate:
    def _pred(event: ClusterEvent) -> bool:
        return event.namespace == namespace

    return _pred


def by_types(*types: str) -> EventPredicate:
    """Match on the rendered event type, e.g. ``by_types("PodCreated", "PodDeleted")``."""
    wanted = frozenset(types)

    def _pred(event: ClusterEvent) -> bool:
        return event.type in wanted

    return _pred


def by_mutations(mutations: Collection[Mutation]) -> EventPredicate:
    wanted = frozenset(mutations)

    def _pred(event: ClusterEvent) -> bool:
        return event.mutation in wanted

    return _pred


def by_source(source: str) -> EventPredicate:
    def _pred(event: ClusterEvent) -> bool:
        return event.source == source

    return _pred


def by_kind(kind: ResourceKind) -> EventPredicate:
    def _pred(event: ClusterEvent) -> bool:
        return event.kind is kind

    return _pred


def all_of(*predicates: EventPredicate) -> EventPredicate:
    def _pred(event: ClusterEvent) -> bool:
        return all(p(event) for p in predicates)

    return _pred
