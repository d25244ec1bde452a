"""Cluster event data structures.

Events are immutable facts and the only sanctioned channel for changing
cluster state.  An event's type is the ``(kind, mutation)`` pair, rendered
as ``<Kind><Mutation>`` (``PodCreated``, ``SecretAnnotated`` ...).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from uuid import uuid4

from kubesim.models.resources import Resource, ResourceKind


class Mutation(StrEnum):
    """What happened to the resource."""

    CREATED = "Created"
    UPDATED = "Updated"
    DELETED = "Deleted"
    LABELED = "Labeled"
    ANNOTATED = "Annotated"


# Mutations that change persisted state.  Closed set; every mutation today.
PERSISTED_MUTATIONS: frozenset[Mutation] = frozenset(
    {
        Mutation.CREATED,
        Mutation.UPDATED,
        Mutation.DELETED,
        Mutation.LABELED,
        Mutation.ANNOTATED,
    }
)


@dataclass(frozen=True)
class ClusterEvent:
    """A single state mutation.

    ``resource`` is the new state (the removed state for Deleted).
    ``previous`` is the state before the change for Updated, Labeled and
    Annotated; it is None for Created and Deleted.
    """

    mutation: Mutation
    resource: Resource
    previous: Resource | None = None
    source: str = "kubectl"
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    event_id: str = field(default_factory=lambda: str(uuid4()))

    @property
    def kind(self) -> ResourceKind:
        return self.resource.kind

    @property
    def name(self) -> str:
        return self.resource.metadata.name

    @property
    def namespace(self) -> str:
        return self.resource.metadata.namespace

    @property
    def type(self) -> str:
        return f"{self.kind}{self.mutation}"


def event_type(kind: ResourceKind, mutation: Mutation) -> str:
    return f"{kind}{mutation}"


ALL_EVENT_TYPES: frozenset[str] = frozenset(event_type(k, m) for k in ResourceKind for m in Mutation)
