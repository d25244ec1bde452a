"""Simulated cluster: event bus, reducer-backed store, seed data.

Exports:
    EventBus             -- synchronous pub/sub with bounded history.
    ClusterStore         -- current state, kept in step with the bus.
    ClusterStateData     -- immutable snapshot, one tuple per kind.
    apply_event_to_state -- the pure reducer.
    seed_cluster         -- default pods for a fresh session.
"""

from kubesim.cluster.bus import EventBus
from kubesim.cluster.seed import seed_cluster
from kubesim.cluster.state import (
    ClusterStateData,
    ClusterStore,
    apply_event_to_state,
    state_from_dict,
    state_to_dict,
)

__all__ = [
    "ClusterStateData",
    "ClusterStore",
    "EventBus",
    "apply_event_to_state",
    "seed_cluster",
    "state_from_dict",
    "state_to_dict",
]
