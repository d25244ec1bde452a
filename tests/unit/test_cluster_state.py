"""Tests for the pure reducer, ClusterStore queries and state serialization."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime

import pytest

from kubesim.cluster.bus import EventBus
from kubesim.cluster.seed import seed_cluster
from kubesim.cluster.state import (
    ClusterStateData,
    ClusterStore,
    apply_event_to_state,
    state_from_dict,
    state_to_dict,
)
from kubesim.errors import NotFoundError, StorageError
from kubesim.models.events import ClusterEvent, Mutation
from kubesim.models.resources import (
    ConfigMap,
    Container,
    ContainerPort,
    EnvVar,
    EnvVarSource,
    ObjectMeta,
    Pod,
    PodPhase,
    PodSpec,
    PodStatus,
    ResourceKind,
    Secret,
    Volume,
    VolumeMount,
    VolumeType,
    with_metadata,
)

_TS = datetime(2026, 3, 1, 9, 30, 0, tzinfo=UTC)


def _make_pod(name: str = "web", namespace: str = "default", labels: dict[str, str] | None = None) -> Pod:
    return Pod(
        metadata=ObjectMeta(name=name, namespace=namespace, labels=labels or {}, creation_timestamp=_TS),
        spec=PodSpec(containers=[Container(name="app", image="nginx:1.25")]),
    )


def _event(mutation: Mutation, resource: Pod | ConfigMap | Secret, previous: Pod | None = None) -> ClusterEvent:
    return ClusterEvent(mutation=mutation, resource=resource, previous=previous)


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------


class TestReducer:
    def test_created_appends_in_order(self) -> None:
        state = ClusterStateData()
        for name in ("a", "b", "c"):
            state = apply_event_to_state(state, _event(Mutation.CREATED, _make_pod(name)))
        assert [p.metadata.name for p in state.pods] == ["a", "b", "c"]

    def test_reducer_is_pure(self) -> None:
        before = ClusterStateData()
        after = apply_event_to_state(before, _event(Mutation.CREATED, _make_pod()))
        assert before.pods == ()
        assert len(after.pods) == 1

    @pytest.mark.parametrize("mutation", [Mutation.UPDATED, Mutation.LABELED, Mutation.ANNOTATED])
    def test_replace_keeps_position(self, mutation: Mutation) -> None:
        state = ClusterStateData(pods=(_make_pod("a"), _make_pod("b"), _make_pod("c")))
        new_b = with_metadata(_make_pod("b"), labels={"env": "prod"})

        state = apply_event_to_state(state, _event(mutation, new_b, previous=_make_pod("b")))

        assert [p.metadata.name for p in state.pods] == ["a", "b", "c"]
        assert state.pods[1].metadata.labels == {"env": "prod"}

    def test_deleted_removes_only_matching_namespace(self) -> None:
        state = ClusterStateData(pods=(_make_pod("web", "default"), _make_pod("web", "prod")))
        state = apply_event_to_state(state, _event(Mutation.DELETED, _make_pod("web", "prod")))
        assert [(p.metadata.name, p.metadata.namespace) for p in state.pods] == [("web", "default")]

    def test_replace_missing_is_noop(self) -> None:
        state = ClusterStateData(pods=(_make_pod("a"),))
        assert apply_event_to_state(state, _event(Mutation.UPDATED, _make_pod("ghost"))) == state

    def test_delete_missing_is_noop(self) -> None:
        state = ClusterStateData(pods=(_make_pod("a"),))
        assert apply_event_to_state(state, _event(Mutation.DELETED, _make_pod("ghost"))) == state

    def test_kinds_are_independent(self) -> None:
        cm = ConfigMap(metadata=ObjectMeta(name="web"), data={"k": "v"})
        state = ClusterStateData(pods=(_make_pod("web"),))
        state = apply_event_to_state(state, _event(Mutation.CREATED, cm))
        state = apply_event_to_state(state, _event(Mutation.DELETED, _make_pod("web")))
        assert state.pods == ()
        assert state.config_maps == (cm,)


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class TestClusterStore:
    def test_store_follows_bus(self) -> None:
        bus = EventBus()
        store = ClusterStore(bus)
        bus.emit(_event(Mutation.CREATED, _make_pod()))
        assert store.find(ResourceKind.POD, "web", "default").metadata.name == "web"

    def test_find_missing(self) -> None:
        store = ClusterStore(EventBus())
        with pytest.raises(NotFoundError) as exc_info:
            store.find(ResourceKind.POD, "web", "default")
        assert exc_info.value.render() == 'Error from server (NotFound): pods "web" not found'

    def test_list_by_namespace(self) -> None:
        store = ClusterStore(EventBus(), seed_cluster(now=_TS))
        assert len(store.list(ResourceKind.POD, "default")) == 3
        assert [p.metadata.name for p in store.list(ResourceKind.POD, "kube-system")] == ["coredns-7d89d9b6f8-2xk9w"]
        assert len(store.list(ResourceKind.POD)) == 4

    def test_detach_stops_updates(self) -> None:
        bus = EventBus()
        store = ClusterStore(bus)
        store.detach()
        bus.emit(_event(Mutation.CREATED, _make_pod()))
        assert store.get(ResourceKind.POD, "web", "default") is None

    def test_load_replaces_state(self) -> None:
        store = ClusterStore(EventBus())
        store.load(seed_cluster(now=_TS))
        assert len(store.snapshot()) == 4


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestSerialization:
    def test_round_trip_preserves_rich_pod(self) -> None:
        pod = Pod(
            metadata=ObjectMeta(
                name="api",
                namespace="prod",
                labels={"app": "api"},
                annotations={"owner": "team-a"},
                creation_timestamp=_TS,
            ),
            spec=PodSpec(
                containers=[
                    Container(
                        name="api",
                        image="python:3.12",
                        ports=[ContainerPort(8080), ContainerPort(9090, "UDP")],
                        env=[
                            EnvVar(name="MODE", value="prod"),
                            EnvVar(name="DB_PASS", value_from=EnvVarSource(ResourceKind.SECRET, "db", "password")),
                            EnvVar(name="LEVEL", value_from=EnvVarSource(ResourceKind.CONFIG_MAP, "cfg", "level")),
                        ],
                        volume_mounts=[VolumeMount(name="cfg", mount_path="/etc/cfg", read_only=True)],
                    )
                ],
                volumes=[
                    Volume(name="cfg", type=VolumeType.CONFIG_MAP, source_name="cfg"),
                    Volume(name="creds", type=VolumeType.SECRET, source_name="db"),
                    Volume(name="scratch"),
                ],
            ),
            status=PodStatus(phase=PodPhase.RUNNING, restart_count=2),
        )
        secret = Secret(metadata=ObjectMeta(name="db", creation_timestamp=_TS), data={"password": "czNjcjN0"})
        cm = ConfigMap(metadata=ObjectMeta(name="cfg", creation_timestamp=_TS), data={"level": "info"})
        state = ClusterStateData(pods=(pod,), config_maps=(cm,), secrets=(secret,))

        assert state_from_dict(state_to_dict(state)) == state

    def test_serialized_shape(self) -> None:
        data = state_to_dict(ClusterStateData(pods=(_make_pod(),)))
        assert list(data) == ["pods", "configMaps", "secrets"]
        assert data["pods"][0]["metadata"]["creationTimestamp"] == "2026-03-01T09:30:00Z"
        assert data["pods"][0]["status"] == {"phase": "Pending", "restartCount": 0}

    def test_invalid_collection(self) -> None:
        with pytest.raises(StorageError, match="not a list"):
            state_from_dict({"pods": {"oops": 1}})

    def test_invalid_item(self) -> None:
        with pytest.raises(StorageError, match="invalid persisted Pod"):
            state_from_dict({"pods": [{"apiVersion": "v1", "kind": "Pod", "metadata": {"name": ""}}]})

    def test_wrong_kind_in_collection(self) -> None:
        raw = ConfigMap(metadata=ObjectMeta(name="cfg")).to_manifest()
        with pytest.raises(StorageError, match="ConfigMap found in pods"):
            state_from_dict({"pods": [raw]})

    def test_missing_collections_default_empty(self) -> None:
        assert state_from_dict({}) == ClusterStateData()

    def test_replace_does_not_touch_original(self) -> None:
        pod = _make_pod()
        changed = replace(pod, status=PodStatus(phase=PodPhase.FAILED))
        assert pod.status.phase is PodPhase.PENDING
        assert changed.status.phase is PodPhase.FAILED
