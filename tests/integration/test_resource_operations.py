"""Integration tests for the mutating kubectl operations.

Each test drives KubectlExecutor with a command line and checks the
rendered result, the events on the bus and the resulting store state.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import pytest

from kubesim.cluster.bus import EventBus
from kubesim.cluster.state import ClusterStore
from kubesim.errors import NotFoundError
from kubesim.filesystem import VirtualFileSystem
from kubesim.kubectl.context import CommandContext
from kubesim.kubectl.executor import KubectlExecutor
from kubesim.models.events import ClusterEvent, Mutation
from kubesim.models.resources import ConfigMap, Pod, ResourceKind

# ---------------------------------------------------------------------------
# Create / apply / delete lifecycle
# ---------------------------------------------------------------------------


class TestPodLifecycle:
    def test_create_then_find(
        self,
        kubectl: KubectlExecutor,
        store: ClusterStore,
        events: list[ClusterEvent],
        write_pod: Callable[..., str],
    ) -> None:
        write_pod()

        result = kubectl.execute("kubectl create -f /manifests/pod.yaml")

        assert result.ok
        assert result.output == "pod/web created"
        assert [e.type for e in events] == ["PodCreated"]
        assert store.find(ResourceKind.POD, "web", "default").metadata.name == "web"

    def test_create_twice_is_rejected_without_events(
        self,
        kubectl: KubectlExecutor,
        store: ClusterStore,
        events: list[ClusterEvent],
        write_pod: Callable[..., str],
    ) -> None:
        write_pod()
        kubectl.execute("kubectl create -f /manifests/pod.yaml")
        before = store.snapshot()

        result = kubectl.execute("kubectl create -f /manifests/pod.yaml")

        assert not result.ok
        assert "AlreadyExists" in result.output
        assert '"web"' in result.output
        assert result.output == 'Error from server (AlreadyExists): pods "web" already exists'
        assert store.snapshot() == before
        assert len(events) == 1

    def test_apply_existing_reports_configured(
        self,
        kubectl: KubectlExecutor,
        store: ClusterStore,
        events: list[ClusterEvent],
        write_pod: Callable[..., str],
    ) -> None:
        write_pod(image="nginx:1.25")
        kubectl.execute("kubectl apply -f /manifests/pod.yaml")
        write_pod(image="nginx:1.27")

        result = kubectl.execute("kubectl apply -f /manifests/pod.yaml")

        assert result.output == "pod/web configured"
        assert [e.type for e in events] == ["PodCreated", "PodUpdated"]
        updated = events[-1]
        assert isinstance(updated.previous, Pod)
        assert isinstance(updated.resource, Pod)
        assert updated.previous.spec.containers[0].image == "nginx:1.25"
        assert updated.resource.spec.containers[0].image == "nginx:1.27"

        current = store.find(ResourceKind.POD, "web", "default")
        assert isinstance(current, Pod)
        assert current.spec.containers[0].image == "nginx:1.27"
        assert current.metadata.creation_timestamp == updated.previous.metadata.creation_timestamp

    def test_apply_new_reports_created(
        self, kubectl: KubectlExecutor, events: list[ClusterEvent], write_pod: Callable[..., str]
    ) -> None:
        write_pod()
        assert kubectl.execute("kubectl apply -f /manifests/pod.yaml").output == "pod/web created"
        assert [e.mutation for e in events] == [Mutation.CREATED]

    @pytest.mark.parametrize("manifest", ["pod.yaml", "cm.yaml"])
    def test_apply_new_matches_create(
        self,
        manifest: str,
        kubectl: KubectlExecutor,
        store: ClusterStore,
        filesystem: VirtualFileSystem,
        now: datetime,
        write_pod: Callable[..., str],
        write_config_map: Callable[..., str],
    ) -> None:
        write_pod(phase="Running")
        write_config_map(port="8080")
        other_bus = EventBus()
        other_store = ClusterStore(other_bus)
        creator = KubectlExecutor(
            CommandContext(store=other_store, bus=other_bus, filesystem=filesystem, clock=lambda: now)
        )

        assert kubectl.execute(f"kubectl apply -f /manifests/{manifest}").ok
        assert creator.execute(f"kubectl create -f /manifests/{manifest}").ok

        assert store.snapshot() == other_store.snapshot()

    def test_delete_then_find_fails(
        self,
        kubectl: KubectlExecutor,
        store: ClusterStore,
        events: list[ClusterEvent],
        write_pod: Callable[..., str],
    ) -> None:
        write_pod()
        kubectl.execute("kubectl apply -f /manifests/pod.yaml")

        result = kubectl.execute("kubectl delete pods web")

        assert result.output == 'pod "web" deleted'
        assert events[-1].type == "PodDeleted"
        with pytest.raises(NotFoundError):
            store.find(ResourceKind.POD, "web", "default")

    def test_delete_missing(self, kubectl: KubectlExecutor, events: list[ClusterEvent]) -> None:
        result = kubectl.execute("kubectl delete pod ghost")
        assert not result.ok
        assert result.output == 'Error from server (NotFound): pods "ghost" not found'
        assert events == []

    def test_delete_respects_namespace(
        self, kubectl: KubectlExecutor, store: ClusterStore, write_pod: Callable[..., str]
    ) -> None:
        write_pod(namespace="prod")
        kubectl.execute("kubectl apply -f /manifests/pod.yaml")

        assert not kubectl.execute("kubectl delete pod web").ok
        assert kubectl.execute("kubectl delete pod web -n prod").ok
        assert store.list(ResourceKind.POD) == []


class TestManifestHandling:
    def test_missing_filename(self, kubectl: KubectlExecutor) -> None:
        result = kubectl.execute("kubectl apply")
        assert result.output == "error: must specify one of -f or --filename"

    def test_missing_file(self, kubectl: KubectlExecutor) -> None:
        result = kubectl.execute("kubectl apply -f /manifests/nope.yaml")
        assert result.output == "error: File not found: /manifests/nope.yaml"

    def test_relative_path(
        self, kubectl: KubectlExecutor, write_pod: Callable[..., str], filesystem: VirtualFileSystem
    ) -> None:
        write_pod()
        filesystem.change_directory("/manifests")
        assert kubectl.execute("kubectl apply -f pod.yaml").ok

    def test_seeded_examples_apply(self, kubectl: KubectlExecutor, store: ClusterStore) -> None:
        for name in ("pod", "configmap", "secret"):
            assert kubectl.execute(f"kubectl apply -f /examples/{name}-example.yaml").ok
        assert len(store.snapshot()) == 3

    def test_namespace_flag_sets_default(
        self, kubectl: KubectlExecutor, store: ClusterStore, write_pod: Callable[..., str]
    ) -> None:
        write_pod()
        kubectl.execute("kubectl apply -f /manifests/pod.yaml -n staging")
        assert store.get(ResourceKind.POD, "web", "staging") is not None

    def test_namespace_mismatch(
        self, kubectl: KubectlExecutor, events: list[ClusterEvent], write_pod: Callable[..., str]
    ) -> None:
        write_pod(namespace="prod")
        result = kubectl.execute("kubectl apply -f /manifests/pod.yaml -n staging")
        assert not result.ok
        assert "does not match" in result.output
        assert events == []

    def test_invalid_manifest(
        self, kubectl: KubectlExecutor, events: list[ClusterEvent], write_manifest: Callable[[str, str], str]
    ) -> None:
        write_manifest("bad.yaml", "apiVersion: v1\nkind: Deployment\nmetadata:\n  name: x\n")
        result = kubectl.execute("kubectl apply -f /manifests/bad.yaml")
        assert result.output.startswith("error: Unsupported resource kind: Deployment")
        assert events == []

    def test_config_map_create(
        self, kubectl: KubectlExecutor, store: ClusterStore, write_config_map: Callable[..., str]
    ) -> None:
        write_config_map(level="info")
        assert kubectl.execute("kubectl create -f /manifests/cm.yaml").output == "configmap/settings created"
        cm = store.find(ResourceKind.CONFIG_MAP, "settings", "default")
        assert isinstance(cm, ConfigMap)
        assert cm.data == {"level": "info"}


# ---------------------------------------------------------------------------
# label / annotate
# ---------------------------------------------------------------------------


@pytest.fixture
def web(kubectl: KubectlExecutor, write_pod: Callable[..., str]) -> None:
    write_pod()
    kubectl.execute("kubectl apply -f /manifests/pod.yaml")


@pytest.mark.usefixtures("web")
class TestLabel:
    def test_add_label(self, kubectl: KubectlExecutor, store: ClusterStore, events: list[ClusterEvent]) -> None:
        result = kubectl.execute("kubectl label pods web env=prod")

        assert result.output == "pod/web labeled"
        assert store.find(ResourceKind.POD, "web", "default").metadata.labels == {"env": "prod"}
        labeled = events[-1]
        assert labeled.type == "PodLabeled"
        assert labeled.previous is not None
        assert labeled.previous.metadata.labels == {}

    def test_existing_key_needs_overwrite(
        self, kubectl: KubectlExecutor, store: ClusterStore, events: list[ClusterEvent]
    ) -> None:
        kubectl.execute("kubectl label pods web env=prod")
        before = store.snapshot()
        count = len(events)

        result = kubectl.execute("kubectl label pods web env=staging")

        assert not result.ok
        assert 'label "env" already exists, use --overwrite to update' in result.output
        assert store.snapshot() == before
        assert len(events) == count
        assert store.find(ResourceKind.POD, "web", "default").metadata.labels == {"env": "prod"}

    def test_conflict_is_atomic(self, kubectl: KubectlExecutor, store: ClusterStore) -> None:
        kubectl.execute("kubectl label pods web env=prod")

        result = kubectl.execute("kubectl label pods web tier=web env=staging")

        assert not result.ok
        assert store.find(ResourceKind.POD, "web", "default").metadata.labels == {"env": "prod"}

    def test_overwrite(self, kubectl: KubectlExecutor, store: ClusterStore) -> None:
        kubectl.execute("kubectl label pods web env=prod")
        assert kubectl.execute("kubectl label pods web env=staging --overwrite").ok
        assert store.find(ResourceKind.POD, "web", "default").metadata.labels == {"env": "staging"}

    def test_overwrite_false_still_conflicts(
        self, kubectl: KubectlExecutor, store: ClusterStore, events: list[ClusterEvent]
    ) -> None:
        kubectl.execute("kubectl label pods web env=prod")
        count = len(events)

        result = kubectl.execute("kubectl label pods web env=staging --overwrite=false")

        assert not result.ok
        assert 'label "env" already exists' in result.output
        assert len(events) == count
        assert store.find(ResourceKind.POD, "web", "default").metadata.labels == {"env": "prod"}

    def test_remove_and_remove_missing(self, kubectl: KubectlExecutor, store: ClusterStore) -> None:
        kubectl.execute("kubectl label pods web env=prod tier=web")
        assert kubectl.execute("kubectl label pods web env- missing-").ok
        assert store.find(ResourceKind.POD, "web", "default").metadata.labels == {"tier": "web"}

    def test_no_changes(self, kubectl: KubectlExecutor, events: list[ClusterEvent]) -> None:
        count = len(events)
        result = kubectl.execute("kubectl label pods web")
        assert result.output == "error: No label changes provided"
        assert len(events) == count

    def test_missing_resource(self, kubectl: KubectlExecutor) -> None:
        result = kubectl.execute("kubectl label pods ghost env=prod")
        assert result.output == 'Error from server (NotFound): pods "ghost" not found'

    def test_selector_sees_new_label(self, kubectl: KubectlExecutor) -> None:
        kubectl.execute("kubectl label pods web env=prod")
        assert "web" in kubectl.execute("kubectl get pods -l env=prod").output


@pytest.mark.usefixtures("web")
class TestAnnotate:
    def test_annotate(self, kubectl: KubectlExecutor, store: ClusterStore, events: list[ClusterEvent]) -> None:
        result = kubectl.execute("kubectl annotate pod web owner=team-a")

        assert result.output == "pod/web annotated"
        assert events[-1].type == "PodAnnotated"
        pod = store.find(ResourceKind.POD, "web", "default")
        assert pod.metadata.annotations == {"owner": "team-a"}
        assert pod.metadata.labels == {}

    def test_annotation_conflict(self, kubectl: KubectlExecutor) -> None:
        kubectl.execute("kubectl annotate pod web owner=team-a")
        result = kubectl.execute("kubectl annotate pod web owner=team-b")
        assert result.output == 'error: annotation "owner" already exists, use --overwrite to update'


# ---------------------------------------------------------------------------
# Failure paths never reach the store
# ---------------------------------------------------------------------------


class TestNoEventOnFailure:
    @pytest.mark.parametrize(
        "line",
        [
            "kubectl",
            "kubectl scale pods web",
            "kubectl get deployments",
            "kubectl delete pod",
            "kubectl label pod web env=prod",
            "kubectl annotate cm missing a=b",
            "kubectl create -f /manifests/missing.yaml",
        ],
    )
    def test_failures_emit_nothing(
        self, kubectl: KubectlExecutor, store: ClusterStore, events: list[ClusterEvent], line: str
    ) -> None:
        result = kubectl.execute(line)
        assert not result.ok
        assert events == []
        assert len(store.snapshot()) == 0
