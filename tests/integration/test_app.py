"""Integration tests for KubeSimApp lifecycle and persistence across restarts."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from kubesim.app import KubeSimApp, _ComponentError
from kubesim.errors import StorageError
from kubesim.models.config import AutosaveConfig, KubeSimConfig, StorageConfig
from kubesim.models.resources import ResourceKind
from kubesim.storage.adapter import JsonFileStorage, MemoryStorage
from kubesim.storage.scheduler import ManualScheduler

# ---------------------------------------------------------------------------
# Helper factories
# ---------------------------------------------------------------------------


def _make_config(seed: bool = True, autosave: bool = True) -> KubeSimConfig:
    return KubeSimConfig(
        seed=seed,
        storage=StorageConfig(backend="memory"),
        autosave=AutosaveConfig(enabled=autosave, debounce_ms=500),
    )


def _make_app(
    storage: MemoryStorage | JsonFileStorage | MagicMock,
    scheduler: ManualScheduler | None = None,
    seed: bool = True,
    autosave: bool = True,
    reset: bool = False,
) -> KubeSimApp:
    app = KubeSimApp(
        config=_make_config(seed=seed, autosave=autosave),
        storage=storage,
        scheduler=scheduler or ManualScheduler(),
        reset=reset,
    )
    app.start()
    return app


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------


class TestStartup:
    def test_seeded_on_first_start(self) -> None:
        app = _make_app(MemoryStorage())
        assert app.running
        assert app.store is not None
        assert len(app.store.list(ResourceKind.POD)) == 4
        app.stop()
        assert not app.running

    def test_empty_without_seed(self) -> None:
        app = _make_app(MemoryStorage(), seed=False)
        assert app.execute("kubectl get pods -A").output == "No resources found"
        app.stop()

    def test_execute_before_start(self) -> None:
        with pytest.raises(RuntimeError):
            KubeSimApp(config=_make_config()).execute("pwd")

    def test_stop_without_start(self) -> None:
        KubeSimApp(config=_make_config()).stop()

    def test_corrupt_state_fails_startup(self) -> None:
        storage = MemoryStorage()
        storage.save("cluster-state", {"pods": "not-a-list"})
        app = KubeSimApp(config=_make_config(), storage=storage, scheduler=ManualScheduler())

        with pytest.raises(_ComponentError) as exc_info:
            app.start()

        assert exc_info.value.component == "store"
        assert not app.running

    def test_invalid_key_fails_startup(self, tmp_path: Path) -> None:
        config = _make_config()
        config.storage = StorageConfig(backend="file", key="../escape")
        app = KubeSimApp(config=config, storage=JsonFileStorage(tmp_path), scheduler=ManualScheduler())

        with pytest.raises(_ComponentError, match="invalid storage key") as exc_info:
            app.start()

        assert exc_info.value.component == "store"


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class TestPersistence:
    def test_state_survives_restart(self) -> None:
        storage = MemoryStorage()
        scheduler = ManualScheduler()
        app = _make_app(storage, scheduler)
        app.execute("kubectl apply -f /examples/configmap-example.yaml")
        app.execute("kubectl delete pod redis-master-0")
        scheduler.advance(1.0)
        app.stop()

        restarted = _make_app(storage)
        assert restarted.store is not None
        assert restarted.store.get(ResourceKind.CONFIG_MAP, "app-config", "default") is not None
        assert restarted.store.get(ResourceKind.POD, "redis-master-0", "default") is None
        restarted.stop()

    def test_labels_are_persisted(self) -> None:
        storage = MemoryStorage()
        scheduler = ManualScheduler()
        app = _make_app(storage, scheduler)
        app.execute("kubectl label pod redis-master-0 env=prod")
        scheduler.advance(1.0)

        saved = storage.load("cluster-state")
        redis = next(p for p in saved["pods"] if p["metadata"]["name"] == "redis-master-0")
        assert redis["metadata"]["labels"]["env"] == "prod"
        app.stop()

    def test_stop_flushes_pending_save(self) -> None:
        storage = MemoryStorage()
        app = _make_app(storage)
        app.execute("kubectl delete pod redis-master-0")
        assert not storage.exists("cluster-state")

        app.stop()

        assert storage.exists("cluster-state")

    def test_autosave_disabled(self) -> None:
        storage = MemoryStorage()
        scheduler = ManualScheduler()
        app = _make_app(storage, scheduler, autosave=False)
        app.execute("kubectl delete pod redis-master-0")
        scheduler.advance(1.0)
        app.stop()
        assert not storage.exists("cluster-state")

    def test_reset_discards_state(self) -> None:
        storage = MemoryStorage()
        app = _make_app(storage)
        app.execute("kubectl delete pod redis-master-0")
        app.stop()

        fresh = _make_app(storage, reset=True)
        assert fresh.store is not None
        assert fresh.store.get(ResourceKind.POD, "redis-master-0", "default") is not None
        fresh.stop()

    def test_final_save_failure_raises(self) -> None:
        storage = MagicMock()
        storage.exists.return_value = False
        storage.save.side_effect = StorageError("disk full")
        app = _make_app(storage)
        app.execute("kubectl delete pod redis-master-0")

        with pytest.raises(StorageError, match="disk full"):
            app.stop()
        assert not app.running

    def test_file_backend(self, tmp_path: Path) -> None:
        storage = JsonFileStorage(tmp_path)
        app = _make_app(storage)
        app.execute("kubectl label pod redis-master-0 env=prod")
        app.stop()

        assert (tmp_path / "cluster-state.json").is_file()
        restarted = _make_app(JsonFileStorage(tmp_path))
        assert restarted.store is not None
        pod = restarted.store.find(ResourceKind.POD, "redis-master-0", "default")
        assert pod.metadata.labels["env"] == "prod"
        restarted.stop()


# ---------------------------------------------------------------------------
# Manifest import
# ---------------------------------------------------------------------------


class TestImportManifests:
    def test_directory(self, tmp_path: Path) -> None:
        (tmp_path / "web.yaml").write_text("apiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: web\n")
        (tmp_path / "notes.txt").write_text("ignored")
        app = _make_app(MemoryStorage())

        assert app.import_manifests(tmp_path) == ["/manifests/web.yaml"]
        assert app.execute("kubectl apply -f /manifests/web.yaml").output == "configmap/web created"
        app.stop()

    def test_single_file(self, tmp_path: Path) -> None:
        path = tmp_path / "pod.yml"
        path.write_text("kind: Pod\n")
        app = _make_app(MemoryStorage())
        assert app.import_manifests(path) == ["/manifests/pod.yml"]
        app.stop()
