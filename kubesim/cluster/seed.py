"""Seed cluster used when no persisted state exists."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from kubesim.cluster.state import ClusterStateData
from kubesim.models.resources import Container, ContainerPort, ObjectMeta, Pod, PodPhase, PodSpec, PodStatus


def _pod(
    name: str,
    image: str,
    container: str,
    ports: list[ContainerPort],
    labels: dict[str, str],
    age: timedelta,
    now: datetime,
    namespace: str = "default",
    restart_count: int = 0,
) -> Pod:
    return Pod(
        metadata=ObjectMeta(name=name, namespace=namespace, labels=labels, creation_timestamp=now - age),
        spec=PodSpec(containers=[Container(name=container, image=image, ports=ports)]),
        status=PodStatus(phase=PodPhase.RUNNING, restart_count=restart_count),
    )


def seed_cluster(now: datetime | None = None) -> ClusterStateData:
    """Three workload pods in ``default`` and CoreDNS in ``kube-system``."""
    now = now or datetime.now(UTC)
    pods = (
        _pod(
            "nginx-deployment-7d8f6c9b5d-x7k2m",
            "nginx:1.21",
            "nginx",
            [ContainerPort(80)],
            {"app": "nginx", "tier": "frontend"},
            timedelta(days=2),
            now,
        ),
        _pod(
            "redis-master-0",
            "redis:7.0-alpine",
            "redis",
            [ContainerPort(6379)],
            {"app": "redis", "role": "master"},
            timedelta(days=5),
            now,
            restart_count=1,
        ),
        _pod(
            "postgres-db-6c8f9d7b4a-h9m3p",
            "postgres:14-alpine",
            "postgres",
            [ContainerPort(5432)],
            {"app": "postgres", "tier": "database"},
            timedelta(days=7),
            now,
        ),
        _pod(
            "coredns-7d89d9b6f8-2xk9w",
            "coredns/coredns:1.10.1",
            "coredns",
            [ContainerPort(53, "UDP"), ContainerPort(53, "TCP")],
            {"k8s-app": "kube-dns"},
            timedelta(days=30),
            now,
            namespace="kube-system",
        ),
    )
    return ClusterStateData(pods=pods)
