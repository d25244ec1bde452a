"""Simulated Kubernetes resource types.

Resources are immutable: every change produces a new instance via
``dataclasses.replace``.  ``to_manifest()`` renders the Kubernetes-shaped,
camelCase dict used by ``-o yaml``/``-o json`` and by persistence.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, ClassVar

DEFAULT_NAMESPACE = "default"


class ResourceKind(StrEnum):
    """The closed set of simulated resource kinds."""

    POD = "Pod"
    CONFIG_MAP = "ConfigMap"
    SECRET = "Secret"

    @property
    def singular(self) -> str:
        """Lower-case name used in ``pod/web created`` style messages."""
        return self.value.lower()

    @property
    def plural(self) -> str:
        """Resource type as kubectl prints it in server errors (``pods``)."""
        return f"{self.value.lower()}s"


class PodPhase(StrEnum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


def format_timestamp(ts: datetime) -> str:
    return ts.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class ObjectMeta:
    """Metadata common to every resource kind."""

    name: str
    namespace: str = DEFAULT_NAMESPACE
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    creation_timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_manifest(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "namespace": self.namespace,
            "creationTimestamp": format_timestamp(self.creation_timestamp),
        }
        if self.labels:
            out["labels"] = dict(self.labels)
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        return out


@dataclass(frozen=True)
class ContainerPort:
    container_port: int
    protocol: str = "TCP"


@dataclass(frozen=True)
class EnvVarSource:
    """Reference to a key in a ConfigMap or Secret."""

    ref_kind: ResourceKind
    name: str
    key: str


@dataclass(frozen=True)
class EnvVar:
    name: str
    value: str | None = None
    value_from: EnvVarSource | None = None

    def to_manifest(self) -> dict[str, Any]:
        if self.value_from is None:
            return {"name": self.name, "value": self.value or ""}
        ref = "configMapKeyRef" if self.value_from.ref_kind is ResourceKind.CONFIG_MAP else "secretKeyRef"
        return {
            "name": self.name,
            "valueFrom": {ref: {"name": self.value_from.name, "key": self.value_from.key}},
        }


@dataclass(frozen=True)
class VolumeMount:
    name: str
    mount_path: str
    read_only: bool = False


@dataclass(frozen=True)
class Container:
    name: str
    image: str
    ports: list[ContainerPort] = field(default_factory=list)
    env: list[EnvVar] = field(default_factory=list)
    volume_mounts: list[VolumeMount] = field(default_factory=list)

    def to_manifest(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "image": self.image}
        if self.ports:
            out["ports"] = [{"containerPort": p.container_port, "protocol": p.protocol} for p in self.ports]
        if self.env:
            out["env"] = [e.to_manifest() for e in self.env]
        if self.volume_mounts:
            out["volumeMounts"] = [
                {"name": m.name, "mountPath": m.mount_path, "readOnly": m.read_only} for m in self.volume_mounts
            ]
        return out


class VolumeType(StrEnum):
    EMPTY_DIR = "emptyDir"
    CONFIG_MAP = "configMap"
    SECRET = "secret"


@dataclass(frozen=True)
class Volume:
    """A pod volume.  ``source_name`` names the ConfigMap or Secret, if any."""

    name: str
    type: VolumeType = VolumeType.EMPTY_DIR
    source_name: str = ""

    def to_manifest(self) -> dict[str, Any]:
        match self.type:
            case VolumeType.EMPTY_DIR:
                source: dict[str, Any] = {}
            case VolumeType.CONFIG_MAP:
                source = {"name": self.source_name}
            case VolumeType.SECRET:
                source = {"secretName": self.source_name}
        return {"name": self.name, str(self.type): source}


@dataclass(frozen=True)
class PodSpec:
    containers: list[Container]
    volumes: list[Volume] = field(default_factory=list)


@dataclass(frozen=True)
class PodStatus:
    phase: PodPhase = PodPhase.PENDING
    restart_count: int = 0


@dataclass(frozen=True)
class Pod:
    kind: ClassVar[ResourceKind] = ResourceKind.POD

    metadata: ObjectMeta
    spec: PodSpec
    status: PodStatus = field(default_factory=PodStatus)

    def container(self, name: str) -> Container | None:
        for container in self.spec.containers:
            if container.name == name:
                return container
        return None

    def to_manifest(self) -> dict[str, Any]:
        spec: dict[str, Any] = {"containers": [c.to_manifest() for c in self.spec.containers]}
        if self.spec.volumes:
            spec["volumes"] = [v.to_manifest() for v in self.spec.volumes]
        return {
            "apiVersion": "v1",
            "kind": str(self.kind),
            "metadata": self.metadata.to_manifest(),
            "spec": spec,
            "status": {"phase": str(self.status.phase), "restartCount": self.status.restart_count},
        }


@dataclass(frozen=True)
class ConfigMap:
    kind: ClassVar[ResourceKind] = ResourceKind.CONFIG_MAP

    metadata: ObjectMeta
    data: dict[str, str] = field(default_factory=dict)
    binary_data: dict[str, str] = field(default_factory=dict)

    def to_manifest(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "apiVersion": "v1",
            "kind": str(self.kind),
            "metadata": self.metadata.to_manifest(),
            "data": dict(self.data),
        }
        if self.binary_data:
            out["binaryData"] = dict(self.binary_data)
        return out


@dataclass(frozen=True)
class Secret:
    """A Secret.  Values in ``data`` are base64-encoded."""

    kind: ClassVar[ResourceKind] = ResourceKind.SECRET

    metadata: ObjectMeta
    type: str = "Opaque"
    data: dict[str, str] = field(default_factory=dict)

    def decoded(self, key: str) -> str | None:
        raw = self.data.get(key)
        if raw is None:
            return None
        return base64.b64decode(raw).decode("utf-8", errors="replace")

    def to_manifest(self) -> dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": str(self.kind),
            "metadata": self.metadata.to_manifest(),
            "type": self.type,
            "data": dict(self.data),
        }


Resource = Pod | ConfigMap | Secret


def with_metadata(resource: Resource, **changes: Any) -> Resource:
    """Return a copy of *resource* with the given metadata fields replaced."""
    return replace(resource, metadata=replace(resource.metadata, **changes))
