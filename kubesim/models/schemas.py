"""Pydantic schemas for Kubernetes-shaped manifests.

The same schemas validate user manifests (``kubectl apply -f``) and the
persisted cluster snapshot, so anything ``to_manifest()`` writes can be read
back.  ``ManifestSchema.to_resource`` converts a validated manifest into the
immutable resource dataclasses.
"""

from __future__ import annotations

import base64
import binascii
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from kubesim.models.resources import (
    DEFAULT_NAMESPACE,
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
    Resource,
    ResourceKind,
    Secret,
    Volume,
    VolumeMount,
    VolumeType,
)


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)


class MetadataSchema(_Schema):
    name: str = Field(min_length=1)
    namespace: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = Field(default=None, alias="creationTimestamp")

    @field_validator("creation_timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class ContainerPortSchema(_Schema):
    container_port: int = Field(alias="containerPort", ge=1, le=65535)
    protocol: Literal["TCP", "UDP", "SCTP"] = "TCP"


class KeyRefSchema(_Schema):
    name: str = Field(min_length=1)
    key: str = Field(min_length=1)


class EnvVarSourceSchema(_Schema):
    config_map_key_ref: KeyRefSchema | None = Field(default=None, alias="configMapKeyRef")
    secret_key_ref: KeyRefSchema | None = Field(default=None, alias="secretKeyRef")

    @model_validator(mode="after")
    def _exactly_one(self) -> EnvVarSourceSchema:
        if (self.config_map_key_ref is None) == (self.secret_key_ref is None):
            raise ValueError("valueFrom needs exactly one of configMapKeyRef or secretKeyRef")
        return self


class EnvVarSchema(_Schema):
    name: str = Field(min_length=1)
    value: str | None = None
    value_from: EnvVarSourceSchema | None = Field(default=None, alias="valueFrom")

    def to_env_var(self) -> EnvVar:
        if self.value_from is None:
            return EnvVar(name=self.name, value=self.value or "")
        if self.value_from.config_map_key_ref is not None:
            ref, kind = self.value_from.config_map_key_ref, ResourceKind.CONFIG_MAP
        else:
            assert self.value_from.secret_key_ref is not None
            ref, kind = self.value_from.secret_key_ref, ResourceKind.SECRET
        return EnvVar(name=self.name, value_from=EnvVarSource(ref_kind=kind, name=ref.name, key=ref.key))


class VolumeMountSchema(_Schema):
    name: str = Field(min_length=1)
    mount_path: str = Field(alias="mountPath", min_length=1)
    read_only: bool = Field(default=False, alias="readOnly")


class ContainerSchema(_Schema):
    name: str = Field(min_length=1)
    image: str = Field(min_length=1)
    ports: list[ContainerPortSchema] = Field(default_factory=list)
    env: list[EnvVarSchema] = Field(default_factory=list)
    volume_mounts: list[VolumeMountSchema] = Field(default_factory=list, alias="volumeMounts")

    def to_container(self) -> Container:
        return Container(
            name=self.name,
            image=self.image,
            ports=[ContainerPort(container_port=p.container_port, protocol=p.protocol) for p in self.ports],
            env=[e.to_env_var() for e in self.env],
            volume_mounts=[
                VolumeMount(name=m.name, mount_path=m.mount_path, read_only=m.read_only) for m in self.volume_mounts
            ],
        )


class ConfigMapVolumeSchema(_Schema):
    name: str = Field(min_length=1)


class SecretVolumeSchema(_Schema):
    secret_name: str = Field(alias="secretName", min_length=1)


class VolumeSchema(_Schema):
    name: str = Field(min_length=1)
    empty_dir: dict[str, object] | None = Field(default=None, alias="emptyDir")
    config_map: ConfigMapVolumeSchema | None = Field(default=None, alias="configMap")
    secret: SecretVolumeSchema | None = None

    def to_volume(self) -> Volume:
        if self.config_map is not None:
            return Volume(name=self.name, type=VolumeType.CONFIG_MAP, source_name=self.config_map.name)
        if self.secret is not None:
            return Volume(name=self.name, type=VolumeType.SECRET, source_name=self.secret.secret_name)
        return Volume(name=self.name, type=VolumeType.EMPTY_DIR)


class PodSpecSchema(_Schema):
    containers: list[ContainerSchema] = Field(min_length=1)
    volumes: list[VolumeSchema] = Field(default_factory=list)

    @field_validator("containers")
    @classmethod
    def _unique_names(cls, containers: list[ContainerSchema]) -> list[ContainerSchema]:
        names = [c.name for c in containers]
        if len(names) != len(set(names)):
            raise ValueError("container names must be unique")
        return containers


class PodStatusSchema(_Schema):
    phase: PodPhase = PodPhase.PENDING
    restart_count: int = Field(default=0, alias="restartCount", ge=0)


class ManifestSchema(_Schema):
    """A single v1 Pod, ConfigMap or Secret manifest."""

    api_version: Literal["v1"] = Field(alias="apiVersion")
    kind: Literal["Pod", "ConfigMap", "Secret"]
    metadata: MetadataSchema
    spec: PodSpecSchema | None = None
    status: PodStatusSchema | None = None
    data: dict[str, str] = Field(default_factory=dict)
    binary_data: dict[str, str] = Field(default_factory=dict, alias="binaryData")
    string_data: dict[str, str] = Field(default_factory=dict, alias="stringData")
    type: str = "Opaque"

    @model_validator(mode="after")
    def _kind_fields(self) -> ManifestSchema:
        if self.kind == "Pod" and self.spec is None:
            raise ValueError("Pod manifest requires spec.containers")
        if self.kind == "Secret":
            for key, value in self.data.items():
                try:
                    base64.b64decode(value, validate=True)
                except (binascii.Error, ValueError):
                    raise ValueError(f"Secret data[{key}] is not valid base64") from None
        return self

    def to_resource(self, default_namespace: str = DEFAULT_NAMESPACE, now: datetime | None = None) -> Resource:
        meta = ObjectMeta(
            name=self.metadata.name,
            namespace=self.metadata.namespace or default_namespace,
            labels=dict(self.metadata.labels),
            annotations=dict(self.metadata.annotations),
            creation_timestamp=self.metadata.creation_timestamp or now or datetime.now(UTC),
        )
        match self.kind:
            case "Pod":
                assert self.spec is not None
                status = self.status or PodStatusSchema()
                return Pod(
                    metadata=meta,
                    spec=PodSpec(
                        containers=[c.to_container() for c in self.spec.containers],
                        volumes=[v.to_volume() for v in self.spec.volumes],
                    ),
                    status=PodStatus(phase=status.phase, restart_count=status.restart_count),
                )
            case "ConfigMap":
                return ConfigMap(metadata=meta, data=dict(self.data), binary_data=dict(self.binary_data))
            case _:
                data = dict(self.data)
                for key, value in self.string_data.items():
                    data[key] = base64.b64encode(value.encode("utf-8")).decode("ascii")
                return Secret(metadata=meta, type=self.type, data=data)
