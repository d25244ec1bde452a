"""Data models shared across kubesim components."""

from kubesim.models.commands import (
    Action,
    Command,
    ExecutionResult,
    FlagValue,
    OutputFormat,
    ShellAction,
    ShellCommand,
)
from kubesim.models.config import KubeSimConfig
from kubesim.models.events import PERSISTED_MUTATIONS, ClusterEvent, Mutation
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

__all__ = [
    "DEFAULT_NAMESPACE",
    "PERSISTED_MUTATIONS",
    "Action",
    "ClusterEvent",
    "Command",
    "ConfigMap",
    "Container",
    "ContainerPort",
    "EnvVar",
    "EnvVarSource",
    "ExecutionResult",
    "FlagValue",
    "KubeSimConfig",
    "Mutation",
    "ObjectMeta",
    "OutputFormat",
    "Pod",
    "PodPhase",
    "PodSpec",
    "PodStatus",
    "Resource",
    "ResourceKind",
    "Secret",
    "ShellAction",
    "ShellCommand",
    "Volume",
    "VolumeMount",
    "VolumeType",
]
