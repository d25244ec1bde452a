"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class StorageConfig:
    """Persistence backend configuration."""

    backend: str = "file"
    state_dir: str = "~/.kubesim"
    key: str = "cluster-state"


@dataclass
class AutosaveConfig:
    """Debounced autosave configuration."""

    enabled: bool = True
    debounce_ms: int = 500


@dataclass
class EventBusConfig:
    """Event bus history configuration."""

    history_enabled: bool = True
    history_size: int = 1000


@dataclass
class AuditConfig:
    """In-memory audit log configuration."""

    max_entries: int = 500


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "warning"
    format: str = "json"


@dataclass
class KubeSimConfig:
    """Top-level kubesim configuration."""

    seed: bool = True
    storage: StorageConfig = field(default_factory=StorageConfig)
    autosave: AutosaveConfig = field(default_factory=AutosaveConfig)
    event_bus: EventBusConfig = field(default_factory=EventBusConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    log: LogConfig = field(default_factory=LogConfig)
