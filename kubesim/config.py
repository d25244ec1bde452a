"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kubesim.models.config import (
    AuditConfig,
    AutosaveConfig,
    EventBusConfig,
    KubeSimConfig,
    LogConfig,
    StorageConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBESIM_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_choice(name: str, value: str, valid: set[str]) -> str:
    if value.lower() not in valid:
        raise ValueError(f"Invalid {name}: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_level(value: str) -> str:
    return _validate_choice("log level", value, {"debug", "info", "warning", "error"})


def load_config() -> KubeSimConfig:
    """Load configuration from KUBESIM_* environment variables."""
    return KubeSimConfig(
        seed=_env_bool("SEED", True),
        storage=StorageConfig(
            backend=_validate_choice("storage backend", _env("STORAGE_BACKEND", "file"), {"file", "memory"}),
            state_dir=_env("STATE_DIR", "~/.kubesim"),
            key=_env("STORAGE_KEY", "cluster-state"),
        ),
        autosave=AutosaveConfig(
            enabled=_env_bool("AUTOSAVE_ENABLED", True),
            debounce_ms=_env_int("AUTOSAVE_DEBOUNCE_MS", 500, min_val=0, max_val=60000),
        ),
        event_bus=EventBusConfig(
            history_enabled=_env_bool("EVENT_HISTORY_ENABLED", True),
            history_size=_env_int("EVENT_HISTORY_SIZE", 1000, min_val=1, max_val=100000),
        ),
        audit=AuditConfig(
            max_entries=_env_int("AUDIT_MAX_ENTRIES", 500, min_val=1, max_val=10000),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "warning")),
            format=_validate_choice("log format", _env("LOG_FORMAT", "json"), {"json", "console"}),
        ),
    )
