"""Output formatting for get and describe."""

from __future__ import annotations

import base64
import json
import zlib
from collections.abc import Sequence
from datetime import datetime
from typing import Any

import yaml

from kubesim.models.commands import OutputFormat
from kubesim.models.resources import ConfigMap, EnvVar, Pod, PodPhase, Resource, ResourceKind, Secret, format_timestamp

_COLUMN_PADDING = 3
_DESCRIBE_WIDTH = 14


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


def format_age(created: datetime, now: datetime) -> str:
    seconds = max(int((now - created).total_seconds()), 0)
    if seconds < 60:
        return f"{seconds}s"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h"
    return f"{hours // 24}d"


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Left-aligned columns separated like kubectl's tabwriter output."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    lines = []
    for row in [list(headers), *rows]:
        cells = [cell.ljust(widths[i] + _COLUMN_PADDING) for i, cell in enumerate(row[:-1])]
        lines.append("".join(cells) + row[-1])
    return "\n".join(lines)


def to_yaml(manifest: dict[str, Any]) -> str:
    return yaml.safe_dump(manifest, sort_keys=False, default_flow_style=False).rstrip("\n")


def to_json(manifest: dict[str, Any]) -> str:
    return json.dumps(manifest, indent=2)


def render_manifests(resources: Sequence[Resource], fmt: OutputFormat, single: bool) -> str:
    """Render one resource, or a v1 List when *single* is False."""
    if single:
        doc = resources[0].to_manifest()
    else:
        doc = {"apiVersion": "v1", "kind": "List", "items": [r.to_manifest() for r in resources]}
    return to_yaml(doc) if fmt is OutputFormat.YAML else to_json(doc)


# ---------------------------------------------------------------------------
# get tables
# ---------------------------------------------------------------------------


def _pod_ready(pod: Pod) -> str:
    total = len(pod.spec.containers)
    ready = total if pod.status.phase is PodPhase.RUNNING else 0
    return f"{ready}/{total}"


def _row(resource: Resource, now: datetime) -> list[str]:
    age = format_age(resource.metadata.creation_timestamp, now)
    match resource:
        case Pod():
            return [
                resource.metadata.name,
                _pod_ready(resource),
                str(resource.status.phase),
                str(resource.status.restart_count),
                age,
            ]
        case ConfigMap():
            return [resource.metadata.name, str(len(resource.data) + len(resource.binary_data)), age]
        case Secret():
            return [resource.metadata.name, resource.type, str(len(resource.data)), age]


_HEADERS: dict[ResourceKind, list[str]] = {
    ResourceKind.POD: ["NAME", "READY", "STATUS", "RESTARTS", "AGE"],
    ResourceKind.CONFIG_MAP: ["NAME", "DATA", "AGE"],
    ResourceKind.SECRET: ["NAME", "TYPE", "DATA", "AGE"],
}


def render_table(kind: ResourceKind, resources: Sequence[Resource], now: datetime, with_namespace: bool) -> str:
    headers = list(_HEADERS[kind])
    rows = [_row(r, now) for r in resources]
    if with_namespace:
        headers.insert(0, "NAMESPACE")
        rows = [[r.metadata.namespace, *row] for r, row in zip(resources, rows, strict=True)]
    return format_table(headers, rows)


# ---------------------------------------------------------------------------
# describe
# ---------------------------------------------------------------------------


def _field(label: str, value: str, width: int = _DESCRIBE_WIDTH) -> str:
    return f"{label + ':':<{width}}{value}"


def _multiline_map(label: str, values: dict[str, str]) -> list[str]:
    if not values:
        return [_field(label, "<none>")]
    items = [f"{k}={v}" for k, v in values.items()]
    return [_field(label, items[0]), *(" " * _DESCRIBE_WIDTH + item for item in items[1:])]


def _metadata_lines(resource: Resource) -> list[str]:
    meta = resource.metadata
    return [
        _field("Name", meta.name),
        _field("Namespace", meta.namespace),
        *_multiline_map("Labels", meta.labels),
        *_multiline_map("Annotations", meta.annotations),
    ]


def simulated_pod_ip(name: str) -> str:
    return f"172.17.0.{zlib.crc32(name.encode()) % 250 + 2}"


def _env_line(env: EnvVar) -> str:
    if env.value_from is None:
        return f"      {env.name}:  {env.value or ''}"
    if env.value_from.ref_kind is ResourceKind.CONFIG_MAP:
        where = f"in config map '{env.value_from.name}'"
    else:
        where = f"of secret '{env.value_from.name}'"
    return f"      {env.name}:  <set to the key '{env.value_from.key}' {where}>"


def describe_pod(pod: Pod) -> str:
    lines = _metadata_lines(pod)
    lines += [
        _field("Start Time", format_timestamp(pod.metadata.creation_timestamp)),
        _field("Status", str(pod.status.phase)),
        _field("IP", simulated_pod_ip(pod.metadata.name)),
        "Containers:",
    ]
    for c in pod.spec.containers:
        lines.append(f"  {c.name}:")
        lines.append(f"    Image:          {c.image}")
        ports = ", ".join(f"{p.container_port}/{p.protocol}" for p in c.ports) or "<none>"
        lines.append(f"    Port:           {ports}")
        lines.append(f"    Ready:          {pod.status.phase is PodPhase.RUNNING}")
        lines.append(f"    Restart Count:  {pod.status.restart_count}")
        if c.env:
            lines.append("    Environment:")
            lines.extend(_env_line(e) for e in c.env)
        else:
            lines.append("    Environment:    <none>")
        if c.volume_mounts:
            lines.append("    Mounts:")
            for m in c.volume_mounts:
                mode = "ro" if m.read_only else "rw"
                lines.append(f"      {m.mount_path} from {m.name} ({mode})")
        else:
            lines.append("    Mounts:         <none>")
    if pod.spec.volumes:
        lines.append("Volumes:")
        for v in pod.spec.volumes:
            lines.append(f"  {v.name}:")
            lines.append(f"    Type:       {v.type}")
            if v.source_name:
                lines.append(f"    Name:       {v.source_name}")
    else:
        lines.append(_field("Volumes", "<none>"))
    lines.append(_field("Events", "<none>"))
    return "\n".join(lines)


def describe_config_map(cm: ConfigMap) -> str:
    lines = _metadata_lines(cm)
    lines += ["", "Data", "===="]
    for key, value in cm.data.items():
        lines += [f"{key}:", "----", value, ""]
    lines += ["", "BinaryData", "===="]
    for key, value in cm.binary_data.items():
        lines.append(f"{key}: {len(value)} bytes")
    lines += ["", _field("Events", "<none>")]
    return "\n".join(lines)


def describe_secret(secret: Secret) -> str:
    lines = _metadata_lines(secret)
    lines += ["", _field("Type", secret.type), "", "Data", "===="]
    for key, value in secret.data.items():
        lines.append(f"{key}:  {len(base64.b64decode(value))} bytes")
    return "\n".join(lines)


def describe(resource: Resource) -> str:
    match resource:
        case Pod():
            return describe_pod(resource)
        case ConfigMap():
            return describe_config_map(resource)
        case Secret():
            return describe_secret(resource)
