"""Manifest loading for ``apply`` and ``create``."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import yaml
from pydantic import ValidationError

from kubesim.errors import ManifestError, UsageError
from kubesim.kubectl.context import CommandContext
from kubesim.models.commands import Command
from kubesim.models.resources import DEFAULT_NAMESPACE, Resource, ResourceKind
from kubesim.models.schemas import ManifestSchema

SUPPORTED_KINDS = ", ".join(k.value for k in ResourceKind)


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    loc = ".".join(str(part) for part in first["loc"])
    msg = first["msg"]
    return f"{loc}: {msg}" if loc else msg


def parse_manifest(text: str, default_namespace: str = DEFAULT_NAMESPACE, now: datetime | None = None) -> Resource:
    """Parse YAML (or JSON) manifest text into a resource.  Raises ManifestError."""
    try:
        doc: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestError(f"YAML parse error: {exc}") from exc
    if not isinstance(doc, dict):
        raise ManifestError("YAML content is empty or invalid")

    kind = doc.get("kind")
    if not isinstance(kind, str) or not kind:
        raise ManifestError("Missing or invalid kind")
    if kind not in {k.value for k in ResourceKind}:
        raise ManifestError(f"Unsupported resource kind: {kind} (supported: {SUPPORTED_KINDS})")

    try:
        schema = ManifestSchema.model_validate(doc)
    except ValidationError as exc:
        raise ManifestError(f"invalid {kind} manifest: {_describe_validation_error(exc)}") from exc
    return schema.to_resource(default_namespace=default_namespace, now=now)


def load_manifest(ctx: CommandContext, command: Command) -> Resource:
    """Read ``-f`` through the virtual filesystem and parse it."""
    filename = command.flag("filename")
    if not isinstance(filename, str) or not filename:
        raise UsageError("must specify one of -f or --filename")

    text = ctx.filesystem.read_file(filename)
    explicit_ns = command.flag("namespace")
    default_ns = explicit_ns if isinstance(explicit_ns, str) else DEFAULT_NAMESPACE
    resource = parse_manifest(text, default_namespace=default_ns, now=ctx.clock())

    if isinstance(explicit_ns, str) and resource.metadata.namespace != explicit_ns:
        raise UsageError(
            f'the namespace from the provided object "{resource.metadata.namespace}" does not match '
            f'the namespace "{explicit_ns}". You must pass \'--namespace={resource.metadata.namespace}\' '
            "to perform this operation."
        )
    return resource
