"""apply and create."""

from __future__ import annotations

import structlog

from kubesim.errors import AlreadyExistsError
from kubesim.kubectl.context import CommandContext
from kubesim.kubectl.manifest import load_manifest
from kubesim.models.commands import Command
from kubesim.models.events import Mutation
from kubesim.models.resources import Resource, with_metadata

_log = structlog.get_logger(component="kubectl.resources")


def apply_resource(ctx: CommandContext, resource: Resource) -> str:
    """Create *resource*, or replace the existing one with the same identity."""
    meta = resource.metadata
    existing = ctx.store.get(resource.kind, meta.name, meta.namespace)
    if existing is None:
        ctx.emit(Mutation.CREATED, resource)
        return f"{resource.kind.singular}/{meta.name} created"

    updated = with_metadata(resource, creation_timestamp=existing.metadata.creation_timestamp)
    ctx.emit(Mutation.UPDATED, updated, previous=existing)
    return f"{resource.kind.singular}/{meta.name} configured"


def create_resource(ctx: CommandContext, resource: Resource) -> str:
    """Create *resource*.  Raises AlreadyExistsError on collision."""
    meta = resource.metadata
    if ctx.store.get(resource.kind, meta.name, meta.namespace) is not None:
        _log.debug("create_rejected", kind=str(resource.kind), name=meta.name, namespace=meta.namespace)
        raise AlreadyExistsError(f'{resource.kind.plural} "{meta.name}" already exists')
    ctx.emit(Mutation.CREATED, resource)
    return f"{resource.kind.singular}/{meta.name} created"


def handle_apply(ctx: CommandContext, command: Command) -> str:
    return apply_resource(ctx, load_manifest(ctx, command))


def handle_create(ctx: CommandContext, command: Command) -> str:
    return create_resource(ctx, load_manifest(ctx, command))
