"""delete."""

from __future__ import annotations

from kubesim.kubectl.context import CommandContext, target_namespace
from kubesim.models.commands import Command
from kubesim.models.events import Mutation


def handle_delete(ctx: CommandContext, command: Command) -> str:
    assert command.resource_kind is not None and command.name is not None
    resource = ctx.store.find(command.resource_kind, command.name, target_namespace(command))
    ctx.emit(Mutation.DELETED, resource)
    return f'{resource.kind.singular} "{resource.metadata.name}" deleted'
