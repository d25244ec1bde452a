"""describe."""

from __future__ import annotations

from kubesim.kubectl.context import CommandContext, target_namespace
from kubesim.kubectl.formatters import describe
from kubesim.models.commands import Command


def handle_describe(ctx: CommandContext, command: Command) -> str:
    assert command.resource_kind is not None and command.name is not None
    return describe(ctx.store.find(command.resource_kind, command.name, target_namespace(command)))
