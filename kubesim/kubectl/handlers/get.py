"""get."""

from __future__ import annotations

from kubesim.kubectl.context import CommandContext, target_namespace
from kubesim.kubectl.formatters import render_manifests, render_table
from kubesim.models.commands import Command, OutputFormat
from kubesim.models.resources import Resource


def _matches(resource: Resource, selector: dict[str, str] | None) -> bool:
    if not selector:
        return True
    labels = resource.metadata.labels
    return all(labels.get(k) == v for k, v in selector.items())


def handle_get(ctx: CommandContext, command: Command) -> str:
    assert command.resource_kind is not None
    kind = command.resource_kind

    if command.name is not None:
        resources = [ctx.store.find(kind, command.name, target_namespace(command))]
    else:
        resources = [r for r in ctx.store.list(kind, command.namespace) if _matches(r, command.selector)]

    if command.output_format is not OutputFormat.TABLE:
        return render_manifests(resources, command.output_format, single=command.name is not None)

    if not resources:
        if command.namespace is None:
            return "No resources found"
        return f"No resources found in {command.namespace} namespace."
    return render_table(kind, resources, ctx.clock(), with_namespace=command.namespace is None)
