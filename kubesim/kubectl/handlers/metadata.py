"""label and annotate.

Both share one merge rule over a change-set (key -> value, or key -> None to
remove).  Setting a key that already exists requires ``--overwrite``; a
conflict anywhere in the change-set rejects the whole operation and nothing
is emitted.
"""

from __future__ import annotations

from typing import Literal

from kubesim.errors import ConflictError, UsageError
from kubesim.kubectl.context import CommandContext, target_namespace
from kubesim.models.commands import Command
from kubesim.models.events import Mutation
from kubesim.models.resources import with_metadata

MetadataField = Literal["labels", "annotations"]


def merge_change_set(
    current: dict[str, str],
    changes: dict[str, str | None],
    overwrite: bool,
    noun: str,
) -> dict[str, str]:
    merged = dict(current)
    for key, value in changes.items():
        if value is None:
            merged.pop(key, None)
            continue
        if key in current and not overwrite:
            raise ConflictError(f'{noun} "{key}" already exists, use --overwrite to update')
        merged[key] = value
    return merged


def _change_metadata(ctx: CommandContext, command: Command, field: MetadataField) -> str:
    noun = "label" if field == "labels" else "annotation"
    assert command.resource_kind is not None and command.name is not None

    resource = ctx.store.find(command.resource_kind, command.name, target_namespace(command))
    if not command.change_set:
        raise UsageError(f"No {noun} changes provided")

    current = getattr(resource.metadata, field)
    merged = merge_change_set(current, command.change_set, bool(command.flag("overwrite")), noun)
    updated = with_metadata(resource, **{field: merged})

    if field == "labels":
        ctx.emit(Mutation.LABELED, updated, previous=resource)
        verb = "labeled"
    else:
        ctx.emit(Mutation.ANNOTATED, updated, previous=resource)
        verb = "annotated"
    return f"{resource.kind.singular}/{resource.metadata.name} {verb}"


def handle_label(ctx: CommandContext, command: Command) -> str:
    return _change_metadata(ctx, command, "labels")


def handle_annotate(ctx: CommandContext, command: Command) -> str:
    return _change_metadata(ctx, command, "annotations")
