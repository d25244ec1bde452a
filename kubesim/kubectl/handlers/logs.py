"""logs."""

from __future__ import annotations

from kubesim.cluster.log_generator import DEFAULT_LINES, generate_logs
from kubesim.errors import UsageError
from kubesim.kubectl.context import CommandContext, target_namespace
from kubesim.kubectl.handlers.containers import select_container
from kubesim.models.commands import Command
from kubesim.models.resources import Pod, ResourceKind

FOLLOW_NOTICE = "(following logs - press Ctrl+C to stop)"


def _tail(value: object) -> int | None:
    if value is None:
        return None
    try:
        count = int(str(value))
    except ValueError:
        raise UsageError(f"invalid --tail value: {value}") from None
    if count < 0:
        raise UsageError(f"invalid --tail value: {value}")
    return count


def handle_logs(ctx: CommandContext, command: Command) -> str:
    assert command.name is not None
    namespace = target_namespace(command)
    pod = ctx.store.find(ResourceKind.POD, command.name, namespace)
    assert isinstance(pod, Pod)
    container = select_container(pod, command)
    tail = _tail(command.flag("tail"))

    lines = generate_logs(
        container.image,
        DEFAULT_LINES,
        seed=f"{namespace}/{pod.metadata.name}/{container.name}",
        start=pod.metadata.creation_timestamp,
    )
    if tail is not None:
        lines = lines[-tail:] if tail else []

    if command.flag("follow") and lines:
        lines.append(FOLLOW_NOTICE)
    return "\n".join(lines)
