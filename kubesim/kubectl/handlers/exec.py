"""exec.

Only a few non-interactive commands are simulated: ``env``/``printenv``,
``hostname`` and ``echo``.  Env vars sourced from ConfigMaps or Secrets are
resolved against the store at exec time.
"""

from __future__ import annotations

from kubesim.errors import UsageError
from kubesim.kubectl.context import CommandContext, target_namespace
from kubesim.kubectl.handlers.containers import select_container
from kubesim.models.commands import Command
from kubesim.models.resources import ConfigMap, Container, EnvVar, Pod, PodPhase, ResourceKind, Secret

_SHELLS = frozenset({"sh", "bash", "/bin/sh", "/bin/bash", "ash", "zsh"})
_BASE_ENV = (
    ("PATH", "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"),
    ("HOME", "/root"),
)


def _resolve(ctx: CommandContext, env: EnvVar, namespace: str) -> str:
    if env.value_from is None:
        return env.value or ""
    ref = env.value_from
    source = ctx.store.get(ref.ref_kind, ref.name, namespace)
    if isinstance(source, ConfigMap) and ref.key in source.data:
        return source.data[ref.key]
    if isinstance(source, Secret):
        value = source.decoded(ref.key)
        if value is not None:
            return value
    kind = "configMap" if ref.ref_kind is ResourceKind.CONFIG_MAP else "secret"
    return f"<from {kind} {ref.name}:{ref.key}>"


def container_env(ctx: CommandContext, pod: Pod, container: Container) -> list[tuple[str, str]]:
    env = [*_BASE_ENV, ("HOSTNAME", pod.metadata.name)]
    env += [(e.name, _resolve(ctx, e, pod.metadata.namespace)) for e in container.env]
    return env


def handle_exec(ctx: CommandContext, command: Command) -> str:
    assert command.name is not None
    if not command.exec_command:
        raise UsageError("you must specify at least one command for the container")

    pod = ctx.store.find(ResourceKind.POD, command.name, target_namespace(command))
    assert isinstance(pod, Pod)
    if pod.status.phase is not PodPhase.RUNNING:
        raise UsageError(f'pod "{pod.metadata.name}" is not running (current phase: {pod.status.phase})')
    container = select_container(pod, command)

    program, *args = command.exec_command
    match program:
        case "env" | "printenv" if not args:
            return "\n".join(f"{k}={v}" for k, v in container_env(ctx, pod, container))
        case "printenv":
            env = dict(container_env(ctx, pod, container))
            found = [env[a] for a in args if a in env]
            if not found:
                raise UsageError("command terminated with exit code 1")
            return "\n".join(found)
        case "hostname":
            return pod.metadata.name
        case "echo":
            return " ".join(args)
        case _ if program in _SHELLS:
            raise UsageError("interactive shells are not supported; pass a command after --, e.g. -- env")
        case _:
            raise UsageError(f'exec: "{program}": executable file not found in $PATH')
