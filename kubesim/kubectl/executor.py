"""kubectl command executor: parse, route to a handler, render errors."""

from __future__ import annotations

import structlog

from kubesim.errors import KubeSimError
from kubesim.kubectl.context import CommandContext
from kubesim.kubectl.handlers import (
    handle_annotate,
    handle_apply,
    handle_create,
    handle_delete,
    handle_describe,
    handle_exec,
    handle_get,
    handle_label,
    handle_logs,
)
from kubesim.models.commands import Action, Command, ExecutionResult
from kubesim.observability.audit import AuditCategory, AuditLog
from kubesim.parsing import parse_command

_log = structlog.get_logger(component="kubectl.executor")


class KubectlExecutor:
    def __init__(self, ctx: CommandContext, audit: AuditLog | None = None) -> None:
        self._ctx = ctx
        self._audit = audit

    def _dispatch(self, command: Command) -> str:
        match command.action:
            case Action.GET:
                return handle_get(self._ctx, command)
            case Action.DESCRIBE:
                return handle_describe(self._ctx, command)
            case Action.DELETE:
                return handle_delete(self._ctx, command)
            case Action.APPLY:
                return handle_apply(self._ctx, command)
            case Action.CREATE:
                return handle_create(self._ctx, command)
            case Action.LOGS:
                return handle_logs(self._ctx, command)
            case Action.EXEC:
                return handle_exec(self._ctx, command)
            case Action.LABEL:
                return handle_label(self._ctx, command)
            case Action.ANNOTATE:
                return handle_annotate(self._ctx, command)

    def execute(self, line: str) -> ExecutionResult:
        """Run one kubectl line.  Every KubeSimError becomes error output."""
        try:
            command = parse_command(line)
            _log.debug("command_parsed", action=str(command.action), name=command.name)
            output = self._dispatch(command)
        except KubeSimError as exc:
            if self._audit is not None:
                self._audit.warn(AuditCategory.EXECUTOR, f"{line.strip()} -> {exc.render()}")
            return ExecutionResult.failure(exc.render())
        if self._audit is not None:
            self._audit.info(AuditCategory.EXECUTOR, f"{command.action} ok")
        return ExecutionResult.success(output)
