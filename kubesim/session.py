"""One interactive session: routes each input line to kubectl or the shell."""

from __future__ import annotations

import structlog

from kubesim.kubectl.executor import KubectlExecutor
from kubesim.models.commands import ExecutionResult
from kubesim.observability.audit import AuditCategory, AuditLog
from kubesim.shell.executor import ShellExecutor

_log = structlog.get_logger(component="session")


class Session:
    """Command boundary.  Always returns an ExecutionResult, never raises."""

    def __init__(self, kubectl: KubectlExecutor, shell: ShellExecutor, audit: AuditLog | None = None) -> None:
        self._kubectl = kubectl
        self._shell = shell
        self._audit = audit

    def execute(self, line: str) -> ExecutionResult:
        stripped = line.strip()
        if not stripped:
            return ExecutionResult.success()
        if self._audit is not None:
            self._audit.info(AuditCategory.COMMAND, stripped)
        try:
            if stripped.split(maxsplit=1)[0] == "kubectl":
                return self._kubectl.execute(stripped)
            return self._shell.execute(stripped)
        except Exception as exc:
            _log.exception("command_failed", line=stripped)
            if self._audit is not None:
                self._audit.error(AuditCategory.EXECUTOR, f"internal error: {exc}")
            return ExecutionResult.failure(f"error: internal error: {exc}")
