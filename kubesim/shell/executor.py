"""Shell command executor over the virtual filesystem."""

from __future__ import annotations

import structlog

from kubesim.errors import FileSystemError, KubeSimError, ParseError
from kubesim.filesystem import VirtualFileSystem
from kubesim.models.commands import ExecutionResult, ShellAction, ShellCommand
from kubesim.observability.audit import AuditCategory, AuditLog
from kubesim.parsing import parse_shell

_log = structlog.get_logger(component="shell.executor")

HELP_TEXT = """\
Available shell commands:
  cd [path]         Change directory (default: /)
  ls [-l] [path]    List directory contents
  pwd               Print working directory
  mkdir [-p] <dir>  Create a directory
  touch <file>      Create an empty file
  cat <file>        Print file contents
  rm [-r] <path>    Remove a file (or a directory with -r)
  clear             Clear the screen
  debug [clear|<category>]
                    Show or clear the audit log
  help              Show this help

kubectl commands:
  kubectl get|describe <pods|configmaps|secrets> [name] [-n ns|-A] [-l k=v] [-o yaml|json]
  kubectl apply|create -f <file>
  kubectl delete <kind> <name>
  kubectl label|annotate <kind> <name> key=value key- [--overwrite]
  kubectl logs <pod> [-c container] [--tail N]
  kubectl exec <pod> [-c container] -- <command>"""


class ShellExecutor:
    def __init__(self, filesystem: VirtualFileSystem, audit: AuditLog | None = None) -> None:
        self._fs = filesystem
        self._audit = audit

    def execute(self, line: str) -> ExecutionResult:
        try:
            command = parse_shell(line)
        except ParseError as exc:
            return ExecutionResult.failure(exc.message)
        _log.debug("shell_command", action=str(command.action), args=command.args)
        try:
            result = self._dispatch(command)
        except FileSystemError as exc:
            if self._audit is not None:
                self._audit.warn(AuditCategory.FILESYSTEM, f"{command.action}: {exc.message}")
            return ExecutionResult.failure(f"{command.action}: {exc.message}")
        except KubeSimError as exc:
            return ExecutionResult.failure(exc.render())
        if self._audit is not None and command.action in _MUTATING:
            self._audit.info(AuditCategory.FILESYSTEM, f"{command.action} {' '.join(command.args)}".strip())
        return result

    def _dispatch(self, command: ShellCommand) -> ExecutionResult:
        args, flags = command.args, command.flags
        match command.action:
            case ShellAction.CD:
                self._fs.change_directory(args[0] if args else "/")
                return ExecutionResult.success()
            case ShellAction.PWD:
                return ExecutionResult.success(self._fs.cwd)
            case ShellAction.LS:
                entries = self._fs.list_directory(args[0] if args else None)
                if flags.get("l"):
                    out = "\n".join(f"d  {e.name}/" if e.is_dir else f"-  {e.name}" for e in entries)
                else:
                    out = "  ".join(e.name for e in entries)
                return ExecutionResult.success(out)
            case ShellAction.MKDIR:
                if not args:
                    return ExecutionResult.failure("mkdir: missing operand")
                for path in args:
                    self._fs.create_directory(path, parents=bool(flags.get("p")))
                return ExecutionResult.success()
            case ShellAction.TOUCH:
                if not args:
                    return ExecutionResult.failure("touch: missing file operand")
                for path in args:
                    self._fs.create_file(path)
                return ExecutionResult.success()
            case ShellAction.CAT:
                if not args:
                    return ExecutionResult.failure("cat: missing file operand")
                return ExecutionResult.success("\n".join(self._fs.read_file(p).rstrip("\n") for p in args))
            case ShellAction.RM:
                if not args:
                    return ExecutionResult.failure("rm: missing operand")
                recursive = bool(flags.get("r") or flags.get("rf") or flags.get("recursive"))
                for path in args:
                    self._fs.delete(path, recursive=recursive)
                return ExecutionResult.success()
            case ShellAction.CLEAR:
                return ExecutionResult(ok=True, output="", clear_screen=True)
            case ShellAction.HELP:
                return ExecutionResult.success(HELP_TEXT)
            case ShellAction.DEBUG:
                return self._debug(args)

    def _debug(self, args: list[str]) -> ExecutionResult:
        if self._audit is None:
            return ExecutionResult.success("audit log disabled")
        if args and args[0] == "clear":
            self._audit.clear()
            return ExecutionResult.success("audit log cleared")
        category = None
        if args:
            try:
                category = AuditCategory(args[0].upper())
            except ValueError:
                valid = ", ".join(c.value for c in AuditCategory)
                return ExecutionResult.failure(f"debug: unknown category {args[0]} (one of: {valid})")
        entries = self._audit.entries(category)
        if not entries:
            return ExecutionResult.success("(no entries)")
        return ExecutionResult.success("\n".join(e.format() for e in entries))


_MUTATING = frozenset({ShellAction.MKDIR, ShellAction.TOUCH, ShellAction.RM, ShellAction.CD})
