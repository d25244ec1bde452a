"""Structured commands produced by the parsers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from kubesim.models.resources import ResourceKind

FlagValue = str | bool


class Action(StrEnum):
    """The closed set of kubectl actions."""

    GET = "get"
    DESCRIBE = "describe"
    DELETE = "delete"
    APPLY = "apply"
    CREATE = "create"
    LOGS = "logs"
    EXEC = "exec"
    LABEL = "label"
    ANNOTATE = "annotate"


class OutputFormat(StrEnum):
    TABLE = "table"
    YAML = "yaml"
    JSON = "json"


@dataclass(frozen=True)
class Command:
    """A validated kubectl command.

    ``namespace`` is None only when ``--all-namespaces`` was given.
    ``change_set`` maps a label/annotation key to its new value, or to None
    when the key is to be removed.
    """

    action: Action
    resource_kind: ResourceKind | None = None
    name: str | None = None
    namespace: str | None = "default"
    flags: dict[str, FlagValue] = field(default_factory=dict)
    selector: dict[str, str] | None = None
    output_format: OutputFormat = OutputFormat.TABLE
    exec_command: list[str] | None = None
    change_set: dict[str, str | None] | None = None

    def flag(self, name: str) -> FlagValue | None:
        return self.flags.get(name)


class ShellAction(StrEnum):
    CD = "cd"
    LS = "ls"
    PWD = "pwd"
    MKDIR = "mkdir"
    TOUCH = "touch"
    CAT = "cat"
    RM = "rm"
    CLEAR = "clear"
    HELP = "help"
    DEBUG = "debug"


@dataclass(frozen=True)
class ShellCommand:
    action: ShellAction
    args: list[str] = field(default_factory=list)
    flags: dict[str, FlagValue] = field(default_factory=dict)


@dataclass(frozen=True)
class ExecutionResult:
    """What a command prints.  ``ok`` is False for error output."""

    ok: bool
    output: str = ""
    clear_screen: bool = False

    @classmethod
    def success(cls, output: str = "") -> ExecutionResult:
        return cls(ok=True, output=output)

    @classmethod
    def failure(cls, output: str) -> ExecutionResult:
        return cls(ok=False, output=output)
