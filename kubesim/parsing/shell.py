"""Shell command parser (cd, ls, pwd, mkdir, touch, cat, rm, clear, help, debug)."""

from __future__ import annotations

from kubesim.errors import ParseError
from kubesim.models.commands import ShellAction, ShellCommand
from kubesim.parsing.pipeline import ParseContext, extract_action, parse_flags, run_pipeline, tokenize, trim

SHELL_COMMANDS: frozenset[str] = frozenset(a.value for a in ShellAction)


def _command_not_found(token: str | None) -> str:
    return f"command not found: {token}"


def is_shell_command(text: str) -> bool:
    tokens = text.split()
    return bool(tokens) and tokens[0] in SHELL_COMMANDS


def parse_shell(text: str) -> ShellCommand:
    """Parse one shell line.  Every shell flag is boolean."""
    ctx = run_pipeline(
        ParseContext(raw=text),
        trim,
        tokenize,
        extract_action(0, SHELL_COMMANDS, _command_not_found),
        parse_flags(1, {}, frozenset()),
    )
    if ctx.action is None:
        raise ParseError("Command cannot be empty")
    return ShellCommand(action=ShellAction(ctx.action), args=ctx.args, flags=ctx.flags)
