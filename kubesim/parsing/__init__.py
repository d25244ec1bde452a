"""Command parsing.

Exposes:
    parse_command -- kubectl grammar, returns a Command or raises ParseError.
    parse_shell   -- shell grammar, returns a ShellCommand or raises ParseError.
"""

from kubesim.parsing.kubectl import parse_command
from kubesim.parsing.shell import is_shell_command, parse_shell

__all__ = ["is_shell_command", "parse_command", "parse_shell"]
