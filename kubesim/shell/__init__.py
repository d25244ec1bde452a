"""Shell commands over the virtual filesystem."""

from kubesim.shell.executor import HELP_TEXT, ShellExecutor

__all__ = ["HELP_TEXT", "ShellExecutor"]
