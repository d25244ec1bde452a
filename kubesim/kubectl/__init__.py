"""kubectl emulation.

Exposes:
    KubectlExecutor -- parses and runs one kubectl line.
    CommandContext  -- store, bus and filesystem handed to handlers.
    parse_manifest  -- YAML manifest text to a resource.
"""

from kubesim.kubectl.context import CommandContext
from kubesim.kubectl.executor import KubectlExecutor
from kubesim.kubectl.manifest import parse_manifest

__all__ = ["CommandContext", "KubectlExecutor", "parse_manifest"]
