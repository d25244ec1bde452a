"""kubesim command-line interface.

Exposes:
    cli -- Click command entry point (registered as ``kubesim`` script).
"""

from kubesim.cli.main import cli

__all__ = ["cli"]
