"""Entry point for `python -m kubesim`.

Usage:
    python -m kubesim
    python -m kubesim -c "kubectl get pods"
"""

from __future__ import annotations

from kubesim.cli import cli

cli(prog_name="kubesim")
