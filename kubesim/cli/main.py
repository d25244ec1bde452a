"""``kubesim`` command-line entry point.

Without ``-c`` an interactive prompt runs until ``exit``, ``quit`` or EOF.
Each ``-c`` runs one line and exits; the exit code is 1 if any of them
failed.  Input is read on a worker thread so debounced autosave timers keep
firing on the event loop while the prompt waits.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

import click

from kubesim import __version__
from kubesim.app import KubeSimApp, _ComponentError
from kubesim.config import load_config
from kubesim.errors import StorageError
from kubesim.models.commands import ExecutionResult
from kubesim.observability.logging import get_logger

PROMPT = "kubesim$ "
_EXIT_WORDS = frozenset({"exit", "quit"})


def _emit(result: ExecutionResult) -> None:
    if result.clear_screen:
        click.clear()
        return
    if result.output:
        click.echo(result.output, err=not result.ok)


async def _repl(app: KubeSimApp) -> None:
    click.echo(f"kubesim {__version__}. Type 'help' for commands, 'exit' to quit.")
    while True:
        try:
            line = await asyncio.to_thread(input, PROMPT)
        except EOFError:
            click.echo()
            return
        if line.strip() in _EXIT_WORDS:
            return
        _emit(app.execute(line))


async def _run(app: KubeSimApp, commands: tuple[str, ...], manifests: str | None) -> int:
    try:
        app.start()
    except _ComponentError as exc:
        get_logger("cli").critical("fatal startup error", component=exc.component, error=str(exc.cause))
        click.echo(f"error: {exc}", err=True)
        return 1

    failed = False
    try:
        if manifests:
            for path in app.import_manifests(manifests):
                click.echo(f"imported {path}", err=True)
        if commands:
            for line in commands:
                result = app.execute(line)
                _emit(result)
                failed = failed or not result.ok
        else:
            await _repl(app)
    finally:
        try:
            app.stop()
        except StorageError as exc:
            click.echo(f"error: failed to save cluster state: {exc.message}", err=True)
            failed = True
    return 1 if failed else 0


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--state-dir", type=click.Path(file_okay=False), help="Directory for persisted cluster state.")
@click.option("--storage", type=click.Choice(["file", "memory"]), help="Persistence backend.")
@click.option("--seed/--no-seed", default=None, help="Seed demo pods when no persisted state exists.")
@click.option("--reset", is_flag=True, help="Discard persisted state before starting.")
@click.option("--manifests", type=click.Path(exists=True), help="Host file or directory copied into /manifests.")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    help="Structured log level (logs go to stderr).",
)
@click.option("-c", "--command", "commands", multiple=True, help="Run a command and exit. Repeatable.")
@click.version_option(__version__, prog_name="kubesim")
def cli(
    state_dir: str | None,
    storage: str | None,
    seed: bool | None,
    reset: bool,
    manifests: str | None,
    log_level: str | None,
    commands: tuple[str, ...],
) -> None:
    """Practice kubectl against a simulated, in-memory cluster."""
    config = load_config()
    if state_dir is not None:
        config.storage = replace(config.storage, state_dir=state_dir)
    if storage is not None:
        config.storage = replace(config.storage, backend=storage)
    if seed is not None:
        config.seed = seed
    if log_level is not None:
        config.log = replace(config.log, level=log_level.lower())

    app = KubeSimApp(config=config, reset=reset)
    code = asyncio.run(_run(app, commands, manifests))
    raise SystemExit(code)
