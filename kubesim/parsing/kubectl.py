"""kubectl command parser.

``parse_command(text)`` turns one input line into a validated Command or
raises ParseError.  It is a pure function: the same text always yields an
equal Command, and surrounding or repeated whitespace never matters.

Pipeline::

    trim -> tokenize -> expect "kubectl" -> action
         -> action transformer -> flags -> resource kind -> name
         -> name check -> assemble
"""

from __future__ import annotations

from dataclasses import replace

from kubesim.errors import ParseError
from kubesim.models.commands import Action, Command, OutputFormat
from kubesim.models.resources import DEFAULT_NAMESPACE
from kubesim.parsing.grammar import (
    ACTIONS,
    FIXED_NAME_ACTIONS,
    FIXED_NAME_POSITION,
    FLAG_ALIASES,
    NAME_REQUIRED,
    RESOURCE_ALIASES,
    VALUE_FLAGS,
)
from kubesim.parsing.pipeline import (
    ParseContext,
    expect_leading,
    extract_action,
    is_flag,
    parse_flags,
    parse_selector,
    run_pipeline,
    tokenize,
    trim,
)
from kubesim.parsing.transformers import has_transformer, positionals, transform


def _action_message(token: str | None) -> str:
    if token is None:
        return "Invalid or missing action"
    return f'unknown command "{token}" for "kubectl"'


def _extract_resource(ctx: ParseContext) -> ParseContext:
    if ctx.resource_kind is not None:
        return ctx
    token = ctx.tokens[2] if len(ctx.tokens) > 2 else None
    if token is None or is_flag(token):
        raise ParseError("Invalid or missing resource type")
    kind = RESOURCE_ALIASES.get(token)
    if kind is None:
        raise ParseError(f'the server doesn\'t have a resource type "{token}"')
    return replace(ctx, resource_kind=kind)


def _first_positional(tokens: list[str]) -> str | None:
    rest = positionals(tokens)
    return rest[0] if rest else None


def _extract_name(ctx: ParseContext) -> ParseContext:
    if ctx.name is not None or ctx.action in {Action.LABEL, Action.ANNOTATE}:
        return ctx
    if ctx.action in FIXED_NAME_ACTIONS:
        token = ctx.tokens[FIXED_NAME_POSITION] if len(ctx.tokens) > FIXED_NAME_POSITION else None
        name = None if token is None or is_flag(token) else token
    elif has_transformer(ctx.action):
        name = _first_positional(ctx.tokens[2:])
    else:
        name = None
    return replace(ctx, name=name)


def _check_name(ctx: ParseContext) -> ParseContext:
    if ctx.action in NAME_REQUIRED and not ctx.name:
        raise ParseError(f"{ctx.action} requires a resource name")
    return ctx


def _output_format(value: object) -> OutputFormat:
    if value is None:
        return OutputFormat.TABLE
    if not isinstance(value, str):
        raise ParseError("flag needs an argument: --output")
    try:
        return OutputFormat(value)
    except ValueError:
        allowed = ", ".join(f.value for f in OutputFormat)
        raise ParseError(
            f'unable to match a printer suitable for the output format "{value}", allowed formats are: {allowed}'
        ) from None


def _assemble(ctx: ParseContext) -> Command:
    flags = ctx.flags
    output_format = _output_format(flags.get("output"))

    if flags.get("all-namespaces"):
        namespace = None
    else:
        ns = flags.get("namespace")
        namespace = ns if isinstance(ns, str) else DEFAULT_NAMESPACE

    raw_selector = flags.get("selector")
    selector = parse_selector(raw_selector) if isinstance(raw_selector, str) else None

    return Command(
        action=Action(ctx.action),
        resource_kind=ctx.resource_kind,
        name=ctx.name,
        namespace=namespace,
        flags=dict(flags),
        selector=selector,
        output_format=output_format,
        exec_command=ctx.exec_command,
        change_set=ctx.change_set,
    )


def parse_command(text: str) -> Command:
    """Parse one kubectl line.  Raises ParseError on the first failing stage."""
    ctx = run_pipeline(
        ParseContext(raw=text),
        trim,
        tokenize,
        expect_leading("kubectl"),
        extract_action(1, ACTIONS, _action_message),
        transform,
        parse_flags(1, FLAG_ALIASES, VALUE_FLAGS),
        _extract_resource,
        _extract_name,
        _check_name,
    )
    return _assemble(ctx)
