"""Action-specific token transformers.

Transformers run after the action is known and before generic flag parsing.
They may rewrite the token stream and pre-fill fields (resource kind, name,
trailing exec command, change-set) that the generic stages would otherwise
derive or cannot derive at all.
"""

from __future__ import annotations

from dataclasses import replace

import structlog

from kubesim.errors import ParseError
from kubesim.models.commands import Action
from kubesim.models.resources import ResourceKind
from kubesim.parsing.grammar import FLAG_ALIASES, RESOURCE_ALIASES, VALUE_FLAGS
from kubesim.parsing.pipeline import ParseContext, is_flag

_log = structlog.get_logger(component="parsing.transformers")

EXEC_SEPARATOR = "--"


def _exec(ctx: ParseContext) -> ParseContext:
    if EXEC_SEPARATOR not in ctx.tokens:
        return replace(ctx, resource_kind=ResourceKind.POD)
    idx = ctx.tokens.index(EXEC_SEPARATOR)
    return replace(
        ctx,
        resource_kind=ResourceKind.POD,
        tokens=ctx.tokens[:idx],
        exec_command=ctx.tokens[idx + 1 :],
    )


def _default_pod(ctx: ParseContext) -> ParseContext:
    return replace(ctx, resource_kind=ResourceKind.POD)


def _takes_value(token: str) -> bool:
    body = token.lstrip("-")
    if "=" in body:
        return False
    return FLAG_ALIASES.get(body, body) in VALUE_FLAGS


def positionals(tokens: list[str]) -> list[str]:
    """Non-flag tokens, skipping the values consumed by value-required flags."""
    out: list[str] = []
    skip = False
    for token in tokens:
        if skip:
            skip = False
            continue
        if is_flag(token):
            skip = _takes_value(token)
            continue
        out.append(token)
    return out


def parse_change_set(tokens: list[str]) -> dict[str, str | None]:
    """``key=value`` upserts, ``key-`` removes; any other token is ignored."""
    changes: dict[str, str | None] = {}
    for token in tokens:
        if "=" in token:
            key, _, value = token.partition("=")
            if key:
                changes[key] = value
                continue
        elif token.endswith("-") and len(token) > 1:
            changes[token[:-1]] = None
            continue
        _log.debug("change_set_token_ignored", token=token)
    return changes


def _metadata(ctx: ParseContext) -> ParseContext:
    token = ctx.tokens[2] if len(ctx.tokens) > 2 else None
    kind = RESOURCE_ALIASES.get(token) if token is not None and not is_flag(token) else None
    if kind is None:
        raise ParseError("Invalid or missing resource type")

    rest = positionals(ctx.tokens[3:])
    if not rest:
        return replace(ctx, resource_kind=kind, change_set={})
    return replace(
        ctx,
        resource_kind=kind,
        name=rest[0],
        change_set=parse_change_set(rest[1:]),
    )


def transform(ctx: ParseContext) -> ParseContext:
    """Dispatch to the transformer for ``ctx.action``; identity for the rest."""
    match ctx.action:
        case Action.EXEC:
            return _exec(ctx)
        case Action.APPLY | Action.CREATE | Action.LOGS:
            return _default_pod(ctx)
        case Action.LABEL | Action.ANNOTATE:
            return _metadata(ctx)
        case _:
            return ctx


def has_transformer(action: str | None) -> bool:
    return action in {Action.EXEC, Action.APPLY, Action.CREATE, Action.LOGS, Action.LABEL, Action.ANNOTATE}
