"""Railway-style parsing pipeline shared by the kubectl and shell grammars.

A stage takes a ParseContext and returns a new one, or raises ParseError.
``run_pipeline`` threads the context through the stages in order; the first
ParseError short-circuits the rest, so later stages may assume every earlier
stage succeeded.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass, field, replace

from kubesim.errors import ParseError
from kubesim.models.commands import FlagValue
from kubesim.models.resources import ResourceKind


@dataclass(frozen=True)
class ParseContext:
    """Accumulated parse state.  Each stage fills in more of it."""

    raw: str
    tokens: list[str] = field(default_factory=list)
    action: str | None = None
    resource_kind: ResourceKind | None = None
    name: str | None = None
    flags: dict[str, FlagValue] = field(default_factory=dict)
    args: list[str] = field(default_factory=list)
    exec_command: list[str] | None = None
    change_set: dict[str, str | None] | None = None


Stage = Callable[[ParseContext], ParseContext]


def run_pipeline(ctx: ParseContext, *stages: Stage) -> ParseContext:
    for stage in stages:
        ctx = stage(ctx)
    return ctx


# ---------------------------------------------------------------------------
# Generic stages
# ---------------------------------------------------------------------------


def trim(ctx: ParseContext) -> ParseContext:
    stripped = ctx.raw.strip()
    if not stripped:
        raise ParseError("Command cannot be empty")
    return replace(ctx, raw=stripped)


def tokenize(ctx: ParseContext) -> ParseContext:
    tokens = ctx.raw.split()
    if not tokens:
        raise ParseError("Command cannot be empty")
    return replace(ctx, tokens=tokens)


def expect_leading(word: str) -> Stage:
    def _stage(ctx: ParseContext) -> ParseContext:
        if not ctx.tokens or ctx.tokens[0] != word:
            raise ParseError(f"Command must start with {word}")
        return ctx

    return _stage


def extract_action(position: int, valid: Collection[str], message: Callable[[str | None], str]) -> Stage:
    """Read the action token at *position* and check it against *valid*."""

    def _stage(ctx: ParseContext) -> ParseContext:
        token = ctx.tokens[position] if len(ctx.tokens) > position else None
        if token is None or token not in valid:
            raise ParseError(message(token))
        return replace(ctx, action=token)

    return _stage


def is_flag(token: str) -> bool:
    return token.startswith("-") and token != "-" and token != "--"


_TRUE_WORDS = frozenset({"true", "1", "yes"})
_FALSE_WORDS = frozenset({"false", "0", "no"})


def _parse_bool(name: str, value: str) -> bool:
    word = value.lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ParseError(f'invalid boolean value "{value}" for --{name}')


def parse_flags(start: int, aliases: Mapping[str, str], value_flags: Collection[str]) -> Stage:
    """Collect flags from ``tokens[start:]``.

    Short names are normalized through *aliases*.  Flags listed in
    *value_flags* take the next token as their value (or an inline
    ``--flag=value``); every other flag is boolean and accepts an inline
    ``true``/``false`` (also ``1``/``0``, ``yes``/``no``).  Tokens that are not
    flags or flag values end up in ``ctx.args`` in order.
    """

    def _stage(ctx: ParseContext) -> ParseContext:
        flags: dict[str, FlagValue] = {}
        args: list[str] = []
        tokens = ctx.tokens
        i = start
        while i < len(tokens):
            token = tokens[i]
            if not is_flag(token):
                args.append(token)
                i += 1
                continue

            body = token.lstrip("-")
            inline: str | None = None
            if "=" in body:
                body, inline = body.split("=", 1)
            name = aliases.get(body, body)

            if name not in value_flags:
                flags[name] = True if inline is None else _parse_bool(name, inline)
                i += 1
                continue

            if inline is not None:
                if not inline:
                    raise ParseError(f"flag needs an argument: --{name}")
                flags[name] = inline
                i += 1
                continue

            value = tokens[i + 1] if i + 1 < len(tokens) else None
            if value is None or is_flag(value):
                raise ParseError(f"flag needs an argument: --{name}")
            flags[name] = value
            i += 2

        return replace(ctx, flags=flags, args=args)

    return _stage


def parse_selector(selector: str) -> dict[str, str]:
    """Parse ``a=b,c=d`` into equality constraints.  Malformed pairs are dropped."""
    out: dict[str, str] = {}
    for pair in selector.split(","):
        key, sep, value = pair.partition("=")
        key, value = key.strip(), value.strip()
        if sep and key and value:
            out[key] = value
    return out
