"""Vocabulary tables for the kubectl grammar."""

from __future__ import annotations

from kubesim.models.commands import Action
from kubesim.models.resources import ResourceKind

FLAG_ALIASES: dict[str, str] = {
    "n": "namespace",
    "o": "output",
    "l": "selector",
    "f": "filename",
    "A": "all-namespaces",
    "c": "container",
}

VALUE_FLAGS: frozenset[str] = frozenset({"namespace", "output", "selector", "filename", "container", "tail"})

RESOURCE_ALIASES: dict[str, ResourceKind] = {
    "pods": ResourceKind.POD,
    "pod": ResourceKind.POD,
    "po": ResourceKind.POD,
    "configmaps": ResourceKind.CONFIG_MAP,
    "configmap": ResourceKind.CONFIG_MAP,
    "cm": ResourceKind.CONFIG_MAP,
    "secrets": ResourceKind.SECRET,
    "secret": ResourceKind.SECRET,
}

ACTIONS: frozenset[str] = frozenset(a.value for a in Action)

# Actions whose name must be present on the command line.
NAME_REQUIRED: frozenset[Action] = frozenset(
    {Action.DELETE, Action.DESCRIBE, Action.LOGS, Action.EXEC, Action.LABEL, Action.ANNOTATE}
)

# Actions whose name sits at a fixed token position (kubectl <action> <kind> <name>).
FIXED_NAME_POSITION = 3
FIXED_NAME_ACTIONS: frozenset[Action] = frozenset({Action.GET, Action.DESCRIBE, Action.DELETE})
