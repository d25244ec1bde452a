"""kubectl action handlers.

Each handler takes (CommandContext, Command), returns the text to print and
raises KubeSimError on failure.  Mutating handlers emit exactly one event on
success and nothing on failure.
"""

from kubesim.kubectl.handlers.delete import handle_delete
from kubesim.kubectl.handlers.describe import handle_describe
from kubesim.kubectl.handlers.exec import handle_exec
from kubesim.kubectl.handlers.get import handle_get
from kubesim.kubectl.handlers.logs import handle_logs
from kubesim.kubectl.handlers.metadata import handle_annotate, handle_label
from kubesim.kubectl.handlers.resources import apply_resource, create_resource, handle_apply, handle_create

__all__ = [
    "apply_resource",
    "create_resource",
    "handle_annotate",
    "handle_apply",
    "handle_create",
    "handle_delete",
    "handle_describe",
    "handle_exec",
    "handle_get",
    "handle_label",
    "handle_logs",
]
