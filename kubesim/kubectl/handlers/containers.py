"""Container selection shared by logs and exec."""

from __future__ import annotations

from kubesim.errors import UsageError
from kubesim.models.commands import Command
from kubesim.models.resources import Container, Pod


def select_container(pod: Pod, command: Command) -> Container:
    """Pick the ``-c`` container, or the only one.  Raises UsageError."""
    name = pod.metadata.name
    wanted = command.flag("container")
    if isinstance(wanted, str):
        container = pod.container(wanted)
        if container is None:
            available = ", ".join(c.name for c in pod.spec.containers)
            raise UsageError(f"container {wanted} is not valid for pod {name}. Available containers: {available}")
        return container
    if len(pod.spec.containers) > 1:
        choices = " ".join(c.name for c in pod.spec.containers)
        raise UsageError(f"a container name must be specified for pod {name}, choose one of: [{choices}]")
    return pod.spec.containers[0]
