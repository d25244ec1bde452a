"""In-memory filesystem holding manifest text.

Paths are POSIX-style.  Relative paths resolve against the current working
directory, ``..`` and ``.`` are normalized, and the root cannot be removed.
Every failure raises FileSystemError with a shell-style message.
"""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass, field

import structlog

from kubesim.errors import FileSystemError

_log = structlog.get_logger(component="filesystem")

_NAME_RE = re.compile(r"^[A-Za-z0-9._-]+$")

POD_EXAMPLE = """\
apiVersion: v1
kind: Pod
metadata:
  name: nginx
  labels:
    app: nginx
spec:
  containers:
  - name: nginx
    image: nginx:latest
    ports:
    - containerPort: 80
"""

CONFIGMAP_EXAMPLE = """\
apiVersion: v1
kind: ConfigMap
metadata:
  name: app-config
data:
  LOG_LEVEL: info
  FEATURE_FLAGS: "search,checkout"
"""

SECRET_EXAMPLE = """\
apiVersion: v1
kind: Secret
metadata:
  name: db-credentials
type: Opaque
stringData:
  username: admin
  password: s3cr3t
"""


@dataclass
class File:
    name: str
    content: str = ""


@dataclass
class Directory:
    name: str
    children: dict[str, File | Directory] = field(default_factory=dict)


@dataclass(frozen=True)
class Entry:
    """One line of a directory listing."""

    name: str
    is_dir: bool


class VirtualFileSystem:
    def __init__(self, seed: bool = True) -> None:
        self._root = Directory(name="/")
        self._cwd = "/"
        if seed:
            self._seed()

    def _seed(self) -> None:
        self.create_directory("/examples")
        self.create_directory("/manifests")
        self.write_file("/examples/pod-example.yaml", POD_EXAMPLE)
        self.write_file("/examples/configmap-example.yaml", CONFIGMAP_EXAMPLE)
        self.write_file("/examples/secret-example.yaml", SECRET_EXAMPLE)

    # ------------------------------------------------------------------
    # Path helpers
    # ------------------------------------------------------------------

    @property
    def cwd(self) -> str:
        return self._cwd

    def resolve(self, path: str) -> str:
        joined = posixpath.join(self._cwd, path) if not path.startswith("/") else path
        normalized = posixpath.normpath(joined)
        # normpath keeps a leading "//"
        return "/" + normalized.lstrip("/")

    def _lookup(self, abs_path: str) -> File | Directory | None:
        node: File | Directory = self._root
        for part in [p for p in abs_path.split("/") if p]:
            if not isinstance(node, Directory):
                return None
            child = node.children.get(part)
            if child is None:
                return None
            node = child
        return node

    def _parent(self, abs_path: str) -> tuple[Directory, str]:
        parent_path, name = posixpath.split(abs_path)
        if not name:
            raise FileSystemError("Invalid path: /")
        if not _NAME_RE.match(name):
            raise FileSystemError(f"Invalid name: {name}")
        parent = self._lookup(parent_path)
        if parent is None:
            raise FileSystemError(f"Parent directory not found: {parent_path}")
        if not isinstance(parent, Directory):
            raise FileSystemError(f"Not a directory: {parent_path}")
        return parent, name

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def change_directory(self, path: str = "/") -> str:
        abs_path = self.resolve(path)
        node = self._lookup(abs_path)
        if node is None:
            raise FileSystemError(f"Directory not found: {path}")
        if not isinstance(node, Directory):
            raise FileSystemError(f"Not a directory: {path}")
        self._cwd = abs_path
        return abs_path

    def list_directory(self, path: str | None = None) -> list[Entry]:
        target = path if path is not None else self._cwd
        node = self._lookup(self.resolve(target))
        if node is None:
            raise FileSystemError(f"Directory not found: {target}")
        if isinstance(node, File):
            return [Entry(name=node.name, is_dir=False)]
        return [Entry(name=name, is_dir=isinstance(child, Directory)) for name, child in node.children.items()]

    def create_directory(self, path: str, parents: bool = False) -> str:
        abs_path = self.resolve(path)
        if parents:
            current = "/"
            for part in [p for p in abs_path.split("/") if p]:
                current = posixpath.join(current, part)
                node = self._lookup(current)
                if node is None:
                    parent, name = self._parent(current)
                    parent.children[name] = Directory(name=name)
                elif not isinstance(node, Directory):
                    raise FileSystemError(f"Not a directory: {current}")
            return abs_path
        if self._lookup(abs_path) is not None:
            raise FileSystemError(f"Directory already exists: {abs_path}")
        parent, name = self._parent(abs_path)
        parent.children[name] = Directory(name=name)
        _log.debug("directory_created", path=abs_path)
        return abs_path

    def create_file(self, path: str, content: str = "") -> str:
        abs_path = self.resolve(path)
        if self._lookup(abs_path) is not None:
            raise FileSystemError(f"File already exists: {abs_path}")
        parent, name = self._parent(abs_path)
        parent.children[name] = File(name=name, content=content)
        _log.debug("file_created", path=abs_path)
        return abs_path

    def write_file(self, path: str, content: str) -> str:
        """Create or overwrite a file."""
        abs_path = self.resolve(path)
        node = self._lookup(abs_path)
        if isinstance(node, Directory):
            raise FileSystemError(f"Not a file: {path}")
        if isinstance(node, File):
            node.content = content
            return abs_path
        return self.create_file(abs_path, content)

    def read_file(self, path: str) -> str:
        node = self._lookup(self.resolve(path))
        if node is None:
            raise FileSystemError(f"File not found: {path}")
        if not isinstance(node, File):
            raise FileSystemError(f"Not a file: {path}")
        return node.content

    def delete(self, path: str, recursive: bool = False) -> str:
        abs_path = self.resolve(path)
        if abs_path == "/":
            raise FileSystemError("Cannot delete root directory")
        node = self._lookup(abs_path)
        if node is None:
            raise FileSystemError(f"No such file or directory: {path}")
        if isinstance(node, Directory) and not recursive:
            raise FileSystemError(f"Is a directory: {path}")
        parent, name = self._parent(abs_path)
        del parent.children[name]
        if self._cwd == abs_path or self._cwd.startswith(abs_path + "/"):
            self._cwd = posixpath.dirname(abs_path) or "/"
        _log.debug("path_deleted", path=abs_path, recursive=recursive)
        return abs_path

    def exists(self, path: str) -> bool:
        return self._lookup(self.resolve(path)) is not None
