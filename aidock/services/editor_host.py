# The editor host: file system, scene graph, script runtime and index refresh.
# Author: AI Dock contributors
# Date: 2025-07-03
# Version: 0.1.0

import json
import os
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from aidock.models.scene import Node, SceneObject, build_node, instance_from_id
from aidock.utils.logger import console

RES_PREFIX = "res://"


class HostError(Exception):
    """A host operation failed (missing path, unreadable file, ...)."""


class ScriptCompileError(HostError):
    """A script snippet failed to compile or to load."""

    def __init__(self, kind: str, diagnostics: List[str]):
        super().__init__(kind)
        self.kind = kind
        self.diagnostics = diagnostics


@dataclass
class DirEntry:
    name: str
    is_dir: bool


@dataclass
class CompiledScript:
    namespace: Dict[str, Any]
    diagnostics: List[str] = field(default_factory=list)


class EditorHost(ABC):
    """
    Everything the tools need from the editor. All calls are synchronous and
    raise HostError on failure.
    """

    @abstractmethod
    def list_dir(self, path: str) -> List[DirEntry]: ...

    @abstractmethod
    def file_exists(self, path: str) -> bool: ...

    @abstractmethod
    def dir_exists(self, path: str) -> bool: ...

    @abstractmethod
    def file_size(self, path: str) -> int: ...

    @abstractmethod
    def read_bytes(self, path: str) -> bytes: ...

    @abstractmethod
    def write_text(self, path: str, content: str) -> None: ...

    @abstractmethod
    def make_dir_recursive(self, path: str) -> None: ...

    @abstractmethod
    def refresh_index(self) -> None: ...

    @abstractmethod
    def edited_scene_root(self) -> Optional[Node]: ...

    @abstractmethod
    def instance_from_id(self, instance_id: int) -> Optional[SceneObject]: ...

    @abstractmethod
    def selected_nodes(self) -> List[Node]: ...

    @abstractmethod
    def compile_script(self, source: str) -> CompiledScript: ...


def join_res_path(directory: str, name: str) -> str:
    if directory.endswith("/"):
        return directory + name
    return f"{directory}/{name}"


def parent_res_path(path: str) -> str:
    if path.startswith(RES_PREFIX):
        rest = path[len(RES_PREFIX):]
        return RES_PREFIX + rest.rsplit("/", 1)[0] if "/" in rest else RES_PREFIX
    return path.rsplit("/", 1)[0] if "/" in path else ""


class ProjectHost(EditorHost):
    """
    Serves a project directory on disk as res:// and an in-memory edited scene.
    Paths may be given as 'res://a/b.txt' or relative to the project root;
    anything resolving outside the root is refused.
    """

    def __init__(self, project_root: Union[str, Path], scene_root: Optional[Node] = None):
        self.project_root = Path(project_root).resolve()
        self._scene_root = scene_root
        self._selection: List[Node] = []
        self.indexed_files: List[str] = []

    @classmethod
    def from_settings(cls, project_root: str, scene_file: Optional[str] = None) -> "ProjectHost":
        host = cls(project_root)
        if scene_file:
            host.load_scene(scene_file)
        return host

    def _resolve(self, path: str) -> Path:
        relative = path[len(RES_PREFIX):] if path.startswith(RES_PREFIX) else path
        resolved = (self.project_root / relative.lstrip("/")).resolve()
        if resolved != self.project_root and self.project_root not in resolved.parents:
            raise HostError(f"Path '{path}' is outside the project.")
        return resolved

    def list_dir(self, path: str) -> List[DirEntry]:
        target = self._resolve(path)
        try:
            with os.scandir(target) as entries:
                return [DirEntry(entry.name, entry.is_dir()) for entry in entries]
        except OSError as e:
            raise HostError(e.strerror or str(e)) from e

    def file_exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def dir_exists(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    def file_size(self, path: str) -> int:
        try:
            return self._resolve(path).stat().st_size
        except OSError as e:
            raise HostError(e.strerror or str(e)) from e

    def read_bytes(self, path: str) -> bytes:
        try:
            return self._resolve(path).read_bytes()
        except OSError as e:
            raise HostError(e.strerror or str(e)) from e

    def write_text(self, path: str, content: str) -> None:
        try:
            self._resolve(path).write_text(content, encoding="utf-8")
        except OSError as e:
            raise HostError(e.strerror or str(e)) from e

    def make_dir_recursive(self, path: str) -> None:
        try:
            self._resolve(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise HostError(e.strerror or str(e)) from e

    def refresh_index(self) -> None:
        files = []
        for directory, _, names in os.walk(self.project_root):
            for name in names:
                relative = Path(directory, name).relative_to(self.project_root).as_posix()
                files.append(RES_PREFIX + relative)
        self.indexed_files = sorted(files)
        console.info(f"Project index refreshed: {len(self.indexed_files)} files.")

    def load_scene(self, scene_file: str) -> Node:
        """Loads a JSON scene description (see build_node) as the edited scene."""
        try:
            data = json.loads(self.read_bytes(scene_file).decode("utf-8"))
        except ValueError as e:
            raise HostError(f"Invalid scene description '{scene_file}': {e}") from e
        self._scene_root = build_node(data)
        self._selection = []
        console.info(f"Loaded scene '{scene_file}' with root '{self._scene_root.name}'.")
        return self._scene_root

    def set_edited_scene(self, root: Optional[Node]) -> None:
        self._scene_root = root
        self._selection = []

    def edited_scene_root(self) -> Optional[Node]:
        return self._scene_root

    def instance_from_id(self, instance_id: int) -> Optional[SceneObject]:
        return instance_from_id(instance_id)

    def select(self, nodes: List[Node]) -> None:
        self._selection = list(nodes)

    def selected_nodes(self) -> List[Node]:
        return list(self._selection)

    def compile_script(self, source: str) -> CompiledScript:
        """
        Compiles a snippet and runs its top level in a fresh namespace where 'editor'
        is this host. Syntax errors and warnings raised while compiling are collected
        as '[Line n]: message' diagnostics.
        """
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            try:
                code = compile(source, "<run_script>", "exec")
            except SyntaxError as e:
                diagnostics = [f"[Line {w.lineno}]: {w.message}" for w in caught]
                diagnostics.append(f"[Line {e.lineno}]: {e.msg}")
                raise ScriptCompileError(type(e).__name__, diagnostics) from e
        diagnostics = [f"[Line {w.lineno}]: {w.message}" for w in caught]

        namespace: Dict[str, Any] = {"__name__": "__aidock_script__", "editor": self}
        try:
            exec(code, namespace)
        except (Exception, SystemExit) as e:
            diagnostics.append(f"[Load]: {type(e).__name__}: {e}")
            raise ScriptCompileError("LoadError", diagnostics) from e
        return CompiledScript(namespace, diagnostics)
