# In-memory object/scene graph that the editor host exposes to the tools.
# Author: AI Dock contributors
# Date: 2025-07-03
# Version: 0.1.0

import itertools
import weakref
from enum import IntFlag
from typing import Any, Dict, Iterator, List, Optional


class PropertyUsage(IntFlag):
    """Visibility flags of an object property, numbered like the editor's own."""
    NONE = 0
    STORAGE = 2
    EDITOR = 4
    INTERNAL = 8
    SCRIPT_VARIABLE = 4096
    DEFAULT = STORAGE | EDITOR


_instance_ids = itertools.count(1)
_object_db: "weakref.WeakValueDictionary[int, SceneObject]" = weakref.WeakValueDictionary()


def instance_from_id(instance_id: int) -> Optional["SceneObject"]:
    """Looks up a live object by its instance ID."""
    return _object_db.get(instance_id)


class SceneObject:
    """
    Base of everything living in the graph. Properties are stored by name together
    with their usage flags; values may be scalars, containers or other SceneObjects.
    """

    def __init__(self, class_name: Optional[str] = None):
        self.instance_id: int = next(_instance_ids)
        self.class_name = class_name or type(self).__name__
        self._values: Dict[str, Any] = {}
        self._usage: Dict[str, PropertyUsage] = {}
        _object_db[self.instance_id] = self

    def set(self, name: str, value: Any, usage: PropertyUsage = PropertyUsage.DEFAULT) -> None:
        self._values[name] = value
        self._usage.setdefault(name, usage)

    def get(self, name: str) -> Any:
        return self._values.get(name)

    def has(self, name: str) -> bool:
        return name in self._values

    def get_property_list(self) -> List[Dict[str, Any]]:
        return [{"name": name, "usage": int(self._usage[name])} for name in self._values]

    def get_indexed(self, path: str) -> Any:
        """
        Resolves a colon-separated property path, e.g. 'mesh:material:albedo_color'.
        Slashes are part of property names ('surface_material_override/0').
        Returns None when any step is missing.
        """
        head, *rest = path.split(":")
        value = self.get(head)
        for key in rest:
            if value is None:
                return None
            if isinstance(value, SceneObject):
                value = value.get(key)
            elif isinstance(value, dict):
                value = value.get(key)
            elif isinstance(value, (list, tuple)) and key.isdigit() and int(key) < len(value):
                value = value[int(key)]
            else:
                return None
        return value

    def __str__(self) -> str:
        return f"<{self.class_name}#{self.instance_id}>"


class Resource(SceneObject):
    """A shareable asset (mesh, material, script...), optionally backed by a file."""

    def __init__(self, class_name: Optional[str] = None, resource_path: str = ""):
        super().__init__(class_name or "Resource")
        self.resource_path = resource_path


class Node(SceneObject):
    """A scene tree node. Children are ordered; names are unique among siblings."""

    def __init__(self, name: str, class_name: Optional[str] = None, scene_file_path: str = ""):
        super().__init__(class_name or "Node")
        self.name = name
        self.scene_file_path = scene_file_path
        self.parent: Optional["Node"] = None
        self._children: List["Node"] = []
        self.set("name", name, PropertyUsage.EDITOR)

    def add_child(self, child: "Node") -> "Node":
        if child.parent is not None:
            raise ValueError(f"Node '{child.name}' already has a parent.")
        if any(existing.name == child.name for existing in self._children):
            raise ValueError(f"Node '{self.name}' already has a child named '{child.name}'.")
        child.parent = self
        self._children.append(child)
        return child

    def get_children(self) -> List["Node"]:
        return list(self._children)

    def get_child(self, name: str) -> Optional["Node"]:
        for child in self._children:
            if child.name == name:
                return child
        return None

    def _ancestors(self) -> Iterator["Node"]:
        node: Optional[Node] = self
        while node is not None:
            yield node
            node = node.parent

    def get_path(self) -> str:
        """Absolute path from the top of the tree, e.g. '/root/Main/Player'."""
        names = [node.name for node in self._ancestors()]
        return "/root/" + "/".join(reversed(names))

    def get_path_to(self, node: "Node") -> str:
        """Relative path from this node to another node of the same tree."""
        mine = list(reversed(list(self._ancestors())))
        theirs = list(reversed(list(node._ancestors())))
        common = 0
        while common < min(len(mine), len(theirs)) and mine[common] is theirs[common]:
            common += 1
        if common == 0:
            raise ValueError(f"Nodes '{self.name}' and '{node.name}' are not in the same tree.")
        ups = [".."] * (len(mine) - common)
        downs = [n.name for n in theirs[common:]]
        return "/".join(ups + downs) or "."

    def get_node_or_null(self, path: str) -> Optional["Node"]:
        node: Optional[Node] = self
        for part in path.strip("/").split("/"):
            if node is None:
                return None
            if part in ("", "."):
                continue
            node = node.parent if part == ".." else node.get_child(part)
        return node


def build_node(data: Dict[str, Any]) -> Node:
    """
    Builds a node tree from a plain description:
    {"name", "class", "scene_file", "properties": {...}, "children": [...]}.
    A property value of the form {"$resource": {"class", "path", "properties"}} becomes a Resource.
    """
    node = Node(data["name"], data.get("class"), data.get("scene_file", ""))
    for name, value in data.get("properties", {}).items():
        node.set(name, _build_value(value))
    for child in data.get("children", []):
        node.add_child(build_node(child))
    return node


def _build_value(value: Any) -> Any:
    if isinstance(value, dict) and "$resource" in value:
        spec = value["$resource"]
        resource = Resource(spec.get("class"), spec.get("path", ""))
        for name, inner in spec.get("properties", {}).items():
            resource.set(name, _build_value(inner))
        return resource
    if isinstance(value, list):
        return [_build_value(item) for item in value]
    return value
