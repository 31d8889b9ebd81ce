# Scene and object inspection tools for the currently edited scene.
# Author: AI Dock contributors
# Date: 2025-07-04
# Version: 0.2.0

import json
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Type
from .base_tool import BaseTool, ToolArgs
from aidock.models.scene import Node, PropertyUsage, Resource, SceneObject
from aidock.utils.logger import console

TREE_MAX_DEPTH = 1
VALUE_MAX_LENGTH = 200

_VISIBLE_USAGE = PropertyUsage.SCRIPT_VARIABLE | PropertyUsage.STORAGE | PropertyUsage.EDITOR

# Shorthand fields reported first for nodes that carry a transform.
_TRANSFORM_SHORTHAND = (
    ("GlobalPosition", "global_position"),
    ("Position", "position"),
    ("RotationDegrees", "rotation_degrees"),
)


def object_reference(obj: SceneObject) -> str:
    """A compact stand-in for an object-valued property. Never walks into the object."""
    resource_path = obj.resource_path if isinstance(obj, Resource) else ""
    return f"<Object: {obj.class_name} (ID: {obj.instance_id}) {resource_path}>"


def _is_hidden(name: str) -> bool:
    return name.startswith("metadata/") or "script/source" in name or name.endswith(".cs")


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "<null>"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(object_reference(item) if isinstance(item, SceneObject) else _stringify(item)
                               for item in value) + "]"
    return str(value)


def serialize_object(obj: Optional[SceneObject]) -> str:
    """
    Dumps one object's visible properties as pretty JSON, one level deep.

    Only script, storage and editor properties are listed; metadata and script
    sources are skipped. Object values are replaced by a type/id/path reference
    and long values are truncated, which keeps the dump bounded on cyclic graphs.
    """
    if obj is None:
        return "null"

    props: Dict[str, Any] = {
        "_Info_": {
            "Class": obj.class_name,
            "InstanceId": str(obj.instance_id),
            "ToString": str(obj),
        }
    }
    if isinstance(obj, Node):
        props["_NodeInfo_"] = {"Name": obj.name, "Path": obj.get_path()}
        for label, prop_name in _TRANSFORM_SHORTHAND:
            if obj.has(prop_name):
                props[label] = _stringify(obj.get(prop_name))

    for prop in obj.get_property_list():
        name = prop["name"]
        if not PropertyUsage(prop["usage"]) & _VISIBLE_USAGE:
            continue
        if _is_hidden(name):
            continue
        try:
            value = obj.get(name)
            if isinstance(value, SceneObject):
                props[name] = object_reference(value)
            else:
                text = _stringify(value)
                if len(text) > VALUE_MAX_LENGTH:
                    text = text[:VALUE_MAX_LENGTH] + "...(truncated)"
                props[name] = text
        except Exception:
            props[name] = "<Error reading property>"

    return json.dumps(props, indent=2)


def _node_by_path(root: Node, path: str) -> Optional[Node]:
    if not path or path == ".":
        return root
    return root.get_node_or_null(path)


# --- Tool 1: Scene Tree ---

class GetSceneTreeInput(BaseModel):
    node_id: str = Field(..., description="The Instance ID of the node to inspect. Pass '0' to get the children of current scene root.")

class GetSceneTreeTool(BaseTool):
    """Dumps a node and its direct children, one line each."""
    name: str = "get_scene_tree"
    description: str = "Get the tree structure of the currently open scene. Returns Name, Type, and Instance ID."
    args_schema: Type[BaseModel] = GetSceneTreeInput

    def execute(self, args: ToolArgs) -> str:
        node = self._node_from_id(args["node_id"].strip())
        if node is None:
            return "Error: Could not find node or no scene is open."
        lines: List[str] = []
        self._build_tree(node, lines, 0)
        return "\n".join(lines)

    def _node_from_id(self, id_str: str) -> Optional[Node]:
        root = self.host.edited_scene_root()
        if root is None:
            return None
        if id_str == "0":
            return root
        if not id_str.isdigit():
            return None
        obj = self.host.instance_from_id(int(id_str))
        return obj if isinstance(obj, Node) else None

    def _build_tree(self, node: Node, lines: List[str], depth: int) -> None:
        line = f"{'  ' * depth}- {node.name} ({node.class_name}) [ID: {node.instance_id}]"
        if node.scene_file_path:
            line += f" [Scene: {node.scene_file_path}]"
        lines.append(line)
        if depth >= TREE_MAX_DEPTH:
            return
        for child in node.get_children():
            self._build_tree(child, lines, depth + 1)


# --- Tool 2: Selected Nodes ---

class GetSelectedNodesInput(BaseModel):
    pass

class GetSelectedNodesTool(BaseTool):
    name: str = "get_selected_nodes"
    description: str = "Get the list of nodes currently selected in the editor. Returns Name, NodePath, Class, and ID."
    args_schema: Type[BaseModel] = GetSelectedNodesInput

    def execute(self, args: ToolArgs) -> str:
        nodes = self.host.selected_nodes()
        if not nodes:
            return "No nodes currently selected."

        root = self.host.edited_scene_root()
        result = []
        for node in nodes:
            path = root.get_path_to(node) if root is not None else node.get_path()
            result.append({
                "Name": node.name,
                "Class": node.class_name,
                "Path": path,
                "InstanceId": str(node.instance_id),
                "SceneFile": node.scene_file_path,
            })
        return json.dumps(result, indent=2)


# --- Tool 3: Object Properties by ID ---

class GetObjectPropertiesInput(BaseModel):
    object_id: str = Field(..., description="The Instance ID of the object.")

class GetObjectPropertiesTool(BaseTool):
    name: str = "get_object_properties"
    description: str = "Get the properties of a specific object (Node or Resource) by its Instance ID."
    args_schema: Type[BaseModel] = GetObjectPropertiesInput

    def execute(self, args: ToolArgs) -> str:
        id_str = args["object_id"].strip()
        if not id_str.isdigit():
            return "Error: Invalid ID format."
        obj = self.host.instance_from_id(int(id_str))
        if obj is None:
            return "Error: Could not find object with that ID."
        return serialize_object(obj)


# --- Tool 4: Node Properties by Path ---

class GetNodePropertiesByPathInput(BaseModel):
    path: str = Field(..., description="The node path (e.g. 'Player/Camera3D' or '.' for root).")

class GetNodePropertiesByPathTool(BaseTool):
    name: str = "get_node_properties_by_path"
    description: str = "Get the properties of a node by its scene path (relative to the edited scene root)."
    args_schema: Type[BaseModel] = GetNodePropertiesByPathInput

    def execute(self, args: ToolArgs) -> str:
        root = self.host.edited_scene_root()
        if root is None:
            return "Error: No scene currently open."
        path = args["path"]
        node = _node_by_path(root, path)
        if node is None:
            return f"Error: Could not find node at path '{path}'."
        return serialize_object(node)


# --- Tool 5: Indexed Property Value ---

class GetNodePropertyValueInput(BaseModel):
    node_path: str = Field(..., description="Path to the scene node (e.g. 'Player/MeshInstance').")
    property_path: str = Field(..., description="Path to the property or sub-resource (e.g. 'mesh:material:albedo_color' "
                               "or 'surface_material_override/0'). Slashes are converted to colons when the first lookup finds nothing.")

class GetNodePropertyValueTool(BaseTool):
    """
    Reads one property or sub-resource of a node. The path is tried as given first;
    if that yields nothing and it contains slashes, it is retried with colons.
    """
    name: str = "get_node_property_value"
    description: str = "Get a specific property value or sub-resource from a node using a path. " \
    "Useful for accessing nested resources like 'mesh:material:albedo_color' or 'surface_material_override/0'."
    args_schema: Type[BaseModel] = GetNodePropertyValueInput

    def execute(self, args: ToolArgs) -> str:
        root = self.host.edited_scene_root()
        if root is None:
            return "Error: No scene currently open."

        node_path, property_path = args["node_path"], args["property_path"]
        node = _node_by_path(root, node_path)
        if node is None:
            return f"Error: Could not find node at path '{node_path}'."

        try:
            value = node.get_indexed(property_path)
            if value is None and "/" in property_path:
                alt_path = property_path.replace("/", ":")
                console.info(f"Property '{property_path}' not found, retrying as '{alt_path}'.")
                value = node.get_indexed(alt_path)

            if value is None:
                top_prop = property_path.replace(":", "/").split("/")[0]
                if node.get(top_prop) is None:
                    return f"Error: Property path '{property_path}' returned Nil (or path is invalid)."

            if isinstance(value, SceneObject):
                return serialize_object(value)
            return _stringify(value)
        except Exception as e:
            return f"Error accessing property '{property_path}': {e}"
