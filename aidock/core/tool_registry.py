# Discovers the editor tools and exposes them by name.
# Version 2.0.0: Tools are bound to an editor host; the registry is frozen after discovery.

import pkgutil
import inspect
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING
from aidock import tools as tools_package
from aidock.tools.base_tool import BaseTool
from aidock.utils.logger import console

if TYPE_CHECKING:
    from aidock.services.editor_host import EditorHost


class ToolRegistry:
    """
    Discovers every BaseTool subclass in the aidock.tools package, instantiates it
    against the given host and keys it by name. Names must be unique.
    """
    def __init__(self, host: "EditorHost"):
        self.host = host
        tools: Dict[str, BaseTool] = {}
        self._discover_tools(tools)
        self._tools: Mapping[str, BaseTool] = MappingProxyType(tools)
        self._definitions = tuple(tool.get_definition() for tool in tools.values())
        console.success(f"Tool discovery complete. Found {len(self._tools)} tools: {list(self._tools.keys())}")

    def _discover_tools(self, tools: Dict[str, BaseTool]):
        """
        Scans the aidock.tools package, imports all modules, finds classes that
        inherit from BaseTool, and creates an instance of each to register.
        """
        for module_info in sorted(pkgutil.iter_modules(tools_package.__path__, f"{tools_package.__name__}."), key=lambda m: m.name):
            modname = module_info.name
            if modname == f"{tools_package.__name__}.base_tool":
                continue
            module = __import__(modname, fromlist="dummy")
            for _, obj in inspect.getmembers(module, inspect.isclass):
                if issubclass(obj, BaseTool) and not inspect.isabstract(obj) and obj.__module__ == modname:
                    instance = obj(self.host)
                    if instance.name in tools:
                        raise ValueError(f"Duplicate tool name '{instance.name}' in {modname}.")
                    tools[instance.name] = instance
                    console.info(f"Successfully registered tool: '{instance.name}'")

    @property
    def names(self) -> List[str]:
        return list(self._tools.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> Optional[BaseTool]:
        return self._tools.get(name)

    def list(self) -> List[Dict[str, Any]]:
        """Returns the tool definitions advertised to the model on every request."""
        return list(self._definitions)
