# Executes tool calls by name. Every outcome, including failure, is a string.
# Author: AI Dock contributors
# Date: 2025-07-04
# Version: 0.1.0

import json
from typing import Any

from aidock.core.tool_registry import ToolRegistry
from aidock.tools.base_tool import ToolArgs
from aidock.utils.logger import console


def _scalar_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def parse_arguments(arguments_json: str) -> ToolArgs:
    """
    Parses a call's argument blob into a flat name -> string mapping.
    A blank blob means no arguments. Anything but a JSON object is rejected.
    """
    if arguments_json is None or not arguments_json.strip():
        return ToolArgs()
    parsed = json.loads(arguments_json)
    if not isinstance(parsed, dict):
        raise ValueError(f"arguments must be a JSON object, got {type(parsed).__name__}")
    return ToolArgs({str(key): _scalar_to_str(value) for key, value in parsed.items()})


class ToolExecutor:
    """
    Dispatches a tool call to its registered handler.

    execute() never raises: bad arguments, unknown names and handler failures all
    come back as error text, so the model always gets an answer it can react to.
    """

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    def execute(self, name: str, arguments_json: str) -> str:
        tool = self.registry.get(name)
        if tool is None:
            console.error(f"Attempted to execute unknown tool: {name}")
            return f"Error: Unknown tool '{name}'."

        try:
            args = parse_arguments(arguments_json)
        except (ValueError, TypeError, AttributeError) as e:
            console.warning(f"Could not parse arguments for tool '{name}': {e}")
            return f"Error executing tool {name}: {e}"

        console.info(f"Executing tool '{name}' with arguments {sorted(args)}")
        try:
            result = tool.execute(args)
        except Exception as e:
            console.exception(f"Tool '{name}' raised an exception.")
            return f"Error executing tool {name}: {e}"

        result = result if isinstance(result, str) else str(result)
        console.debug(f"Tool '{name}' returned {len(result)} characters.")
        return result
