# The contract every editor tool implements, and the argument mapping it receives.
# Author: AI Dock contributors
# Date: 2025-07-03
# Version: 0.2.0

from abc import ABC, abstractmethod
from pydantic import BaseModel
from typing import Dict, Any, Type, TYPE_CHECKING

if TYPE_CHECKING:
    from aidock.services.editor_host import EditorHost


class ToolArgs(dict):
    """Flat tool arguments. A missing parameter reads as an empty string."""

    def __missing__(self, key: str) -> str:
        return ""


class BaseTool(ABC):
    """
    A named capability the model may call, bound to one editor host.

    Attributes:
        name (str): Unique across the registry; the model calls the tool by it.
        description (str): Shown to the model verbatim.
        args_schema (Type[BaseModel]): Source of the advertised parameter schema.
            Incoming calls are not validated against it.
    """
    name: str
    description: str
    args_schema: Type[BaseModel]

    def __init__(self, host: "EditorHost"):
        self.host = host

    @abstractmethod
    def execute(self, args: ToolArgs) -> str:
        """
        Runs the tool against the host.

        Args:
            args: The call's arguments, every value already stringified.

        Returns:
            The text handed back to the model. Failures the tool can describe
            are returned as "Error: ..." text rather than raised.
        """

    def get_definition(self) -> Dict[str, Any]:
        """The tool as an OpenAI function-calling entry."""
        parameters = self.args_schema.model_json_schema()
        parameters.pop("title", None)
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }
