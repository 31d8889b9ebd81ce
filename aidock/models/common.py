# Conversation state and chat-completions wire models.
# Author: AI Dock contributors
# Date: 2025-07-02
# Version: 0.2.0

import json
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Literal, Optional, Union

Role = Literal["system", "user",
               "assistant", "tool"]


class ConversationIntegrityError(ValueError):
    """Raised when tool turns do not line up with the tool calls that requested them."""


class TextPart(BaseModel):
    """A text segment of a multimodal message."""
    type: Literal["text"] = "text"
    text: str


class ImageUrl(BaseModel):
    url: str


class ImagePart(BaseModel):
    """An inline image, carried as a base64 data URI."""
    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl

    @classmethod
    def from_base64(cls, mime_type: str, data: str) -> "ImagePart":
        return cls(image_url=ImageUrl(url=f"data:{mime_type};base64,{data}"))


ContentPart = Union[TextPart, ImagePart]


class FunctionCall(BaseModel):
    name: str
    arguments: str = Field(default="{}", description="The JSON-encoded arguments, passed through untouched.")

    @field_validator("arguments", mode="before")
    @classmethod
    def _encode_arguments(cls, value: Any) -> Any:
        # Some providers send null or an already-decoded object.
        if value is None:
            return "{}"
        if isinstance(value, dict):
            return json.dumps(value)
        return value


class ToolCall(BaseModel):
    """
    Represents a tool call made by the assistant.
    Attributes:
        id (str): The unique ID for the tool call, echoed back in the matching tool turn.
        function (FunctionCall): The function name and its JSON argument string.
        type (str): The type of the tool call, always 'function'.
    """
    id: str = Field(..., description="The unique ID for the tool call.")
    function: FunctionCall = Field(..., description="The function name and arguments.")
    type: str = Field(default="function", description="The type of the tool call, e.g., 'function'.")

    @property
    def name(self) -> str:
        return self.function.name

    @property
    def arguments_json(self) -> str:
        return self.function.arguments


class Message(BaseModel):
    """
    A single turn of the conversation.
    Attributes:
        role (Role): The role of the message sender (system, user, assistant, or tool).
        content: Plain text, or an ordered list of text/image parts for multimodal input.
        tool_calls (Optional[List[ToolCall]]): Tool calls requested by the assistant.
        tool_call_id (Optional[str]): The ID of the tool call this message is a result of.
        reasoning (Optional[str]): Reasoning text some providers return with an assistant turn.
            It is kept for display and never sent back to the model.
    """
    role: Role = Field(..., description="The role of the message sender.")
    content: Optional[Union[str, List[ContentPart]]] = Field(default=None, description="The content of the message.")
    tool_calls: Optional[List[ToolCall]] = Field(default=None, description="A list of tool calls requested by the assistant.")
    tool_call_id: Optional[str] = Field(default=None, description="The ID of the tool call this message is a result of.")
    reasoning: Optional[str] = Field(default=None, description="Assistant reasoning, display only.")

    @classmethod
    def user(cls, text: Optional[str] = None, image: Optional[ImagePart] = None) -> "Message":
        text = text.strip() if text else text
        if not text and image is None:
            raise ValueError("A user message needs text, an image, or both.")
        if image is None:
            return cls(role="user", content=text)
        parts: List[ContentPart] = []
        if text:
            parts.append(TextPart(text=text))
        parts.append(image)
        return cls(role="user", content=parts)

    @property
    def text(self) -> str:
        """The textual content, with image parts left out."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "\n".join(part.text for part in self.content if isinstance(part, TextPart))

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True, exclude={"reasoning"})


class Usage(BaseModel):
    """Token usage reported by the last response. Overwritten, never summed."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Conversation(BaseModel):
    """
    The ordered, append-only turn log sent to the model on every request.
    It only shrinks through clear(), which is reserved for an explicit user action.
    """
    messages: List[Message] = Field(default_factory=list, description="The history of messages in the conversation.")

    def __len__(self) -> int:
        return len(self.messages)

    def append(self, message: Message) -> None:
        self.messages.append(message)

    def clear(self) -> None:
        self.messages.clear()

    def to_wire(self) -> List[Dict[str, Any]]:
        return [message.to_wire() for message in self.messages]

    def validate_tool_links(self) -> None:
        """
        Checks that every tool turn answers a call from the nearest preceding assistant
        turn with tool calls, and that each call group is complete before the next
        user or assistant turn. Only the last group may still be open.
        """
        pending: List[str] = []
        for index, message in enumerate(self.messages):
            if message.role == "tool":
                if message.tool_call_id not in pending:
                    raise ConversationIntegrityError(
                        f"Turn {index}: tool result '{message.tool_call_id}' matches no pending call.")
                pending.remove(message.tool_call_id)
                continue
            if pending:
                raise ConversationIntegrityError(
                    f"Turn {index}: {message.role} turn before tool calls {pending} were answered.")
            if message.role == "assistant" and message.tool_calls:
                pending = [call.id for call in message.tool_calls]
                if len(set(pending)) != len(pending):
                    raise ConversationIntegrityError(f"Turn {index}: duplicate tool call ids {pending}.")


class ErrorInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    message: str = "Unknown API Error"
    type: Optional[str] = None
    code: Optional[Union[str, int]] = None


class AssistantPayload(BaseModel):
    """The message of a response choice, as the provider returned it."""
    model_config = ConfigDict(extra="ignore")

    content: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    reasoning_content: Optional[str] = None
    reasoning: Optional[str] = None

    @property
    def reasoning_text(self) -> Optional[str]:
        return self.reasoning_content or self.reasoning


class Choice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: AssistantPayload
    finish_reason: Optional[str] = None


class ChatCompletionEnvelope(BaseModel):
    """The response envelope of a chat-completions call."""
    model_config = ConfigDict(extra="ignore")

    choices: List[Choice] = Field(default_factory=list)
    usage: Optional[Usage] = None
    error: Optional[ErrorInfo] = None
