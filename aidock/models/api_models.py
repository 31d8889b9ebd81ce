# The module is to define the API models for the application.
# Author: AI Dock contributors
# Date: 2025-07-07
# Version: 0.2.0

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from aidock.models.common import ImagePart, Message, Usage
from aidock.services.transcript import TranscriptEntry


class ImageAttachment(BaseModel):
    """
    An image sent along with a chat message.
    Attributes:
        mime_type (str): The MIME type, e.g. 'image/png'.
        data (str): The base64-encoded image bytes.
    """
    mime_type: str = Field(..., description="The MIME type of the image, e.g. 'image/png'.")
    data: str = Field(..., min_length=1, description="The base64-encoded image bytes.")

    def to_part(self) -> ImagePart:
        return ImagePart.from_base64(self.mime_type, self.data)


class ChatRequest(BaseModel):
    """
    Defines the request body for the /v1/chat endpoint.
    Attributes:
        session_id (str): The unique ID for the conversation session.
        user_input (Optional[str]): The user's text input.
        image (Optional[ImageAttachment]): An image to send with (or instead of) the text.
    """
    session_id: str = Field(..., description="The unique ID for the conversation session.")
    user_input: Optional[str] = Field(default=None, description="The user's text input.")
    image: Optional[ImageAttachment] = Field(default=None, description="An optional image attachment.")


class ChatResponse(BaseModel):
    """
    Defines the response body for the /v1/chat endpoint.
    Attributes:
        session_id (str): The unique ID for the conversation session.
        outcome (str): How the exchange ended: done, cancelled, error or round_trip_limit.
        round_trips (int): How many requests were made to the model.
        content (Optional[str]): The final assistant answer, when there is one.
        error (Optional[str]): The error or stop notice, when there is one.
        transcript (List[TranscriptEntry]): The transcript lines produced by this exchange.
        usage (Usage): Token usage of the last response.
    """
    session_id: str
    outcome: str
    round_trips: int
    content: Optional[str] = None
    error: Optional[str] = None
    transcript: List[TranscriptEntry] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)


class NewSessionResponse(BaseModel):
    session_id: str
    message: str


class CancelResponse(BaseModel):
    session_id: str
    cancelled: bool


class HistoryResponse(BaseModel):
    session_id: str
    busy: bool
    messages: List[Message]
    usage: Usage


class SettingsPayload(BaseModel):
    """The user-editable session settings. Omitted fields are left unchanged on update."""
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    model: Optional[str] = None


class ToolListResponse(BaseModel):
    tools: List[Dict[str, Any]]
