# The UI side of a chat session: transcript lines, status notices, busy flag, usage.
# Author: AI Dock contributors
# Date: 2025-07-05
# Version: 0.1.0

from typing import List, Literal, Optional, Protocol

from pydantic import BaseModel

from aidock.models.common import Usage
from aidock.utils.logger import console


class ChatObserver(Protocol):
    """What the orchestrator pushes to whoever renders the chat."""

    def on_transcript(self, sender: str, text: str) -> None: ...

    def on_status(self, text: str) -> None: ...

    def on_busy(self, busy: bool) -> None: ...

    def on_usage(self, usage: Usage) -> None: ...


class TranscriptEntry(BaseModel):
    kind: Literal["message", "status"]
    text: str
    sender: Optional[str] = None


class TranscriptRecorder:
    """
    Keeps the rendered transcript in memory and mirrors it to the console.
    `busy` plays the part of the disabled send button.
    """

    def __init__(self):
        self.entries: List[TranscriptEntry] = []
        self.busy = False
        self.usage = Usage()

    def on_transcript(self, sender: str, text: str) -> None:
        self.entries.append(TranscriptEntry(kind="message", sender=sender, text=text))
        console.info(f"{sender}: {text}")

    def on_status(self, text: str) -> None:
        self.entries.append(TranscriptEntry(kind="status", text=text))
        console.info(f"[status] {text}")

    def on_busy(self, busy: bool) -> None:
        self.busy = busy

    def on_usage(self, usage: Usage) -> None:
        self.usage = usage

    def since(self, index: int) -> List[TranscriptEntry]:
        return self.entries[index:]

    def clear(self) -> None:
        self.entries.clear()
        self.usage = Usage()
