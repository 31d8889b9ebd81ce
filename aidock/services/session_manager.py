# Keeps chat sessions in memory: one orchestrator, transcript and pending attachment each.
# Author: AI Dock contributors
# Date: 2025-07-06
# Version: 0.2.0

import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, Dict, Optional
from uuid import uuid4

from aidock.core.config import ConfigStore, Settings, get_config_store, get_settings
from aidock.core.orchestrator import ChatOrchestrator, ExchangeInProgressError, ExchangeResult, LoopOptions
from aidock.core.tool_registry import ToolRegistry
from aidock.models.common import ImagePart
from aidock.services.editor_host import EditorHost, ProjectHost
from aidock.services.llm_connector import ChatTransport, OpenAITransport, TransportOptions
from aidock.services.transcript import TranscriptRecorder
from aidock.utils.logger import console


class SessionNotFoundError(KeyError):
    """No session with the given ID."""


@dataclass
class ChatSession:
    session_id: str
    orchestrator: ChatOrchestrator
    transcript: TranscriptRecorder
    pending_image: Optional[ImagePart] = field(default=None)
    last_used: float = field(default=0.0)


class SessionManager:
    """
    Creates and looks up chat sessions. All sessions share the editor host,
    the tool registry and the transport; each owns its conversation.
    Sessions idle for longer than session_ttl seconds are evicted when a new
    one is created, unless an exchange is running in them.
    """

    def __init__(self, registry: ToolRegistry, transport: ChatTransport,
                 transport_options: Callable[[], TransportOptions], loop_options: LoopOptions,
                 session_ttl: float = 86400, clock: Callable[[], float] = time.monotonic):
        self.session_ttl = session_ttl
        self._clock = clock
        self.registry = registry
        self.transport = transport
        self.transport_options = transport_options
        self.loop_options = loop_options
        self._sessions: Dict[str, ChatSession] = {}

    def create(self) -> ChatSession:
        self._evict_expired()
        session_id = str(uuid4())
        transcript = TranscriptRecorder()
        orchestrator = ChatOrchestrator(
            transport=self.transport,
            registry=self.registry,
            transport_options=self.transport_options,
            observer=transcript,
            options=self.loop_options,
        )
        session = ChatSession(session_id=session_id, orchestrator=orchestrator, transcript=transcript,
                              last_used=self._clock())
        self._sessions[session_id] = session
        console.info(f"New session created: {session_id}")
        return session

    def get(self, session_id: str) -> ChatSession:
        try:
            session = self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None
        session.last_used = self._clock()
        return session

    def delete(self, session_id: str) -> None:
        session = self.get(session_id)
        if session.orchestrator.busy:
            raise ExchangeInProgressError("Cannot delete a session while a request is running.")
        del self._sessions[session_id]
        console.info(f"Session deleted: {session_id}")

    def _evict_expired(self) -> None:
        cutoff = self._clock() - self.session_ttl
        expired = [sid for sid, s in self._sessions.items() if s.last_used < cutoff and not s.orchestrator.busy]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            console.info(f"Evicted {len(expired)} idle session(s).")

    def __len__(self) -> int:
        return len(self._sessions)

    def attach_image(self, session_id: str, image: ImagePart) -> None:
        """Stages an image for the next submit, replacing any image already staged."""
        self.get(session_id).pending_image = image

    async def submit(self, session_id: str, text: Optional[str],
                     image: Optional[ImagePart] = None) -> ExchangeResult:
        session = self.get(session_id)
        image = image or session.pending_image
        result = await session.orchestrator.submit(text, image)
        session.pending_image = None
        return result

    def cancel(self, session_id: str) -> bool:
        return self.get(session_id).orchestrator.cancel()

    def clear(self, session_id: str) -> None:
        session = self.get(session_id)
        session.orchestrator.clear()
        session.pending_image = None
        session.transcript.clear()


def build_session_manager(settings: Settings, config_store: ConfigStore,
                          host: Optional[EditorHost] = None,
                          transport: Optional[ChatTransport] = None) -> SessionManager:
    host = host or ProjectHost.from_settings(settings.PROJECT_ROOT, settings.SCENE_FILE)
    return SessionManager(
        registry=ToolRegistry(host),
        transport=transport or OpenAITransport(),
        transport_options=lambda: TransportOptions.from_config(config_store.config, settings),
        loop_options=LoopOptions(
            max_round_trips=settings.MAX_ROUND_TRIPS,
            tool_notice_delay=settings.TOOL_NOTICE_DELAY,
        ),
        session_ttl=settings.SESSION_TTL,
    )


@lru_cache
def get_session_manager() -> SessionManager:
    return build_session_manager(get_settings(), get_config_store())
