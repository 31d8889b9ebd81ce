# The module is to define the API endpoints for chat interactions.
# Author: AI Dock contributors
# Date: 2025-07-07
# Version: 0.2.0

from fastapi import APIRouter, Depends, HTTPException

from aidock.core.orchestrator import ExchangeInProgressError
from aidock.models.api_models import (
    CancelResponse,
    ChatRequest,
    ChatResponse,
    HistoryResponse,
    ImageAttachment,
)
from aidock.services.session_manager import SessionManager, SessionNotFoundError, get_session_manager
from aidock.utils.logger import console

router = APIRouter()


def _session_or_404(manager: SessionManager, session_id: str):
    try:
        return manager.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found.")


@router.post("/", response_model=ChatResponse)
async def chat(request: ChatRequest, manager: SessionManager = Depends(get_session_manager)):
    """
    Runs one exchange: the user turn plus every round trip and tool call it leads to.
    """
    console.info(f"Received chat request for session_id: {request.session_id}")
    session = _session_or_404(manager, request.session_id)
    first_entry = len(session.transcript.entries)

    image = request.image.to_part() if request.image else None
    try:
        result = await manager.submit(request.session_id, request.user_input, image)
    except ExchangeInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ChatResponse(
        session_id=request.session_id,
        outcome=result.outcome.value,
        round_trips=result.round_trips,
        content=result.content,
        error=result.error,
        transcript=session.transcript.since(first_entry),
        usage=session.transcript.usage,
    )


@router.post("/{session_id}/attachment")
def attach_image(session_id: str, image: ImageAttachment, manager: SessionManager = Depends(get_session_manager)):
    """Stages an image to be sent with the next message."""
    _session_or_404(manager, session_id)
    manager.attach_image(session_id, image.to_part())
    return {"session_id": session_id, "message": "Image attached."}


@router.post("/{session_id}/cancel", response_model=CancelResponse)
def cancel(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    _session_or_404(manager, session_id)
    return CancelResponse(session_id=session_id, cancelled=manager.cancel(session_id))


@router.post("/{session_id}/clear")
def clear(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    """Clears the conversation, any staged image and the usage counters."""
    _session_or_404(manager, session_id)
    try:
        manager.clear(session_id)
    except ExchangeInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"session_id": session_id, "message": "Conversation cleared."}


@router.get("/{session_id}/history", response_model=HistoryResponse)
def history(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    session = _session_or_404(manager, session_id)
    return HistoryResponse(
        session_id=session_id,
        busy=session.orchestrator.busy,
        messages=session.orchestrator.conversation.messages,
        usage=session.transcript.usage,
    )
