# The module is to define the API endpoints for session management.
# Author: AI Dock contributors
# Date: 2025-07-07
# Version: 0.3.0


from fastapi import APIRouter, Depends, HTTPException
from aidock.core.orchestrator import ExchangeInProgressError
from aidock.models.api_models import NewSessionResponse
from aidock.services.session_manager import SessionManager, SessionNotFoundError, get_session_manager

router = APIRouter()

@router.post("/new",
          response_model=NewSessionResponse)
def create_new_session(manager: SessionManager = Depends(get_session_manager)):
    """
    Initializes a new session and returns a unique session ID.
    """
    session = manager.create()
    return NewSessionResponse(
        session_id=session.session_id,
        message="New session created successfully."
    )


@router.delete("/{session_id}")
def delete_session(session_id: str, manager: SessionManager = Depends(get_session_manager)):
    """Forgets a session and its conversation."""
    try:
        manager.delete(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found.")
    except ExchangeInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"session_id": session_id, "message": "Session deleted."}
