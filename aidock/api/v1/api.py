# The module is to define the API router for the application.
# Author: AI Dock contributors
# Date: 2025-07-07
# Version: 0.2.0

from fastapi import APIRouter
from aidock.api.v1.endpoints import session, chat, settings

api_router = APIRouter()

# Include the session router with a '/session' prefix
api_router.include_router(session.router, prefix="/session", tags=["Session Management"])

# Include the chat router with a '/chat' prefix
api_router.include_router(chat.router, prefix="/chat", tags=["Conversation"])

# Settings and tool listing live at the top of /v1
api_router.include_router(settings.router, tags=["Configuration"])
