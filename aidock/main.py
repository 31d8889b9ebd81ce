# The module provides the FastAPI application that serves the AI Dock chat backend.
# Author: AI Dock contributors
# Date: 2025-07-07
# Version: 0.2.0

from contextlib import asynccontextmanager

from fastapi import FastAPI
from aidock.api.v1.api import api_router
from aidock.core.config import get_settings
from aidock.services.session_manager import get_session_manager
from aidock.utils.logger import console


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tool discovery and scene loading happen once, before the first request.
    settings = get_settings()
    manager = get_session_manager()
    console.success(f"AI Dock ready: project '{settings.PROJECT_ROOT}', {len(manager.registry)} tools.")
    yield


app = FastAPI(
    title="AI Dock",
    version="0.2.0",
    description="Chat backend for an editor assistant with project and scene inspection tools.",
    lifespan=lifespan,
)

@app.get("/", summary="Health Check", tags=["Status"])
def read_root():
    """Root endpoint to check if the service is alive."""
    console.info("Health check endpoint was hit.")
    return {"message": "AI Dock is alive and running!"}

app.include_router(api_router, prefix="/v1")
