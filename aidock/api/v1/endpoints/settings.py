# The module is to define the API endpoints for the session settings and the tool list.
# Author: AI Dock contributors
# Date: 2025-07-07
# Version: 0.1.0

from fastapi import APIRouter, Depends

from aidock.core.config import ConfigStore, get_config_store
from aidock.models.api_models import SettingsPayload, ToolListResponse
from aidock.services.session_manager import SessionManager, get_session_manager

router = APIRouter()


def _masked(store: ConfigStore) -> SettingsPayload:
    key = store.get("api_key")
    masked = f"{key[:3]}...{key[-4:]}" if len(key) > 8 else ("*" * len(key))
    return SettingsPayload(endpoint=store.get("endpoint"), api_key=masked, model=store.get("model"))


@router.get("/settings", response_model=SettingsPayload)
def read_settings(store: ConfigStore = Depends(get_config_store)):
    """Returns the endpoint, model and a masked API key."""
    return _masked(store)


@router.put("/settings", response_model=SettingsPayload)
def update_settings(payload: SettingsPayload, store: ConfigStore = Depends(get_config_store)):
    """Updates the given fields and saves the settings file."""
    for key, value in payload.model_dump(exclude_none=True).items():
        store.set(key, value)
    store.save()
    return _masked(store)


@router.get("/tools", response_model=ToolListResponse)
def list_tools(manager: SessionManager = Depends(get_session_manager)):
    """Lists the tool definitions advertised to the model."""
    return ToolListResponse(tools=manager.registry.list())
