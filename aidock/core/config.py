# Configuration for AI Dock: process settings and the user-facing session config.
# Author: AI Dock contributors
# Date: 2025-07-02
# Version: 0.2.0

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from aidock.utils.logger import console

DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o"


class Settings(BaseSettings):
    """
    Process-level settings, loaded from the environment (prefix AIDOCK_) or a .env file.
    Attributes:
        PROJECT_ROOT (str): Directory that res:// paths resolve against.
        SCENE_FILE (Optional[str]): JSON scene description loaded as the edited scene.
        CONFIG_PATH (str): Location of the persisted session config (endpoint, key, model).
        MAX_ROUND_TRIPS (int): Safety bound on request/response cycles per exchange.
        MAX_TOKENS (int): Output token cap sent with every request.
        TOOL_NOTICE_DELAY (float): Seconds to yield after announcing a tool call.
        REQUEST_TIMEOUT (float): Timeout in seconds for a single chat-completions call.
        SESSION_TTL (float): Seconds a session may sit idle before it is evicted.
    """
    model_config = SettingsConfigDict(
        env_prefix="AIDOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    PROJECT_ROOT: str = "."
    SCENE_FILE: Optional[str] = None
    CONFIG_PATH: str = "~/.config/aidock/config.json"

    MAX_ROUND_TRIPS: int = 10
    MAX_TOKENS: int = 4096
    TOOL_NOTICE_DELAY: float = 0.1
    REQUEST_TIMEOUT: float = 120.0
    SESSION_TTL: float = 86400


@lru_cache
def get_settings() -> Settings:
    return Settings()


class AppConfig(BaseModel):
    """The session configuration a user edits from the settings panel."""
    endpoint: str = DEFAULT_ENDPOINT
    api_key: str = ""
    model: str = DEFAULT_MODEL


class ConfigStore:
    """
    A small get/set store over AppConfig, persisted as pretty-printed JSON.

    A missing or unreadable file is not an error: the store falls back to defaults,
    so a fresh install starts with a usable (if unauthenticated) configuration.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()
        self.config = AppConfig()

    def load(self) -> AppConfig:
        if not self.path.exists():
            console.info(f"No config file at '{self.path}', using defaults.")
            self.config = AppConfig()
            return self.config
        try:
            self.config = AppConfig.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            console.warning(f"Could not read config file '{self.path}': {e}. Using defaults.")
            self.config = AppConfig()
        return self.config

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.config.model_dump(), indent=2), encoding="utf-8")
        console.success(f"Settings saved to '{self.path}'.")

    def get(self, key: str) -> Any:
        if key not in AppConfig.model_fields:
            raise KeyError(key)
        return getattr(self.config, key)

    def set(self, key: str, value: Any) -> None:
        if key not in AppConfig.model_fields:
            raise KeyError(key)
        self.config = self.config.model_copy(update={key: value})


@lru_cache
def get_config_store() -> ConfigStore:
    store = ConfigStore(get_settings().CONFIG_PATH)
    store.load()
    return store
