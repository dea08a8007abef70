"""
Runtime settings, read from the environment and an optional `.env` file.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from dotenv import dotenv_values
from pydantic import BaseModel, ValidationError

from copilot.errors import CopilotError

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"
DOTENV_FILE = ".env"

ENV_NAMES = {
    "openai_api_key": "OPENAI_API_KEY",
    "openai_base_url": "OPENAI_BASE_URL",
    "openai_model": "OPENAI_MODEL",
    "openai_timeout_seconds": "OPENAI_TIMEOUT_SECONDS",
    "log_level": "COPILOT_LOG_LEVEL",
    "no_color": "NO_COLOR",
}


class Settings(BaseModel):
    openai_api_key: Optional[str] = None
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_timeout_seconds: float = 30.0
    log_level: str = "WARNING"
    no_color: bool = False

    @property
    def has_api_key(self) -> bool:
        return bool(self.openai_api_key)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables. Bad values raise CopilotError."""
        env = os.environ if environ is None else environ
        try:
            return cls(
                openai_api_key=env.get("OPENAI_API_KEY") or None,
                openai_base_url=env.get("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL),
                openai_model=env.get("OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
                openai_timeout_seconds=env.get("OPENAI_TIMEOUT_SECONDS", "30"),
                log_level=env.get("COPILOT_LOG_LEVEL", "WARNING").upper(),
                no_color="NO_COLOR" in env,
            )
        except ValidationError as exc:
            first = exc.errors()[0]
            name = ENV_NAMES.get(str(first["loc"][0]), str(first["loc"][0]))
            raise CopilotError(
                f"Invalid value for {name}: {first.get('input')!r} ({first['msg']})"
            ) from exc

    @classmethod
    def load(cls, dotenv_path: str = DOTENV_FILE) -> "Settings":
        """
        Settings from the process environment, falling back to a dotenv file
        in the working directory. Variables already set in the environment win.
        """
        file_values = {k: v for k, v in dotenv_values(dotenv_path).items() if v is not None}
        return cls.from_env({**file_values, **os.environ})
