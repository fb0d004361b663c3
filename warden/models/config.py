"""Configuration helpers for the Warden bot."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, BaseModel, Field, ValidationError, model_validator

_DEFAULT_MODEL = "gpt-4o-mini"


class BotSettings(BaseModel):
    """Runtime configuration parsed from environment variables."""

    discord_token: str = Field(..., alias="DISCORD_TOKEN")
    llm_api_key: Optional[str] = Field(
        default=None,
        alias="OPENAI_API_KEY",
        validation_alias=AliasChoices("OPENAI_API_KEY", "LLM_API_KEY", "GEMINI_API_KEY"),
    )
    llm_model: str = Field(
        default=_DEFAULT_MODEL,
        alias="OPENAI_MODEL",
        validation_alias=AliasChoices("OPENAI_MODEL", "LLM_MODEL"),
    )
    llm_base_url: Optional[str] = Field(
        default=None,
        alias="OPENAI_BASE_URL",
        validation_alias=AliasChoices("OPENAI_BASE_URL", "LLM_BASE_URL"),
    )
    llm_timeout_seconds: float = Field(default=30.0, alias="LLM_TIMEOUT_SECONDS", gt=0)

    max_turns: int = Field(default=20, alias="MAX_TURNS", ge=1, le=100)
    max_context_messages: Optional[int] = Field(
        default=None, alias="MAX_CONTEXT_MESSAGES", ge=1, le=200
    )
    default_response_style: str = Field(default="normal", alias="DEFAULT_RESPONSE_STYLE")
    user_cooldown_seconds: float = Field(default=5.0, alias="USER_COOLDOWN_SECONDS", ge=0)

    auto_action_every_n_messages: int = Field(
        default=15, alias="AUTO_ACTION_EVERY_N_MESSAGES", ge=0
    )
    auto_action_window_size: Optional[int] = Field(
        default=None, alias="AUTO_ACTION_WINDOW_SIZE", ge=1, le=200
    )
    auto_action_max_actions: int = Field(default=3, alias="AUTO_ACTION_MAX_ACTIONS", ge=0, le=10)
    auto_action_max_timeout_minutes: int = Field(
        default=10, alias="AUTO_ACTION_MAX_TIMEOUT_MINUTES", ge=1, le=60
    )

    health_host: str = Field(default="0.0.0.0", alias="HEALTH_HOST")
    health_port: int = Field(default=8080, alias="HEALTH_PORT")

    class Config:
        populate_by_name = True

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_values(cls, data: Any) -> Any:
        # Blank variables in .env files count as unset.
        if not hasattr(data, "items"):
            return data
        return {
            key: value
            for key, value in data.items()
            if not (isinstance(value, str) and not value.strip())
        }

    @property
    def context_messages(self) -> int:
        """Q&A memory size; defaults to two entries per configured turn."""

        return self.max_context_messages or self.max_turns * 2

    @property
    def auto_actions_enabled(self) -> bool:
        return self.auto_action_every_n_messages > 0

    @property
    def window_size(self) -> int:
        """Messages retained per channel for auto-action planning."""

        return self.auto_action_window_size or max(1, self.auto_action_every_n_messages)


def load_settings(env_file: str | None = ".env") -> BotSettings:
    """Load and validate configuration, raising a helpful error if missing."""

    if env_file and Path(env_file).exists():
        load_dotenv(env_file)

    environ: Dict[str, str] = dict(os.environ)
    try:
        settings = BotSettings.model_validate(environ)
    except ValidationError as exc:
        missing = [err["loc"][0] for err in exc.errors() if err["type"] == "missing"]
        if not missing:
            raise RuntimeError(f"Invalid configuration: {exc}") from exc
        raise RuntimeError(
            (
                "Missing required configuration values: "
                f"{', '.join(str(name) for name in missing)}. "
                "Create a .env file with DISCORD_TOKEN and optionally OPENAI_API_KEY."
            )
        ) from exc

    return settings
