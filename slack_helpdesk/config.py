"""Pydantic-based configuration helpers for the Slack helpdesk receiver."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Iterable, List

from pydantic import BaseModel, Field, ValidationError, field_validator


class AppSettings(BaseModel):
    """Settings required to initialise the Slack clients and the receiver."""

    app_token: str = Field(..., alias="SLACK_APP_TOKEN")
    bot_token: str = Field(..., alias="SLACK_BOT_TOKEN")
    signing_secret: str = Field(..., alias="SLACK_SIGNING_SECRET")
    base_path: str = Field("/slack", alias="SLACK_BASE_PATH")
    identity_header: str | None = Field(None, alias="SLACK_IDENTITY_HEADER")
    help_command: str = Field("/help-me", alias="SLACK_HELP_COMMAND")
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(4390, alias="PORT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @field_validator("app_token", "bot_token", "signing_secret")
    @classmethod
    def _ensure_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("base_path")
    @classmethod
    def _ensure_absolute(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith("/"):
            raise ValueError("Base path must start with '/'")
        return value

    @field_validator("identity_header")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        return value.strip().upper()


def _format_missing(fields: Iterable[str]) -> str:
    """Return a human-friendly comma-separated list of missing env vars."""

    unique: List[str] = []
    for field in fields:
        if field not in unique:
            unique.append(field)
    return ", ".join(unique)


@lru_cache()
def get_settings() -> AppSettings:
    """Fetch and cache settings from environment variables."""

    try:
        return AppSettings.model_validate(os.environ)
    except ValidationError as exc:  # pragma: no cover - exercised via tests
        missing = [str(error["loc"][0]) for error in exc.errors()]
        message = (
            "Missing or invalid environment variables: "
            f"{_format_missing(missing)}"
        )
        raise RuntimeError(message) from exc
