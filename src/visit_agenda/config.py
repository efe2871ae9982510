"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="VISITS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Visit Agenda API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for locally persisted state.")
    store_key: str = Field(
        default="visitlogmodule.plannedVisits",
        description="Key under which the current visit plan is persisted.",
    )
    clients_file: Optional[Path] = Field(
        default=None,
        description="JSON file with the selectable client catalog. Built-in sample clients are used when unset.",
    )
    gateway_base_url: str = Field(
        default="http://localhost:8080/visits",
        description="Endpoint of the remote visit service (POST submits, GET lists recent visits).",
    )
    gateway_token: Optional[str] = Field(
        default=None,
        description="Bearer token forwarded to the remote visit service.",
    )
    gateway_timeout_seconds: Optional[float] = Field(default=30.0, ge=0.0)
    commercial_id: int = Field(default=7, description="Field representative attached to submitted visits.")
    agenda_start_hour: int = Field(default=9, ge=0, le=23)
    recent_visits_limit: int = Field(default=10, ge=1)
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", "clients_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Optional[Path]:
        if value is None or value == "":
            return None
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
