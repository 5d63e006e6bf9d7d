"""Application settings and configuration helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Literal

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly-typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = Field(default="Airline Claims Assistant", description="Human-readable service name.")
    environment: str = Field(default="local", description="Deployment environment identifier.")
    log_level: str = Field(default="INFO", description="Application log level.")

    chat_engine: Literal["tool_calling", "slot_filling"] = Field(
        default="tool_calling",
        description="Which chat engine answers /chat and WebSocket turns.",
    )
    max_history_size: int = Field(
        default=20,
        ge=2,
        description="Transcript length above which history is trimmed back to the system turn.",
    )

    llm_base_url: str = Field(
        default="https://api.mistral.ai/v1",
        description="Base URL of the OpenAI-compatible chat completions API.",
    )
    llm_api_key: str | None = Field(default=None, description="Bearer token for the completions API.")
    llm_model: str = Field(default="mistral-small-latest", description="Completion model identifier.")
    llm_max_tokens: int = Field(default=200, ge=16, description="max_tokens sent with every completion.")
    llm_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for one completion round-trip.",
    )

    compensation_service_url: str | None = Field(
        default=None,
        description="Base URL of the compensation rules service. If omitted, claims cannot be decided.",
    )
    compensation_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for one compensation decision call.",
    )

    frontend_origin: AnyHttpUrl | None = Field(
        default=None,
        description="Allowed frontend origin (CORS). If omitted, defaults to localhost dev server.",
    )
    additional_origins: List[AnyHttpUrl] = Field(
        default_factory=list,
        description="Additional allowed CORS origins for multi-client deployments.",
    )

    @property
    def cors_origins(self) -> list[str]:
        """Return the full list of allowed CORS origins."""

        origins: list[str] = []

        if self.frontend_origin:
            origins.append(str(self.frontend_origin).rstrip("/"))
        else:
            origins.extend([
                "http://localhost:8080",
                "http://127.0.0.1:8080",
            ])

        for origin in self.additional_origins:
            origins.append(str(origin).rstrip("/"))

        # Deduplicate while preserving order
        seen: set[str] = set()
        unique: list[str] = []
        for origin in origins:
            if origin not in seen:
                seen.add(origin)
                unique.append(origin)

        return unique

    @property
    def compensation_enabled(self) -> bool:
        return bool(self.compensation_service_url)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()
