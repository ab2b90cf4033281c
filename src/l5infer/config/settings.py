"""Application settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class InferSettings(BaseSettings):
    """Inferencer and CLI settings, read from L5INFER_* variables or .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="L5INFER_",
        case_sensitive=False,
        extra="ignore",
    )

    recursion_limit: int = Field(default=10000, ge=1000)
    tvar_prefix: str = Field(default="T", min_length=1)
    history_file: str | None = Field(default=None)

    def resolve_history_file(self) -> Path:
        if self.history_file:
            return Path(self.history_file).expanduser().resolve()
        return (Path.home() / ".l5infer_history").resolve()


def load_settings(**overrides: object) -> InferSettings:
    """Load settings from the environment, with explicit overrides on top."""
    return InferSettings(**overrides)  # type: ignore[arg-type]
