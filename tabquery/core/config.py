"""
Centralised client settings loaded from environment / .env file.
"""
from __future__ import annotations

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TABQUERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Server ───────────────────────────────────────────
    base_url: str = "http://localhost:8080"
    context_path: str = ""
    container_path: str = "/home"
    api_key: str = ""

    # ── Client ───────────────────────────────────────────
    request_timeout: float = 30.0
    log_level: str = "INFO"

    @property
    def server_root(self) -> str:
        return self.base_url.rstrip("/") + self.context_path.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
