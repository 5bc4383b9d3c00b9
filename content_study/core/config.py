"""Environment driven settings."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    """Runtime configuration for the API and its providers."""

    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    assemblyai_api_key: str | None = None
    notion_api_key: str | None = None
    notion_database_id: str | None = None
    neynar_api_key: str = "NEYNAR_API_DOCS"

    max_urls: int = 5
    download_dir: Path = Path("/tmp/content-study-tool")

    # seconds
    download_timeout: float = 300.0
    transcribe_timeout: float = 600.0
    text_fetch_timeout: float = 30.0
    completion_timeout: float = 120.0
    publish_timeout: float = 60.0

    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, *, load_files: bool = True) -> "Settings":
        if load_files:
            load_dotenv(".env.local")
            load_dotenv()

        origins_env = os.getenv("API_CORS_ORIGINS", "")
        origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]

        return cls(
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            anthropic_model=os.getenv("ANTHROPIC_MODEL") or cls.anthropic_model,
            assemblyai_api_key=os.getenv("ASSEMBLYAI_API_KEY") or None,
            notion_api_key=os.getenv("NOTION_API_KEY") or None,
            notion_database_id=os.getenv("NOTION_DATABASE_ID") or None,
            neynar_api_key=os.getenv("NEYNAR_API_KEY") or cls.neynar_api_key,
            max_urls=max(1, _int_env("MAX_URLS", cls.max_urls)),
            download_dir=Path(os.getenv("DOWNLOAD_DIR") or cls.download_dir).expanduser(),
            download_timeout=_float_env("DOWNLOAD_TIMEOUT", cls.download_timeout),
            transcribe_timeout=_float_env("TRANSCRIBE_TIMEOUT", cls.transcribe_timeout),
            text_fetch_timeout=_float_env("TEXT_FETCH_TIMEOUT", cls.text_fetch_timeout),
            completion_timeout=_float_env("COMPLETION_TIMEOUT", cls.completion_timeout),
            publish_timeout=_float_env("PUBLISH_TIMEOUT", cls.publish_timeout),
            cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process settings, loading them on first use."""

    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure_settings(settings: Settings | None) -> None:
    """Install explicit settings (``None`` reloads from the environment)."""

    global _settings
    _settings = settings
