from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    output_dir: Path = Field(default=Path('./data/reports'))
    log_level: str = 'INFO'

    # Ticket file storage. A local directory wins over the remote bucket.
    ticket_storage_dir: Path | None = None
    ticket_storage_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices('TICKET_STORAGE_URL', 'STORAGE_URL', 'SUPABASE_URL'),
    )
    ticket_storage_bucket: str = 'tickets'
    ticket_storage_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices('TICKET_STORAGE_API_KEY', 'STORAGE_API_KEY', 'SUPABASE_KEY'),
    )
    ticket_fetch_timeout_seconds: int = 60
    max_attachment_bytes: int = 25 * 1024 * 1024

    # PDF export
    pdf_font_name: str = 'Helvetica'
    pdf_font_path: Path | None = None
    attachment_scale: float = 0.8


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.output_dir.mkdir(parents=True, exist_ok=True)
    return settings
