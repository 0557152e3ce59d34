"""
Configuration management for the PDF Renamer.

Uses pydantic-settings to load configuration from environment variables
and .env files.
"""

from functools import lru_cache
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Persistence
    state_file: Path = Path("~/.config/pdf-renamer/folders.json")

    # Naming Configuration
    default_template: str = "author_title_journal_year"

    # Monitoring Configuration
    supported_extensions: str = "pdf"
    sweep_delay: float = 0.5  # seconds between files during startup sweep
    event_latency: float = 1.0  # seconds of event coalescing
    recursive: bool = False
    max_workers: int = 4

    # Extraction Configuration
    text_page_limit: int = 2

    # API Configuration
    api_port: int = 8000
    log_level: str = "INFO"
    api_title: str = "PDF Renamer API"
    api_version: str = "1.0.0"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def get_supported_extensions(self) -> set[str]:
        """Parse supported extensions into a set of lowercase dotted suffixes."""
        return {
            "." + ext.strip().lstrip(".").lower()
            for ext in self.supported_extensions.split(',')
            if ext.strip()
        }

    def get_state_file(self) -> Path:
        """Resolve the state file location."""
        return self.state_file.expanduser()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
