"""
Configuration management for the Love&Pixels CMS API.

Provides centralized configuration loading with environment variable fallbacks.
All settings have sane defaults so the application runs even without .env file.
Adapter credentials live in adapters.wiring.Env.
"""

import os
from dataclasses import dataclass, field
from typing import List


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass
class Settings:
    """Application settings with environment variable fallbacks."""

    # Server configuration
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Browsers calling /api/send-email from the dashboard
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Default analytics window when the dashboard sends none
    default_range: str = "7days"

    # Logging
    log_level: str = "INFO"


def get_settings() -> Settings:
    """
    Load settings from environment variables with fallbacks.

    Returns:
        Settings: Configuration object with all application settings
    """
    return Settings(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        debug=os.getenv("DEBUG", "false").lower() == "true",
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")) or ["*"],
        default_range=os.getenv("ANALYTICS_DEFAULT_RANGE", "7days"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
