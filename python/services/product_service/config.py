"""Configuration for the product service.

``Settings`` reads environment variables when it is instantiated. A
module-level ``settings`` instance serves the running process; tests build
their own ``Settings`` and pass it to ``create_app``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = field(default_factory=lambda: os.getenv("PROJECT_NAME", "Product Service"))
    api_version: str = field(default_factory=lambda: os.getenv("API_VERSION", "0.3.0"))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    # Also write logs to this file when set.
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE") or None)

    # Seeds the catalog with the two demo products on startup.
    seed_demo_data: bool = field(default_factory=lambda: _env_flag("SEED_DEMO_DATA", "true"))

    # Comma-separated list, e.g. CORS_ORIGINS="https://a.example,https://b.example".
    cors_origins: list[str] = field(default_factory=lambda: _env_list("CORS_ORIGINS", "*"))


settings = Settings()
