#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

import tempfile
from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent

# Environments that keep a browsable copy of every rendered PDF
DEV_ENVIRONMENTS = ("development", "local")


class Settings(BaseSettings):
    """Application settings"""

    # ========== Runtime ==========
    environment: str = "production"  # development | local | staging | production

    # ========== Logging ==========
    log_level: str = "INFO"
    log_file: Optional[Path] = None  # Rotating file log when set

    # ========== Templates & Fonts ==========
    templates_dir: Path = BASE_DIR / "templates"
    fonts_dir: Path = BASE_DIR / "templates" / "fonts"

    # ========== Artifacts ==========
    temp_dir: Path = Path(tempfile.gettempdir()) / "InvoicePdfs"
    downloads_dir: Path = Path.home() / "Downloads"
    # Force download copies outside development/local
    keep_download_copies: bool = False

    # ========== Browser ==========
    browser_executable_path: Optional[str] = None  # None = Playwright's bundled Chromium
    browser_args: List[str] = [
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--lang=en-US,ar-SA",
    ]
    browser_launch_timeout_ms: int = 30000
    prelaunch_browser: bool = False  # Launch at startup instead of first request

    # ========== Rendering ==========
    render_timeout_seconds: float = 60.0  # 0 = wait indefinitely

    # ========== Cleanup / Retention ==========
    cleanup_interval_minutes: float = 30
    cleanup_max_age_hours: float = 2

    # ========== Notifications ==========
    slack_webhook_url: Optional[str] = None

    # CORS origins (comma-separated in env, parsed to list)
    cors_origins: str = ""  # Empty = use default dev origins

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Create directories
        self.temp_dir.mkdir(exist_ok=True, parents=True)
        if self.should_keep_download_copies():
            self.downloads_dir.mkdir(exist_ok=True, parents=True)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in DEV_ENVIRONMENTS

    def should_keep_download_copies(self) -> bool:
        """Copy rendered PDFs to the downloads dir (dev environments, or when forced)."""
        return self.keep_download_copies or self.is_development

    def get_cors_origins(self) -> list:
        """Get CORS origins as a list. Falls back to dev defaults if empty."""
        if self.cors_origins:
            return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        # Dev defaults
        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:4200",
            "http://127.0.0.1:4200",
            "http://localhost:8000",
            "http://127.0.0.1:8000",
        ]


# Global settings instance
settings = Settings()
