"""Application configuration loaded from environment variables."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, model_validator

load_dotenv()

_PROJECT_ROOT = Path(__file__).resolve().parent

logger = logging.getLogger(__name__)


class Config(BaseModel):
    """Centralised app configuration backed by env vars."""

    # Shopify
    shopify_access_token: str = ""
    shopify_api_version: str = "2024-01"

    # Storage
    database_path: str = str(_PROJECT_ROOT / "data" / "profit.db")

    # Reporting
    default_currency: str = "USD"
    report_cache_ttl_seconds: int = 300
    http_timeout_seconds: int = 30
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _warn_empty_critical_fields(self) -> Config:
        """Log warnings when critical integration fields are empty."""
        if not self.shopify_access_token:
            logger.warning("SHOPIFY_ACCESS_TOKEN is not set; order fetching will fail")
        return self

    @classmethod
    def from_env(cls) -> Config:
        """Build config from environment variables."""
        return cls(
            shopify_access_token=os.getenv("SHOPIFY_ACCESS_TOKEN", ""),
            shopify_api_version=os.getenv("SHOPIFY_API_VERSION", "2024-01"),
            database_path=os.getenv("DATABASE_PATH", str(_PROJECT_ROOT / "data" / "profit.db")),
            default_currency=os.getenv("DEFAULT_CURRENCY", "USD"),
            report_cache_ttl_seconds=int(os.getenv("REPORT_CACHE_TTL_SECONDS", "300")),
            http_timeout_seconds=int(os.getenv("HTTP_TIMEOUT_SECONDS", "30")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


settings = Config.from_env()
