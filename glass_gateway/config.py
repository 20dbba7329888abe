# -*- coding: utf-8 -*-
"""
Glass Gateway Configuration
"""
from pathlib import Path
from typing import Any, Dict, Literal
from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid"""


class Settings(BaseSettings):
    """Application settings"""

    # App info
    APP_NAME: str = "Glass Gateway"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENV: Literal["development", "production"] = "development"
    LOG_LEVEL: str = "INFO"

    # Master Auto Glass SOAP service
    MAG_API_URL: str = "https://www.master-auto-glass.co.uk/pdaservice.asmx"
    MAG_NAMESPACE: str = "https://www.master-auto-glass.co.uk/pdaservice.asmx"
    MAG_TIMEOUT: float = 30.0

    # "direct" posts to MAG_API_URL, "proxy" posts to MAG_PROXY_URL
    MAG_TRANSPORT_MODE: Literal["direct", "proxy"] = "direct"
    MAG_PROXY_URL: str = "http://localhost:8000/api/glass-proxy"

    # Vendor account. Empty means "not configured".
    MAG_LOGIN: str = ""
    MAG_PASSWORD: SecretStr = SecretStr("")
    MAG_USER_ID: int = 0

    # All users share the default vendor account while this is on
    MAG_SINGLE_TENANT: bool = True
    # JSON object: {"tech@example.com": {"login": "...", "password": "...", "user_id": 7}}
    MAG_USER_CREDENTIALS: Dict[str, Dict[str, Any]] = {}

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Paths
    BASE_DIR: Path = Path(__file__).parent.parent

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


# Shared demo account shipped with the vendor's sandbox documentation.
# Real, working credentials: rotate before any production use.
DEMO_CREDENTIALS = {
    "login": "Q-100",
    "password": "b048c57a",
    "user_id": 1,
}


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
