"""Configuration management using Pydantic Settings"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Facility source: "proxy" forwards to the legacy proxy, "fallback" serves canned data
    facility_source: Literal["proxy", "fallback"] = "proxy"

    # Legacy proxy
    proxy_base_url: str = "http://localhost:7002"
    proxy_path: str = "/api/proxy/v1/legacy-service/credit-card"
    proxy_channel_header: str = "Canal"

    # Service
    service_name: str = "bian-credit-card-facility"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0
    disconnect_poll_seconds: float = 0.1


settings = Settings()
