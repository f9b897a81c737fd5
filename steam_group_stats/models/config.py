"""Configuration data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""
    api_key: str
    last_group: str
    request_timeout: float
    log_level: str
    proxy_url: str | None = None  # Prefix the encoded target URL is appended to
    verify_ssl: bool = True
