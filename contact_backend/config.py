"""
Configuration and settings for the contact backend.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    environment: str = Field(default="development")

    # Encrypted storage
    encryption_key: str = Field(default="")
    data_dir: str = Field(default="data")
    retention_days: int = Field(default=180, ge=1)
    cleanup_interval_hours: float = Field(default=24.0, gt=0)
    ip_hash_salt: str = Field(default="contact-backend-default-salt")

    # HTTP surface
    allowed_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000"
    )
    max_body_bytes: int = Field(default=10 * 1024)
    content_security_policy: str = Field(
        default=(
            "default-src 'self'; object-src 'none'; frame-ancestors 'self'; "
            "form-action 'self'"
        )
    )
    frame_options: str = Field(default="SAMEORIGIN")
    referrer_policy: str = Field(default="no-referrer")

    # Admin API
    admin_password: Optional[str] = Field(default=None)
    admin_token_secret: Optional[str] = Field(default=None)
    admin_session_timeout_seconds: int = Field(default=3600, ge=60)

    # Sessions (Redis)
    redis_url: Optional[str] = Field(default=None)
    redis_session_prefix: str = Field(default="contact:admin-session:")

    # SMTP
    smtp_host: str = Field(default="")
    smtp_port: int = Field(default=587)
    smtp_secure: bool = Field(default=False)
    smtp_user: str = Field(default="")
    smtp_pass: str = Field(default="")
    smtp_from: Optional[str] = Field(default=None)
    notification_email: str = Field(default="contact@example.com")
    send_auto_response: bool = Field(default=False)
    timezone: str = Field(default="Europe/Berlin")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def allowed_origin_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def security_headers(self) -> dict[str, str]:
        return {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": self.frame_options,
            "Content-Security-Policy": self.content_security_policy,
            "Referrer-Policy": self.referrer_policy,
        }

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)

    @property
    def token_secret(self) -> str:
        return (
            self.admin_token_secret
            or self.encryption_key
            or "admin-token-secret-change-in-production"
        )

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_pass)

    @property
    def sender_address(self) -> str:
        return self.smtp_from or self.smtp_user or "noreply@example.com"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
