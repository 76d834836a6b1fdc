"""
Configuration and settings for the campaign service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_prefix: str = Field(default="/api")

    # Database (Postgres expected)
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")

    # S3-compatible storage
    s3_bucket: Optional[str] = Field(default=None, alias="AWS_BUCKET_NAME")
    s3_region: Optional[str] = Field(default=None, alias="AWS_DEFAULT_REGION")
    s3_endpoint: Optional[str] = Field(default=None, alias="S3_ENDPOINT")
    aws_access_key_id: Optional[str] = Field(
        default=None, alias="AWS_ACCESS_KEY_ID"
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None, alias="AWS_SECRET_ACCESS_KEY"
    )
    signed_url_expires_in: int = Field(default=300, alias="SIGNED_URL_EXPIRES_IN")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, alias="QR_USE_IN_MEMORY_BACKENDS"
    )

    # Tokens
    tracking_secret: str = Field(
        default="dev-tracking-secret-change-me", alias="TRACKING_SECRET"
    )
    session_secret: str = Field(
        default="dev-session-secret-change-me", alias="SESSION_SECRET"
    )
    session_max_age: int = Field(default=60 * 60 * 24 * 7, alias="SESSION_MAX_AGE")

    # Flyer generation
    tracking_url_style: Literal["path", "token"] = Field(
        default="path", alias="TRACKING_URL_STYLE"
    )
    max_campaigns_per_user: int = Field(default=5, alias="MAX_CAMPAIGNS_PER_USER")
    max_flyers_per_campaign: int = Field(
        default=500, alias="MAX_FLYERS_PER_CAMPAIGN"
    )
    qr_box_size: int = Field(default=10, alias="QR_BOX_SIZE")
    # Quiet zone in modules, drawn inside the marked rectangle.
    qr_border: int = Field(default=2, alias="QR_BORDER")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
