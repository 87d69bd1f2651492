"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

MAX_FILE_SIZE = 50 * 1024 * 1024
MAX_FILE_COUNT = 100
MAX_CONCURRENT_UPLOADS = 3
MAX_CACHE_SIZE = 50
THUMBNAIL_SIZE = 64
HISTORY_LIMIT = 50
MAX_STATE_FILE_SIZE = 10 * 1024 * 1024

MAX_SITE_NAME_LENGTH = 50
MAX_PERSON_NAME_LENGTH = 30
MAX_LOCATION_LENGTH = 100
MAX_COMMENT_LENGTH = 500

ALLOWED_MEDIA_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    max_file_size: int = MAX_FILE_SIZE
    max_file_count: int = MAX_FILE_COUNT
    max_concurrent_uploads: int = MAX_CONCURRENT_UPLOADS
    max_cache_size: int = MAX_CACHE_SIZE
    thumbnail_size: int = THUMBNAIL_SIZE
    history_limit: int = HISTORY_LIMIT
    max_state_file_size: int = MAX_STATE_FILE_SIZE
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="PHOTO_REPORT_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
