from datetime import timedelta
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BlobSettings(BaseSettings):
    """Lifecycle timing for the blob manager.

    Durations accept seconds or ISO 8601 strings, e.g.
    JSONBLOB_BLOB_ACCESS_TTL=P90D or JSONBLOB_FLUSH_INTERVAL=60.
    """

    cleanup_frequency: timedelta = Field(default=timedelta(days=1))
    blob_access_ttl: timedelta = Field(default=timedelta(days=90))
    flush_interval: timedelta = Field(default=timedelta(minutes=1))
    blob_count_refresh: timedelta = Field(default=timedelta(hours=1))

    model_config = SettingsConfigDict(
        env_prefix="JSONBLOB_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("cleanup_frequency", "flush_interval", "blob_count_refresh", "blob_access_ttl")
    @classmethod
    def _positive(cls, value: timedelta) -> timedelta:
        if value.total_seconds() <= 0:
            raise ValueError("duration must be positive")
        return value


@lru_cache
def get_blob_settings(**kwargs) -> BlobSettings:
    # Only include kwargs that are not None, so defaults in BlobSettings are used
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return BlobSettings(**filtered_kwargs)
