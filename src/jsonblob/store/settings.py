from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """
    Blob store settings.

    Env support:
      - JSONBLOB_STORE_BACKEND selects the engine: memory | mongo | sql
      - Mongo: JSONBLOB_STORE_MONGO_URL (falls back to MONGO_URL),
        JSONBLOB_STORE_MONGO_DATABASE, JSONBLOB_STORE_COLLECTION
      - SQL: JSONBLOB_STORE_SQL_URL (falls back to DATABASE_URL), JSONBLOB_STORE_ECHO
    """

    backend: Literal["memory", "mongo", "sql"] = Field(default="memory")
    mongo_url: Optional[str] = Field(default=None)
    mongo_database: str = Field(default="jsonblob")
    collection: str = Field(default="blobs")
    sql_url: Optional[str] = Field(default=None)
    echo: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="JSONBLOB_STORE_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def resolved_mongo_url(self) -> str:
        url = self.mongo_url or os.getenv("MONGO_URL")
        if not url:
            raise ValueError("MONGO_URL or JSONBLOB_STORE_MONGO_URL must be set for the mongo backend")
        return url

    @property
    def resolved_sql_url(self) -> str:
        url = self.sql_url or os.getenv("DATABASE_URL")
        if not url:
            raise ValueError("DATABASE_URL or JSONBLOB_STORE_SQL_URL must be set for the sql backend")
        # normalize legacy postgres:// to the SQLAlchemy dialect name
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url


@lru_cache
def get_store_settings(**kwargs) -> StoreSettings:
    # Only include kwargs that are not None, so defaults in StoreSettings are used
    filtered = {k: v for k, v in kwargs.items() if v is not None}
    return StoreSettings(**filtered)
