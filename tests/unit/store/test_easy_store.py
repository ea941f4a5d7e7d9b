from __future__ import annotations

import pytest

from jsonblob.store import InMemoryBlobStore, SqlBlobStore, StoreSettings, easy_store

pytestmark = pytest.mark.storage


def test_defaults_to_memory(monkeypatch):
    monkeypatch.delenv("JSONBLOB_STORE_BACKEND", raising=False)
    assert isinstance(easy_store(StoreSettings()), InMemoryBlobStore)


def test_sql_backend_from_settings():
    store = easy_store(StoreSettings(backend="sql", sql_url="sqlite://"))
    try:
        assert isinstance(store, SqlBlobStore)
        assert store.count() == 0
    finally:
        store.close()


def test_backend_from_env(monkeypatch):
    monkeypatch.setenv("JSONBLOB_STORE_BACKEND", "sql")
    monkeypatch.setenv("JSONBLOB_STORE_SQL_URL", "sqlite:///:memory:")
    store = easy_store(StoreSettings())
    try:
        assert isinstance(store, SqlBlobStore)
    finally:
        store.close()


def test_sql_url_falls_back_to_database_url(monkeypatch):
    monkeypatch.delenv("JSONBLOB_STORE_SQL_URL", raising=False)
    monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db/blobs")
    assert StoreSettings().resolved_sql_url == "postgresql://u:p@db/blobs"


def test_missing_urls_raise(monkeypatch):
    for name in ("MONGO_URL", "DATABASE_URL", "JSONBLOB_STORE_MONGO_URL", "JSONBLOB_STORE_SQL_URL"):
        monkeypatch.delenv(name, raising=False)
    cfg = StoreSettings()
    with pytest.raises(ValueError):
        cfg.resolved_mongo_url
    with pytest.raises(ValueError):
        cfg.resolved_sql_url
