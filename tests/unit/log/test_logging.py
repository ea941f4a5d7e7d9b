"""Unit tests for jsonblob.app.core.logging."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from jsonblob.app.core import env as env_mod
from jsonblob.app.core.logging import JsonFormatter, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fresh_env():
    env_mod.get_env.cache_clear()
    yield
    env_mod.get_env.cache_clear()


def _record(msg: str = "Test message", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="jsonblob.manager",
        level=logging.INFO,
        pathname="manager.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for k, v in extra.items():
        setattr(record, k, v)
    return record


class TestJsonFormatter:
    def test_formats_as_json(self):
        out = json.loads(JsonFormatter().format(_record()))
        assert out["level"] == "INFO"
        assert out["logger"] == "jsonblob.manager"
        assert out["message"] == "Test message"
        assert "blob_id" not in out

    def test_includes_blob_id_when_present(self):
        out = json.loads(JsonFormatter().format(_record(blob_id="5f1d7a2b9c3e4d5f6a7b8c9d")))
        assert out["blob_id"] == "5f1d7a2b9c3e4d5f6a7b8c9d"

    def test_includes_error_details(self):
        try:
            raise RuntimeError("store down")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()
        out = json.loads(JsonFormatter().format(record))
        assert out["error"]["type"] == "RuntimeError"
        assert out["error"]["message"] == "store down"
        assert "Traceback" in out["error"]["stack"]

    def test_truncates_long_stacks(self, monkeypatch):
        monkeypatch.setenv("LOG_STACK_LIMIT", "20")
        try:
            raise ValueError("x")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        out = json.loads(JsonFormatter().format(record))
        assert out["error"]["stack"].endswith("...(truncated)")


class TestSetupLogging:
    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        setup_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_prod_defaults_to_info_and_json(self, monkeypatch, fresh_env):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        monkeypatch.setenv("JSONBLOB_ENV", "production")

        setup_logging()

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_local_defaults_to_debug_plain(self, monkeypatch, fresh_env):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        monkeypatch.delenv("JSONBLOB_ENV", raising=False)
        monkeypatch.delenv("APP_ENV", raising=False)

        setup_logging()

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_driver_loggers_are_quiet(self):
        setup_logging(level="DEBUG")
        assert logging.getLogger("pymongo").level == logging.WARNING
        assert logging.getLogger("sqlalchemy").level == logging.WARNING


class TestEnv:
    def test_unknown_env_warns_and_falls_back(self, monkeypatch, fresh_env):
        monkeypatch.setenv("JSONBLOB_ENV", "moon")
        with pytest.warns(RuntimeWarning):
            assert env_mod.get_env() is env_mod.Env.LOCAL

    def test_app_env_is_fallback(self, monkeypatch, fresh_env):
        monkeypatch.delenv("JSONBLOB_ENV", raising=False)
        monkeypatch.setenv("APP_ENV", "ci")
        flags = env_mod.get_env_flags()
        assert flags.is_test and not flags.is_prod
