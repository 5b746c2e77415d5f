"""Tests for the logging setup and database helpers."""

import logging

from storefront.domain import storefront
from storefront.utils.db import drop_db, setup_db
from storefront.utils.logging import configure_logging, get_log_level


class TestLogLevel:
    def test_environment_defaults(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ENV", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)

        monkeypatch.setenv("PROTEAN_ENV", "production")
        assert get_log_level() == "INFO"

        monkeypatch.setenv("PROTEAN_ENV", "test")
        assert get_log_level() == "WARNING"

    def test_override(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert get_log_level() == "ERROR"


class TestConfigureLogging:
    def test_writes_rotating_logs(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "INFO")
        root = logging.getLogger()
        saved = list(root.handlers), root.level
        try:
            configure_logging(log_dir=tmp_path)
            assert (tmp_path / "storefront.log").exists()
            assert (tmp_path / "storefront_error.log").exists()
            assert len(root.handlers) == 3
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers, level = saved
            root.setLevel(level)


class TestDatabaseSetup:
    def test_memory_provider_needs_no_tables(self):
        assert setup_db(storefront) == []
        assert drop_db(storefront) == []
