"""
Unit tests for settings and the logging configuration built from them
"""
import logging
import logging.handlers

import pytest

from teacha.utils.config import DEV_SECRET_KEY, Settings, get_settings
from teacha.utils.logger import get_logger


class TestSecretKey:

    @pytest.mark.parametrize("environment", ["staging", "production", "test"])
    def test_dev_key_refused_outside_development(self, environment):
        with pytest.raises(ValueError, match="SECRET_KEY must be set outside development"):
            Settings(environment=environment, secret_key=DEV_SECRET_KEY)

    def test_empty_key_refused_outside_development(self):
        with pytest.raises(ValueError):
            Settings(environment="staging", secret_key="")

    def test_dev_key_allowed_in_development(self):
        settings = Settings(environment="development", secret_key=DEV_SECRET_KEY)

        assert settings.secret_key == DEV_SECRET_KEY

    def test_real_key_accepted(self):
        assert Settings(environment="staging", secret_key="s3cr3t-signing-key").environment == "staging"


class TestLoggerSettings:

    @pytest.fixture
    def log_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_DIR", str(tmp_path))
        get_settings.cache_clear()
        yield tmp_path
        get_settings.cache_clear()

    @staticmethod
    def _release(logger: logging.Logger):
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_level_and_directory_come_from_settings(self, log_env):
        logger = get_logger("teacha.settings_check")
        try:
            file_handlers = [
                handler for handler in logger.handlers
                if isinstance(handler, logging.handlers.RotatingFileHandler)
            ]

            assert logger.level == logging.DEBUG
            assert [handler.baseFilename for handler in file_handlers] == [str(log_env / "teacha.log")]
        finally:
            self._release(logger)

    def test_empty_log_dir_skips_file(self):
        logger = get_logger("teacha.console_only")
        try:
            assert not any(
                isinstance(handler, logging.handlers.RotatingFileHandler) for handler in logger.handlers
            )
        finally:
            self._release(logger)
