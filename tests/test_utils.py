"""
Tests for godotenv.utils: input validation, app directory and logger setup.
"""

import logging
import os
import sys
from pathlib import Path

import pytest

from godotenv.utils.app_dir import get_app_dir
from godotenv.utils.input_validator import InputValidationError, InputValidator
from godotenv.utils.logger import LOG_FILE_NAME, LOGGER_NAME, get_logger, set_log_level, setup_logger


class TestInputValidator:
    @pytest.mark.parametrize("version", ["4.2.1", "4.3.0-rc.1", "3.6.0-beta2", " 4.2.1 "])
    def test_valid_versions(self, version):
        assert InputValidator.validate_version_string(version) is True

    @pytest.mark.parametrize("version", ["", "   ", "4.2", "latest", "4.2.1-", "1." * 60 + "1"])
    def test_invalid_versions(self, version):
        with pytest.raises(InputValidationError):
            InputValidator.validate_version_string(version)

    def test_safe_join_inside(self, tmp_path):
        joined = InputValidator.safe_join_path(str(tmp_path), "a", "b")
        assert joined == os.path.join(str(tmp_path), "a", "b")

    @pytest.mark.parametrize("parts", [("..", "x"), ("a", "../../x"), ("/etc/passwd",)])
    def test_safe_join_outside(self, tmp_path, parts):
        with pytest.raises(InputValidationError):
            InputValidator.safe_join_path(str(tmp_path), *parts)

    def test_sanitize_filename(self):
        assert InputValidator.sanitize_filename('rc<1>:"x"|?*') == "rc1x"
        assert InputValidator.sanitize_filename("") == ""


class TestAppDir:
    def test_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GODOTENV_HOME", str(tmp_path))
        assert get_app_dir() == tmp_path

    @pytest.mark.skipif(sys.platform in ("win32", "darwin"), reason="XDG layout is Linux only")
    def test_xdg_config_home(self, tmp_path, monkeypatch):
        monkeypatch.delenv("GODOTENV_HOME", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_app_dir() == Path(tmp_path) / "godotenv"


class TestLogger:
    @pytest.fixture(autouse=True)
    def reset_handlers(self):
        yield
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()

    def test_setup_writes_log_file(self, tmp_path):
        logger = setup_logger(level=logging.DEBUG, log_to_console=False, log_dir=tmp_path)
        logger.debug("hello")
        for handler in logger.handlers:
            handler.flush()

        assert "hello" in (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8")
        assert get_logger() is logger

    def test_setup_is_repeatable(self, tmp_path):
        setup_logger(log_dir=tmp_path)
        logger = setup_logger(log_dir=tmp_path)
        assert len(logger.handlers) == 2

    def test_set_log_level(self, tmp_path):
        logger = setup_logger(level=logging.INFO, log_dir=tmp_path)
        set_log_level(logging.WARNING)
        assert logger.level == logging.WARNING
        assert all(h.level == logging.WARNING for h in logger.handlers)
