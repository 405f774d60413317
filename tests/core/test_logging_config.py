"""Tests for log handler setup."""

import logging
import os
from logging.handlers import RotatingFileHandler

import pytest

from metrics_reporter.core import logging_config
from metrics_reporter.core.logging_config import (
    LOG_FILE_NAME,
    configure_logging,
    default_log_dir,
    rotating_file_handler,
)


def close_all(handlers):
    for handler in handlers:
        handler.close()


def test_default_log_dir_is_under_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert default_log_dir() == os.path.join(str(tmp_path), "logs")


def test_default_log_dir_is_outside_the_package():
    package_dir = os.path.dirname(os.path.dirname(os.path.abspath(logging_config.__file__)))
    assert not default_log_dir().startswith(package_dir + os.sep)


def test_rotating_file_handler_creates_directory(tmp_path):
    log_dir = tmp_path / "nested" / "logs"

    handler = rotating_file_handler(str(log_dir))
    try:
        assert log_dir.is_dir()
        assert handler.baseFilename == str(log_dir / LOG_FILE_NAME)
        assert handler.maxBytes == 10 * 1024 * 1024
        assert handler.backupCount == 7
    finally:
        handler.close()


def test_rotating_file_handler_raises_on_unusable_directory(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with pytest.raises(OSError):
        rotating_file_handler(str(blocker / "logs"))


def test_configure_logging_falls_back_to_console(tmp_path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with caplog.at_level(logging.WARNING, logger="metrics_reporter"):
        handlers = configure_logging(log_dir=str(blocker / "logs"))
    close_all(handlers)

    assert len(handlers) == 1
    assert not isinstance(handlers[0], RotatingFileHandler)
    assert "File logging disabled" in caplog.text


def test_configure_logging_adds_file_handler(tmp_path):
    handlers = configure_logging(log_dir=str(tmp_path))
    close_all(handlers)

    assert [type(h) for h in handlers] == [logging.StreamHandler, RotatingFileHandler]
