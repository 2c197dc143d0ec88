import logging
import sys

import pytest

from gdrive_mcp.core import config


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def test_development_logging_is_verbose(monkeypatch):
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("MCP_LOG_FILE", raising=False)

    logger = config.setup_logging()

    assert logger is logging.getLogger()
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert logger.handlers[0].stream is sys.stderr


def test_production_logging(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("MCP_LOG_FILE", raising=False)

    logger = config.setup_logging()

    assert logger.level == logging.INFO
    assert "%(funcName)s" not in logger.handlers[0].formatter._fmt


def test_log_level_override(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.delenv("MCP_LOG_FILE", raising=False)

    assert config.setup_logging().level == logging.WARNING


def test_log_file(monkeypatch, tmp_path):
    log_file = tmp_path / "logs" / "mcp.log"
    monkeypatch.setenv("MCP_LOG_FILE", str(log_file))
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    logger = config.setup_logging()
    logging.getLogger("gdrive_mcp.test").info("written to file")
    for handler in logger.handlers:
        handler.flush()

    assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    assert "written to file" in log_file.read_text()


def test_defaults():
    assert config.DRIVE_SCOPES == ["https://www.googleapis.com/auth/drive.readonly"]
    assert isinstance(config.MCP_DRIVE_PORT, int)
