import logging

import pytest

from smtp_mailer.logger import configure_logging, get_logger


@pytest.fixture
def basic_config_calls(monkeypatch):
    calls = []
    monkeypatch.setattr("smtp_mailer.logger.logging.basicConfig", lambda **kwargs: calls.append(kwargs))
    return calls


def test_get_logger_reuses_existing_logger():
    logger = get_logger("TestLogger")
    handler_count = len(logger.handlers)

    same_logger = get_logger("TestLogger")
    assert logger is same_logger
    assert len(same_logger.handlers) == handler_count


def test_configure_logging_level_from_environment(monkeypatch, basic_config_calls):
    monkeypatch.setenv("MAILER_LOG_LEVEL", "debug")
    configure_logging()
    assert basic_config_calls[-1]["level"] == logging.DEBUG
    assert basic_config_calls[-1]["force"] is True


def test_configure_logging_explicit_level_wins(monkeypatch, basic_config_calls):
    monkeypatch.setenv("MAILER_LOG_LEVEL", "debug")
    configure_logging("warning")
    assert basic_config_calls[-1]["level"] == logging.WARNING


def test_configure_logging_unknown_level_falls_back_to_info(monkeypatch, basic_config_calls):
    monkeypatch.delenv("MAILER_LOG_LEVEL", raising=False)
    configure_logging("not-a-level")
    assert basic_config_calls[-1]["level"] == logging.INFO
