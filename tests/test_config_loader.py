# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Tests for SMTP settings loading from config.ini and the environment."""

import pytest
from pydantic import ValidationError

from smtp_mailer.config_loader import build_configuration, load_smtp_settings, parse_bool

pytestmark = pytest.mark.usefixtures("clean_mailer_env")


def test_load_settings_from_file(tmp_path):
    config_file = tmp_path / "mailer.ini"
    config_file.write_text("""
[smtp]
host = smtp.example.com
port = 465
sender = reports@example.com
password = secret
use_tls = yes
timeout = 15
""")

    settings = load_smtp_settings(config_file)

    assert settings == {
        "smtp_host": "smtp.example.com",
        "smtp_port": 465,
        "sender": "reports@example.com",
        "password": "secret",
        "use_tls": True,
        "timeout": 15.0,
    }


def test_environment_is_the_fallback(monkeypatch, tmp_path):
    config_file = tmp_path / "mailer.ini"
    config_file.write_text("[smtp]\nhost = from-file.example.com\n")
    monkeypatch.setenv("MAILER_SMTP_HOST", "from-env.example.com")
    monkeypatch.setenv("MAILER_SMTP_PORT", "2525")
    monkeypatch.setenv("MAILER_USE_TLS", "off")

    settings = load_smtp_settings(config_file)

    assert settings["smtp_host"] == "from-file.example.com"
    assert settings["smtp_port"] == 2525
    assert settings["use_tls"] is False


def test_defaults_without_any_file(monkeypatch):
    monkeypatch.setenv("MAILER_SMTP_HOST", "smtp.local")
    monkeypatch.setenv("MAILER_SENDER", "me@x.com")

    settings = load_smtp_settings()

    assert settings["smtp_host"] == "smtp.local"
    assert settings["smtp_port"] == 25
    assert settings["use_tls"] is True
    assert settings["password"] is None
    assert settings["timeout"] == 60.0


def test_default_file_in_working_directory(tmp_path):
    (tmp_path / "config.ini").write_text("[smtp]\nhost = cwd.example.com\n")
    assert load_smtp_settings()["smtp_host"] == "cwd.example.com"


def test_config_path_from_environment(monkeypatch, tmp_path):
    config_file = tmp_path / "other.ini"
    config_file.write_text("[smtp]\nhost = env-path.example.com\n")
    monkeypatch.setenv("MAILER_CONFIG", str(config_file))
    assert load_smtp_settings()["smtp_host"] == "env-path.example.com"


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_smtp_settings(tmp_path / "nope.ini")


def test_invalid_port_raises(tmp_path):
    config_file = tmp_path / "mailer.ini"
    config_file.write_text("[smtp]\nport = twenty-five\n")
    with pytest.raises(ValueError):
        load_smtp_settings(config_file)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1", True), ("Yes", True), ("on", True), ("0", False), ("FALSE", False), ("maybe", None), (None, None)],
)
def test_parse_bool(value, expected):
    assert parse_bool(value) is expected


def test_build_configuration_merges_message_fields():
    settings = {
        "smtp_host": "smtp.local",
        "smtp_port": 587,
        "sender": "me@x.com",
        "password": None,
        "use_tls": True,
        "timeout": 60.0,
    }
    config = build_configuration(settings, to="a@x.com,b@x.com", subject="Hi", cc=["c@x.com"])

    assert config.smtp_host == "smtp.local"
    assert config.recipients() == ["a@x.com", "b@x.com"]
    assert config.cc == ["c@x.com"]


def test_build_configuration_requires_host():
    with pytest.raises(ValidationError):
        build_configuration({"smtp_host": None, "sender": "me@x.com"}, to="a@x.com")

