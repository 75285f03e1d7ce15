# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration loader for SMTP connection settings.

Connection settings come from an INI file with environment variables as
fallbacks; the message content (recipients, subject, body, attachments) is
supplied per mail by the caller.

Environment variables (all prefixed with MAILER_):
  MAILER_CONFIG - Path to the INI file (default: config.ini)
  MAILER_SMTP_HOST - SMTP server hostname
  MAILER_SMTP_PORT - SMTP server port (default: 25)
  MAILER_SENDER - Sender address, also used as login user
  MAILER_PASSWORD - SMTP password
  MAILER_USE_TLS - Enable TLS (default: true)
  MAILER_TIMEOUT - SMTP client timeout in seconds (default: 60)
  MAILER_LOG_LEVEL - Logging level for the command line (default: INFO)

Example:
    Configuration file format (config.ini)::

        [smtp]
        host = smtp.example.com
        port = 587
        sender = reports@example.com
        password = secret
        use_tls = yes

    Building a configuration for one mail::

        settings = load_smtp_settings("/etc/smtp-mailer/config.ini")
        config = build_configuration(settings, to="a@x.com,b@x.com", subject="Hi", body="<p>hi</p>")
"""

from __future__ import annotations

import configparser
import os
from pathlib import Path
from typing import Any

from .logger import get_logger
from .models import DEFAULT_SMTP_PORT, DEFAULT_TIMEOUT, MailConfiguration

logger = get_logger("ConfigLoader")

DEFAULT_CONFIG_FILE = "config.ini"
SECTION = "smtp"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def parse_bool(value: Any, default: bool | None = None) -> bool | None:
    """Interpret common INI/env spellings of a boolean.

    Unrecognized values yield ``default``.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    return default


def load_smtp_settings(config_path: str | Path | None = None) -> dict[str, Any]:
    """Load SMTP connection settings.

    The file is ``config_path`` when given, else ``$MAILER_CONFIG``, else
    ``config.ini`` in the working directory. Values in the ``[smtp]``
    section win over the environment.

    Returns:
        Dict with keys ``smtp_host``, ``smtp_port``, ``sender``, ``password``,
        ``use_tls`` and ``timeout``, suitable for :func:`build_configuration`.

    Raises:
        FileNotFoundError: If an explicitly requested file does not exist.
        ValueError: If port or timeout are not numbers.
    """
    explicit = config_path is not None or "MAILER_CONFIG" in os.environ
    path = Path(config_path if config_path is not None else os.getenv("MAILER_CONFIG", DEFAULT_CONFIG_FILE))
    parser = configparser.ConfigParser()
    if path.exists():
        parser.read(path)
        logger.debug("Loaded SMTP settings from %s", path)
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {path}")

    def get(option: str, env: str, fallback: str | None = None) -> str | None:
        if parser.has_option(SECTION, option):
            return parser.get(SECTION, option)
        return os.getenv(env, fallback)

    port = get("port", "MAILER_SMTP_PORT")
    timeout = get("timeout", "MAILER_TIMEOUT")
    password = get("password", "MAILER_PASSWORD")

    return {
        "smtp_host": get("host", "MAILER_SMTP_HOST"),
        "smtp_port": int(port) if port else DEFAULT_SMTP_PORT,
        "sender": get("sender", "MAILER_SENDER"),
        "password": password or None,
        "use_tls": parse_bool(get("use_tls", "MAILER_USE_TLS"), default=True),
        "timeout": float(timeout) if timeout else DEFAULT_TIMEOUT,
    }


def build_configuration(settings: dict[str, Any], **message_fields: Any) -> MailConfiguration:
    """Combine connection ``settings`` with per-mail fields.

    Raises:
        pydantic.ValidationError: If a required setting is missing or a
            field has the wrong type.
    """
    return MailConfiguration(**{**settings, **message_fields})
