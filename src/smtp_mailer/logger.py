# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging utilities for the SMTP mailer.

Loggers are plain standard library loggers. Handlers, level and format are
configured once by the entry point (see ``smtp_mailer.cli``) through
``configure_logging()``, so library code never installs handlers itself.

Example:
    Typical usage in a module::

        from smtp_mailer.logger import get_logger

        logger = get_logger("MailSender")
        logger.info("Message delivered")
"""

import logging
import os

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "SmtpMailer") -> logging.Logger:
    """Return the logger bound to ``name``.

    No handler or formatter is attached here; that is the job of the
    application entry point.
    """
    return logging.getLogger(name)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for command-line use.

    Args:
        level: Level name such as ``"DEBUG"``. Falls back to the
            ``MAILER_LOG_LEVEL`` environment variable, then ``INFO``.
            Unknown names resolve to ``INFO``.
    """
    level_name = (level or os.getenv("MAILER_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        force=True,  # Force reconfiguration to avoid duplicate handlers
    )
