# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Compose HTML mail and send it through SMTP, blocking or in the background.

The package wraps ``aiosmtplib`` and the standard ``email`` package:

- MailConfiguration: Sender identity, SMTP settings and message content
- MailSender: Composes the message once, sends it, releases it
- Attachment: Attachment handle backed by bytes, a path or a stream
- SendOutcome: Delivered / cancelled / failed result of a send

Example:
    Blocking send::

        from smtp_mailer import MailConfiguration, MailSender

        config = MailConfiguration(
            sender="reports@example.com",
            password="secret",
            smtp_host="smtp.example.com",
            smtp_port=587,
            to="a@x.com,b@x.com",
            subject="Hi",
            body="<p>hi</p>",
        )
        with MailSender(config) as sender:
            sender.send()
"""

from .attachments import Attachment, guess_mime
from .composer import ComposedMessage, compose_message
from .models import CANCELLED_MESSAGE, MailConfiguration, OutcomeStatus, SendOutcome
from .sender import MailSender
from .transport import SmtpTransport

__version__ = "0.1.0"

__all__ = [
    "Attachment",
    "CANCELLED_MESSAGE",
    "ComposedMessage",
    "MailConfiguration",
    "MailSender",
    "OutcomeStatus",
    "SendOutcome",
    "SmtpTransport",
    "compose_message",
    "guess_mime",
]
