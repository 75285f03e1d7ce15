# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Message composition.

Turns a :class:`~smtp_mailer.models.MailConfiguration` into a
:class:`ComposedMessage`: an ``EmailMessage`` with recipients, HTML body,
priority headers and attachments, plus ownership of the attachment handles
that were read to build it. Composition never touches the network.

Every composed message gets the same policy: the sender address doubles as
the display name, the body is ``text/html`` in UTF-8, and the message is
flagged high priority.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import formataddr

from .attachments import Attachment
from .logger import get_logger
from .models import MailConfiguration

logger = get_logger("MessageComposer")

CHARSET = "utf-8"
PRIORITY_HEADERS = {
    "X-Priority": "1 (Highest)",
    "Importance": "high",
    "Priority": "urgent",
}


@dataclass
class ComposedMessage:
    """A message ready for the transport and the handles it owns.

    Attributes:
        message: The MIME message, or ``None`` once released.
        sender: Envelope sender address.
        to: Primary recipients in order.
        cc: CC recipients in order.
        bcc: BCC recipients in order.
        attachments: Attachments added to the message, in order.
    """

    message: EmailMessage | None
    sender: str
    to: list[str]
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    released: bool = False

    @property
    def recipients(self) -> list[str]:
        return [*self.to, *self.cc, *self.bcc]

    def release(self) -> None:
        """Close every attachment handle and drop the message.

        Idempotent. A handle that fails to close is logged and skipped so the
        remaining handles are still released.
        """
        if self.released:
            return
        self.released = True
        for attachment in self.attachments:
            try:
                attachment.close()
            except Exception as exc:
                logger.warning("Failed to close attachment %s: %s", attachment.filename, exc)
        self.message = None


def compose_message(config: MailConfiguration) -> ComposedMessage | None:
    """Build the message described by ``config``.

    Recipient addresses are not validated here; a malformed address is
    reported by the transport when the message is sent.

    Returns:
        The composed message, or ``None`` when ``config.to`` holds no
        recipients (nothing to send).

    Raises:
        ValueError: If a configured attachment was already closed.
        OSError: If a path-based attachment cannot be read.
    """
    to = config.recipients()
    if not to:
        logger.debug("No recipients configured, nothing to compose")
        return None

    msg = EmailMessage()
    msg["From"] = formataddr((config.sender, config.sender))
    msg["To"] = ", ".join(to)
    if config.cc:
        msg["Cc"] = ", ".join(config.cc)
    if config.bcc:
        msg["Bcc"] = ", ".join(config.bcc)
    msg["Subject"] = config.subject
    for header, value in PRIORITY_HEADERS.items():
        msg[header] = value
    msg.set_content(config.body, subtype="html", charset=CHARSET)

    attachments = [att for att in config.attachments if att is not None]
    for att in attachments:
        maintype, subtype = att.maintype_subtype
        msg.add_attachment(att.read(), maintype=maintype, subtype=subtype, filename=att.filename)

    logger.debug(
        "Composed message %r for %d recipient(s) with %d attachment(s)",
        config.subject,
        len(to) + len(config.cc) + len(config.bcc),
        len(attachments),
    )
    return ComposedMessage(
        message=msg,
        sender=config.sender,
        to=to,
        cc=list(config.cc),
        bcc=list(config.bcc),
        attachments=attachments,
    )
