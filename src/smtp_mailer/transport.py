# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SMTP transport built on aiosmtplib.

:class:`SmtpTransport` owns a single ``aiosmtplib.SMTP`` client for one
send attempt: it connects, authenticates, hands the message over and says
goodbye. When the exchange is interrupted (error or task cancellation) the
connection may still be open; :meth:`SmtpTransport.close` tears it down and
is safe to call any number of times.

TLS behavior based on port and ``use_tls``:

- Port 465 with ``use_tls=True``: direct TLS (implicit TLS)
- Any other port with ``use_tls=True``: STARTTLS
- ``use_tls=False``: plain SMTP

Example:
    Sending a composed message::

        transport = SmtpTransport("smtp.example.com", 587, "me@example.com", "secret", use_tls=True)
        try:
            await transport.send(message, sender="me@example.com")
        finally:
            transport.close()
"""

from __future__ import annotations

from email.message import EmailMessage

import aiosmtplib

from .logger import get_logger
from .models import DEFAULT_TIMEOUT, MailConfiguration

logger = get_logger("SmtpTransport")

IMPLICIT_TLS_PORT = 465


class SmtpTransport:
    """One-shot SMTP connection for a single message.

    Attributes:
        host: SMTP server hostname or IP address.
        port: SMTP server port number.
        user: Username for authentication, or None for no auth.
        password: Password for authentication, or None for no auth.
        use_tls: Whether to encrypt the connection.
        timeout: Timeout handed to aiosmtplib for its socket operations.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str | None = None,
        password: str | None = None,
        *,
        use_tls: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self._smtp: aiosmtplib.SMTP | None = None
        self._closed = False

    @classmethod
    def from_config(cls, config: MailConfiguration) -> SmtpTransport:
        """Build a transport from the connection settings of ``config``."""
        return cls(
            config.smtp_host,
            config.smtp_port,
            config.sender,
            config.password,
            use_tls=config.use_tls,
            timeout=config.timeout,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def _client(self) -> aiosmtplib.SMTP:
        if self.use_tls and self.port == IMPLICIT_TLS_PORT:
            smtp = aiosmtplib.SMTP(hostname=self.host, port=self.port, start_tls=False, use_tls=True, timeout=self.timeout)
        elif self.use_tls:
            smtp = aiosmtplib.SMTP(hostname=self.host, port=self.port, start_tls=True, use_tls=False, timeout=self.timeout)
        else:
            smtp = aiosmtplib.SMTP(hostname=self.host, port=self.port, start_tls=False, use_tls=False, timeout=self.timeout)
        return smtp

    async def send(self, message: EmailMessage, sender: str | None = None) -> None:
        """Connect, authenticate and transmit ``message``.

        Args:
            message: The message to send. Recipients are taken from its
                To, Cc and Bcc headers; the Bcc header is not transmitted.
            sender: Envelope sender; defaults to the From header.

        Raises:
            RuntimeError: If the transport was already used or closed.
            aiosmtplib.SMTPException: If the server rejects the connection,
                the credentials or every recipient.
            OSError: On network failures.
        """
        if self._closed or self._smtp is not None:
            raise RuntimeError("SmtpTransport is single-use")
        self._smtp = smtp = self._client()
        await smtp.connect()
        if self.user and self.password:
            await smtp.login(self.user, self.password)
        refused, response = await smtp.send_message(message, sender=sender)
        if refused:
            logger.warning(
                "Server %s:%s refused %d recipient(s): %s",
                self.host,
                self.port,
                len(refused),
                ", ".join(sorted(refused)),
            )
        try:
            await smtp.quit()
        except aiosmtplib.SMTPException as exc:
            # The message was already accepted; close() drops the socket.
            logger.warning("QUIT to %s:%s failed after delivery: %s", self.host, self.port, exc)
        logger.debug("Message accepted by %s:%s: %s", self.host, self.port, response)

    def close(self) -> None:
        """Drop the connection if it is still open. Idempotent, never raises."""
        if self._closed:
            return
        self._closed = True
        smtp, self._smtp = self._smtp, None
        if smtp is None:
            return
        try:
            if smtp.is_connected:
                smtp.close()
        except Exception as exc:
            logger.warning("Error closing SMTP connection to %s:%s: %s", self.host, self.port, exc)
