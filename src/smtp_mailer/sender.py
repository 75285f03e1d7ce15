# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Message sender: compose once, send once, release once.

:class:`MailSender` is the public entry point. It composes the message
described by a :class:`~smtp_mailer.models.MailConfiguration` on first use,
sends it through an :class:`~smtp_mailer.transport.SmtpTransport` and then
releases the message, its attachment handles and the transport. Three
flavors of send are offered:

- :meth:`MailSender.send` blocks until the server accepted the message and
  raises whatever the transport raised.
- :meth:`MailSender.send_async` schedules the send on the running event loop,
  returns the task immediately and reports the outcome to a callback as a
  single string.
- :meth:`MailSender.deliver` is a coroutine resolving to a
  :class:`~smtp_mailer.models.SendOutcome` instead of raising.

A configuration without primary recipients is not an error: every send
flavor silently does nothing and no connection is opened.

A sender handles one send at a time. Issue the next send after the previous
one completed, or use one sender per message.

Example:
    Fire-and-forget from async code::

        def on_done(result: str) -> None:
            print("mail finished:", result)

        sender = MailSender(config)
        sender.send_async(on_done, user_state="job-42")
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from functools import partial

from .composer import ComposedMessage, compose_message
from .logger import get_logger
from .models import MailConfiguration, SendOutcome
from .transport import SmtpTransport

CompletionCallback = Callable[[str], None]
TransportFactory = Callable[[MailConfiguration], SmtpTransport]

DEFAULT_USER_STATE = "true"


class MailSender:
    """Compose and send one message described by ``config``.

    Attributes:
        config: The caller's configuration; never modified.
        logger: Logger used for delivery activity.
    """

    def __init__(self, config: MailConfiguration, transport_factory: TransportFactory = SmtpTransport.from_config):
        self.config = config
        self.logger = get_logger("MailSender")
        self._transport_factory = transport_factory
        self._message: ComposedMessage | None = None
        self._transport: SmtpTransport | None = None
        self._in_flight = False
        self._closed = False

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------
    @property
    def message(self) -> ComposedMessage | None:
        """The composed message, built on first access and cached.

        ``None`` when there are no primary recipients.
        """
        if self._message is None and not self._closed:
            self._message = compose_message(self.config)
        return self._message

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------
    def send(self) -> SendOutcome | None:
        """Send the message and block until the server accepted it.

        Returns:
            A delivered outcome, or ``None`` when there was nothing to send.

        Raises:
            RuntimeError: If the sender is closed, already sending, or called
                from inside a running event loop.
            aiosmtplib.SMTPException: If the server rejects the message.
            OSError: On network failures.
        """
        self._check_ready()
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            self.close()
            raise RuntimeError("MailSender.send() cannot block inside a running event loop; use deliver()")

        if self._compose() is None:
            return None
        self._in_flight = True
        try:
            asyncio.run(self._transmit())
        finally:
            self.close()
        return SendOutcome.delivered()

    def send_async(
        self,
        callback: CompletionCallback | None = None,
        user_state: str | None = DEFAULT_USER_STATE,
    ) -> asyncio.Task | None:
        """Start sending without blocking.

        Must be called from a thread running an asyncio event loop. The
        callback receives one string once the send finished:

        - ``"operation cancelled"`` if the returned task was cancelled;
        - ``"UserState:<user_state>, Message:<error>"`` if the send failed;
        - ``user_state`` unchanged on success.

        Args:
            callback: Completion callback, called at most once.
            user_state: Correlation token identifying this send in the
                callback string.

        Returns:
            The task performing the send, or ``None`` when there was nothing
            to send (the callback is then never called).

        Raises:
            RuntimeError: If no event loop is running, or the sender is
                closed or already sending.
        """
        self._check_ready()
        loop = asyncio.get_running_loop()
        if self._compose() is None:
            return None
        self._in_flight = True
        task = loop.create_task(self._transmit())
        task.add_done_callback(partial(self._on_send_completed, callback, user_state))
        return task

    async def deliver(self, user_state: str | None = DEFAULT_USER_STATE) -> SendOutcome | None:
        """Send the message and resolve to its outcome.

        Transport failures are captured in a failed outcome rather than
        raised. Cancelling the awaiting task cancels the send; resources are
        released before the cancellation propagates.

        Returns:
            The outcome, or ``None`` when there was nothing to send.
        """
        self._check_ready()
        if self._compose() is None:
            return None
        self._in_flight = True
        try:
            await self._transmit()
        except asyncio.CancelledError:
            self.logger.info("Send to %s cancelled", self._describe_recipients())
            raise
        except Exception as exc:
            self.logger.error("Send to %s failed: %s", self._describe_recipients(), exc)
            return SendOutcome.from_exception(user_state, exc)
        finally:
            self.close()
        return SendOutcome.delivered(user_state)

    async def _transmit(self) -> None:
        composed = self._message
        self._transport = self._transport_factory(self.config)
        self.logger.debug(
            "Sending %r via %s:%s",
            self.config.subject,
            self.config.smtp_host,
            self.config.smtp_port,
        )
        await self._transport.send(composed.message, sender=composed.sender)
        self.logger.info("Message %r delivered to %s", self.config.subject, self._describe_recipients())

    def _on_send_completed(self, callback: CompletionCallback | None, user_state: str | None, task: asyncio.Task) -> None:
        try:
            if task.cancelled():
                outcome = SendOutcome.cancelled(user_state)
                self.logger.info("Send to %s cancelled", self._describe_recipients())
            elif (exc := task.exception()) is not None:
                outcome = SendOutcome.from_exception(user_state, exc)
                self.logger.error("Send to %s failed: %s", self._describe_recipients(), exc)
            else:
                outcome = SendOutcome.delivered(user_state)
            if callback is not None:
                try:
                    callback(outcome.describe())
                except Exception:
                    self.logger.exception("Completion callback raised")
        finally:
            self.close()

    def _compose(self) -> ComposedMessage | None:
        try:
            return self.message
        except Exception:
            self.close()
            raise

    def _check_ready(self) -> None:
        if self._closed:
            raise RuntimeError("MailSender is closed")
        if self._in_flight:
            raise RuntimeError("A send is already in progress on this MailSender")

    def _describe_recipients(self) -> str:
        composed = self._message
        if composed is None:
            return "<nobody>"
        return ", ".join(composed.recipients)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------
    def close(self) -> None:
        """Release the message, its attachments and the transport.

        Idempotent and safe on partially built state. Attachments listed in
        the configuration are closed even when no message was composed.
        Failures while releasing are logged and swallowed.
        """
        if self._closed:
            return
        self._closed = True
        self._in_flight = False

        transport, self._transport = self._transport, None
        if transport is not None:
            try:
                transport.close()
            except Exception as exc:
                self.logger.warning("Failed to close transport: %s", exc)

        composed, self._message = self._message, None
        if composed is not None:
            composed.release()

        for attachment in self.config.attachments:
            if attachment is None or attachment.closed:
                continue
            try:
                attachment.close()
            except Exception as exc:
                self.logger.warning("Failed to close attachment %s: %s", attachment.filename, exc)

    def __enter__(self) -> MailSender:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("sending" if self._in_flight else "idle")
        return f"MailSender(to={self.config.to!r}, subject={self.config.subject!r}, {state})"
