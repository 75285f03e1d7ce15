# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Data models for the SMTP mailer.

Models:
    - MailConfiguration: Sender identity, SMTP connection settings and the
      message content for one mail.
    - OutcomeStatus: Possible results of a send attempt.
    - SendOutcome: Result of a send attempt, rendered for completion callbacks.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .attachments import Attachment

CANCELLED_MESSAGE = "operation cancelled"
DEFAULT_SMTP_PORT = 25
DEFAULT_TIMEOUT = 60.0


class MailConfiguration(BaseModel):
    """Everything needed to compose and send one mail.

    The configuration is frozen: the sender reads it but never changes it.
    ``to`` is a comma-separated string; an empty value means there is
    nothing to send.

    Attributes:
        sender: Sender address; also the display name and the login user.
        password: Credential used to authenticate with the SMTP server.
        smtp_host: SMTP server hostname or IP address.
        smtp_port: SMTP server port (default 25).
        use_tls: Direct TLS on port 465, STARTTLS elsewhere (default on).
        subject: Message subject.
        body: HTML body.
        to: Primary recipients, comma separated.
        cc: Carbon-copy recipients, in order.
        bcc: Blind carbon-copy recipients, in order.
        attachments: Attachments in order; ``None`` entries are skipped.
        timeout: Socket timeout handed to the SMTP client library.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    sender: Annotated[str, Field(min_length=1, description="Sender address")]
    password: Annotated[str | None, Field(default=None, description="SMTP password")]
    smtp_host: Annotated[str, Field(min_length=1, description="SMTP server hostname")]
    smtp_port: Annotated[int, Field(default=DEFAULT_SMTP_PORT, ge=1, le=65535, description="SMTP server port")]
    use_tls: Annotated[bool, Field(default=True, description="Use TLS (direct on 465, STARTTLS otherwise)")]
    subject: Annotated[str, Field(default="", description="Message subject")]
    body: Annotated[str, Field(default="", description="HTML body")]
    to: Annotated[str, Field(default="", description="Comma-separated primary recipients")]
    cc: Annotated[list[str], Field(default_factory=list, description="CC recipients")]
    bcc: Annotated[list[str], Field(default_factory=list, description="BCC recipients")]
    attachments: Annotated[list[Attachment | None], Field(default_factory=list, description="Attachments")]
    timeout: Annotated[float, Field(default=DEFAULT_TIMEOUT, gt=0, description="SMTP client timeout in seconds")]

    @field_validator("to", mode="before")
    @classmethod
    def none_means_no_recipients(cls, v):
        return "" if v is None else v

    def recipients(self) -> list[str]:
        """Primary recipients split on commas, in order, blanks dropped."""
        return [part.strip() for part in self.to.split(",") if part.strip()]


class OutcomeStatus(str, Enum):
    """Result of a send attempt.

    Attributes:
        DELIVERED: The transport accepted the message.
        CANCELLED: The asynchronous send was cancelled before completing.
        FAILED: The transport reported an error.
    """

    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class SendOutcome:
    """Outcome of one send attempt.

    ``user_state`` is the caller's correlation token, threaded through the
    asynchronous send so the completion callback can tell sends apart.
    """

    status: OutcomeStatus
    user_state: str | None = None
    detail: str | None = None

    @classmethod
    def delivered(cls, user_state: str | None = None) -> SendOutcome:
        return cls(OutcomeStatus.DELIVERED, user_state)

    @classmethod
    def cancelled(cls, user_state: str | None = None) -> SendOutcome:
        return cls(OutcomeStatus.CANCELLED, user_state)

    @classmethod
    def failed(cls, user_state: str | None, detail: str) -> SendOutcome:
        return cls(OutcomeStatus.FAILED, user_state, detail)

    @classmethod
    def from_exception(cls, user_state: str | None, exc: BaseException) -> SendOutcome:
        return cls.failed(user_state, str(exc) or type(exc).__name__)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.DELIVERED

    def describe(self) -> str:
        """Render the outcome as the string handed to completion callbacks."""
        if self.status is OutcomeStatus.CANCELLED:
            return CANCELLED_MESSAGE
        if self.status is OutcomeStatus.FAILED:
            return f"UserState:{self.user_state}, Message:{self.detail}"
        return self.user_state or ""
