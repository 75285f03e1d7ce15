# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Shared fixtures: an in-memory stand-in for ``aiosmtplib.SMTP``."""

import asyncio
import os

import pytest

from smtp_mailer import MailConfiguration


class DummySMTP:
    """Records the SMTP conversation instead of talking to a server."""

    connect_error: BaseException | None = None
    send_error: BaseException | None = None
    quit_error: BaseException | None = None
    refused: dict = {}
    block_send = False

    def __init__(self, hostname, port, start_tls=True, use_tls=False, timeout=None):
        self.hostname = hostname
        self.port = port
        self.start_tls = start_tls
        self.use_tls = use_tls
        self.timeout = timeout
        self.login_credentials = None
        self.sent = []
        self.is_connected = False
        self.quit_called = False
        self.close_calls = 0
        self.send_started = asyncio.Event()

    async def connect(self):
        if self.connect_error is not None:
            raise self.connect_error
        self.is_connected = True

    async def login(self, user, password):
        self.login_credentials = (user, password)

    async def send_message(self, message, sender=None):
        self.send_started.set()
        if self.block_send:
            await asyncio.Event().wait()
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((message, sender))
        return dict(self.refused), "250 OK queued"

    async def quit(self):
        if self.quit_error is not None:
            raise self.quit_error
        self.quit_called = True
        self.is_connected = False

    def close(self):
        self.close_calls += 1
        self.is_connected = False


class SmtpClients(list):
    """Clients created during a test, in creation order."""

    def __init__(self, monkeypatch, smtp_class):
        super().__init__()
        self._monkeypatch = monkeypatch
        self._smtp_class = smtp_class

    def configure(self, **behavior):
        """Set DummySMTP behavior (connect_error, send_error, quit_error, refused, block_send)."""
        for name, value in behavior.items():
            self._monkeypatch.setattr(self._smtp_class, name, value)


@pytest.fixture
def smtp_clients(monkeypatch):
    """Replace aiosmtplib.SMTP with DummySMTP and collect every client created."""

    class RecordingSMTP(DummySMTP):
        def __init__(self, **kwargs):
            super().__init__(**kwargs)
            created.append(self)

    created = SmtpClients(monkeypatch, RecordingSMTP)
    monkeypatch.setattr("smtp_mailer.transport.aiosmtplib.SMTP", RecordingSMTP)
    return created


@pytest.fixture
def make_config():
    def factory(**overrides):
        fields = dict(
            sender="reports@example.com",
            password="secret",
            smtp_host="smtp.local",
            smtp_port=587,
            to="a@x.com,b@x.com",
            subject="Hi",
            body="<p>hi</p>",
        )
        fields.update(overrides)
        return MailConfiguration(**fields)

    return factory


@pytest.fixture
def clean_mailer_env(monkeypatch, tmp_path):
    """Drop every MAILER_* variable and run from an empty directory."""
    for name in [name for name in os.environ if name.startswith("MAILER_")]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
