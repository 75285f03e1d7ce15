# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Command-line interface for smtp-mailer.

Sends a single HTML mail using the SMTP settings from config.ini or the
MAILER_* environment variables.

Usage:
    smtp-mailer send --to a@x.com,b@x.com --subject "Hi" --body "<p>hi</p>"
    smtp-mailer send --config /etc/mailer.ini --to ops@x.com --cc lead@x.com \\
        --subject "Nightly report" --body-file report.html --attach report.pdf
    smtp-mailer send --to ops@x.com --subject "Ping" --body "<b>up</b>" --async --user-state job-42
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console

from .attachments import Attachment
from .config_loader import build_configuration, load_smtp_settings
from .logger import configure_logging
from .sender import DEFAULT_USER_STATE, MailSender

console = Console()
err_console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_notice(message: str) -> None:
    console.print(f"[yellow]![/yellow] {message}")


async def _send_in_background(sender: MailSender, user_state: str) -> str | None:
    results: list[str] = []
    task = sender.send_async(results.append, user_state=user_state)
    if task is None:
        return None
    # The done-callback registered by send_async runs before wait() wakes up.
    await asyncio.wait([task])
    return results[0] if results else None


@click.group()
@click.option("--log-level", default=None, help="Logging level (default: $MAILER_LOG_LEVEL or INFO).")
def main(log_level: str | None) -> None:
    """Send HTML mail through an SMTP server."""
    configure_logging(log_level)


@main.command()
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), help="INI file with an [smtp] section.")
@click.option("--to", "to", required=True, help="Comma-separated primary recipients.")
@click.option("--cc", multiple=True, help="CC recipient (repeatable).")
@click.option("--bcc", multiple=True, help="BCC recipient (repeatable).")
@click.option("--subject", default="", help="Message subject.")
@click.option("--body", default=None, help="HTML body.")
@click.option("--body-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Read the HTML body from a file.")
@click.option("--attach", "attach", multiple=True, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="File to attach (repeatable).")
@click.option("--async", "use_async", is_flag=True, help="Send in the background and report through the completion callback.")
@click.option("--user-state", default=DEFAULT_USER_STATE, show_default=True, help="Correlation token reported by --async.")
def send(
    config_path: Path | None,
    to: str,
    cc: tuple[str, ...],
    bcc: tuple[str, ...],
    subject: str,
    body: str | None,
    body_file: Path | None,
    attach: tuple[Path, ...],
    use_async: bool,
    user_state: str,
) -> None:
    """Send one message."""
    if body is not None and body_file is not None:
        print_error("Use either --body or --body-file, not both")
        sys.exit(1)
    if body_file is not None:
        body = body_file.read_text(encoding="utf-8")

    try:
        settings = load_smtp_settings(config_path)
        config = build_configuration(
            settings,
            to=to,
            cc=list(cc),
            bcc=list(bcc),
            subject=subject,
            body=body or "",
            attachments=[Attachment.from_path(path) for path in attach],
        )
    except (FileNotFoundError, ValueError, ValidationError) as e:
        print_error(str(e))
        sys.exit(1)

    with MailSender(config) as sender:
        if use_async:
            try:
                result = asyncio.run(_send_in_background(sender, user_state))
            except Exception as e:
                print_error(f"Send failed: {e}")
                sys.exit(1)
            if result is None:
                print_notice("No recipients, nothing sent")
                return
            console.print(result, markup=False)
            if result != user_state:
                sys.exit(1)
            return

        try:
            outcome = sender.send()
        except Exception as e:
            print_error(f"Send failed: {e}")
            sys.exit(1)
        if outcome is None:
            print_notice("No recipients, nothing sent")
            return
        print_success(f"Message sent to {config.to}")


if __name__ == "__main__":
    main()
