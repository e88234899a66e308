"""Outbound mail used by the password reset flow."""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from threadline.core.settings import Settings, settings

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    """Anything able to deliver a plain-text message."""

    def send(self, to: str, subject: str, body: str) -> bool:
        """Deliver a message and report whether it was accepted."""
        ...


class LogMailer:
    """Mailer that only logs messages; used when no SMTP relay is configured."""

    def __init__(self) -> None:
        self.outbox: list[EmailMessage] = []

    def send(self, to: str, subject: str, body: str) -> bool:
        message = _build_message(settings.smtp_sender, to, subject, body)
        self.outbox.append(message)
        logger.info("Mail to %s not sent (no SMTP relay configured): %s", to, subject)
        return True


class SmtpMailer:
    """Deliver messages through an SMTP relay."""

    def __init__(self, config: Settings) -> None:
        self.config = config

    def send(self, to: str, subject: str, body: str) -> bool:
        message = _build_message(self.config.smtp_sender, to, subject, body)
        try:
            with smtplib.SMTP(
                self.config.smtp_host or "localhost",
                self.config.smtp_port,
                timeout=self.config.smtp_timeout_seconds,
            ) as client:
                if self.config.smtp_use_tls:
                    client.starttls()
                if self.config.smtp_username:
                    client.login(self.config.smtp_username, self.config.smtp_password or "")
                client.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Error sending email to %s: %s", to, exc)
            return False
        logger.info("Email sent to %s: %s", to, subject)
        return True


def _build_message(sender: str, to: str, subject: str, body: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body)
    return message


def get_mailer() -> Mailer:
    """Return the mailer matching the current configuration."""
    if settings.smtp_enabled:
        return SmtpMailer(settings)
    return LogMailer()
