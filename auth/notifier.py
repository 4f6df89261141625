"""
auth/notifier.py -- Outbound notification port for verification and reset links.

AuthService depends on the Notifier protocol, not on a mail transport. Two
implementations ship:

  LogNotifier  -- development default. Logs the link instead of sending it.
  SmtpNotifier -- stdlib smtplib with STARTTLS + login.

build_notifier() picks one from Settings: an empty SMTP_HOST means LogNotifier.

Delivery is fire-and-forget from the service's point of view. AuthService
wraps every call and logs failures, so an implementation may simply raise.
"""

from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol
from urllib.parse import quote

from core.config import Settings

logger = logging.getLogger("mindconnect.auth.notifier")


class Notifier(Protocol):
    def send_verification(self, email: str, token: str) -> None: ...

    def send_password_reset(self, email: str, token: str) -> None: ...


def _link(frontend_url: str, path: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}{path}?token={quote(token)}"


class LogNotifier:
    """Writes the would-be email to the log. Used in development and tests."""

    def __init__(self, frontend_url: str) -> None:
        self.frontend_url = frontend_url

    def send_verification(self, email: str, token: str) -> None:
        logger.info("Verification link for %s: %s", email, _link(self.frontend_url, "/auth/verify-email", token))

    def send_password_reset(self, email: str, token: str) -> None:
        logger.info("Password reset link for %s: %s", email, _link(self.frontend_url, "/auth/reset-password", token))


class SmtpNotifier:
    """Sends plain-text + HTML mail through an SMTP relay.

    A new connection is opened per message. Volume is a handful of mails per
    registration, and a fresh connection never hands a half-dead socket to a
    request thread.
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        sender: str,
        frontend_url: str,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.frontend_url = frontend_url
        self.timeout = timeout

    def send_verification(self, email: str, token: str) -> None:
        url = _link(self.frontend_url, "/auth/verify-email", token)
        body = (
            "Welcome to MindConnect!\n\n"
            "To activate your account, open the link below:\n"
            f"{url}\n\n"
            "The link expires in 24 hours. If you did not sign up, ignore this email.\n"
        )
        self._send(email, "Verify your MindConnect account", body, url, "Verify email")

    def send_password_reset(self, email: str, token: str) -> None:
        url = _link(self.frontend_url, "/auth/reset-password", token)
        body = (
            "We received a request to reset your MindConnect password.\n\n"
            f"{url}\n\n"
            "The link expires in 1 hour. If you did not ask for a reset, ignore this email.\n"
        )
        self._send(email, "Reset your MindConnect password", body, url, "Reset password")

    def _send(self, to: str, subject: str, body: str, url: str, label: str) -> None:
        message = MIMEMultipart("alternative")
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.attach(MIMEText(body, "plain"))
        message.attach(MIMEText(f'<p>{body.splitlines()[0]}</p><p><a href="{url}">{label}</a></p>', "html"))

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            server.starttls()
            if self.user:
                server.login(self.user, self.password)
            server.send_message(message)
        logger.info("Sent '%s' to %s", subject, to)


def build_notifier(settings: Settings) -> Notifier:
    if not settings.smtp_host:
        logger.info("SMTP_HOST not set -- notification links will be logged, not mailed")
        return LogNotifier(settings.frontend_url)
    return SmtpNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.mail_from,
        frontend_url=settings.frontend_url,
    )
