"""Email transports: SMTP (smtplib in a worker thread) and log-only.

The SMTP dispatcher keeps one connection open for the process. All access
to it goes through an asyncio.Lock. When a send fails because the server
dropped the connection, it reconnects and retries that message once.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from libris.core.config import Settings, get_settings
from libris.shared.telemetry.logging import get_logger
from libris.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class SmtpNotificationDispatcher:
    """INotificationDispatcher over a long-lived SMTP connection."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._smtp: smtplib.SMTP | None = None
        self._lock = asyncio.Lock()

    def _open(self) -> smtplib.SMTP:
        s = self.settings
        smtp = smtplib.SMTP(s.smtp_host or "", s.smtp_port, timeout=s.smtp_timeout_seconds)
        if s.smtp_use_tls:
            smtp.starttls()
        if s.smtp_username and s.smtp_password:
            smtp.login(s.smtp_username, s.smtp_password.get_secret_value())
        return smtp

    def _close(self) -> None:
        if self._smtp is None:
            return
        try:
            self._smtp.quit()
        except smtplib.SMTPException:
            logger.debug("SMTP quit failed; dropping connection")
        finally:
            self._smtp = None

    def _build_message(self, to_address: str, subject: str, html_body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.settings.email_from
        message["To"] = to_address
        message["Subject"] = subject
        message.set_content("This message requires an HTML-capable email client.")
        message.add_alternative(html_body, subtype="html")
        return message

    async def connect(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._close)
            self._smtp = await asyncio.to_thread(self._open)
        logger.info(
            "SMTP connected: %s:%s", self.settings.smtp_host, self.settings.smtp_port
        )

    async def send(self, to_address: str, subject: str, html_body: str) -> None:
        message = self._build_message(to_address, subject, html_body)
        async with self._lock:
            if self._smtp is None:
                self._smtp = await asyncio.to_thread(self._open)
            try:
                await asyncio.to_thread(self._smtp.send_message, message)
            except (smtplib.SMTPServerDisconnected, OSError):
                logger.warning("SMTP connection lost; reconnecting and retrying once")
                await asyncio.to_thread(self._close)
                self._smtp = await asyncio.to_thread(self._open)
                await asyncio.to_thread(self._smtp.send_message, message)

    async def close(self) -> None:
        async with self._lock:
            await asyncio.to_thread(self._close)
        logger.info("SMTP connection closed")


class LogOnlyNotificationDispatcher:
    """INotificationDispatcher that logs instead of sending email.

    Use when no SMTP is configured (local development and tests).
    """

    async def connect(self) -> None:
        logger.info("Email backend is log-only; messages will not be delivered")

    async def send(self, to_address: str, subject: str, html_body: str) -> None:
        """Log the message; nothing is sent."""
        logger.info("Email: would send %r to %s", (subject or "")[:80], to_address)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Email body for %s (at %s, first 500 chars): %s",
                to_address,
                utc_now().isoformat(),
                (html_body or "")[:500],
            )

    async def close(self) -> None:
        return None


def build_dispatcher(settings: Settings | None = None) -> SmtpNotificationDispatcher | LogOnlyNotificationDispatcher:
    """Pick the transport named by settings.email_backend."""
    settings = settings or get_settings()
    if settings.email_backend == "smtp":
        return SmtpNotificationDispatcher(settings)
    return LogOnlyNotificationDispatcher()
