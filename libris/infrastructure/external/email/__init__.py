"""Outbound transactional email: templates, transports, best-effort notifier."""

from libris.infrastructure.external.email.dispatchers import (
    LogOnlyNotificationDispatcher,
    SmtpNotificationDispatcher,
    build_dispatcher,
)
from libris.infrastructure.external.email.notifier import BestEffortNotifier, DeferredNotifier
from libris.infrastructure.external.email.templates import EmailTemplateRenderer

__all__ = [
    "BestEffortNotifier",
    "DeferredNotifier",
    "EmailTemplateRenderer",
    "LogOnlyNotificationDispatcher",
    "SmtpNotificationDispatcher",
    "build_dispatcher",
]
