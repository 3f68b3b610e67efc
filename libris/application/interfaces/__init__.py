"""Ports (Protocols) the identity lifecycle depends on."""

from libris.application.interfaces.repositories import IAccountRepository
from libris.application.interfaces.services import (
    INotificationDispatcher,
    INotifier,
    IRevocationStore,
    ISessionTokenIssuer,
)

__all__ = [
    "IAccountRepository",
    "INotificationDispatcher",
    "INotifier",
    "IRevocationStore",
    "ISessionTokenIssuer",
]
