"""DTOs for identity use cases (no dependency on ORM)."""

from libris.application.dtos.account import AccountView, LoginDeviceRecord, SessionTokens
from libris.application.dtos.result import Err, Ok, Result

__all__ = [
    "AccountView",
    "Err",
    "LoginDeviceRecord",
    "Ok",
    "Result",
    "SessionTokens",
]
