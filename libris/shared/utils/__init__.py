"""Shared utilities: UTC datetime helpers and generators."""

from libris.shared.utils.datetime import (
    ensure_utc,
    from_timestamp_utc,
    isoformat_utc,
    utc_now,
)
from libris.shared.utils.generators import generate_cuid, generate_temp_password

__all__ = [
    "ensure_utc",
    "from_timestamp_utc",
    "generate_cuid",
    "generate_temp_password",
    "isoformat_utc",
    "utc_now",
]
