"""Human readable codes for orders and sessions.

Codes embed the creation date so staff can read them off a ticket, plus a
short random base-36 suffix. They are unique with high probability only;
callers insert optimistically and retry with a fresh code on conflict.
"""

from __future__ import annotations

import secrets
import string
from datetime import datetime

ALPHABET = string.digits + string.ascii_uppercase


def random_suffix(length: int) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def make_order_code(prefix: str, now: datetime) -> str:
    """Return ``<prefix>-YYYYMMDD-XXXX``."""

    return f"{prefix}-{now:%Y%m%d}-{random_suffix(4)}"


def make_session_code(prefix: str, now: datetime) -> str:
    """Return ``<prefix>-YYYYMMDD-HHMMSS-XX``."""

    return f"{prefix}-{now:%Y%m%d-%H%M%S}-{random_suffix(2)}"
