"""Where an order claims to come from."""

from __future__ import annotations

from enum import Enum


class OrderSource(str, Enum):
    """Trust classification attached to every order."""

    VERIFIED_TABLE = "verified_table"
    COUNTER = "counter"
