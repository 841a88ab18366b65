"""Conditional refresh helpers for polling clients."""

from __future__ import annotations

from datetime import datetime

from ..domain import as_utc


def parse_since(value: str | None) -> datetime | None:
    """Parse an ISO-8601 watermark; unparseable values are ignored."""

    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def has_changes(latest: datetime | None, since: datetime | None) -> bool:
    """Return ``False`` only when ``latest`` is known and not newer than ``since``.

    Equal timestamps mean "no change".
    """

    if since is None or latest is None:
        return True
    return as_utc(latest) > as_utc(since)
