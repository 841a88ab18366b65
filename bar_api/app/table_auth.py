"""Sign and verify table QR links.

A table link carries the table code and an HMAC-SHA256 of that code keyed
with ``TABLE_QR_SIGNING_SECRET``. Orders presenting a valid pair are tagged
as coming from that table; anything else is downgraded to a counter order
rather than rejected.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
from dataclasses import dataclass
from urllib.parse import urlencode

from .domain import OrderSource

logger = logging.getLogger(__name__)

TABLE_CODE_RE = re.compile(r"^[A-Z0-9][A-Z0-9_-]{0,19}$")
SIGNATURE_RE = re.compile(r"^[a-f0-9]{64}$")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class OrderOrigin:
    """Result of classifying an order's claimed origin."""

    source: OrderSource
    table_code: str | None = None


COUNTER = OrderOrigin(OrderSource.COUNTER)


def normalize_table_code(value: object) -> str | None:
    """Return ``value`` as an uppercase table code or ``None`` if invalid."""

    if not isinstance(value, str):
        return None
    cleaned = _WHITESPACE_RE.sub("", value.strip().upper())
    if not cleaned or not TABLE_CODE_RE.match(cleaned):
        return None
    return cleaned


def sign_table_code(table_code: str, secret: str) -> str:
    """Return the hex HMAC-SHA256 of ``table_code`` under ``secret``."""

    return hmac.new(
        secret.encode(), table_code.encode(), hashlib.sha256
    ).hexdigest()


def verify_table_signature(table_code: str, signature: str, secret: str) -> bool:
    """Check ``signature`` for ``table_code`` in constant time.

    Malformed signatures fail before any comparison; well-formed ones are
    compared as raw digests with :func:`hmac.compare_digest`.
    """

    if not SIGNATURE_RE.match(signature):
        return False
    expected = bytes.fromhex(sign_table_code(table_code, secret))
    supplied = bytes.fromhex(signature)
    if len(expected) != len(supplied):
        return False
    return hmac.compare_digest(expected, supplied)


def resolve_order_origin(
    table_code: object, signature: object, secret: str | None
) -> OrderOrigin:
    """Classify an order as a verified table order or a counter order.

    Without a configured ``secret`` any well-formed table code is trusted.
    """

    code = normalize_table_code(table_code)
    if code is None:
        return COUNTER
    if not secret:
        return OrderOrigin(OrderSource.VERIFIED_TABLE, code)

    token = signature.strip().lower() if isinstance(signature, str) else ""
    if not verify_table_signature(code, token, secret):
        logger.warning("table signature rejected table=%s", code)
        return COUNTER
    return OrderOrigin(OrderSource.VERIFIED_TABLE, code)


def build_table_link(base_url: str, table_code: str, secret: str | None) -> str:
    """Return the ordering link encoded in a table's QR code."""

    params = {"table": table_code}
    if secret:
        params["token"] = sign_table_code(table_code, secret)
    return f"{base_url.rstrip('/')}/?{urlencode(params)}"
