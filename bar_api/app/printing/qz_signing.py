"""Challenge signing for the QZ Tray print companion.

QZ Tray asks the server to sign an opaque challenge with the site's private
key before it accepts print jobs. This module only reads the key material
from the environment and produces the signature.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from typing import Mapping

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..errors import UpstreamUnavailableError, ValidationError

logger = logging.getLogger(__name__)

PRIVATE_KEY_ENV = "QZ_PRIVATE_KEY_PEM"
CERTIFICATE_ENV = "QZ_CERT_PEM"
MAX_CHALLENGE_CHARS = 20_000


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _normalize(value: str) -> str:
    return _strip_quotes(value.strip()).replace("\\n", "\n").strip()


def read_pem_from_env(key: str, environ: Mapping[str, str] | None = None) -> str | None:
    """Return the PEM stored in ``key`` or base64-encoded in ``key_BASE64``.

    Escaped ``\\n`` sequences and wrapping quotes are normalised. Returns
    ``None`` when neither variable holds a value.
    """

    env = os.environ if environ is None else environ
    raw = env.get(key, "")
    if raw.strip():
        return _normalize(raw)
    encoded = env.get(f"{key}_BASE64", "")
    if encoded.strip():
        try:
            decoded = base64.b64decode(_strip_quotes(encoded.strip()), validate=False)
            return _normalize(decoded.decode("utf-8")) or None
        except (binascii.Error, UnicodeDecodeError):
            logger.warning("%s_BASE64 is not valid base64", key)
            return None
    return None


def sign_challenge(to_sign: object, private_key_pem: str | None) -> str:
    """Sign ``to_sign`` with RSA PKCS#1 v1.5 over SHA-512, base64 encoded."""

    if not isinstance(to_sign, str) or not to_sign or len(to_sign) > MAX_CHALLENGE_CHARS:
        raise ValidationError(
            "to_sign must be a non-empty string",
            {"max_length": MAX_CHALLENGE_CHARS},
        )
    if not private_key_pem:
        logger.error("%s is not configured", PRIVATE_KEY_ENV)
        raise UpstreamUnavailableError(f"{PRIVATE_KEY_ENV} is not configured")
    try:
        key = serialization.load_pem_private_key(private_key_pem.encode(), password=None)
    except (ValueError, TypeError) as exc:
        logger.error("%s could not be loaded", PRIVATE_KEY_ENV)
        raise UpstreamUnavailableError(f"{PRIVATE_KEY_ENV} could not be loaded") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise UpstreamUnavailableError(f"{PRIVATE_KEY_ENV} must be an RSA key")
    signature = key.sign(to_sign.encode("utf-8"), padding.PKCS1v15(), hashes.SHA512())
    return base64.b64encode(signature).decode("ascii")
