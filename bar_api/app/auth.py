# auth.py

"""Bearer-token checks for operator-only routes.

Operators sign in elsewhere; this module only answers "is this caller an
authenticated operator" from an HS256 JWT carrying ``sub`` and ``role``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from config import get_settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 12 * 60
OPERATOR_ROLES = frozenset({"owner", "manager", "operator"})

bearer_scheme = HTTPBearer(auto_error=False)


class User(BaseModel):
    """Caller identity extracted from a verified token."""

    username: str
    role: str


def create_access_token(
    sub: str, role: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed JWT for ``sub`` with ``role``."""

    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {"sub": sub, "role": role, "exp": expire}
    return jwt.encode(payload, get_settings().secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[User]:
    """Return the :class:`User` in ``token`` or ``None`` if it does not verify."""

    try:
        payload = jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None
    username = payload.get("sub")
    role = payload.get("role")
    if not isinstance(username, str) or not isinstance(role, str):
        return None
    return User(username=username, role=role)


def is_authenticated_operator(token: Optional[str]) -> bool:
    user = decode_token(token) if token else None
    return user is not None and user.role in OPERATOR_ROLES


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """Resolve the user from a bearer token or raise ``HTTPException``."""

    user = decode_token(credentials.credentials) if credentials else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_operator(user: User = Depends(get_current_user)) -> User:
    """Dependency allowing only operator roles through."""

    if user.role not in OPERATOR_ROLES:
        logger.warning("operator route denied user=%s role=%s", user.username, user.role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient privileges"
        )
    return user
