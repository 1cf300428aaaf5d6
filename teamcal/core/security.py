"""
Security utilities - session id generation and cookie signing.

The cookie never carries session data, only the opaque session id.
The id is wrapped in an HS256 JWS signed with SESSION_SECRET so a
forged or edited cookie is rejected before the store is consulted.
"""

import secrets
from typing import Optional

from jose import JWTError, jwt

from teamcal.core.config import settings


ALGORITHM = "HS256"


def generate_session_id() -> str:
    """Random, URL-safe session identifier (32 bytes of entropy)."""
    return secrets.token_urlsafe(32)


def sign_session_id(session_id: str, secret: Optional[str] = None) -> str:
    """
    Produce the cookie value for a session id.

    Args:
        session_id: Opaque id used as the session store key
        secret: Signing key (defaults to settings.SESSION_SECRET)

    Returns:
        Compact JWS string, safe to place in a cookie
    """
    return jwt.encode({"sid": session_id}, secret or settings.SESSION_SECRET, algorithm=ALGORITHM)


def unsign_session_id(cookie_value: str, secret: Optional[str] = None) -> Optional[str]:
    """
    Recover the session id from a cookie value.

    Returns None for anything that was not signed with our secret.
    Expiry is enforced by the store TTL, not by the cookie.
    """
    try:
        payload = jwt.decode(cookie_value, secret or settings.SESSION_SECRET, algorithms=[ALGORITHM])
    except JWTError:
        return None

    session_id = payload.get("sid")
    if not isinstance(session_id, str) or not session_id:
        return None
    return session_id
