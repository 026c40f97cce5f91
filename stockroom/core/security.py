"""Signed session tokens.

The auth service and the backend share ``SESSION_SECRET``; a session token is
a JWT whose ``sub`` is the user id and whose remaining claims mirror the
session contract (name, email, role, theme, language).
"""

from datetime import datetime, timedelta, timezone

from jose import jwt

from stockroom.core.config import get_settings


def create_session_token(
    user_id: str,
    *,
    email: str | None = None,
    name: str | None = None,
    role: str = "USER",
    theme: str = "LIGHT",
    language: str = "en",
    expires_delta: timedelta | None = None,
) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.session_max_age_days)
    )
    payload = {
        "sub": user_id,
        "email": email,
        "name": name,
        "role": role,
        "theme": theme,
        "language": language,
        "exp": expire,
    }
    return jwt.encode(payload, settings.session_secret, algorithm=settings.session_algorithm)


def decode_session_token(token: str) -> dict:
    """Decode and verify a session token. Raises jose.JWTError on failure."""
    settings = get_settings()
    return jwt.decode(token, settings.session_secret, algorithms=[settings.session_algorithm])
