"""Session oracle — resolves inbound request credentials to a session user.

Contract: ``await oracle.fetch(cookies, headers)`` returns a ``SessionUser``
or ``None`` for a signed-out caller. Transport failures and malformed
answers raise ``UpstreamAuthError``; the request layer degrades those to an
anonymous caller.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping

import httpx
from jose import JWTError
from pydantic import BaseModel, ValidationError as PydanticValidationError, field_validator

from stockroom.core.config import Settings
from stockroom.core.errors import UpstreamAuthError
from stockroom.core.security import decode_session_token
from stockroom.models.user import Theme, UserRole

logger = logging.getLogger(__name__)


class SessionUser(BaseModel):
    """The ``user`` object of the session contract."""

    id: uuid.UUID
    name: str | None = None
    email: str | None = None
    role: UserRole = UserRole.USER
    theme: Theme = Theme.LIGHT
    language: str = "en"

    @field_validator("role", "theme", "language", mode="before")
    @classmethod
    def _default_when_missing(cls, v, info):
        if v is None:
            return cls.model_fields[info.field_name].default
        return v


class SessionOracle:
    async def fetch(
        self, cookies: Mapping[str, str], headers: Mapping[str, str]
    ) -> SessionUser | None:
        raise NotImplementedError

    async def aclose(self) -> None:
        pass


class SignedCookieSessionOracle(SessionOracle):
    """Verifies a session JWT from the session cookie or a bearer header."""

    def __init__(self, cookie_name: str) -> None:
        self.cookie_name = cookie_name

    def _extract_token(
        self, cookies: Mapping[str, str], headers: Mapping[str, str]
    ) -> str | None:
        token = cookies.get(self.cookie_name)
        if token:
            return token
        auth = headers.get("authorization", "")
        scheme, _, value = auth.partition(" ")
        if scheme.lower() == "bearer" and value:
            return value
        return None

    async def fetch(
        self, cookies: Mapping[str, str], headers: Mapping[str, str]
    ) -> SessionUser | None:
        token = self._extract_token(cookies, headers)
        if token is None:
            return None
        try:
            payload = decode_session_token(token)
        except JWTError:
            # expired or tampered cookie: treat as signed out
            logger.info("Rejected session token")
            return None
        try:
            return SessionUser(
                id=payload["sub"],
                name=payload.get("name"),
                email=payload.get("email"),
                role=payload.get("role"),
                theme=payload.get("theme"),
                language=payload.get("language"),
            )
        except (KeyError, PydanticValidationError) as exc:
            raise UpstreamAuthError("Malformed session token payload") from exc


class RemoteSessionOracle(SessionOracle):
    """Asks the auth service: ``GET {auth_url}/api/auth/session``."""

    FORWARDED_HEADERS = ("cookie", "authorization")

    def __init__(self, auth_url: str, client: httpx.AsyncClient | None = None) -> None:
        self.auth_url = auth_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=5.0)

    async def fetch(
        self, cookies: Mapping[str, str], headers: Mapping[str, str]
    ) -> SessionUser | None:
        forwarded = {
            name: headers[name] for name in self.FORWARDED_HEADERS if name in headers
        }
        try:
            resp = await self._client.get(f"{self.auth_url}/api/auth/session", headers=forwarded)
        except httpx.HTTPError as exc:
            raise UpstreamAuthError(f"Session fetch failed: {exc}") from exc

        if not resp.is_success:
            raise UpstreamAuthError(f"Session fetch failed: HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamAuthError("Session response is not JSON") from exc

        user = body.get("user") if isinstance(body, dict) else None
        if not user:
            return None
        try:
            return SessionUser.model_validate(user)
        except PydanticValidationError as exc:
            raise UpstreamAuthError("Malformed session user") from exc

    async def aclose(self) -> None:
        await self._client.aclose()


def build_session_oracle(settings: Settings) -> SessionOracle:
    if settings.session_backend == "remote":
        return RemoteSessionOracle(settings.auth_url)
    return SignedCookieSessionOracle(settings.session_cookie_name)
