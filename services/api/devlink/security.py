"""
Credential helpers: password hashing and signed access tokens.

Tokens are HS256 JWTs carrying ``{"user": {"id", "name"}}`` plus ``iat`` and
``exp`` claims, signed with ``Settings.jwt_secret_key``. Clients send them in
the ``x-auth-token`` header (``Authorization: Bearer <token>`` also works).
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Header, Request
from werkzeug.security import check_password_hash, generate_password_hash

from devlink.config import Settings
from devlink.errors import Unauthorized
from devlink.telemetry import AUTH_FAILURES_TOTAL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Identity claim extracted from a verified token."""
    id: str
    name: str


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def create_access_token(identity: Identity, settings: Settings) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user": {"id": identity.id, "name": identity.name},
        "iat": now,
        "exp": now + timedelta(seconds=settings.jwt_expires_seconds),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_access_token(token: Optional[str], settings: Settings) -> Identity:
    """
    Verify signature and expiry and return the embedded identity.

    Raises Unauthorized for a missing, malformed, foreign-signed or expired
    token, and for a token whose payload lacks the user claim.
    """
    if not token:
        raise Unauthorized("No token, authorization denied")
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise Unauthorized("Token is not valid")
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected invalid token: %s", exc)
        raise Unauthorized("Token is not valid")

    user = payload.get("user")
    if not isinstance(user, dict) or not user.get("id"):
        raise Unauthorized("Token is not valid")
    return Identity(id=str(user["id"]), name=str(user.get("name", "")))


def _extract_token(x_auth_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
    if x_auth_token:
        return x_auth_token.strip()
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip()
    return None


async def get_current_identity(
    request: Request,
    x_auth_token: Optional[str] = Header(None, alias="x-auth-token"),
    authorization: Optional[str] = Header(None),
) -> Identity:
    """FastAPI dependency guarding private routes."""
    settings: Settings = request.app.state.settings
    token = _extract_token(x_auth_token, authorization)
    try:
        return verify_access_token(token, settings)
    except Unauthorized:
        AUTH_FAILURES_TOTAL.labels(reason="missing" if not token else "invalid").inc()
        raise
