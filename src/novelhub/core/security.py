"""Token helpers built on python-jose."""
from __future__ import annotations

import secrets
from datetime import timedelta

from jose import JWTError, jwt

from novelhub.core.errors import UnauthorizedError
from novelhub.core.settings import settings
from novelhub.db.time import utcnow

BEARER_PREFIX = "Bearer "


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Issue a signed access token whose subject is the user id."""
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> int:
    """Return the user id carried by an access token.

    Raises:
        UnauthorizedError: If the token is expired, tampered with or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise UnauthorizedError("Could not validate credentials") from err

    subject = payload.get("sub")
    if subject is None:
        raise UnauthorizedError("Could not validate credentials")
    try:
        return int(subject)
    except (TypeError, ValueError) as err:
        raise UnauthorizedError("Could not validate credentials") from err


def verify_scheduler_credential(authorization: str | None, secret: str | None) -> None:
    """Check an ``Authorization`` header against the scheduler's shared secret.

    A ``None`` or empty secret disables the check.

    Raises:
        UnauthorizedError: If a secret is configured and the header does not carry it.
    """
    if not secret:
        return
    expected = f"{BEARER_PREFIX}{secret}"
    if authorization is None or not secrets.compare_digest(
        authorization.encode("utf-8"), expected.encode("utf-8")
    ):
        raise UnauthorizedError("Unauthorized")
