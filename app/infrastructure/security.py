"""JWT helpers used to authenticate websocket clients."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import Settings, get_settings

ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(minutes=60)


def create_access_token(
    subject: str,
    *,
    expires_delta: timedelta | None = None,
    settings: Settings | None = None,
) -> str:
    """Return a signed token whose ``sub`` claim is ``subject``."""

    settings = settings or get_settings()
    expire = datetime.now(timezone.utc) + (expires_delta or DEFAULT_TOKEN_TTL)
    return jwt.encode({"sub": subject, "exp": expire}, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, *, settings: Settings | None = None) -> dict:
    settings = settings or get_settings()
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def user_id_from_token(token: str, *, settings: Settings | None = None) -> str:
    """Return the user id carried by ``token`` or raise ``ValueError``."""

    payload = decode_access_token(token, settings=settings)
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise ValueError("Token has no subject")
    return subject


__all__ = ["create_access_token", "decode_access_token", "user_id_from_token"]
