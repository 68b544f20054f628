"""FastAPI dependency utilities."""

from __future__ import annotations

from fastapi import HTTPException, Request, WebSocket, status

from app.container import NotificationContainer
from app.infrastructure.security import user_id_from_token


def get_container(connection: Request | WebSocket) -> NotificationContainer:
    """Return the container stored on the application state."""

    container = getattr(connection.app.state, "container", None)
    if container is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification engine is not running",
        )
    return container


def resolve_user_id(token: str | None) -> str:
    """Return the user id carried by ``token`` or raise a 401 ``HTTPException``."""

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing credentials"
        )
    try:
        return user_id_from_token(token)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        ) from exc


__all__ = ["get_container", "resolve_user_id"]
