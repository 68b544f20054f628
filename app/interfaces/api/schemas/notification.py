"""Pydantic models describing websocket frames sent by notification clients."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

MAX_IDS_PER_FRAME = 100


class NotificationClientFrame(BaseModel):
    """Frame received from a client: ``ping``, ``ack`` (read) or ``delivered``."""

    type: Literal["ping", "ack", "delivered"]
    ids: list[str] = Field(default_factory=list, max_length=MAX_IDS_PER_FRAME)

    def unique_ids(self) -> list[str]:
        """Return the list of identifiers without duplicates preserving order."""

        unique: list[str] = []
        seen: set[str] = set()
        for notification_id in self.ids:
            if not notification_id or notification_id in seen:
                continue
            seen.add(notification_id)
            unique.append(notification_id)
        return unique


__all__ = ["MAX_IDS_PER_FRAME", "NotificationClientFrame"]
