"""Outcome of a single delivery attempt through one channel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DeliveryResult:
    """Success flag and details reported by a delivery adapter."""

    success: bool
    channel: str
    error: str | None = None
    metadata: dict[str, Any] | None = None

    @classmethod
    def ok(cls, channel: str, **metadata: Any) -> "DeliveryResult":
        return cls(success=True, channel=channel, metadata=metadata or None)

    @classmethod
    def failed(cls, channel: str, error: str, **metadata: Any) -> "DeliveryResult":
        return cls(success=False, channel=channel, error=error, metadata=metadata or None)


__all__ = ["DeliveryResult"]
