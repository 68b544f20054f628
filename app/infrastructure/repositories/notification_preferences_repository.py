"""Persistence helpers for notification preferences."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from app.domain.entities import (
    CHANNELS,
    NotificationPreferences,
    QuietHours,
    TypePreference,
)
from app.infrastructure.models import NotificationPreferencesModel
from app.utils import ensure_app_naive_datetime, ensure_app_timezone


class NotificationPreferencesRepository:
    """Load and store one preferences row per user."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_user(self, user_id: str) -> NotificationPreferences | None:
        model = self.session.get(NotificationPreferencesModel, user_id)
        return self._to_entity(model) if model is not None else None

    def create(self, preferences: NotificationPreferences) -> NotificationPreferences:
        model = NotificationPreferencesModel(user_id=preferences.user_id)
        self._apply_entity_to_model(model, preferences)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, preferences: NotificationPreferences) -> NotificationPreferences:
        model = self.session.get(NotificationPreferencesModel, preferences.user_id)
        if model is None:
            model = NotificationPreferencesModel(user_id=preferences.user_id)
        self._apply_entity_to_model(model, preferences)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationPreferencesModel, preferences: NotificationPreferences
    ) -> None:
        model.channels = dict(preferences.channels)
        model.types = {
            name: {"enabled": value.enabled, "channels": list(value.channels)}
            for name, value in preferences.types.items()
        }
        model.quiet_hours_enabled = preferences.quiet_hours.enabled
        model.quiet_hours_start = preferences.quiet_hours.start
        model.quiet_hours_end = preferences.quiet_hours.end
        model.quiet_hours_timezone = preferences.quiet_hours.timezone
        model.updated_at = ensure_app_naive_datetime(preferences.updated_at)

    @staticmethod
    def _to_entity(model: NotificationPreferencesModel) -> NotificationPreferences:
        stored_channels: dict[str, Any] = model.channels or {}
        stored_types: dict[str, Any] = model.types or {}
        return NotificationPreferences(
            user_id=model.user_id,
            channels={
                channel: bool(stored_channels.get(channel, True)) for channel in CHANNELS
            },
            types={
                name: TypePreference(
                    enabled=bool(value.get("enabled", True)),
                    channels=list(value.get("channels") or []),
                )
                for name, value in stored_types.items()
            },
            quiet_hours=QuietHours(
                enabled=bool(model.quiet_hours_enabled),
                start=model.quiet_hours_start,
                end=model.quiet_hours_end,
                timezone=model.quiet_hours_timezone,
            ),
            updated_at=ensure_app_timezone(model.updated_at),
        )


__all__ = ["NotificationPreferencesRepository"]
