"""Async stores backed by the SQLAlchemy repositories.

Each call opens its own session and runs the blocking repository method in a
worker thread through :mod:`anyio`.
"""

from __future__ import annotations

import logging
from datetime import datetime
from functools import partial
from typing import Callable, Iterable, TypeVar

from anyio import to_thread
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.domain.entities import (
    Notification,
    NotificationFilters,
    NotificationPreferences,
    NotificationStats,
    PaginatedResult,
    ServicesPlan,
    UserContact,
)
from app.domain.exceptions import NotFoundError

from .notification_preferences_repository import NotificationPreferencesRepository
from .notification_repository import NotificationRepository
from .services_plan_repository import ServicesPlanRepository
from .user_contact_repository import UserContactRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _SessionRunner:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    async def _run(self, operation: Callable[[Session], T]) -> T:
        return await to_thread.run_sync(partial(self._run_sync, operation))

    def _run_sync(self, operation: Callable[[Session], T]) -> T:
        with self._session_factory() as session:
            return operation(session)


class SqlNotificationStore(_SessionRunner):
    """:class:`NotificationStore` implementation over SQLAlchemy."""

    async def create(self, notification: Notification) -> Notification:
        return await self._run(lambda session: NotificationRepository(session).create(notification))

    async def find_by_id(self, notification_id: str) -> Notification | None:
        return await self._run(lambda session: NotificationRepository(session).get(notification_id))

    async def find_by_user(
        self,
        user_id: str,
        filters: NotificationFilters,
        *,
        page: int,
        limit: int,
    ) -> PaginatedResult:
        items, total = await self._run(
            lambda session: NotificationRepository(session).list_for_user(
                user_id, filters, skip=(page - 1) * limit, limit=limit
            )
        )
        return PaginatedResult(items=list(items), page=page, limit=limit, total_items=total)

    async def list_unread(self, user_id: str, *, limit: int | None = 50) -> list[Notification]:
        items = await self._run(
            lambda session: NotificationRepository(session).list_unread_for_user(
                user_id, limit=limit
            )
        )
        return list(items)

    async def transition(
        self,
        notification_id: str,
        status: str,
        *,
        from_statuses: Iterable[str],
        sent_at: datetime | None = None,
        read_at: datetime | None = None,
    ) -> Notification | None:
        sources = frozenset(from_statuses)
        return await self._run(
            lambda session: NotificationRepository(session).transition(
                notification_id,
                status,
                from_statuses=sources,
                sent_at=sent_at,
                read_at=read_at,
            )
        )

    async def delete(self, notification_id: str) -> bool:
        return await self._run(lambda session: NotificationRepository(session).delete(notification_id))

    async def mark_all_read(self, user_id: str, *, read_at: datetime) -> int:
        return await self._run(
            lambda session: NotificationRepository(session).mark_all_read(
                user_id, read_at=read_at
            )
        )

    async def get_stats(self, user_id: str) -> NotificationStats:
        return await self._run(lambda session: NotificationRepository(session).stats_for_user(user_id))


class SqlPreferencesStore(_SessionRunner):
    """:class:`PreferencesStore` implementation over SQLAlchemy."""

    async def find_by_user(self, user_id: str) -> NotificationPreferences | None:
        return await self._run(
            lambda session: NotificationPreferencesRepository(session).get_by_user(user_id)
        )

    async def create(self, preferences: NotificationPreferences) -> NotificationPreferences:
        def _create(session: Session) -> NotificationPreferences:
            repository = NotificationPreferencesRepository(session)
            try:
                return repository.create(preferences)
            except IntegrityError:
                # Another worker created the defaults first.
                session.rollback()
                logger.debug("Preferences for %s already exist", preferences.user_id)
                existing = repository.get_by_user(preferences.user_id)
                if existing is None:
                    raise
                return existing

        return await self._run(_create)

    async def update(self, preferences: NotificationPreferences) -> NotificationPreferences:
        return await self._run(
            lambda session: NotificationPreferencesRepository(session).update(preferences)
        )


class SqlServicesPlanStore(_SessionRunner):
    """:class:`ServicesPlanStore` implementation over SQLAlchemy."""

    async def find_by_id(self, plan_id: str) -> ServicesPlan | None:
        return await self._run(lambda session: ServicesPlanRepository(session).get(plan_id))

    async def list_by_care_plan(self, care_plan_id: str) -> list[ServicesPlan]:
        plans = await self._run(
            lambda session: ServicesPlanRepository(session).list_by_care_plan(care_plan_id)
        )
        return list(plans)

    async def update_status(self, plan_id: str, status: str) -> ServicesPlan:
        def _update(session: Session) -> ServicesPlan:
            try:
                return ServicesPlanRepository(session).update_status(plan_id, status)
            except ValueError as exc:
                raise NotFoundError(str(exc)) from exc

        return await self._run(_update)


class SqlContactDirectory(_SessionRunner):
    """:class:`ContactDirectory` implementation over SQLAlchemy."""

    async def get_contact(self, user_id: str) -> UserContact | None:
        return await self._run(lambda session: UserContactRepository(session).get(user_id))


__all__ = [
    "SqlContactDirectory",
    "SqlNotificationStore",
    "SqlPreferencesStore",
    "SqlServicesPlanStore",
]
