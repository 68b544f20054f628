"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime

from sqlalchemy import desc, func, or_
from sqlalchemy.orm import Query, Session

from app.domain.entities import (
    STATUS_READ,
    UNREAD_STATUSES,
    Notification,
    NotificationFilters,
    NotificationStats,
)
from app.infrastructure.models import NotificationModel
from app.utils import (
    ensure_app_naive_datetime,
    ensure_app_timezone,
    now_in_app_timezone,
)


class NotificationRepository:
    """Provide CRUD and query operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, notification_id: str) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        return self._to_entity(model) if model is not None else None

    def list_for_user(
        self,
        user_id: str,
        filters: NotificationFilters,
        *,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Notification], int]:
        """Return the requested slice and the total number of matches."""

        query = self._apply_filters(
            self.session.query(NotificationModel).filter(
                NotificationModel.user_id == user_id
            ),
            filters,
        )
        total = query.count()
        query = query.order_by(
            desc(NotificationModel.created_at), desc(NotificationModel.id)
        )
        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()], total

    def list_unread_for_user(
        self, user_id: str, *, limit: int | None = 50
    ) -> Sequence[Notification]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .filter(NotificationModel.status.in_(UNREAD_STATUSES))
            .order_by(desc(NotificationModel.created_at), desc(NotificationModel.id))
        )
        if limit is not None:
            query = query.limit(limit)
        return [self._to_entity(model) for model in query.all()]

    def create(self, notification: Notification) -> Notification:
        if notification.id is None:
            raise ValueError("Notification id is required")
        model = NotificationModel(id=notification.id)
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def transition(
        self,
        notification_id: str,
        status: str,
        *,
        from_statuses: Iterable[str],
        sent_at: datetime | None = None,
        read_at: datetime | None = None,
    ) -> Notification | None:
        """Move the notification to ``status`` if it is still in ``from_statuses``.

        The check and the write are one ``UPDATE`` statement, so a concurrent
        change of status makes this call match no row and return ``None``.
        """

        values: dict = {NotificationModel.status: status}
        if sent_at is not None:
            values[NotificationModel.sent_at] = ensure_app_naive_datetime(sent_at)
        if read_at is not None:
            values[NotificationModel.read_at] = ensure_app_naive_datetime(read_at)
        count = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.id == notification_id,
                NotificationModel.status.in_(list(from_statuses)),
            )
            .update(values, synchronize_session=False)
        )
        self.session.commit()
        if not count:
            return None
        self.session.expire_all()
        return self.get(notification_id)

    def delete(self, notification_id: str) -> bool:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return False
        self.session.delete(model)
        self.session.commit()
        return True

    def mark_all_read(self, user_id: str, *, read_at: datetime | None = None) -> int:
        """Mark every unread notification of ``user_id`` as read."""

        count = (
            self.session.query(NotificationModel)
            .filter(
                NotificationModel.user_id == user_id,
                NotificationModel.status.in_(UNREAD_STATUSES),
            )
            .update(
                {
                    NotificationModel.status: STATUS_READ,
                    NotificationModel.read_at: ensure_app_naive_datetime(
                        read_at or now_in_app_timezone()
                    ),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return count

    def stats_for_user(self, user_id: str) -> NotificationStats:
        base = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )
        total = base.count()
        unread = base.filter(NotificationModel.status.in_(UNREAD_STATUSES)).count()
        by_category = dict(
            self.session.query(NotificationModel.category, func.count(NotificationModel.id))
            .filter(NotificationModel.user_id == user_id)
            .group_by(NotificationModel.category)
            .all()
        )
        by_priority = dict(
            self.session.query(NotificationModel.priority, func.count(NotificationModel.id))
            .filter(NotificationModel.user_id == user_id)
            .group_by(NotificationModel.priority)
            .all()
        )
        return NotificationStats(
            total=total,
            unread=unread,
            by_category=by_category,
            by_priority=by_priority,
        )

    @staticmethod
    def _apply_filters(query: Query, filters: NotificationFilters) -> Query:
        if filters.type:
            query = query.filter(NotificationModel.type == filters.type)
        if filters.category:
            query = query.filter(NotificationModel.category == filters.category)
        if filters.status:
            query = query.filter(NotificationModel.status == filters.status)
        if filters.priority:
            query = query.filter(NotificationModel.priority == filters.priority)
        if filters.start_date is not None:
            query = query.filter(
                NotificationModel.created_at
                >= ensure_app_naive_datetime(filters.start_date)
            )
        if filters.end_date is not None:
            query = query.filter(
                NotificationModel.created_at
                <= ensure_app_naive_datetime(filters.end_date)
            )
        if filters.search and filters.search.strip():
            term = filters.search.strip()
            query = query.filter(
                or_(
                    NotificationModel.title.icontains(term, autoescape=True),
                    NotificationModel.message.icontains(term, autoescape=True),
                )
            )
        if filters.read is True:
            query = query.filter(NotificationModel.status == STATUS_READ)
        elif filters.read is False:
            query = query.filter(NotificationModel.status.in_(UNREAD_STATUSES))
        return query

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        model.created_at = ensure_app_naive_datetime(
            notification.created_at or now_in_app_timezone()
        )
        model.user_id = notification.user_id
        model.type = notification.type
        model.category = notification.category
        model.priority = notification.priority
        model.title = notification.title
        model.message = notification.message
        model.data = notification.data
        model.channels = list(notification.channels)
        model.status = notification.status
        model.sent_at = ensure_app_naive_datetime(notification.sent_at)
        model.read_at = ensure_app_naive_datetime(notification.read_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            type=model.type,
            category=model.category,
            priority=model.priority,
            title=model.title,
            message=model.message,
            data=model.data,
            channels=list(model.channels or []),
            status=model.status,
            created_at=ensure_app_timezone(model.created_at),
            sent_at=ensure_app_timezone(model.sent_at),
            read_at=ensure_app_timezone(model.read_at),
        )


__all__ = ["NotificationRepository"]
