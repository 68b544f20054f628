"""Persistence helpers for user contact details."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.domain.entities import UserContact
from app.infrastructure.models import UserContactModel


class UserContactRepository:
    """Look up and store the addresses used by email and SMS delivery."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> UserContact | None:
        model = self.session.get(UserContactModel, user_id)
        if model is None:
            return None
        return UserContact(
            user_id=model.user_id, email=model.email, phone=model.phone, name=model.name
        )

    def save(self, contact: UserContact) -> UserContact:
        model = self.session.get(UserContactModel, contact.user_id)
        if model is None:
            model = UserContactModel(user_id=contact.user_id)
        model.email = contact.email
        model.phone = contact.phone
        model.name = contact.name
        self.session.add(model)
        self.session.commit()
        return contact


__all__ = ["UserContactRepository"]
