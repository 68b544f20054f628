"""Utility script to store the email address and phone number of a user."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from app.domain.entities import UserContact
from app.infrastructure.database import SessionLocal, initialize_database
from app.infrastructure.repositories import UserContactRepository


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the contact record."""

    parser = argparse.ArgumentParser(
        description="Create or update the contact details used for email and SMS notifications.",
    )
    parser.add_argument("user_id", help="Identifier of the user receiving notifications")
    parser.add_argument("--email", default=None, help="Email address for email delivery")
    parser.add_argument(
        "--phone", default=None, help="Phone number in E.164 format for SMS delivery"
    )
    parser.add_argument("--name", default=None, help="Name used to greet the user")
    return parser.parse_args()


def main() -> None:
    """Save a contact using the provided command line arguments."""

    args = parse_args()
    if not args.email and not args.phone:
        raise SystemExit("Provide at least --email or --phone.")

    initialize_database()

    session = SessionLocal()
    try:
        contact = UserContactRepository(session).save(
            UserContact(
                user_id=args.user_id,
                email=args.email,
                phone=args.phone,
                name=args.name,
            )
        )
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not save the contact: {exc}") from exc
    else:
        print(
            "Contact saved:\n"
            f"  User: {contact.user_id}\n"
            f"  Email: {contact.email or '-'}\n"
            f"  Phone: {contact.phone or '-'}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
