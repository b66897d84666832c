"""
Create the tables and the first admin account.

    TAXCLUSIVE_ADMIN_EMAIL=... TAXCLUSIVE_ADMIN_PASSWORD=... python -m taxclusive.seed
"""

import logging
import os

from sqlalchemy.orm import Session

from taxclusive.db.database import SessionLocal, init_db
from taxclusive.db.models import User
from taxclusive.services import users as users_service

logger = logging.getLogger(__name__)


def seed_admin(db: Session, email: str, password: str, name: str = "Admin User") -> User:
    """Create the admin user unless an account with this email already exists."""
    existing = users_service.get_user_by_email(db, email)
    if existing:
        logger.info("User %s already exists. Skipping seed.", existing.email)
        return existing
    return users_service.create_user(db, email=email, password=password, name=name, role="ADMIN")


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    email = os.getenv("TAXCLUSIVE_ADMIN_EMAIL")
    password = os.getenv("TAXCLUSIVE_ADMIN_PASSWORD")
    if not email or not password:
        raise SystemExit("TAXCLUSIVE_ADMIN_EMAIL and TAXCLUSIVE_ADMIN_PASSWORD must be set")

    logger.info("Creating database and tables...")
    init_db()
    db = SessionLocal()
    try:
        user = seed_admin(db, email, password)
    finally:
        db.close()
    logger.info("Admin user ready: %s", user.email)


if __name__ == "__main__":
    main()
