"""
Staff user management and password hashing.
"""

import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from taxclusive.db.models import USER_ROLES, User, utcnow
from taxclusive.services.errors import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == _normalize_email(email)).first()


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def count_users(db: Session) -> int:
    return db.query(func.count(User.id)).scalar() or 0


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user when the credentials match, otherwise None."""
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationError("Email already in use", {"email": "Email already in use"}) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError(f"Failed to {action} user") from exc


def _check_role(role: Optional[str]) -> None:
    if role is not None and role not in USER_ROLES:
        raise ValidationError("Invalid role", {"role": f"Role must be one of {', '.join(USER_ROLES)}"})


def create_user(
    db: Session,
    email: Optional[str],
    password: Optional[str],
    name: Optional[str] = None,
    role: str = "EDITOR",
) -> User:
    errors = {}
    if not email or not email.strip():
        errors["email"] = "Email is required"
    if not password:
        errors["password"] = "Password is required"
    if errors:
        raise ValidationError("Missing required fields", errors)
    _check_role(role)

    if get_user_by_email(db, email):
        raise ValidationError("Email already in use", {"email": "Email already in use"})

    user = User(
        email=_normalize_email(email),
        name=name,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    _commit(db, "create")
    db.refresh(user)
    logger.info("Created %s user %s", user.role, user.email)
    return user


def update_user(
    db: Session,
    user_id: int,
    email: Optional[str] = None,
    name: Optional[str] = None,
    role: Optional[str] = None,
    password: Optional[str] = None,
) -> User:
    """Update a user. The password is only rehashed when one is supplied."""
    user = get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    _check_role(role)

    if email is not None and email.strip():
        user.email = _normalize_email(email)
    if name is not None:
        user.name = name
    if role is not None:
        user.role = role
    if password:
        user.password_hash = hash_password(password)
    user.updated_at = utcnow()

    _commit(db, "update")
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int, acting_user: User) -> None:
    if user_id == acting_user.id:
        raise ValidationError("Cannot delete yourself", {"id": "Cannot delete yourself"})
    user = get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if user.posts:
        raise ValidationError(
            "User still has blog posts",
            {"id": "Reassign or delete this user's blog posts first"}
        )
    for testimonial in user.testimonials:
        testimonial.author_id = None
    db.delete(user)
    _commit(db, "delete")
    logger.info("Deleted user %s", user.email)
