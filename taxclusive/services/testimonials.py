"""
Testimonials service: admin CRUD and public listing.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from taxclusive.db.models import Testimonial, User, utcnow
from taxclusive.services.errors import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "name", "designation", "company", "location", "content",
    "rating", "avatar", "featured", "approved",
)


def _check_rating(rating: Optional[int]) -> None:
    if rating is not None and not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5", {"rating": "Rating must be between 1 and 5"})


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError(f"Failed to {action} testimonial") from exc


def list_testimonials(db: Session) -> list[Testimonial]:
    """All testimonials for the admin area, newest first."""
    return db.query(Testimonial).options(joinedload(Testimonial.author)).order_by(
        Testimonial.created_at.desc(), Testimonial.id.desc()
    ).all()


def get_approved_testimonials(
    db: Session,
    featured_only: bool = False,
    limit: Optional[int] = None
) -> list[Testimonial]:
    """Approved testimonials for the public site, featured first."""
    query = db.query(Testimonial).filter(Testimonial.approved.is_(True))
    if featured_only:
        query = query.filter(Testimonial.featured.is_(True))
    query = query.order_by(
        Testimonial.featured.desc(),
        Testimonial.created_at.desc(),
        Testimonial.id.desc()
    )
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def require_testimonial(db: Session, testimonial_id: int) -> Testimonial:
    testimonial = db.query(Testimonial).options(joinedload(Testimonial.author)).filter(
        Testimonial.id == testimonial_id
    ).first()
    if testimonial is None:
        raise NotFoundError("Testimonial not found")
    return testimonial


def create_testimonial(
    db: Session,
    author: User,
    name: Optional[str],
    designation: Optional[str],
    content: Optional[str],
    company: Optional[str] = None,
    location: Optional[str] = None,
    rating: Optional[int] = None,
    avatar: Optional[str] = None,
    featured: bool = False,
    approved: bool = False,
) -> Testimonial:
    """Create a testimonial; name, designation and content are required."""
    errors = {
        field: f"{field.capitalize()} is required"
        for field, value in (("name", name), ("designation", designation), ("content", content))
        if not value or not value.strip()
    }
    if errors:
        raise ValidationError("Missing required fields", errors)
    _check_rating(rating)

    testimonial = Testimonial(
        name=name,
        designation=designation,
        company=company,
        location=location,
        content=content,
        rating=rating or 5,
        avatar=avatar,
        featured=bool(featured),
        approved=bool(approved),
        author_id=author.id,
    )
    db.add(testimonial)
    _commit(db, "create")
    logger.info("Created testimonial %d from %s", testimonial.id, name)
    return require_testimonial(db, testimonial.id)


def update_testimonial(db: Session, testimonial_id: int, **changes) -> Testimonial:
    """Apply the given field changes. None values are ignored."""
    testimonial = require_testimonial(db, testimonial_id)
    _check_rating(changes.get("rating"))

    for field in EDITABLE_FIELDS:
        value = changes.get(field)
        if value is not None:
            setattr(testimonial, field, value)
    testimonial.updated_at = utcnow()

    _commit(db, "update")
    return require_testimonial(db, testimonial_id)


def delete_testimonial(db: Session, testimonial_id: int) -> None:
    testimonial = require_testimonial(db, testimonial_id)
    db.delete(testimonial)
    _commit(db, "delete")
    logger.info("Deleted testimonial %d", testimonial_id)
