"""
Slug generation and collision avoidance for blog posts and tags.
"""

import re
from typing import Optional

from sqlalchemy.orm import Session

from taxclusive.db.models import Post

_INELIGIBLE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(text: str) -> str:
    """
    Derive a URL-safe slug from a title.

    The result only contains [a-z0-9-], never has consecutive hyphens and
    never starts or ends with one. It is empty when the text has no letters
    or digits.
    """
    slug = _INELIGIBLE.sub("", text.lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip("-")


def slug_taken(db: Session, slug: str, exclude_id: Optional[int] = None) -> bool:
    """Check whether a post other than `exclude_id` already holds `slug`."""
    query = db.query(Post.id).filter(Post.slug == slug)
    if exclude_id is not None:
        query = query.filter(Post.id != exclude_id)
    return query.first() is not None


def resolve_unique_slug(
    db: Session,
    candidate: str,
    exclude_id: Optional[int] = None
) -> str:
    """
    Return `candidate`, or `candidate-N` for the smallest N >= 1 that no
    other post holds.

    This is a read before the write; concurrent writers are caught by the
    unique constraint on posts.slug (see posts.create_post).
    """
    slug = candidate
    counter = 1
    while slug_taken(db, slug, exclude_id):
        slug = f"{candidate}-{counter}"
        counter += 1
    return slug
