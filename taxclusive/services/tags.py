"""
Tag management for blog posts.
"""

import logging
from typing import Iterable

from sqlalchemy.orm import Session

from taxclusive.db.models import Tag
from taxclusive.services.slugs import slugify

logger = logging.getLogger(__name__)


def get_or_create_tag(db: Session, name: str, slug: str) -> Tag:
    """Look a tag up by slug, creating it with `name` if absent.

    An existing tag keeps its original name.
    """
    tag = db.query(Tag).filter(Tag.slug == slug).first()
    if tag is None:
        tag = Tag(name=name, slug=slug)
        db.add(tag)
        db.flush()
        logger.info("Created tag %r", slug)
    return tag


def reconcile_tags(db: Session, names: Iterable[str]) -> list[int]:
    """
    Map free-text tag names to tag ids, creating missing tags.

    Args:
        db: Database session
        names: Tag names as entered; blanks are skipped

    Returns:
        Tag ids in input order. Names that normalise to the same slug
        resolve to the same id, which then appears more than once.

    New tags are flushed but not committed; the caller owns the transaction.
    """
    tag_ids = []
    for raw_name in names:
        name = raw_name.strip()
        if not name:
            continue
        slug = slugify(name)
        if not slug:
            continue
        tag_ids.append(get_or_create_tag(db, name, slug).id)
    return tag_ids
