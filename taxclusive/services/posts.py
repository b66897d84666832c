"""
Posts service for the Taxclusive blog.
Slug assignment, tag association and publish-timestamp rules for blog posts.
"""

import logging
from typing import Iterable, Optional

import markdown
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from taxclusive.db.models import POST_STATUSES, Post, Tag, User, utcnow
from taxclusive.services.errors import NotFoundError, StorageError, ValidationError
from taxclusive.services.slugs import resolve_unique_slug, slugify
from taxclusive.services.tags import reconcile_tags

logger = logging.getLogger(__name__)

# Attempts at writing a post before a unique-constraint conflict is reported
SLUG_RETRY_ATTEMPTS = 3


def render_markdown(content: str) -> str:
    """Convert markdown to HTML."""
    md = markdown.Markdown(extensions=['extra', 'codehilite', 'toc'])
    return md.convert(content)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _title_slug(title: str) -> str:
    slug = slugify(title)
    if not slug:
        raise ValidationError(
            "Title must contain at least one letter or digit",
            {"title": "Title must contain at least one letter or digit"}
        )
    return slug


def _load_tags(db: Session, tag_ids: Iterable[int]) -> list[Tag]:
    """Load tags for association, dropping repeated ids but keeping order."""
    unique_ids = list(dict.fromkeys(tag_ids))
    if not unique_ids:
        return []
    tags_by_id = {tag.id: tag for tag in db.query(Tag).filter(Tag.id.in_(unique_ids))}
    return [tags_by_id[tag_id] for tag_id in unique_ids]


# =============================================================================
# READ OPERATIONS
# =============================================================================

def _with_relations(query):
    return query.options(joinedload(Post.author), selectinload(Post.tags))


def get_post(db: Session, post_id: int) -> Optional[Post]:
    """Get a post by ID."""
    return _with_relations(db.query(Post)).filter(Post.id == post_id).first()


def require_post(db: Session, post_id: int) -> Post:
    """Get a post by ID or raise NotFoundError."""
    post = get_post(db, post_id)
    if post is None:
        raise NotFoundError("Blog not found")
    return post


def get_post_by_slug(db: Session, slug: str) -> Optional[Post]:
    """Get a post by slug."""
    return _with_relations(db.query(Post)).filter(Post.slug == slug).first()


def get_published_post_by_slug(db: Session, slug: str) -> Optional[Post]:
    """Get a published post by slug; drafts and archived posts are hidden."""
    return _with_relations(db.query(Post)).filter(
        Post.slug == slug,
        Post.status == "PUBLISHED"
    ).first()


def list_posts(
    db: Session,
    status: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0
) -> list[Post]:
    """List posts for the admin area, newest first."""
    query = _with_relations(db.query(Post))

    if status:
        query = query.filter(Post.status == status)

    query = query.order_by(Post.created_at.desc(), Post.id.desc()).offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def get_published_posts(
    db: Session,
    featured_only: bool = False,
    limit: Optional[int] = None,
    offset: int = 0
) -> tuple[list[Post], int]:
    """Get published posts, featured first, then by publish date.

    Returns:
        Tuple of (posts, total_count)
    """
    query = db.query(Post).filter(Post.status == "PUBLISHED")
    if featured_only:
        query = query.filter(Post.featured.is_(True))

    total = query.count()
    query = _with_relations(query).order_by(
        Post.featured.desc(),
        Post.published_at.desc(),
        Post.id.desc()
    ).offset(offset)
    if limit is not None:
        query = query.limit(limit)

    return query.all(), total


def count_posts(db: Session, status: Optional[str] = None) -> int:
    query = db.query(func.count(Post.id))
    if status:
        query = query.filter(Post.status == status)
    return query.scalar() or 0


def public_post_dict(post: Post) -> dict:
    """Shape a published post for the public site."""
    published_at = post.published_at or post.created_at
    return {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "excerpt": post.excerpt,
        "content": post.content_md,
        "content_html": post.content_html,
        "coverImage": post.cover_image,
        "status": post.status,
        "featured": post.featured,
        "reading_time": post.reading_time,
        "published_at": published_at.isoformat(),
        "updated_at": post.updated_at.isoformat(),
        "created_at": post.created_at.isoformat(),
        "author": {
            "name": post.author.name or "Taxclusive Team",
            "email": post.author.email,
        } if post.author else None,
        "tags": [{"name": tag.name, "slug": tag.slug} for tag in post.tags],
        "featured_image": {
            "url": post.cover_image,
            "alt": f"{post.title} cover image",
        } if post.cover_image else None,
        "seo": {
            "meta_title": post.meta_title or post.title,
            "meta_description": post.meta_description or post.excerpt,
            "focus_keyword": post.focus_keyword,
            "og_image": post.og_image or post.cover_image,
        },
    }


# =============================================================================
# WRITE OPERATIONS
# =============================================================================

def create_post(
    db: Session,
    author: User,
    title: Optional[str],
    content: Optional[str],
    excerpt: Optional[str] = None,
    cover_image: Optional[str] = None,
    status: Optional[str] = None,
    featured: bool = False,
    tags: Optional[list[str]] = None,
    slug: Optional[str] = None,
    meta_title: Optional[str] = None,
    meta_description: Optional[str] = None,
    focus_keyword: Optional[str] = None,
    og_image: Optional[str] = None,
) -> Post:
    """
    Create a new post.

    The slug is the slugified custom slug, or the title's slug when the
    custom one is absent or slugifies to nothing, made unique with a numeric
    suffix. Unknown statuses fall back to DRAFT; published_at is only set
    when the post starts out PUBLISHED.

    Raises:
        ValidationError: title or content missing, before anything is written
        StorageError: the database failed, or slug conflicts persisted
    """
    errors = {}
    if _is_blank(title):
        errors["title"] = "Title is required"
    if _is_blank(content):
        errors["content"] = "Content is required"
    if errors:
        raise ValidationError("Title and content are required", errors)

    candidate = slugify(slug or "") or _title_slug(title)
    status = status if status in POST_STATUSES else "DRAFT"
    content_html = render_markdown(content)

    for attempt in range(1, SLUG_RETRY_ATTEMPTS + 1):
        now = utcnow()
        post = Post(
            title=title,
            excerpt=excerpt,
            content_md=content,
            content_html=content_html,
            cover_image=cover_image,
            status=status,
            featured=bool(featured),
            published_at=now if status == "PUBLISHED" else None,
            created_at=now,
            updated_at=now,
            meta_title=meta_title or None,
            meta_description=meta_description or None,
            focus_keyword=focus_keyword or None,
            og_image=og_image or None,
            author_id=author.id,
        )
        try:
            post.slug = resolve_unique_slug(db, candidate)
            post.tags = _load_tags(db, reconcile_tags(db, tags or []))
            db.add(post)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            logger.warning(
                "Conflict saving post %r (attempt %d/%d): %s",
                candidate, attempt, SLUG_RETRY_ATTEMPTS, exc.orig
            )
            if attempt == SLUG_RETRY_ATTEMPTS:
                raise StorageError("Could not assign a unique slug") from exc
            continue
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError("Failed to create post") from exc

        logger.info("Created post %s (%s) by %s", post.slug, post.status, author.email)
        return require_post(db, post.id)


def update_post(
    db: Session,
    post_id: int,
    title: Optional[str] = None,
    content: Optional[str] = None,
    excerpt: Optional[str] = None,
    cover_image: Optional[str] = None,
    status: Optional[str] = None,
    featured: Optional[bool] = None,
    tags: Optional[list[str]] = None,
    meta_title: Optional[str] = None,
    meta_description: Optional[str] = None,
    focus_keyword: Optional[str] = None,
    og_image: Optional[str] = None,
) -> Post:
    """
    Update an existing post. Arguments left as None are unchanged.

    The slug is only recomputed when the title actually changes. A tag list
    replaces the post's tags. published_at is stamped on the first move into
    PUBLISHED and kept from then on, including across archive and republish.

    Raises:
        NotFoundError: no post with this id
        ValidationError: blank title/content or unknown status
        StorageError: the database failed, or slug conflicts persisted
    """
    errors = {}
    if title is not None and not title.strip():
        errors["title"] = "Title cannot be empty"
    if content is not None and not content.strip():
        errors["content"] = "Content cannot be empty"
    if status is not None and status not in POST_STATUSES:
        errors["status"] = f"Status must be one of {', '.join(POST_STATUSES)}"
    if errors:
        raise ValidationError("Invalid blog update", errors)

    for attempt in range(1, SLUG_RETRY_ATTEMPTS + 1):
        post = require_post(db, post_id)
        candidate = None
        if title is not None and title != post.title:
            candidate = _title_slug(title)

        try:
            if candidate is not None:
                post.slug = resolve_unique_slug(db, candidate, exclude_id=post.id)
                post.title = title
            if content is not None:
                post.content_md = content
                post.content_html = render_markdown(content)
            if excerpt is not None:
                post.excerpt = excerpt
            if cover_image is not None:
                post.cover_image = cover_image
            if featured is not None:
                post.featured = featured
            if meta_title is not None:
                post.meta_title = meta_title or None
            if meta_description is not None:
                post.meta_description = meta_description or None
            if focus_keyword is not None:
                post.focus_keyword = focus_keyword or None
            if og_image is not None:
                post.og_image = og_image or None
            if status is not None:
                if status == "PUBLISHED" and post.published_at is None:
                    post.published_at = utcnow()
                post.status = status
            if tags is not None:
                post.tags = _load_tags(db, reconcile_tags(db, tags))

            post.updated_at = utcnow()
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            logger.warning(
                "Conflict updating post %d (attempt %d/%d): %s",
                post_id, attempt, SLUG_RETRY_ATTEMPTS, exc.orig
            )
            if attempt == SLUG_RETRY_ATTEMPTS:
                raise StorageError("Could not assign a unique slug") from exc
            continue
        except SQLAlchemyError as exc:
            db.rollback()
            raise StorageError("Failed to update post") from exc

        logger.info("Updated post %s (%s)", post.slug, post.status)
        return require_post(db, post_id)


def delete_post(db: Session, post_id: int) -> None:
    """Delete a post. Its tag links go with it; the tags themselves stay."""
    post = require_post(db, post_id)
    slug = post.slug
    try:
        db.delete(post)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError("Failed to delete post") from exc
    logger.info("Deleted post %s", slug)
