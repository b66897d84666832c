"""
SQLAlchemy models for the Taxclusive site backend.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship

from taxclusive.db.database import Base

POST_STATUSES = ("DRAFT", "PUBLISHED", "ARCHIVED")
USER_ROLES = ("ADMIN", "EDITOR")


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """Staff account for the admin area."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    name = Column(String(200))
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default="EDITOR", nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    posts = relationship("Post", back_populates="author")
    testimonials = relationship("Testimonial", back_populates="author")

    __table_args__ = (
        CheckConstraint("role IN ('ADMIN', 'EDITOR')", name="check_user_role"),
    )

    def __repr__(self):
        return f"<User {self.email}>"


class Tag(Base):
    """
    Tag shared by many posts.
    Created lazily on first use and never deleted by post operations.
    """
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    posts = relationship("Post", secondary=post_tags, back_populates="tags")

    def __repr__(self):
        return f"<Tag {self.slug}>"


class Post(Base):
    """Blog post model."""
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String(200), unique=True, nullable=False, index=True)
    title = Column(String(500), nullable=False)
    excerpt = Column(Text)
    content_md = Column(Text, nullable=False)
    content_html = Column(Text)
    cover_image = Column(String(500))
    status = Column(String(20), default="DRAFT", nullable=False)
    featured = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # SEO
    meta_title = Column(String(200))
    meta_description = Column(String(500))
    focus_keyword = Column(String(100))
    og_image = Column(String(500))

    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    author = relationship("User", back_populates="posts")
    tags = relationship("Tag", secondary=post_tags, back_populates="posts", order_by=Tag.id)

    __table_args__ = (
        CheckConstraint(
            "status IN ('DRAFT', 'PUBLISHED', 'ARCHIVED')",
            name="check_post_status"
        ),
        Index("idx_posts_status", "status"),
        Index("idx_posts_published_at", "published_at"),
    )

    @property
    def reading_time(self) -> int:
        """Calculate reading time in minutes (~200 words/min)."""
        if not self.content_md:
            return 1
        word_count = len(self.content_md.split())
        return max(1, round(word_count / 200))

    def __repr__(self):
        return f"<Post {self.slug}>"


class Testimonial(Base):
    """Client testimonial shown on the public site once approved."""
    __tablename__ = "testimonials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    designation = Column(String(200), nullable=False)
    company = Column(String(200))
    location = Column(String(200))
    content = Column(Text, nullable=False)
    rating = Column(Integer, default=5, nullable=False)
    avatar = Column(String(500))
    featured = Column(Boolean, default=False, nullable=False)
    approved = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    author_id = Column(Integer, ForeignKey("users.id"), index=True)
    author = relationship("User", back_populates="testimonials")

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="check_testimonial_rating"),
    )

    def __repr__(self):
        return f"<Testimonial {self.name}>"
