"""Database package for the Taxclusive site backend."""

from taxclusive.db.database import get_db, init_db, Base
from taxclusive.db.models import Post, Tag, Testimonial, User

__all__ = ["get_db", "init_db", "Base", "Post", "Tag", "Testimonial", "User"]
