"""
Request and response bodies for the JSON API.
Keys are camelCase on the wire to match the site front end.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# BLOGS
# =============================================================================

class AuthorOut(CamelModel):
    name: Optional[str] = None
    email: str


class TagOut(CamelModel):
    id: int
    name: str
    slug: str


class BlogCreate(CamelModel):
    # title and content are checked by the posts service so that a missing
    # value is a 400 with field detail rather than a 422
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    cover_image: Optional[str] = None
    status: Optional[str] = None
    featured: bool = False
    tags: list[str] = Field(default_factory=list)
    slug: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    focus_keyword: Optional[str] = None
    og_image: Optional[str] = None


class BlogUpdate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    cover_image: Optional[str] = None
    status: Optional[str] = None
    featured: Optional[bool] = None
    tags: Optional[list[str]] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    focus_keyword: Optional[str] = None
    og_image: Optional[str] = None


class BlogOut(CamelModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str = Field(validation_alias="content_md")
    content_html: Optional[str] = None
    cover_image: Optional[str] = None
    status: str
    featured: bool
    reading_time: int
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    focus_keyword: Optional[str] = None
    og_image: Optional[str] = None
    author: Optional[AuthorOut] = None
    tags: list[TagOut] = Field(default_factory=list)


# =============================================================================
# TESTIMONIALS
# =============================================================================

class TestimonialCreate(CamelModel):
    name: Optional[str] = None
    designation: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    content: Optional[str] = None
    rating: Optional[int] = None
    avatar: Optional[str] = None
    featured: bool = False
    approved: bool = False


class TestimonialUpdate(CamelModel):
    name: Optional[str] = None
    designation: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    content: Optional[str] = None
    rating: Optional[int] = None
    avatar: Optional[str] = None
    featured: Optional[bool] = None
    approved: Optional[bool] = None


class TestimonialOut(CamelModel):
    id: int
    name: str
    designation: str
    company: Optional[str] = None
    location: Optional[str] = None
    content: str
    rating: int
    avatar: Optional[str] = None
    featured: bool
    approved: bool
    created_at: datetime
    updated_at: datetime
    author: Optional[AuthorOut] = None


# =============================================================================
# USERS
# =============================================================================

class UserCreate(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    role: str = "EDITOR"


class UserUpdate(CamelModel):
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    password: Optional[str] = None


class UserOut(CamelModel):
    id: int
    email: str
    name: Optional[str] = None
    role: str
    created_at: datetime
    updated_at: datetime


# =============================================================================
# FORMS
# =============================================================================

class ContactForm(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class AppointmentForm(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    service: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    meeting_type: Optional[str] = None
    message: Optional[str] = None


class QueryForm(CamelModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    subject: Optional[str] = None
    query: Optional[str] = None
    files: Optional[list[str]] = None
    recaptcha_token: Optional[str] = None


class MessageForm(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class NewsletterForm(CamelModel):
    email: Optional[str] = None
    recaptcha_token: Optional[str] = None
