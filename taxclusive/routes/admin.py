"""
Admin API for the Taxclusive site.
Blog posts and testimonials are open to editors; user management to admins only.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taxclusive.db.database import get_db
from taxclusive.db.models import User
from taxclusive.routes.auth import require_admin, require_staff
from taxclusive.schemas import (
    BlogCreate,
    BlogOut,
    BlogUpdate,
    TestimonialCreate,
    TestimonialOut,
    TestimonialUpdate,
    UserCreate,
    UserOut,
    UserUpdate,
)
from taxclusive.services import dashboard as dashboard_service
from taxclusive.services import posts as posts_service
from taxclusive.services import testimonials as testimonials_service
from taxclusive.services import users as users_service

router = APIRouter(prefix="/api/admin", tags=["admin"])


# =============================================================================
# BLOGS
# =============================================================================

@router.get("/blogs", response_model=list[BlogOut])
async def admin_list_blogs(
    status: str = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff)
):
    """List all posts, newest first."""
    return posts_service.list_posts(db, status=status)


@router.post("/blogs", response_model=BlogOut, status_code=201)
async def admin_create_blog(
    body: BlogCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff)
):
    """Create a new post."""
    return posts_service.create_post(
        db,
        author=user,
        title=body.title,
        content=body.content,
        excerpt=body.excerpt,
        cover_image=body.cover_image,
        status=body.status,
        featured=body.featured,
        tags=body.tags,
        slug=body.slug,
        meta_title=body.meta_title,
        meta_description=body.meta_description,
        focus_keyword=body.focus_keyword,
        og_image=body.og_image,
    )


@router.get("/blogs/{post_id}", response_model=BlogOut)
async def admin_get_blog(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff)
):
    return posts_service.require_post(db, post_id)


@router.put("/blogs/{post_id}", response_model=BlogOut)
async def admin_update_blog(
    post_id: int,
    body: BlogUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff)
):
    """Update a post; omitted fields are left unchanged."""
    return posts_service.update_post(db, post_id, **body.model_dump(exclude_unset=True))


@router.delete("/blogs/{post_id}")
async def admin_delete_blog(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff)
):
    posts_service.delete_post(db, post_id)
    return {"message": "Blog deleted successfully"}


# =============================================================================
# TESTIMONIALS
# =============================================================================

@router.get("/testimonials", response_model=list[TestimonialOut])
async def admin_list_testimonials(
    db: Session = Depends(get_db),
    user: User = Depends(require_staff)
):
    return testimonials_service.list_testimonials(db)


@router.post("/testimonials", response_model=TestimonialOut, status_code=201)
async def admin_create_testimonial(
    body: TestimonialCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff)
):
    return testimonials_service.create_testimonial(db, author=user, **body.model_dump())


@router.put("/testimonials/{testimonial_id}", response_model=TestimonialOut)
async def admin_update_testimonial(
    testimonial_id: int,
    body: TestimonialUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff)
):
    return testimonials_service.update_testimonial(db, testimonial_id, **body.model_dump(exclude_unset=True))


@router.delete("/testimonials/{testimonial_id}")
async def admin_delete_testimonial(
    testimonial_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff)
):
    testimonials_service.delete_testimonial(db, testimonial_id)
    return {"message": "Testimonial deleted successfully"}


# =============================================================================
# USERS
# =============================================================================

@router.get("/users", response_model=list[UserOut])
async def admin_list_users(
    db: Session = Depends(get_db),
    user: User = Depends(require_admin)
):
    return users_service.list_users(db)


@router.post("/users", response_model=UserOut, status_code=201)
async def admin_create_user(
    body: UserCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin)
):
    return users_service.create_user(db, **body.model_dump())


@router.put("/users/{user_id}", response_model=UserOut)
async def admin_update_user(
    user_id: int,
    body: UserUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin)
):
    return users_service.update_user(db, user_id, **body.model_dump(exclude_unset=True))


@router.delete("/users/{user_id}")
async def admin_delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin)
):
    users_service.delete_user(db, user_id, acting_user=user)
    return {"message": "User deleted successfully"}


# =============================================================================
# DASHBOARD
# =============================================================================

@router.get("/dashboard/stats")
async def admin_dashboard_stats(
    db: Session = Depends(get_db),
    user: User = Depends(require_staff)
):
    return dashboard_service.get_dashboard_stats(db)
