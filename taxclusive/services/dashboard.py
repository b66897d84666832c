"""
Summary figures for the admin dashboard.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from taxclusive.db.models import Post, Testimonial, User, utcnow


def _count(db: Session, model, *criteria) -> int:
    return db.query(func.count(model.id)).filter(*criteria).scalar() or 0


def month_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Start of the current month and start of the previous one."""
    start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    start_of_last_month = (start_of_month - timedelta(days=1)).replace(day=1)
    return start_of_month, start_of_last_month


def start_of_week(now: datetime) -> datetime:
    """Most recent Sunday at midnight."""
    days_since_sunday = (now.weekday() + 1) % 7
    return (now - timedelta(days=days_since_sunday)).replace(hour=0, minute=0, second=0, microsecond=0)


def growth_rate(current: int, previous: int) -> int:
    """Month-on-month change in percent."""
    if previous > 0:
        return round((current - previous) / previous * 100)
    return 100 if current > 0 else 0


def get_dashboard_stats(db: Session, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    start_of_month, start_of_last_month = month_bounds(now)
    week_start = start_of_week(now)

    total_blogs = _count(db, Post)
    published_blogs = _count(db, Post, Post.status == "PUBLISHED")
    total_testimonials = _count(db, Testimonial)
    total_users = _count(db, User)
    blogs_this_month = _count(db, Post, Post.created_at >= start_of_month)
    blogs_last_month = _count(
        db, Post,
        Post.created_at >= start_of_last_month,
        Post.created_at < start_of_month
    )
    testimonials_this_week = _count(db, Testimonial, Testimonial.created_at >= week_start)

    recent_posts = db.query(Post).filter(Post.status == "PUBLISHED").order_by(
        Post.created_at.desc()
    ).limit(5).all()
    recent_testimonials = db.query(Testimonial).order_by(
        Testimonial.created_at.desc()
    ).limit(5).all()

    recent_activity = [
        {
            "type": "blog",
            "name": post.title,
            "createdAt": post.created_at.isoformat(),
            "updatedAt": post.updated_at.isoformat(),
            "status": post.status,
        }
        for post in recent_posts
    ] + [
        {
            "type": "testimonial",
            "name": testimonial.name,
            "createdAt": testimonial.created_at.isoformat(),
            "updatedAt": testimonial.updated_at.isoformat(),
            "status": "published" if testimonial.approved else "pending",
        }
        for testimonial in recent_testimonials
    ]
    recent_activity.sort(key=lambda item: item["createdAt"], reverse=True)

    return {
        "totalBlogs": {
            "value": total_blogs,
            "change": f"+{blogs_this_month} this month" if blogs_this_month else "No new blogs this month",
            "trend": growth_rate(blogs_this_month, blogs_last_month),
        },
        "publishedBlogs": {
            "value": published_blogs,
            "change": f"{total_blogs - published_blogs} drafts",
            "trend": 0,
        },
        "testimonials": {
            "value": total_testimonials,
            "change": (
                f"+{testimonials_this_week} this week"
                if testimonials_this_week else "No new testimonials this week"
            ),
            "trend": testimonials_this_week,
        },
        "users": {
            "value": total_users,
            "change": "Active users",
            "trend": 0,
        },
        "recentActivity": recent_activity[:10],
    }
