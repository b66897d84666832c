"""
Public testimonial routes for the Taxclusive site.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from taxclusive.db.database import get_db
from taxclusive.schemas import TestimonialOut
from taxclusive.services import testimonials as testimonials_service

router = APIRouter(prefix="/api/public", tags=["testimonials"])

DEFAULT_LIMIT = 6
MAX_LIMIT = 20


def parse_limit(raw_limit: Optional[str], default: int = DEFAULT_LIMIT, maximum: int = MAX_LIMIT) -> int:
    """Lenient limit parsing: junk or non-positive values fall back to the default."""
    if not raw_limit:
        return default
    try:
        parsed = int(raw_limit)
    except ValueError:
        return default
    if parsed < 1:
        return default
    return min(parsed, maximum)


@router.get("/testimonials")
async def public_testimonials(
    featured: bool = False,
    limit: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Approved testimonials; the limit applies to the featured listing."""
    testimonials = testimonials_service.get_approved_testimonials(
        db,
        featured_only=featured,
        limit=parse_limit(limit) if featured else None
    )
    data = [
        TestimonialOut.model_validate(testimonial).model_dump(
            mode="json", by_alias=True, exclude={"author", "approved"}
        )
        for testimonial in testimonials
    ]
    response = JSONResponse({"success": True, "data": data, "count": len(data)})
    response.headers["Cache-Control"] = "public, max-age=300"
    return response
