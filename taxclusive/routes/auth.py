"""
Admin authentication routes for the Taxclusive site.
Email/password login against staff users, with signed session cookies.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import JSONResponse
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from taxclusive import config
from taxclusive.db.database import get_db
from taxclusive.db.models import User
from taxclusive.schemas import UserOut
from taxclusive.services import users as users_service
from taxclusive.services.recaptcha import verify_recaptcha

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

# Rate limiter for login attempts
limiter = Limiter(key_func=get_remote_address, enabled=config.RATE_LIMIT_ENABLED)

serializer = URLSafeTimedSerializer(config.SECRET_KEY, salt="taxclusive-session")

STAFF_ROLES = ("ADMIN", "EDITOR")


def create_session_token(user: User) -> str:
    """Create a signed session token for a user."""
    return serializer.dumps({"user_id": user.id, "role": user.role})


def read_session_token(token: str) -> Optional[int]:
    """Return the user id from a valid, unexpired session token."""
    try:
        data = serializer.loads(token, max_age=config.SESSION_MAX_AGE)
    except (BadSignature, SignatureExpired):
        return None
    return data.get("user_id")


def get_current_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """The user behind the request's session cookie, if any."""
    token = request.cookies.get(config.SESSION_COOKIE_NAME)
    if not token:
        return None
    user_id = read_session_token(token)
    if user_id is None:
        return None
    return users_service.get_user(db, user_id)


def require_staff(user: Optional[User] = Depends(get_current_user)) -> User:
    """Allow admins and editors."""
    if user is None or user.role not in STAFF_ROLES:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def require_admin(user: User = Depends(require_staff)) -> User:
    """Allow admins only."""
    if user.role != "ADMIN":
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def set_session_cookie(response, user: User) -> None:
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=create_session_token(user),
        httponly=True,
        secure=config.IS_PRODUCTION,
        samesite="lax",
        max_age=config.SESSION_MAX_AGE
    )


@router.post("/login")
@limiter.limit("5/minute")  # Rate limit: 5 attempts per minute per IP
async def login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    recaptcha_token: str = Form(""),
    db: Session = Depends(get_db)
):
    """Process login form and start a session."""
    recaptcha = await verify_recaptcha(recaptcha_token, "admin_login", 0.7)
    if not recaptcha.success:
        logger.warning("reCAPTCHA failed for login attempt: %s", recaptcha.error)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user = users_service.authenticate(db, email, password)
    if user is None:
        logger.warning("Failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    response = JSONResponse(UserOut.model_validate(user).model_dump(mode="json", by_alias=True))
    set_session_cookie(response, user)
    logger.info("User %s logged in", user.email)
    return response


@router.post("/logout")
async def logout():
    """Log out and clear session."""
    response = JSONResponse({"message": "Logged out"})
    response.delete_cookie(
        key=config.SESSION_COOKIE_NAME,
        httponly=True,
        secure=config.IS_PRODUCTION,
        samesite="lax"
    )
    return response


@router.get("/session", response_model=UserOut)
async def session(user: User = Depends(require_staff)):
    """The signed-in user."""
    return user
