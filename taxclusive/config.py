"""
Runtime configuration for the Taxclusive site backend.
All values come from environment variables.
"""

import os
import secrets
import warnings
from pathlib import Path

ENVIRONMENT = os.getenv("TAXCLUSIVE_ENV", "development")
IS_PRODUCTION = ENVIRONMENT == "production"

# Database
DEFAULT_DB_PATH = Path(__file__).parent.parent / "data" / "taxclusive.db"
DATABASE_URL = os.getenv("TAXCLUSIVE_DATABASE_URL", f"sqlite:///{DEFAULT_DB_PATH}")

# Sessions
SECRET_KEY = os.getenv("TAXCLUSIVE_SECRET_KEY")

if not SECRET_KEY:
    if IS_PRODUCTION:
        raise RuntimeError("TAXCLUSIVE_SECRET_KEY must be set in production environment")
    warnings.warn("TAXCLUSIVE_SECRET_KEY not set - using random key (sessions won't persist across restarts)")
    SECRET_KEY = secrets.token_hex(32)

SESSION_COOKIE_NAME = "taxclusive_session"
SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days in seconds

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

# Public site
SITE_URL = os.getenv("SITE_URL", "https://taxclusive.com").rstrip("/")
SITE_NAME = os.getenv("SITE_NAME", "Taxclusive")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", SITE_URL).split(",")
    if origin.strip()
]

# Outgoing mail
SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_SSL = os.getenv("SMTP_SSL", "false").lower() == "true"
SMTP_STARTTLS = os.getenv("SMTP_STARTTLS", "true").lower() == "true"

EMAIL_SENDER_NAME = os.getenv("EMAIL_SENDER_NAME", SITE_NAME)
EMAIL_SENDER_ADDRESS = os.getenv("EMAIL_SENDER_ADDRESS", "no-reply@taxclusive.com")
EMAIL_RECIPIENT_NAME = os.getenv("EMAIL_RECIPIENT_NAME", f"{SITE_NAME} Support")
EMAIL_RECIPIENT_ADDRESS = os.getenv("EMAIL_RECIPIENT_ADDRESS", "support@taxclusive.com")
EMAIL_TIMEOUT_SECONDS = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "30"))

# Google reCAPTCHA v3; verification is skipped when no secret is configured
RECAPTCHA_SECRET_KEY = os.getenv("RECAPTCHA_SECRET_KEY", "")
RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
