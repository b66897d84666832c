"""
Security headers for the Taxclusive site.

Every response gets HSTS, a Content-Security-Policy that admits Google
reCAPTCHA, nosniff, frame denial, a referrer policy, a permissions policy
and COOP. Admin and auth API responses are additionally marked no-store.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

PRIVATE_PREFIXES = ("/api/admin", "/api/auth")
NO_STORE = "no-store, no-cache, must-revalidate"

DENIED_FEATURES = (
    "accelerometer", "camera", "display-capture", "geolocation",
    "gyroscope", "magnetometer", "microphone", "payment", "usb",
)

# reCAPTCHA loads from www.google.com and www.gstatic.com
DEFAULT_CSP = {
    "default-src": "'self'",
    "script-src": "'self' https://www.google.com https://www.gstatic.com",
    "style-src": "'self' 'unsafe-inline' https://fonts.googleapis.com",
    "font-src": "'self' https://fonts.gstatic.com",
    "img-src": "'self' data: https:",
    "connect-src": "'self' https://www.google.com",
    "frame-src": "https://www.google.com",
    "frame-ancestors": "'none'",
    "base-uri": "'self'",
    "form-action": "'self'",
}


def build_csp(directives: dict) -> str:
    """Join CSP directives; an empty value emits the bare directive name."""
    return "; ".join(
        f"{name} {value}" if value else name
        for name, value in directives.items()
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add hardened security headers to all responses."""

    def __init__(self, app, csp_overrides: dict | None = None):
        super().__init__(app)
        self.headers = {
            "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
            "Content-Security-Policy": build_csp({**DEFAULT_CSP, **(csp_overrides or {})}),
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "Permissions-Policy": ", ".join(f"{feature}=()" for feature in DENIED_FEATURES),
            "Cross-Origin-Opener-Policy": "same-origin",
        }

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.update(self.headers)

        if request.url.path.startswith(PRIVATE_PREFIXES):
            response.headers["Cache-Control"] = NO_STORE

        return response
