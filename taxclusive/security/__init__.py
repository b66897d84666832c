"""Security modules for the Taxclusive site."""

from taxclusive.security.headers import SecurityHeadersMiddleware
from taxclusive.security.logging import RequestLogMiddleware, get_client_ip

__all__ = [
    "SecurityHeadersMiddleware",
    "RequestLogMiddleware",
    "get_client_ip",
]
