"""
Google reCAPTCHA v3 server-side verification.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from taxclusive import config

logger = logging.getLogger(__name__)

VERIFY_TIMEOUT = 10.0


@dataclass
class RecaptchaResult:
    success: bool
    score: Optional[float] = None
    action: Optional[str] = None
    error: Optional[str] = None
    error_codes: list[str] = field(default_factory=list)


async def verify_recaptcha(
    token: Optional[str],
    expected_action: Optional[str] = None,
    minimum_score: float = 0.5,
) -> RecaptchaResult:
    """
    Verify a reCAPTCHA token with Google.

    A missing secret key fails verification in production. Outside
    production verification is skipped and the result is successful.
    """
    if not config.RECAPTCHA_SECRET_KEY:
        if config.IS_PRODUCTION:
            logger.error("reCAPTCHA: RECAPTCHA_SECRET_KEY is not configured")
            return RecaptchaResult(success=False, error="reCAPTCHA is not configured on the server")
        logger.debug("reCAPTCHA secret not configured; skipping verification")
        return RecaptchaResult(success=True)

    if not token or not token.strip():
        return RecaptchaResult(success=False, error="Invalid reCAPTCHA token")

    try:
        async with httpx.AsyncClient(timeout=VERIFY_TIMEOUT) as client:
            response = await client.post(
                config.RECAPTCHA_VERIFY_URL,
                data={"secret": config.RECAPTCHA_SECRET_KEY, "response": token},
            )
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPError as exc:
        logger.error("reCAPTCHA verification request failed: %s", exc)
        return RecaptchaResult(success=False, error="Failed to verify reCAPTCHA token")

    if not data.get("success"):
        return RecaptchaResult(
            success=False,
            error="reCAPTCHA verification failed",
            error_codes=data.get("error-codes", []),
        )

    score = data.get("score")
    action = data.get("action")

    if expected_action and action != expected_action:
        logger.warning("reCAPTCHA action mismatch: expected %s, got %s", expected_action, action)
        return RecaptchaResult(success=False, score=score, action=action, error="reCAPTCHA action mismatch")

    if score is None or score < minimum_score:
        logger.warning("reCAPTCHA score %s below threshold %s", score, minimum_score)
        return RecaptchaResult(success=False, score=score, action=action, error="reCAPTCHA score too low")

    return RecaptchaResult(success=True, score=score, action=action)
