"""Tests for reCAPTCHA verification against a mocked Google endpoint."""

import asyncio
import json

import httpx
import pytest

from taxclusive import config
from taxclusive.services import recaptcha


@pytest.fixture
def google(monkeypatch):
    """Route the verification request to a canned response."""
    monkeypatch.setattr(config, "RECAPTCHA_SECRET_KEY", "test-secret")
    state = {"payload": {"success": True, "score": 0.9, "action": "newsletter_signup"}, "requests": []}

    def handler(request):
        state["requests"].append(request)
        if state["payload"] is None:
            return httpx.Response(502)
        return httpx.Response(200, content=json.dumps(state["payload"]))

    real_client = httpx.AsyncClient

    def client_factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(recaptcha.httpx, "AsyncClient", client_factory)
    return state


def _verify(token, action="newsletter_signup", minimum_score=0.5):
    return asyncio.run(recaptcha.verify_recaptcha(token, action, minimum_score))


class TestVerifyRecaptcha:
    def test_skipped_without_secret_outside_production(self, monkeypatch):
        monkeypatch.setattr(config, "RECAPTCHA_SECRET_KEY", "")
        monkeypatch.setattr(config, "IS_PRODUCTION", False)
        assert _verify(None).success is True

    def test_missing_secret_rejected_in_production(self, monkeypatch):
        monkeypatch.setattr(config, "RECAPTCHA_SECRET_KEY", "")
        monkeypatch.setattr(config, "IS_PRODUCTION", True)

        result = _verify("token")

        assert result.success is False
        assert result.error == "reCAPTCHA is not configured on the server"

    def test_blank_token(self, google):
        result = _verify("  ")
        assert result.success is False
        assert google["requests"] == []

    def test_success(self, google):
        result = _verify("token")

        assert result.success is True
        assert result.score == 0.9
        [request] = google["requests"]
        assert b"secret=test-secret" in request.content
        assert b"response=token" in request.content

    def test_google_rejects(self, google):
        google["payload"] = {"success": False, "error-codes": ["invalid-input-response"]}
        result = _verify("token")
        assert result.success is False
        assert result.error_codes == ["invalid-input-response"]

    def test_action_mismatch(self, google):
        result = _verify("token", action="admin_login")
        assert result.success is False
        assert result.error == "reCAPTCHA action mismatch"

    def test_low_score(self, google):
        google["payload"]["score"] = 0.2
        result = _verify("token", minimum_score=0.3)
        assert result.success is False
        assert result.error == "reCAPTCHA score too low"

    def test_upstream_error(self, google):
        google["payload"] = None
        result = _verify("token")
        assert result.success is False
        assert result.error == "Failed to verify reCAPTCHA token"
