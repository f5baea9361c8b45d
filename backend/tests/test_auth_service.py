"""
Marathon Event API — Token Service Unit Tests
===============================================

What:  Signing, verification and cookie flags of the session token.
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from starlette.responses import Response

from marathon_api.exceptions import AuthenticationError, ValidationError
from marathon_api.services.auth_service import COOKIE_NAME, TokenService

SECRET = "unit-test-secret-0123456789abcdef0123"


class TestTokenSigning:

    def setup_method(self):
        self.service = TokenService(SECRET, expire_days=100)

    def test_issue_then_verify_returns_claims(self):
        token = self.service.issue({"email": "runner@example.com", "role": "runner"})

        claims = self.service.verify(token)

        assert claims["email"] == "runner@example.com"
        assert claims["role"] == "runner"

    def test_expiry_is_one_hundred_days(self):
        token = self.service.issue({"email": "runner@example.com"})

        claims = self.service.verify(token)

        assert claims["exp"] - claims["iat"] == 100 * 24 * 60 * 60

    def test_tampered_token_rejected(self):
        token = self.service.issue({"email": "runner@example.com"})
        header, payload, signature = token.split(".")
        flipped = "A" if signature[0] != "A" else "B"
        tampered = ".".join([header, payload, flipped + signature[1:]])

        with pytest.raises(AuthenticationError, match="invalid token"):
            self.service.verify(tampered)

    def test_other_secret_rejected(self):
        token = TokenService("some-other-secret-0123456789abcdef0123").issue({"email": "x@example.com"})

        with pytest.raises(AuthenticationError, match="invalid token"):
            self.service.verify(token)

    def test_expired_token_rejected(self):
        past = datetime.now(timezone.utc) - timedelta(days=1)
        token = jwt.encode({"email": "x@example.com", "exp": past}, SECRET, algorithm="HS256")

        with pytest.raises(AuthenticationError) as exc_info:
            self.service.verify(token)

        assert exc_info.value.context["reason"] == "expired"

    def test_garbage_rejected(self):
        with pytest.raises(AuthenticationError, match="invalid token"):
            self.service.verify("not-a-jwt")

    def test_registered_claims_round_trip(self):
        claims = {"aud": "frontend", "sub": 42, "jti": 7, "iss": "firebase"}

        decoded = self.service.verify(self.service.issue(claims))

        assert {k: decoded[k] for k in claims} == claims

    def test_audience_list_round_trips(self):
        decoded = self.service.verify(self.service.issue({"aud": ["web", "mobile"]}))

        assert decoded["aud"] == ["web", "mobile"]

    def test_non_string_issuer_rejected_before_signing(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.issue({"iss": 5})

        assert exc_info.value.field == "iss"

    def test_non_numeric_not_before_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.issue({"nbf": "tomorrow"})

        assert exc_info.value.field == "nbf"

    def test_caller_iat_and_exp_replaced(self):
        decoded = self.service.verify(self.service.issue({"iat": 1, "exp": 2}))

        assert decoded["exp"] - decoded["iat"] == 100 * 24 * 60 * 60

    def test_missing_secret_falls_back_to_random(self):
        first = TokenService("")
        second = TokenService("")

        token = first.issue({"email": "x@example.com"})

        assert first.verify(token)["email"] == "x@example.com"
        with pytest.raises(AuthenticationError):
            second.verify(token)


class TestTokenCookie:

    def test_development_cookie_flags(self):
        response = Response()
        TokenService(SECRET, secure_cookies=False).set_cookie(response, "abc")

        header = response.headers["set-cookie"]

        assert header.startswith(f"{COOKIE_NAME}=abc")
        assert "HttpOnly" in header
        assert "SameSite=lax" in header
        assert "Secure" not in header
        assert f"Max-Age={100 * 24 * 60 * 60}" in header

    def test_production_cookie_flags(self):
        response = Response()
        TokenService(SECRET, secure_cookies=True).set_cookie(response, "abc")

        header = response.headers["set-cookie"]

        assert "Secure" in header
        assert "SameSite=none" in header

    def test_clear_cookie_expires_immediately(self):
        response = Response()
        TokenService(SECRET).clear_cookie(response)

        header = response.headers["set-cookie"]

        assert header.startswith(f"{COOKIE_NAME}=")
        assert "Max-Age=0" in header
