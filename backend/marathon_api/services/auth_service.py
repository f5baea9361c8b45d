"""
Marathon Event API — Session Token Service
============================================

What:  Issues, verifies and clears the signed session token.
How:   HS256 JWT (PyJWT) carrying the caller-supplied claims plus `iat` and
       `exp`. The token travels in an HTTP-only cookie named `token`; the
       server keeps no session table and verifies by signature alone.
Who:   Used by POST /jwt, POST /logout and the require_token dependency.

Cookie flags:
    production:  HttpOnly; Secure; SameSite=None  (cross-site frontend)
    otherwise:   HttpOnly; SameSite=Lax

Limitation:
    Logout only deletes the client's cookie. There is no revocation list,
    so a captured token stays valid until it expires.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from starlette.responses import Response

from marathon_api.exceptions import AuthenticationError, ValidationError

logger = logging.getLogger(__name__)

COOKIE_NAME = "token"

# Registered claims PyJWT refuses to sign unless they hold a string
STRING_CLAIMS = ("iss",)

# Registered claims carried as opaque data: no audience or subject/id type checks
DECODE_OPTIONS = {"verify_aud": False, "verify_sub": False, "verify_jti": False}


class TokenService:
    """
    Signs and verifies session tokens.

    Attributes:
        expire_days:      Validity window of issued tokens (default 100 days)
        secure_cookies:   Production cookie flags (Secure + SameSite=None)
    """

    algorithm = "HS256"

    def __init__(self, secret: str, expire_days: int = 100, secure_cookies: bool = False):
        if not secret:
            # Tokens signed with a per-process secret stop verifying on restart
            logger.warning("ACCESS_TOKEN_SECRET is not set; using a random per-process secret")
            secret = secrets.token_urlsafe(32)
        self._secret = secret
        self.expire_days = expire_days
        self.secure_cookies = secure_cookies

    # ── Token ─────────────────────────────────────────────────────────────
    def issue(self, claims: Dict[str, Any]) -> str:
        """
        Signs `claims` with a fixed expiry; caller-supplied iat/exp are replaced.

        Raises:
            ValidationError: a registered claim has a type the token format
            cannot carry (`iss` not a string, `nbf` not a number)
        """
        for name in STRING_CLAIMS:
            if name in claims and not isinstance(claims[name], str):
                raise ValidationError(f"Claim '{name}' must be a string", field=name)
        nbf = claims.get("nbf")
        if nbf is not None and (isinstance(nbf, bool) or not isinstance(nbf, (int, float))):
            raise ValidationError("Claim 'nbf' must be a number", field="nbf")

        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "iat": now,
            "exp": now + timedelta(days=self.expire_days),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Decodes a token and returns its claims.

        Raises:
            AuthenticationError("invalid token"): bad signature, malformed
            token or expired token
        """
        try:
            return jwt.decode(
                token, self._secret, algorithms=[self.algorithm], options=DECODE_OPTIONS
            )
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired session token")
            raise AuthenticationError(message="invalid token", context={"reason": "expired"})
        except jwt.InvalidTokenError as e:
            logger.info("Rejected session token: %s", type(e).__name__)
            raise AuthenticationError(message="invalid token")

    # ── Cookie ────────────────────────────────────────────────────────────
    def cookie_options(self) -> Dict[str, Any]:
        return {
            "httponly": True,
            "secure": self.secure_cookies,
            "samesite": "none" if self.secure_cookies else "lax",
            "path": "/",
        }

    def set_cookie(self, response: Response, token: str) -> None:
        response.set_cookie(
            COOKIE_NAME,
            token,
            max_age=self.expire_days * 24 * 60 * 60,
            **self.cookie_options(),
        )

    def clear_cookie(self, response: Response) -> None:
        """Expires the cookie immediately (Max-Age=0) with the same flags it was set with."""
        response.set_cookie(COOKIE_NAME, "", max_age=0, **self.cookie_options())
