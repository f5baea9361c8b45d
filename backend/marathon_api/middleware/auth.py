"""
Marathon Event API — Auth Gate
================================

What:  Route-level dependency that admits only requests carrying a valid
       session cookie.
How:   Attached per route by the route table (routes/__init__.py) when the
       route is flagged `protected` or named in PROTECTED_ROUTES. It is a
       dependency rather than an app-wide middleware so that protection is
       decided route by route.

Outcomes:
    no `token` cookie       → 401 "unauthorized access"
    bad/expired signature   → 401 "invalid token"
    valid                   → claims on request.state.user, request proceeds
"""

import logging
from typing import Any, Dict

from fastapi import Depends, Request

from marathon_api.dependencies import get_token_service
from marathon_api.exceptions import AuthenticationError
from marathon_api.services.auth_service import COOKIE_NAME, TokenService

logger = logging.getLogger(__name__)


async def require_token(
    request: Request,
    token_service: TokenService = Depends(get_token_service),
) -> Dict[str, Any]:
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        logger.info("Rejected %s %s: no session cookie", request.method, request.url.path)
        raise AuthenticationError(message="unauthorized access")

    claims = token_service.verify(token)
    request.state.user = claims
    return claims
