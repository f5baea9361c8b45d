"""
Marathon Event API — Session Route Handlers
=============================================

What:  POST /jwt issues the session cookie, POST /logout clears it.
How:   The JSON body of /jwt is taken as the token claims (typically
       `{"email": ...}` from the frontend's identity provider).
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Body, Depends, Response

from marathon_api.dependencies import get_token_service
from marathon_api.services.auth_service import TokenService

logger = logging.getLogger(__name__)


async def issue_token(
    response: Response,
    claims: Optional[Dict[str, Any]] = Body(default=None),
    token_service: TokenService = Depends(get_token_service),
) -> Dict[str, bool]:
    """
    Sign the posted claims and set them as the `token` cookie.

    Example:
        POST /jwt {"email": "runner@example.com"}
        → 200 {"success": true}, Set-Cookie: token=...; HttpOnly; ...
    """
    claims = claims or {}
    token = token_service.issue(claims)
    token_service.set_cookie(response, token)
    logger.info("Issued session token (claims: %s)", sorted(claims))
    return {"success": True}


async def logout(
    response: Response,
    token_service: TokenService = Depends(get_token_service),
) -> Dict[str, bool]:
    token_service.clear_cookie(response)
    return {"success": True}
