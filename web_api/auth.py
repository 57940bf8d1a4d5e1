"""
Request dependencies for the web API.

- get_app_context: the AppContext stored on the FastAPI app at startup
- require_admin_token: guards operator endpoints with the ADMIN_TOKEN header
"""

import hmac

from fastapi import Depends, Header, HTTPException, Request

from core.app_context import AppContext


def get_app_context(request: Request) -> AppContext:
    ctx = getattr(request.app.state, "context", None)
    if ctx is None:
        raise HTTPException(503, "Service not ready")
    return ctx


def require_admin_token(
    x_admin_token: str | None = Header(default=None),
    ctx: AppContext = Depends(get_app_context),
) -> None:
    """
    Reject the request unless X-Admin-Token matches ADMIN_TOKEN.

    With no ADMIN_TOKEN configured every request is rejected.
    """
    expected = ctx.settings.admin_token
    if not expected or not x_admin_token:
        raise HTTPException(401, "Admin token required")
    if not hmac.compare_digest(x_admin_token, expected):
        raise HTTPException(401, "Invalid admin token")
