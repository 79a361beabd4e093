"""Jinja2 page rendering.

Every page gets is_authenticated/username so the nav bar can show
"Logged in as X" on public pages without forcing a login.
"""

import os
from typing import Any, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from kitchenhand.auth.dependencies import CallerIdentity

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")

templates = Jinja2Templates(directory=TEMPLATES_DIR)


def render(
    request: Request,
    name: str,
    context: Optional[dict[str, Any]] = None,
    *,
    user: Optional[CallerIdentity] = None,
    status_code: int = 200,
) -> Response:
    ctx = {
        "is_authenticated": user is not None,
        "username": user.username if user else None,
        "error": "",
    }
    ctx.update(context or {})
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)
