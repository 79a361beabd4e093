"""Auth pages — login, logout, (disabled) registration.

Learn: Browser sessions carry the JWT in an HttpOnly `auth_token` cookie.
- GET /login → login form (303 to / when already logged in)
- POST /login → username/password → cookie + 303 to /
- GET /logout → clear the cookie + 303 to /
- GET|POST /register → "Registration Temporarily Disabled" (404).
  Staff accounts are created with `kitchenhand create-user`.
- GET /401 → the "please log in" page

Logout only drops the cookie. A copied token stays valid until it
expires (no server-side revocation).
"""

import structlog
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from kitchenhand.api.errors import unauthorized_response
from kitchenhand.api.templates import render
from kitchenhand.auth.dependencies import AUTH_COOKIE, OptionalIdentity, get_token_codec
from kitchenhand.auth.jwt import TokenCodec
from kitchenhand.auth.password import CodecError
from kitchenhand.db.engine import get_db
from kitchenhand.errors import AppError, InvalidCredentials
from kitchenhand.schemas.catalog import LoginForm
from kitchenhand.services.user_service import UserService

logger = structlog.get_logger()

router = APIRouter()


# ─── Login ───────────────────────────────────────────────


@router.get("/login")
async def login_form(request: Request, user: OptionalIdentity):
    if user is not None:
        return RedirectResponse("/", status_code=303)
    return render(request, "login.html")


@router.post("/login")
async def login(
    request: Request,
    username: str = Form(""),
    password: str = Form(""),
    db: AsyncSession = Depends(get_db),
    tokens: TokenCodec = Depends(get_token_codec),
):
    """Check credentials, set the auth cookie, redirect home."""
    form = LoginForm(username=username, password=password)
    try:
        user = await UserService(db).authenticate(form.username, form.password)
    except InvalidCredentials as e:
        return render(
            request,
            "login.html",
            {"error": e.message, "login_username": form.username},
            status_code=e.status_code,
        )
    except CodecError as e:
        # A stored hash bcrypt can't parse is a data problem, not a bad login.
        logger.error("auth.bad_password_hash", username=form.username, error=str(e))
        raise AppError("Login failed") from e

    token = tokens.issue(str(user.id), user.username)
    logger.info("auth.login", user_id=str(user.id), username=user.username)

    settings = request.app.state.settings
    response = RedirectResponse("/", status_code=303)
    response.set_cookie(
        AUTH_COOKIE,
        token,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )
    return response


# ─── Logout ──────────────────────────────────────────────


@router.get("/logout")
async def logout(request: Request):
    settings = request.app.state.settings
    response = RedirectResponse("/", status_code=303)
    response.set_cookie(
        AUTH_COOKIE,
        "",
        max_age=0,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.secure_cookies,
    )
    return response


# ─── Register (disabled) ─────────────────────────────────


@router.get("/register")
@router.post("/register")
async def register(request: Request, user: OptionalIdentity):
    return render(request, "registration_disabled.html", user=user, status_code=404)


# ─── 401 ─────────────────────────────────────────────────


@router.get("/401")
async def unauthorized_page(request: Request):
    return unauthorized_response(request)
