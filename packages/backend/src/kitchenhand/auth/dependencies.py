"""FastAPI auth dependencies — the access-control gate.

Learn: These are used as Depends() in route handlers and router groups
to extract and validate the caller identity from the request.

Token sources, in order:
1. Authorization: Bearer <token>   (programmatic clients)
2. auth_token cookie                (browser sessions)

Three pieces:
- require_login: applied to a whole router via include_router(dependencies=...).
  Rejects the request with 401 before the handler runs, otherwise attaches
  the decoded claims to the request.
- get_current_user (RequiredIdentity): reads the attached claims, 401 if absent.
- get_current_user_optional (OptionalIdentity): never fails, used by public
  pages that only want to show "logged in as X".
"""

import uuid
from dataclasses import dataclass
from typing import Annotated, Optional

import structlog
from fastapi import Depends, Request

from kitchenhand.auth.jwt import Claims, TokenCodec, TokenError
from kitchenhand.errors import NotAuthenticated

logger = structlog.get_logger()

AUTH_COOKIE = "auth_token"
_BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class CallerIdentity:
    """The authenticated caller for the lifetime of one request."""

    user_id: uuid.UUID
    username: str


class RequestAuthContext:
    """Typed accessor for the claims the gate attaches to a request.

    Learn: Starlette's request.state is an untyped bag. All reads and
    writes of the claims go through this class so the contract
    "require_login writes, get_current_user reads" lives in one place.
    """

    _KEY = "auth_claims"

    @classmethod
    def attach_claims(cls, request: Request, claims: Claims) -> None:
        setattr(request.state, cls._KEY, claims)

    @classmethod
    def attached_claims(cls, request: Request) -> Optional[Claims]:
        return getattr(request.state, cls._KEY, None)


def get_token_codec(request: Request) -> TokenCodec:
    """The TokenCodec built once at startup by create_app()."""
    return request.app.state.tokens


def extract_token(request: Request) -> Optional[str]:
    """Bearer header first (exact, case-sensitive prefix), then the cookie."""
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith(_BEARER_PREFIX):
        return authorization[len(_BEARER_PREFIX):]
    return request.cookies.get(AUTH_COOKIE)


def _identity_from_claims(claims: Claims) -> CallerIdentity:
    return CallerIdentity(
        user_id=TokenCodec.subject_as_id(claims),
        username=claims.username,
    )


async def require_login(
    request: Request,
    tokens: TokenCodec = Depends(get_token_codec),
) -> None:
    """Route-group gate: 401 unless the request carries a valid token."""
    token = extract_token(request)
    if not token:
        logger.info("auth.missing_token", path=request.url.path)
        raise NotAuthenticated()

    try:
        claims = tokens.validate(token)
    except TokenError as e:
        logger.info(
            "auth.invalid_token",
            path=request.url.path,
            reason=type(e).__name__,
        )
        raise NotAuthenticated() from e

    RequestAuthContext.attach_claims(request, claims)


async def get_current_user(request: Request) -> CallerIdentity:
    """Extract current identity (required — 401 if none was resolved)."""
    claims = RequestAuthContext.attached_claims(request)
    if claims is None:
        raise NotAuthenticated()
    try:
        return _identity_from_claims(claims)
    except TokenError as e:
        raise NotAuthenticated("Invalid user ID in token") from e


async def get_current_user_optional(
    request: Request,
    tokens: TokenCodec = Depends(get_token_codec),
) -> Optional[CallerIdentity]:
    """Extract current identity (optional — returns None if no auth).

    Learn: This is the "soft" dependency. It first looks for claims the
    gate already attached, then validates the auth_token cookie itself.
    Every failure along the way means "anonymous", never an error.
    """
    claims = RequestAuthContext.attached_claims(request)
    if claims is not None:
        try:
            return _identity_from_claims(claims)
        except TokenError:
            pass

    cookie = request.cookies.get(AUTH_COOKIE)
    if not cookie:
        return None
    try:
        return _identity_from_claims(tokens.validate(cookie))
    except TokenError:
        return None


RequiredIdentity = Annotated[CallerIdentity, Depends(get_current_user)]
OptionalIdentity = Annotated[Optional[CallerIdentity], Depends(get_current_user_optional)]
