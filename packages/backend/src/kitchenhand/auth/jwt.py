"""JWT token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication.
A single token type is issued at login and carried either in the
Authorization header (programmatic clients) or the auth_token cookie
(browsers). There is no server-side revocation: expiry is the only way
a token stops being valid, and logout just clears the cookie.

The token carries the user id (sub) and the display name (username), so
the gate can rebuild the caller identity without touching the database.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

_REQUIRED_CLAIMS = ["sub", "username", "iat", "exp"]


class TokenError(Exception):
    """Raised when token creation/verification fails."""


class ExpiredToken(TokenError):
    """The token's exp is at or before the current time."""


class MalformedToken(TokenError):
    """Bad structure, bad signature or missing claims."""


class UnknownTokenError(TokenError):
    """Anything the JWT library raised that isn't covered above."""


class InvalidSubject(TokenError):
    """The sub claim is not a UUID."""


@dataclass(frozen=True)
class Claims:
    sub: str
    username: str
    iat: int
    exp: int


class TokenCodec:
    """Signs and verifies identity tokens with a server-held secret."""

    def __init__(self, secret: str, ttl_hours: int = 24, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self.ttl_hours = ttl_hours
        self.algorithm = algorithm

    def issue(
        self,
        subject_id: uuid.UUID | str,
        display_name: str,
        ttl_hours: int | None = None,
    ) -> str:
        """Create a signed token valid for ttl_hours (default: configured ttl)."""
        now = datetime.now(timezone.utc)
        hours = self.ttl_hours if ttl_hours is None else ttl_hours
        payload = {
            "sub": str(subject_id),
            "username": display_name,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=hours)).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def validate(self, token: str) -> Claims:
        """Verify signature and expiry, and return the embedded claims.

        No database lookup happens here: a user deactivated after the token
        was issued stays valid until exp.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredToken("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise MalformedToken(f"Invalid token: {e}") from e
        except Exception as e:
            raise UnknownTokenError(f"Token validation failed: {e}") from e

        try:
            return Claims(
                sub=str(payload["sub"]),
                username=str(payload["username"]),
                iat=int(payload["iat"]),
                exp=int(payload["exp"]),
            )
        except (TypeError, ValueError) as e:
            raise MalformedToken(f"Invalid claims: {e}") from e

    @staticmethod
    def subject_as_id(claims: Claims) -> uuid.UUID:
        try:
            return uuid.UUID(claims.sub)
        except (ValueError, AttributeError, TypeError) as e:
            raise InvalidSubject(f"Invalid user id in token: {claims.sub!r}") from e
