"""Security headers middleware.

Learn: The header set is built once in create_app() from Settings and the
chosen upload backend, then stamped onto every page and asset:
- Content-Security-Policy: everything from this origin. Images may also
  come from the S3 bucket when uploads live there. The templates carry an
  inline stylesheet and the add-step script, so inline style/script stay
  allowed.
- X-Content-Type-Options / X-Frame-Options: uploaded images are never
  sniffed as HTML and the catalog is never framed
- Strict-Transport-Security: only in production, the same switch that
  marks the auth cookie Secure
"""

from collections.abc import Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

HSTS = "max-age=31536000; includeSubDomains"


def content_security_policy(image_origins: Iterable[str] = ()) -> str:
    img_src = " ".join(["'self'", "data:", *image_origins])
    return "; ".join(
        [
            "default-src 'self'",
            f"img-src {img_src}",
            "style-src 'self' 'unsafe-inline'",
            "script-src 'self' 'unsafe-inline'",
            "form-action 'self'",
            "frame-ancestors 'none'",
        ]
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add the same precomputed security headers to all responses."""

    def __init__(
        self,
        app: ASGIApp,
        image_origins: Iterable[str] = (),
        hsts: bool = False,
    ):
        super().__init__(app)
        self.security_headers = {
            "Content-Security-Policy": content_security_policy(image_origins),
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
        }
        if hsts:
            self.security_headers["Strict-Transport-Security"] = HSTS

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update(self.security_headers)
        return response
