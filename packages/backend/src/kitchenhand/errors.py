"""Application error taxonomy.

Learn: Every failure a request can end in maps to exactly one of these
exceptions, and each one knows its HTTP status. Route handlers raise them;
the handlers registered in main.py turn them into themed HTML pages.
Codec and adapter errors (TokenError, CodecError, StorageError) are wrapped
into these at the route boundary so the client never sees internals.
"""


class AppError(Exception):
    """Base class for errors that end a request with a rendered page."""

    status_code = 500
    template = "500.html"
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotAuthenticated(AppError):
    """No token, an invalid token, or no resolved identity on a protected path."""

    status_code = 401
    template = "401.html"
    default_message = "Authentication required"


class InvalidCredentials(AppError):
    """Login failed. Same message for unknown user and wrong password."""

    status_code = 401
    template = "login.html"
    default_message = "Invalid username or password"


class ValidationFailed(AppError):
    """Malformed form input."""

    status_code = 400
    template = "400.html"
    default_message = "Invalid form data"


class NotFound(AppError):
    status_code = 404
    template = "404.html"
    default_message = "Not found"


class StorageFailure(AppError):
    """Upload could not be written to the configured backend."""

    status_code = 500
    default_message = "Failed to store uploaded file"


class DatabaseFailure(AppError):
    """Pool exhaustion or a failed query."""

    status_code = 500
    default_message = "Database error"
