"""Password hashing utilities.

Learn: Uses bcrypt for secure password hashing. bcrypt automatically
handles salting and is resistant to rainbow table attacks.
The work factor (rounds=12 by default, BCRYPT_ROUNDS to tune) takes
~250ms per hash on modern hardware. Only the hash is ever stored.
"""

import bcrypt

DEFAULT_ROUNDS = 12

# bcrypt only looks at the first 72 bytes of the password.
_MAX_PASSWORD_BYTES = 72


class CodecError(Exception):
    """Raised when hashing fails or a stored hash is malformed."""


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt.

    bcrypt includes a random salt automatically and produces
    hashes starting with "$2b$". Passwords are truncated to 72 bytes.
    """
    pw_bytes = password.encode("utf-8")[:_MAX_PASSWORD_BYTES]
    try:
        salt = bcrypt.gensalt(rounds=rounds or DEFAULT_ROUNDS)
        return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")
    except (ValueError, TypeError) as e:
        raise CodecError(f"Failed to hash password: {e}") from e


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash.

    Returns False on mismatch. Raises CodecError when password_hash is
    not a bcrypt hash at all.
    """
    pw_bytes = password.encode("utf-8")[:_MAX_PASSWORD_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError) as e:
        raise CodecError("Malformed password hash") from e
