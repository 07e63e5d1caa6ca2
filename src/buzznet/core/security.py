"""Password hashing and bearer-token primitives."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from buzznet.core.errors import InvalidToken
from buzznet.core.settings import Settings, settings
from buzznet.db.time import utcnow

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int | None = None) -> str:
    """Return a salted bcrypt hash of ``password``.

    Args:
        password: Plain-text password; must encode to at most 72 bytes.
        rounds: Work factor override, defaults to ``settings.password_hash_rounds``.

    Returns:
        The hash in modular crypt format (``$2b$10$...``).
    """
    salt = bcrypt.gensalt(rounds=rounds or settings.password_hash_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches ``password_hash``."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
    except ValueError:
        # Over-long input or a corrupt stored hash never matches.
        return False


def create_access_token(
    subject: str,
    *,
    now: datetime | None = None,
    config: Settings = settings,
) -> str:
    """Create a signed JWT whose ``sub`` claim is the user id."""
    issued_at = now or utcnow()
    to_encode: dict[str, Any] = {
        "sub": subject,
        "iat": int(issued_at.timestamp()),
        "exp": issued_at + timedelta(minutes=config.access_token_expire_minutes),
    }
    encoded_jwt: str = jwt.encode(
        to_encode,
        config.secret_key,
        algorithm=config.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str, *, config: Settings = settings) -> str:
    """Verify ``token`` and return its subject.

    Raises:
        InvalidToken: If the signature, expiry or shape of the token is wrong.
    """
    try:
        payload = jwt.decode(
            token,
            config.secret_key,
            algorithms=[config.jwt_algorithm],
        )
    except JWTError as err:
        raise InvalidToken() from err

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise InvalidToken()
    return subject
