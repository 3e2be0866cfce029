"""Password hashing and access tokens.

Tokens are HS256 JWTs whose ``sub`` claim is the player's email.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from kaizen.core.config import settings


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def issue_access_token(email: str, *, now: datetime | None = None) -> str:
    issued = now or datetime.now(timezone.utc)
    claims = {
        "sub": email,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.jwt_expire_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def token_subject(token: str) -> str | None:
    """Email carried by a valid, unexpired token, else None."""
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    subject = claims.get("sub")
    return subject if isinstance(subject, str) and subject else None
