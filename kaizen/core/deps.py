"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from kaizen.core.game_rules import GameRules, load_game_rules
from kaizen.core.security import token_subject
from kaizen.db.session import get_db
from kaizen.models.user import User
from kaizen.services.auth_service import get_user_by_email

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> User:
    """Resolve the bearer token to an active player, or 401."""
    if not credentials:
        raise _unauthorized("Not authenticated")
    email = token_subject(credentials.credentials)
    if email is None:
        raise _unauthorized("Invalid or expired token")
    user = get_user_by_email(db, email)
    if not user:
        raise _unauthorized("User not found")
    if not user.is_active:
        raise _unauthorized("User is inactive")
    return user


def get_game_rules() -> GameRules:
    """Game rules for the current deployment."""
    return load_game_rules()
