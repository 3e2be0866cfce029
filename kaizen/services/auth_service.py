"""Auth service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from kaizen.core.game_rules import GameRules
from kaizen.core.security import hash_password, verify_password
from kaizen.models.user import User
from kaizen.models.user_stats import UserStats
from kaizen.schemas.auth import RegisterRequest
from kaizen.services.progression import initial_stats


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get user by email."""
    return db.execute(select(User).where(User.email == email)).scalar_one_or_none()


def create_user(db: Session, data: RegisterRequest, rules: GameRules) -> User:
    """Create a new user together with their starting stats."""
    user = User(
        email=data.email,
        hashed_password=hash_password(data.password),
        full_name=data.full_name,
        avatar=data.avatar or "",
    )
    db.add(user)
    db.flush()
    db.add(UserStats(user_id=user.id, **initial_stats(rules)))
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Authenticate user by email and password."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    if not user.is_active:
        return None
    return user
