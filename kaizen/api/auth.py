"""Auth endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from kaizen.core.deps import get_current_user, get_game_rules
from kaizen.core.game_rules import GameRules
from kaizen.core.security import issue_access_token
from kaizen.db.session import get_db
from kaizen.models.user import User
from kaizen.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserMe
from kaizen.services.auth_service import authenticate_user, create_user, get_user_by_email

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserMe)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    rules: GameRules = Depends(get_game_rules),
):
    """Register a new user and give them starting stats."""
    if get_user_by_email(db, data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    user = create_user(db, data, rules)
    return user


@router.post("/login", response_model=TokenResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
):
    """Login and return access token."""
    user = authenticate_user(db, data.email, data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    token = issue_access_token(user.email)
    return TokenResponse(access_token=token)


@router.get("/me", response_model=UserMe)
def me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return current_user
