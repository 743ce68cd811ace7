"""
Profile endpoints for the authenticated user.

Only ``address`` is writable here; email and role cannot be changed through
the public API.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from core.logger import logger
from core.security import TokenClaims, get_current_claims
from models.user import User
from users.schemas import ProfileResponse, ProfileUpdatedResponse, UpdateProfileRequest, UserProfile

router = APIRouter(prefix="/users", tags=["users"])


def _load_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# ---------------------------------------------------------------------------
# GET /users/profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """Return the caller's profile (no password hash)."""
    try:
        user = _load_user(db, claims.user_id)
    except SQLAlchemyError:
        logger.exception("Fetching profile failed for user_id=%s", claims.user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching profile.",
        )
    return ProfileResponse(user=UserProfile.model_validate(user))


# ---------------------------------------------------------------------------
# PUT /users/profile
# ---------------------------------------------------------------------------


@router.put("/profile", response_model=ProfileUpdatedResponse)
def update_profile(
    body: UpdateProfileRequest,
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """Overwrite the caller's shipping address."""
    try:
        user = _load_user(db, claims.user_id)
        user.address = body.address
        db.commit()
        db.refresh(user)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Updating profile failed for user_id=%s", claims.user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error updating profile.",
        )
    return ProfileUpdatedResponse(message="Profile updated!", user=UserProfile.model_validate(user))
