"""
Auth endpoints – registration and login.

Security notes
--------------
* Login returns the *same* error message whether the email doesn't exist or
  the password is wrong.  This prevents user-enumeration attacks.
* The very first account created through registration becomes an admin.
  Counting users and inserting the new row are two separate statements, so
  two simultaneous first registrations can both be promoted.  Deployments
  that need exactly one admin should run bin/seed_admin.py before opening
  registration.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from core.logger import logger
from core.security import get_client_ip, hash_password, issue_token_for, verify_password
from models.user import ROLE_ADMIN, ROLE_USER, User
from auth.schemas import AuthResponse, CredentialsRequest, PublicUser

router = APIRouter(prefix="/auth", tags=["auth"])

_MISSING_FIELDS = "Email and password are required."
_EMAIL_TAKEN = "User with this email already exists."
# Generic message used for both "no such email" and "wrong password"
_LOGIN_FAIL = "Invalid credentials."


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(token=issue_token_for(user), user=PublicUser.model_validate(user))


# ---------------------------------------------------------------------------
# POST /auth/register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(body: CredentialsRequest, request: Request, db: Session = Depends(get_db)):
    """Create an account and return a signed JWT for it."""
    email = _normalize_email(body.email or "")
    if not email or not body.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_MISSING_FIELDS)

    try:
        if db.query(User).filter(User.email == email).first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_EMAIL_TAKEN)

        password_hash = hash_password(body.password)

        is_first_user = db.query(User).count() == 0
        user = User(
            email=email,
            password_hash=password_hash,
            role=ROLE_ADMIN if is_first_user else ROLE_USER,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        # Lost a race against a concurrent registration for the same email
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_EMAIL_TAKEN)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Registration failed for %s", email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error during registration.",
        )

    logger.info(
        "Registered user_id=%s role=%s client=%s", user.id, user.role, get_client_ip(request)
    )
    return _auth_response(user)


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=AuthResponse)
def login(body: CredentialsRequest, request: Request, db: Session = Depends(get_db)):
    """Authenticate and return a signed JWT."""
    email = _normalize_email(body.email or "")
    if not email or not body.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_MISSING_FIELDS)

    try:
        user = db.query(User).filter(User.email == email).first()
        # Unified failure path – no information leaks about whether the email exists
        if not user or not verify_password(body.password, user.password_hash):
            logger.warning("Failed login attempt client=%s", get_client_ip(request))
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_LOGIN_FAIL)
    except (SQLAlchemyError, ValueError):
        # ValueError: stored hash is corrupt
        logger.exception("Login failed unexpectedly")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error during login.",
        )

    return _auth_response(user)
