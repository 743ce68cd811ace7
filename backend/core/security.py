"""
Central security module.  All cryptographic primitives and auth guards live
here.  No other module should touch raw crypto directly.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. JWT creation / decoding                  (PyJWT / HS256)
3. FastAPI dependency guards                (get_current_claims, require_admin)
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.config import settings
from core.logger import logger
from database import get_db

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------
# The work factor is the PBKDF2 round count (PASSWORD_HASH_ROUNDS).  The salt
# and round count are embedded in the hash string, so changing the setting
# only affects newly hashed passwords.
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Hash a plaintext password, returning the full passlib hash string."""
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """
    Constant-time verification of a plaintext password against a hash
    produced by :func:`hash_password`.

    Raises ``ValueError`` if *stored_hash* is not a valid pbkdf2_sha256 hash.
    """
    return _pbkdf2.verify(plain, stored_hash)


# ---------------------------------------------------------------------------
# 2.  JWT – access tokens
# ---------------------------------------------------------------------------

_ALGORITHM = "HS256"

# Same message for bad signature, expiry and garbage – callers learn nothing
# about which check failed.
_INVALID_TOKEN = "Invalid or expired token."


class TokenClaims(BaseModel):
    """Identity carried by an access token."""

    user_id: int
    role: str


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a JWT with HS256.

    *data* should contain at minimum: sub, user_id, role.
    An ``exp`` claim is added automatically.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode["exp"] = expire
    return _jwt.encode(to_encode, settings.secret_key, algorithm=_ALGORITHM)


def issue_token_for(user) -> str:
    """Issue an access token carrying *user*'s id and role."""
    return create_access_token(
        {"sub": str(user.id), "user_id": user.id, "role": user.role}
    )


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT.  Raises HTTP 401 on any failure (expired,
    bad signature, malformed).
    """
    try:
        return _jwt.decode(token, settings.secret_key, algorithms=[_ALGORITHM])
    except (_jwt.ExpiredSignatureError, _jwt.InvalidTokenError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_INVALID_TOKEN,
        )


# ---------------------------------------------------------------------------
# 3.  FastAPI dependency guards
# ---------------------------------------------------------------------------

# auto_error=False so a missing or non-Bearer header reaches our own 401.
# The tokenUrl here is only used by the auto-generated OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_current_claims(token: Optional[str] = Depends(oauth2_scheme)) -> TokenClaims:
    """
    Dependency: authentication stage.  Requires ``Authorization: Bearer
    <token>`` and returns the decoded claims.  Never touches the database.

    Raises 401 if the header is missing/malformed or the token is invalid.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token required.",
        )

    payload = decode_access_token(token)
    try:
        return TokenClaims(user_id=payload.get("user_id"), role=payload.get("role"))
    except ValidationError:
        # Correctly signed but missing the identity claims
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_INVALID_TOKEN,
        )


def require_admin(
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """
    Dependency: authorization stage.  Runs after :func:`get_current_claims`
    and re-reads the user's role from the database; the role embedded in
    the token is ignored.  Returns the User ORM instance.

    Raises 403 if the user is not (or no longer) an admin, 500 if the
    lookup itself fails.
    """
    # Lazy import to avoid circular dependency at module load time
    from models.user import ROLE_ADMIN, User  # noqa: E402

    try:
        user = db.query(User).filter(User.id == claims.user_id).first()
    except SQLAlchemyError:
        logger.exception("Admin check failed for user_id=%s", claims.user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error checking admin status.",
        )

    if not user or user.role != ROLE_ADMIN:
        logger.warning("Admin access denied for user_id=%s", claims.user_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required.",
        )
    return user


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For header first (for proxies), then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"
