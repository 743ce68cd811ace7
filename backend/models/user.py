"""User ORM model."""

from sqlalchemy import Column, Integer, String, Enum, DateTime
from sqlalchemy.sql import func

from database import Base, SQLITE_TABLE_ARGS

ROLE_ADMIN = "admin"
ROLE_USER = "user"


class User(Base):
    __tablename__ = "users"
    __table_args__ = SQLITE_TABLE_ARGS

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Always stored lowercased; the unique index is the source of truth for
    # duplicate detection under concurrent registrations.
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    address = Column(String(1024), nullable=False, default="", server_default="")
    role = Column(Enum(ROLE_ADMIN, ROLE_USER, name="user_role"), nullable=False, default=ROLE_USER)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
