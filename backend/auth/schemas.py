"""Pydantic request / response models for the auth endpoints."""

from typing import Optional

from pydantic import BaseModel


# -- Requests --------------------------------------------------------------


class CredentialsRequest(BaseModel):
    # Optional so that a missing field reaches the handler's own 400 message
    email: Optional[str] = None
    password: Optional[str] = None


# -- Responses -------------------------------------------------------------


class PublicUser(BaseModel):
    id: int
    email: str
    role: str

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    token: str
    user: PublicUser
