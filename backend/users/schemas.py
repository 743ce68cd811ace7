"""Pydantic request / response models for the profile endpoints."""

from pydantic import BaseModel


class UpdateProfileRequest(BaseModel):
    address: str


class UserProfile(BaseModel):
    id: int
    email: str
    address: str
    role: str

    model_config = {"from_attributes": True}


class ProfileResponse(BaseModel):
    user: UserProfile


class ProfileUpdatedResponse(BaseModel):
    message: str
    user: UserProfile
