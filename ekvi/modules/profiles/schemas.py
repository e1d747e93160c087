import uuid
from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field

Role = Literal["athlete", "coach", "admin"]

class ProfileCreate(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=120)
    role: Role
    bio: str | None = None
    avatar_url: str | None = Field(default=None, max_length=512)
    location: str | None = Field(default=None, max_length=120)
    timezone: str | None = Field(default=None, max_length=64)

class ProfileUpdate(BaseModel):
    display_name: str | None = Field(default=None, min_length=1, max_length=120)
    bio: str | None = None
    avatar_url: str | None = Field(default=None, max_length=512)
    location: str | None = Field(default=None, max_length=120)
    timezone: str | None = Field(default=None, max_length=64)

class ProfileOut(BaseModel):
    id: uuid.UUID
    display_name: str
    bio: str | None
    avatar_url: str | None
    role: Role
    location: str | None
    timezone: str | None
    account_status: str
    created_at: datetime

    class Config:
        from_attributes = True

class AuthUserOut(BaseModel):
    id: str
    email: str | None
    name: str | None
    has_completed_onboarding: bool

class CurrentUserOut(BaseModel):
    auth_user: AuthUserOut
    profile: ProfileOut | None
