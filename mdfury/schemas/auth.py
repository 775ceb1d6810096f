from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username or email address")
    password: str = Field(..., min_length=1, description="User's password")


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Unique username")
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., description="User's password")
    confirm_password: str = Field(..., description="Must match password")
    display_name: Optional[str] = None
    invite_code: Optional[str] = Field(default=None, description="Required when invite-only registration is on")


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    fp: str
    username: str
    email: str
    display_name: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class ApiTokenResponse(BaseModel):
    api_token: str


class AuthConfigResponse(BaseModel):
    registration_disabled: bool
    invite_code_required: bool
    oauth_registration_disabled: bool
    oauth_providers: dict
