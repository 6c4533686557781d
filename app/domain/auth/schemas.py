"""Auth domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import validate_email, validate_phone


class RegisterRequest(BaseModel):
    """Schema for self-registration (admins are provisioned, not registered)"""

    email: str
    phone: str
    password: str = Field(..., min_length=8, max_length=72)
    user_type: Literal["customer", "provider"]
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class RefreshTokenRequest(BaseModel):
    refreshToken: str


class ChangePasswordRequest(BaseModel):
    currentPassword: str
    newPassword: str = Field(..., min_length=8, max_length=72)


class UpdateProfileRequest(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    profile_picture: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)


class UserResponse(BaseModel):
    """Sanitized user - never includes the password hash"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    phone: str
    user_type: str
    first_name: str
    last_name: str
    profile_picture: Optional[str] = None
    is_verified: bool
    created_at: datetime


class TokenPair(BaseModel):
    accessToken: str
    refreshToken: str


class AuthResponse(BaseModel):
    user: UserResponse
    tokens: TokenPair
