from pydantic import BaseModel, EmailStr, Field, field_validator

from classroom_api.schemas.base import APIModel
from classroom_api.schemas.user import UserProfile, check_password_strength


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(APIModel):
    user_id: str = Field(min_length=1)
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=72)

    @field_validator("new_password")
    @classmethod
    def password_is_strong(cls, value: str) -> str:
        return check_password_strength(value)


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserProfile
