import re

from pydantic import EmailStr, Field, field_validator

from classroom_api.schemas.base import APIModel

BCRYPT_MAX_BYTES = 72


def check_password_strength(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password cannot be longer than {BCRYPT_MAX_BYTES} bytes")
    if not re.search(r"\d", value):
        raise ValueError("Password must contain at least one digit")
    if not re.search(r"[a-z]", value):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[A-Z]", value):
        raise ValueError("Password must contain at least one uppercase letter")
    return value


class UserCreate(APIModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    role: str
    full_name: str = Field(min_length=1, max_length=255)
    age: int = Field(ge=0, le=150)
    gender: str = Field(min_length=1, max_length=50)
    description: str | None = None

    @field_validator("role")
    @classmethod
    def role_is_known(cls, value: str) -> str:
        if value not in ("Teacher", "Student"):
            raise ValueError("Role must be either 'Teacher' or 'Student'")
        return value

    @field_validator("password")
    @classmethod
    def password_is_strong(cls, value: str) -> str:
        return check_password_strength(value)


class UserProfile(APIModel):
    id: str
    email: EmailStr
    full_name: str
    gender: str
    age: int
    description: str | None = None
    roles: list[str]


class RegisterResponse(APIModel):
    message: str
    user_id: str
