from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

PHONE_PATTERN = r"^[6-9]\d{9}$"


# 1. For Registration (Input)
class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)
    password: str = Field(..., min_length=6)
    role: Literal["jobseeker", "employer"] = "jobseeker"
    company_name: Optional[str] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


# 2. For Login (Input)
class UserLogin(BaseModel):
    email: EmailStr
    password: str


# 3. For Responses (Output)
class UserResponse(BaseModel):
    id: str
    name: str
    email: EmailStr
    phone: Optional[str] = None
    role: str
    skills: List[str] = []
    experience: Optional[str] = None
    education: Optional[str] = None
    bio: Optional[str] = None
    current_location: Optional[str] = None
    resume_id: Optional[str] = None
    company_name: Optional[str] = None
    company_description: Optional[str] = None
    company_website: Optional[str] = None
    company_size: Optional[str] = None
    is_active: bool = True
    is_verified: bool = False
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# 4. For Updating Profile (Input)
class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    skills: Optional[List[str]] = None
    experience: Optional[str] = None
    education: Optional[str] = None
    bio: Optional[str] = None
    current_location: Optional[str] = None
    company_name: Optional[str] = None
    company_description: Optional[str] = None
    company_website: Optional[str] = None
    company_size: Optional[str] = None


# 5. For Changing Password (Input)
class PasswordUpdate(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


def user_to_response(user: dict) -> dict:
    """Mongo user document -> UserResponse payload (no password)."""
    data = {k: v for k, v in user.items() if k not in ("_id", "password")}
    data["id"] = str(user["_id"])
    return data
