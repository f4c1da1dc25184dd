from datetime import datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field

from .base import MongoBaseModel

Role = Literal["jobseeker", "employer", "admin"]


class User(MongoBaseModel):
    name: str
    email: EmailStr
    phone: str
    password: str
    role: Role = "jobseeker"

    # Job seeker
    skills: List[str] = []
    experience: Optional[str] = None
    education: Optional[str] = None
    bio: Optional[str] = None
    current_location: Optional[str] = None
    resume_id: Optional[str] = None

    # Employer
    company_name: Optional[str] = None
    company_description: Optional[str] = None
    company_website: Optional[str] = None
    company_size: Optional[str] = None

    is_active: bool = True
    is_verified: bool = False
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
