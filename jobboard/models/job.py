from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .base import MongoBaseModel, PyObjectId

JobType = Literal["fulltime", "parttime", "contract", "internship"]
WorkMode = Literal["office", "remote", "hybrid"]
JobStatus = Literal["active", "closed", "draft"]


class Location(BaseModel):
    city: str
    area: str = ""


class Salary(BaseModel):
    min: Optional[int] = None
    max: Optional[int] = None
    currency: str = "INR"


class Job(MongoBaseModel):
    title: str
    description: str
    company_id: PyObjectId
    company_name: str
    location: Location
    job_type: JobType = "fulltime"
    work_mode: WorkMode = "office"
    category: str
    experience_required: str
    education_required: str
    skills: List[str] = []
    salary: Salary = Field(default_factory=Salary)
    vacancies: int = 1
    status: JobStatus = "active"
    views: int = 0
    application_count: int = 0
    expiry_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
