# ========================================
# jobboard/schemas/job.py
# ========================================

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from jobboard.models.job import JobStatus, JobType, Location, Salary, WorkMode

# 1. Input: What the Employer sends
class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str
    location: Optional[Location] = None
    job_type: JobType = "fulltime"
    work_mode: WorkMode = "office"
    category: str
    experience_required: str
    education_required: str
    skills: List[str] = []
    salary: Salary = Field(default_factory=Salary)
    vacancies: int = Field(1, ge=1)
    status: JobStatus = "active"
    expiry_date: Optional[datetime] = None


# 2. Input: Update existing job
class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[Location] = None
    job_type: Optional[JobType] = None
    work_mode: Optional[WorkMode] = None
    category: Optional[str] = None
    experience_required: Optional[str] = None
    education_required: Optional[str] = None
    skills: Optional[List[str]] = None
    salary: Optional[Salary] = None
    vacancies: Optional[int] = Field(None, ge=1)
    status: Optional[JobStatus] = None
    expiry_date: Optional[datetime] = None


# 3. Output: Basic Response
class JobResponse(BaseModel):
    id: str
    title: str
    description: str
    company_id: str
    company_name: str
    location: Location
    job_type: JobType
    work_mode: WorkMode
    category: str
    experience_required: str
    education_required: str
    skills: List[str] = []
    salary: Salary
    vacancies: int = 1
    status: JobStatus
    views: int = 0
    application_count: int = 0
    expiry_date: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


# 4. Output: Employer's own job with pipeline counts
class MyJobResponse(JobResponse):
    applications_by_status: Dict[str, int] = {}


# 5. Output: Paginated list
class JobListResponse(BaseModel):
    count: int
    total: int
    total_pages: int
    current_page: int
    data: List[JobResponse]


def job_to_response(job: dict) -> dict:
    return {**job, "id": str(job["_id"])}
