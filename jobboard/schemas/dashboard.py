from typing import List, Optional

from pydantic import BaseModel

from jobboard.schemas.application import ApplicationView, MyApplicationItem
from jobboard.schemas.job import JobResponse


class CompanyResponse(BaseModel):
    id: str
    name: str
    company_name: Optional[str] = None
    company_description: Optional[str] = None
    company_website: Optional[str] = None
    company_size: Optional[str] = None
    is_verified: bool = False
    active_jobs_count: Optional[int] = None


class EmployerStats(BaseModel):
    total_jobs: int
    active_jobs: int
    closed_jobs: int
    total_applications: int
    pending_applications: int
    shortlisted: int
    interviewed: int
    hired: int
    rejected: int
    access_requests_pending: int
    access_granted: int
    total_views: int


class EmployerDashboard(BaseModel):
    stats: EmployerStats
    jobs: List[JobResponse]
    recent_applications: List[ApplicationView]


class JobSeekerStats(BaseModel):
    total_applications: int
    pending_applications: int
    reviewing: int
    shortlisted: int
    interviewed: int
    rejected: int
    hired: int
    withdrawn: int


class JobSeekerDashboard(BaseModel):
    stats: JobSeekerStats
    applications: List[MyApplicationItem]
    recent_jobs: List[JobResponse]
