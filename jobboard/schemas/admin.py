# ========================================
# jobboard/schemas/admin.py
# ========================================

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from jobboard.schemas.user import UserResponse


class UserStatusUpdate(BaseModel):
    """Fields an admin may flip on a user account"""
    is_verified: Optional[bool] = None
    is_active: Optional[bool] = None


class UserDetailResponse(UserResponse):
    total_jobs_posted: int = 0
    total_applications: int = 0


class AdminApplicationRow(BaseModel):
    id: str
    job_seeker_name: str
    job_seeker_email: str
    job_title: str
    company_name: str
    status: str
    details_access: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserCounts(BaseModel):
    total: int
    job_seekers: int
    employers: int
    admins: int


class JobCounts(BaseModel):
    total: int
    active: int


class ApplicationCounts(BaseModel):
    total: int
    pending: int
    access_requests_pending: int
    access_granted: int


class PlatformStats(BaseModel):
    users: UserCounts
    jobs: JobCounts
    applications: ApplicationCounts


class AuditLogResponse(BaseModel):
    id: str
    action: str
    admin_id: str
    admin_name: str
    target_type: str
    target_id: Optional[str] = None
    details: dict = {}
    timestamp: datetime


class DeleteResult(BaseModel):
    message: str
    jobs_deleted: int = 0
    applications_deleted: int = 0
