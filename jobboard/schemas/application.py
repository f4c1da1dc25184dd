# ========================================
# jobboard/schemas/application.py
# ========================================

import re
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel

from jobboard.models.application import (
    ApplicationStatus,
    Interview,
    StatusHistoryEntry,
    SupplementaryData,
)

# 1. Input: Update Status
class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = None


# 2. Input: Schedule Interview
class InterviewSchedule(BaseModel):
    date: str
    time: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None


def split_skills(raw: Optional[str]) -> List[str]:
    """Form posts send skills as one comma/newline separated string."""
    if not raw:
        return []
    return [s.strip() for s in re.split(r"[,\n]", raw) if s.strip()]


# 3. Applicant identity, either revealed or anonymized
class RevealedApplicant(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None


class AnonymousApplicant(BaseModel):
    id: str
    anonymous_name: str


# 4. Output: What a viewer gets for one application
class ApplicationView(BaseModel):
    id: str
    job_id: str
    employer_id: str
    status: ApplicationStatus
    cover_letter: str = ""
    applied_at: datetime
    updated_at: Optional[datetime] = None
    status_history: List[StatusHistoryEntry] = []
    interview: Optional[Interview] = None

    applicant: Union[RevealedApplicant, AnonymousApplicant]
    additional_data: SupplementaryData
    resume: Optional[str] = None
    has_resume: bool = False

    # True when the viewer sees name, email, phone and resume. The applicant
    # and admins always do; details_access_granted only tracks the workflow.
    identity_visible: bool
    access_requested: bool
    details_access_requested: bool
    details_access_requested_at: Optional[datetime] = None
    details_access_granted: bool
    details_access_granted_at: Optional[datetime] = None
    details_access_granted_by: Optional[str] = None

    # Filled in by list endpoints
    job_title: Optional[str] = None
    company_name: Optional[str] = None


# 5. Output: Jobseeker's own application list
class MyApplicationItem(BaseModel):
    id: str
    job_id: str
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    location: Optional[dict] = None
    job_type: Optional[str] = None
    status: ApplicationStatus
    applied_at: datetime
    interview: Optional[Interview] = None


# 6. Output: Admin queue of pending access requests
class AccessRequestItem(BaseModel):
    id: str
    requested_at: datetime
    status: ApplicationStatus
    job: Optional[dict] = None
    employer: Optional[dict] = None
    applicant: Optional[dict] = None


# 7. Output: Result of a workflow transition
class AccessTransitionResponse(BaseModel):
    message: str
    application_id: str
    details_access_requested: bool
    details_access_requested_at: Optional[datetime] = None
    details_access_granted: bool
    details_access_granted_at: Optional[datetime] = None
    details_access_granted_by: Optional[str] = None
