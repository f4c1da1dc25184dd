from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .base import MongoBaseModel, PyObjectId

ApplicationStatus = Literal[
    "pending",
    "reviewing",
    "shortlisted",
    "rejected",
    "interview_scheduled",
    "hired",
    "withdrawn",
]

NO_RESUME = "No resume provided"


# ===========================
# DETAILS ACCESS (hidden -> requested -> granted)
# ===========================

class AccessHidden(BaseModel):
    state: Literal["hidden"] = "hidden"


class AccessRequested(BaseModel):
    state: Literal["requested"] = "requested"
    requested_at: datetime


class AccessGranted(BaseModel):
    state: Literal["granted"] = "granted"
    requested_at: datetime
    granted_at: datetime
    granted_by: PyObjectId


DetailsAccess = Annotated[
    Union[AccessHidden, AccessRequested, AccessGranted],
    Field(discriminator="state"),
]


# ===========================
# APPLICATION
# ===========================

class SupplementaryData(BaseModel):
    """Applicant-supplied data captured at apply time; never contact identity."""
    experience: Optional[str] = None
    current_location: Optional[str] = None
    current_job_title: Optional[str] = None
    skills: List[str] = []
    education: Optional[str] = None
    expected_salary: Optional[str] = None
    notice_period: Optional[str] = None


class StatusHistoryEntry(BaseModel):
    status: ApplicationStatus
    note: str = ""
    changed_by: Optional[PyObjectId] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class Interview(BaseModel):
    date: str
    time: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None


class Application(MongoBaseModel):
    job_id: PyObjectId
    applicant_id: PyObjectId
    employer_id: PyObjectId
    cover_letter: str = ""
    resume: str = NO_RESUME
    status: ApplicationStatus = "pending"
    status_history: List[StatusHistoryEntry] = []
    interview: Optional[Interview] = None
    additional_data: SupplementaryData = Field(default_factory=SupplementaryData)
    details_access: DetailsAccess = Field(default_factory=AccessHidden)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    @property
    def has_resume(self) -> bool:
        return self.resume != NO_RESUME
