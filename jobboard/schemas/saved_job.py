# ========================================
# jobboard/schemas/saved_job.py
# ========================================

from datetime import datetime
from typing import List

from pydantic import BaseModel

from jobboard.schemas.job import JobResponse


class SavedJobResponse(BaseModel):
    """Returned when a job is bookmarked"""
    id: str
    user_id: str
    job_id: str
    saved_at: datetime


class SavedJobDetail(BaseModel):
    saved_job_id: str
    saved_at: datetime
    job: JobResponse


class SavedJobList(BaseModel):
    count: int
    data: List[SavedJobDetail]
