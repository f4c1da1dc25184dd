from datetime import datetime

from pydantic import Field

from .base import MongoBaseModel, PyObjectId


class SavedJob(MongoBaseModel):
    job_id: PyObjectId
    user_id: PyObjectId
    saved_at: datetime = Field(default_factory=datetime.utcnow)
