# ========================================
# jobboard/routes/saved_job.py
# ========================================

import logging

from fastapi import APIRouter, Depends, status
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from jobboard.database import get_db, to_object_id
from jobboard.errors import NotFoundError, ValidationError
from jobboard.models.saved_job import SavedJob
from jobboard.routes.application import load_jobs
from jobboard.schemas.job import job_to_response
from jobboard.schemas.saved_job import SavedJobList, SavedJobResponse
from jobboard.utils.auth import require_roles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["Saved Jobs"])


# ✅ 1. GET SAVED JOBS (Jobseeker)
@router.get("/saved/all", response_model=SavedJobList)
async def get_saved_jobs(
    current_user: dict = Depends(require_roles("jobseeker")),
    db=Depends(get_db),
):
    """Bookmarked jobs with full job details, most recently saved first."""

    saved = (
        await db.saved_jobs.find({"user_id": str(current_user["_id"])})
        .sort("saved_at", DESCENDING)
        .to_list(None)
    )
    jobs = await load_jobs(db, (doc["job_id"] for doc in saved))

    # Skip bookmarks whose job has since been deleted
    data = [
        {
            "saved_job_id": str(doc["_id"]),
            "saved_at": doc["saved_at"],
            "job": job_to_response(jobs[doc["job_id"]]),
        }
        for doc in saved
        if doc["job_id"] in jobs
    ]
    return {"count": len(data), "data": data}


# ✅ 2. SAVE A JOB (Jobseeker)
@router.post("/{job_id}/save", response_model=SavedJobResponse, status_code=status.HTTP_201_CREATED)
async def save_job(
    job_id: str,
    current_user: dict = Depends(require_roles("jobseeker")),
    db=Depends(get_db),
):
    """Bookmark a job for later."""

    job = await db.jobs.find_one({"_id": to_object_id(job_id, "job ID")})
    if not job:
        raise NotFoundError("Job not found")

    saved_job = SavedJob(job_id=str(job["_id"]), user_id=str(current_user["_id"]))

    existing = await db.saved_jobs.find_one({"job_id": saved_job.job_id, "user_id": saved_job.user_id})
    if existing:
        raise ValidationError("Job already saved")

    try:
        result = await db.saved_jobs.insert_one(saved_job.to_mongo())
    except DuplicateKeyError:
        raise ValidationError("Job already saved")

    logger.info("User %s saved job %s", saved_job.user_id, saved_job.job_id)
    return {**saved_job.model_dump(exclude={"id"}), "id": str(result.inserted_id)}


# ✅ 3. UNSAVE A JOB (Jobseeker)
@router.delete("/{job_id}/save")
async def unsave_job(
    job_id: str,
    current_user: dict = Depends(require_roles("jobseeker")),
    db=Depends(get_db),
):
    """Remove a job from the saved list."""

    job_id = str(to_object_id(job_id, "job ID"))
    result = await db.saved_jobs.delete_one({"job_id": job_id, "user_id": str(current_user["_id"])})
    if result.deleted_count == 0:
        raise NotFoundError("Job not found in saved jobs")

    return {"message": "Job removed from saved list", "job_id": job_id}
