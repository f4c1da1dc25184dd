# ========================================
# jobboard/routes/job.py
# ========================================

import math
import re
from collections import Counter, defaultdict
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pymongo import ASCENDING, DESCENDING

from jobboard import config
from jobboard.database import get_db, to_object_id
from jobboard.errors import ForbiddenError, NotFoundError, ValidationError
from jobboard.models.job import Job, Location
from jobboard.schemas.job import (
    JobCreate,
    JobListResponse,
    JobResponse,
    JobUpdate,
    MyJobResponse,
    job_to_response,
)
from jobboard.services.cascade import delete_job_cascade
from jobboard.utils.auth import require_roles

router = APIRouter(prefix="/jobs", tags=["Jobs"])

SORTABLE_FIELDS = {"created_at", "views", "application_count", "title", "vacancies"}


async def get_owned_job(db, job_id: str, current_user: dict, action: str) -> dict:
    """Load a job the current user may modify (owner or admin)."""
    job = await db.jobs.find_one({"_id": to_object_id(job_id, "job ID")})
    if not job:
        raise NotFoundError("Job not found")

    if current_user["role"] != "admin" and job.get("company_id") != str(current_user["_id"]):
        raise ForbiddenError(f"Not authorized to {action} this job")
    return job


# ===========================
# PUBLIC ENDPOINTS
# ===========================

# ✅ 1. GET ALL JOBS WITH SEARCH AND FILTERS (Public)
@router.get("", response_model=JobListResponse)
async def get_jobs(
    search: Optional[str] = Query(None, description="Search in title, description, or company"),
    location: Optional[str] = Query(None, description="Filter by city or area"),
    job_type: Optional[str] = Query(None, description="fulltime, parttime, contract, internship or all"),
    category: Optional[str] = Query(None),
    experience: Optional[str] = Query(None, description="Exact experience requirement or all"),
    work_mode: Optional[str] = Query(None, description="office, remote, hybrid"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort: str = Query("-created_at", description="Field to sort by, prefix with - for descending"),
    db=Depends(get_db),
):
    """List active jobs with filters and pagination."""

    query = {"status": "active"}

    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"title": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
            {"company_name": {"$regex": pattern, "$options": "i"}},
        ]

    if location:
        pattern = re.escape(location)
        query.setdefault("$and", []).append(
            {
                "$or": [
                    {"location.city": {"$regex": pattern, "$options": "i"}},
                    {"location.area": {"$regex": pattern, "$options": "i"}},
                ]
            }
        )

    if job_type and job_type != "all":
        query["job_type"] = job_type

    if category:
        query["category"] = {"$regex": re.escape(category), "$options": "i"}

    if experience and experience != "all":
        query["experience_required"] = experience

    if work_mode:
        query["work_mode"] = work_mode

    sort_field = sort.lstrip("-")
    if sort_field not in SORTABLE_FIELDS:
        raise ValidationError(f"Cannot sort by '{sort_field}'")
    direction = DESCENDING if sort.startswith("-") else ASCENDING

    total = await db.jobs.count_documents(query)
    jobs = (
        await db.jobs.find(query)
        .sort(sort_field, direction)
        .skip((page - 1) * limit)
        .limit(limit)
        .to_list(limit)
    )

    return {
        "count": len(jobs),
        "total": total,
        "total_pages": math.ceil(total / limit),
        "current_page": page,
        "data": [job_to_response(job) for job in jobs],
    }


# ===========================
# EMPLOYER ENDPOINTS
# ===========================

# ✅ 2. GET MY POSTED JOBS (Employer/Admin)
@router.get("/my-jobs", response_model=List[MyJobResponse])
async def get_my_jobs(
    current_user: dict = Depends(require_roles("employer", "admin")),
    db=Depends(get_db),
):
    """Jobs posted by the current user, with application counts by status."""

    jobs = (
        await db.jobs.find({"company_id": str(current_user["_id"])})
        .sort("created_at", DESCENDING)
        .to_list(None)
    )
    job_ids = [str(job["_id"]) for job in jobs]

    counts = defaultdict(Counter)
    applications = await db.applications.find(
        {"job_id": {"$in": job_ids}}, {"job_id": 1, "status": 1}
    ).to_list(None)
    for app in applications:
        counts[app["job_id"]][app["status"]] += 1

    return [
        {**job_to_response(job), "applications_by_status": dict(counts[str(job["_id"])])}
        for job in jobs
    ]


# ✅ 3. GET SINGLE JOB DETAILS (Public)
@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: str, db=Depends(get_db)):
    """Get one job and count the view."""

    oid = to_object_id(job_id, "job ID")
    job = await db.jobs.find_one({"_id": oid})
    if not job:
        raise NotFoundError("Job not found")

    await db.jobs.update_one({"_id": oid}, {"$inc": {"views": 1}})
    job["views"] = job.get("views", 0) + 1

    return job_to_response(job)


# ✅ 4. POST A JOB (Employer/Admin)
@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    job: JobCreate,
    current_user: dict = Depends(require_roles("employer", "admin")),
    db=Depends(get_db),
):
    """Create a new job posting owned by the current user."""

    new_job = Job(
        **job.model_dump(exclude={"location"}),
        location=job.location or Location(city=config.DEFAULT_CITY),
        company_id=str(current_user["_id"]),
        company_name=current_user.get("company_name") or current_user["name"],
    ).to_mongo()

    result = await db.jobs.insert_one(new_job)
    new_job["_id"] = result.inserted_id

    return job_to_response(new_job)


# ✅ 5. UPDATE JOB (Owner/Admin)
@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    job_update: JobUpdate,
    current_user: dict = Depends(require_roles("employer", "admin")),
    db=Depends(get_db),
):
    """Update job details. Only the job owner or an admin can update."""

    job = await get_owned_job(db, job_id, current_user, "update")

    update_data = job_update.model_dump(exclude_unset=True)
    if not update_data:
        raise ValidationError("No fields to update")
    update_data["updated_at"] = datetime.utcnow()

    await db.jobs.update_one({"_id": job["_id"]}, {"$set": update_data})

    updated_job = await db.jobs.find_one({"_id": job["_id"]})
    return job_to_response(updated_job)


# ✅ 6. DELETE JOB (Owner/Admin)
@router.delete("/{job_id}")
async def delete_job(
    job_id: str,
    current_user: dict = Depends(require_roles("employer", "admin")),
    db=Depends(get_db),
):
    """Delete a job posting and its applications."""

    await get_owned_job(db, job_id, current_user, "delete")
    removed = await delete_job_cascade(db, job_id)

    return {
        "message": "Job deleted successfully",
        "job_id": job_id,
        "applications_deleted": removed,
    }
