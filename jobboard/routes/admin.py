# ========================================
# jobboard/routes/admin.py
# ========================================

import re
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pymongo import DESCENDING

from jobboard.database import get_db, to_object_id
from jobboard.errors import NotFoundError, ValidationError
from jobboard.routes.application import load_jobs, load_users
from jobboard.schemas.admin import (
    AdminApplicationRow,
    AuditLogResponse,
    DeleteResult,
    PlatformStats,
    UserDetailResponse,
    UserStatusUpdate,
)
from jobboard.schemas.job import JobResponse, job_to_response
from jobboard.schemas.user import user_to_response
from jobboard.services.audit import log_admin_action
from jobboard.services.cascade import delete_job_cascade, delete_user_cascade
from jobboard.utils.auth import require_roles

router = APIRouter(prefix="/admin", tags=["Admin"])

admin_required = require_roles("admin")


async def with_stats(db, user: dict) -> dict:
    user_id = str(user["_id"])
    result = user_to_response(user)
    result["total_jobs_posted"] = await db.jobs.count_documents({"company_id": user_id})
    result["total_applications"] = await db.applications.count_documents({"applicant_id": user_id})
    return result


# ===========================
# USER MANAGEMENT
# ===========================

# ✅ 1. LIST ALL USERS WITH FILTERS
@router.get("/users", response_model=List[UserDetailResponse])
async def list_users(
    role: Optional[str] = Query(None, description="jobseeker, employer or admin"),
    search: Optional[str] = Query(None, description="Search by name, email or company"),
    status: Optional[Literal["active", "inactive"]] = Query(None),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """List users with optional filters. Admin only."""

    query = {}
    if role:
        query["role"] = role
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"email": {"$regex": pattern, "$options": "i"}},
            {"company_name": {"$regex": pattern, "$options": "i"}},
        ]
    if status:
        query["is_active"] = status == "active"

    users = await db.users.find(query, {"password": 0}).sort("created_at", DESCENDING).to_list(None)
    return [await with_stats(db, user) for user in users]


# ✅ 2. GET USER DETAILS
@router.get("/users/{user_id}", response_model=UserDetailResponse)
async def get_user(
    user_id: str,
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    user = await db.users.find_one({"_id": to_object_id(user_id, "user ID")}, {"password": 0})
    if not user:
        raise NotFoundError("User not found")
    return await with_stats(db, user)


# ✅ 3. VERIFY / ACTIVATE / DEACTIVATE USER
@router.put("/users/{user_id}", response_model=UserDetailResponse)
async def update_user(
    user_id: str,
    changes: UserStatusUpdate,
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """Change verification or active flags on a user account."""

    oid = to_object_id(user_id, "user ID")
    user = await db.users.find_one({"_id": oid})
    if not user:
        raise NotFoundError("User not found")

    update_data = changes.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        raise ValidationError("No fields to update")

    if update_data.get("is_active") is False and oid == current_user["_id"]:
        raise ValidationError("Cannot deactivate your own account")

    await db.users.update_one({"_id": oid}, {"$set": update_data})
    await log_admin_action(db, current_user, "user_updated", "user", user_id, update_data)

    user.update(update_data)
    return await with_stats(db, user)


# ✅ 4. DELETE USER (cascades to their jobs and applications)
@router.delete("/users/{user_id}", response_model=DeleteResult)
async def delete_user(
    user_id: str,
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    oid = to_object_id(user_id, "user ID")
    user = await db.users.find_one({"_id": oid})
    if not user:
        raise NotFoundError("User not found")

    if oid == current_user["_id"]:
        raise ValidationError("Cannot delete your own account")

    removed = await delete_user_cascade(db, user_id)
    await log_admin_action(
        db, current_user, "user_deleted", "user", user_id,
        {"email": user.get("email"), **removed},
    )

    return {"message": "User deleted successfully", **removed}


# ===========================
# CONTENT
# ===========================

# ✅ 5. ALL APPLICATIONS
@router.get("/applications", response_model=List[AdminApplicationRow])
async def list_applications(
    status: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """Flattened application rows for the admin table."""

    query = {"status": status} if status else {}
    documents = await db.applications.find(query).sort("created_at", DESCENDING).to_list(limit)

    users = await load_users(db, (doc["applicant_id"] for doc in documents))
    jobs = await load_jobs(db, (doc["job_id"] for doc in documents))

    rows = []
    for doc in documents:
        applicant = users.get(doc["applicant_id"], {})
        job = jobs.get(doc["job_id"], {})
        rows.append({
            "id": str(doc["_id"]),
            "job_seeker_name": applicant.get("name", "N/A"),
            "job_seeker_email": applicant.get("email", "N/A"),
            "job_title": job.get("title", "N/A"),
            "company_name": job.get("company_name", "N/A"),
            "status": doc["status"],
            "details_access": doc.get("details_access", {}).get("state", "hidden"),
            "created_at": doc["created_at"],
            "updated_at": doc.get("updated_at"),
        })
    return rows


# ✅ 6. ALL JOBS
@router.get("/jobs", response_model=List[JobResponse])
async def list_jobs(
    status: Optional[str] = Query(None, description="active, closed or draft"),
    search: Optional[str] = Query(None, description="Search title or company"),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    query = {}
    if status:
        query["status"] = status
    if search:
        pattern = re.escape(search)
        query["$or"] = [
            {"title": {"$regex": pattern, "$options": "i"}},
            {"company_name": {"$regex": pattern, "$options": "i"}},
        ]

    jobs = await db.jobs.find(query).sort("created_at", DESCENDING).to_list(None)
    return [job_to_response(job) for job in jobs]


# ✅ 7. DELETE JOB (cascades to applications)
@router.delete("/jobs/{job_id}", response_model=DeleteResult)
async def delete_job(
    job_id: str,
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    job = await db.jobs.find_one({"_id": to_object_id(job_id, "job ID")})
    if not job:
        raise NotFoundError("Job not found")

    removed = await delete_job_cascade(db, job_id)
    await log_admin_action(
        db, current_user, "job_deleted", "job", job_id,
        {"title": job.get("title"), "applications_deleted": removed},
    )

    return {
        "message": "Job and all associated applications deleted successfully",
        "jobs_deleted": 1,
        "applications_deleted": removed,
    }


# ===========================
# STATS & AUDIT
# ===========================

# ✅ 8. PLATFORM STATS
@router.get("/stats", response_model=PlatformStats)
async def get_stats(
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    return {
        "users": {
            "total": await db.users.count_documents({}),
            "job_seekers": await db.users.count_documents({"role": "jobseeker"}),
            "employers": await db.users.count_documents({"role": "employer"}),
            "admins": await db.users.count_documents({"role": "admin"}),
        },
        "jobs": {
            "total": await db.jobs.count_documents({}),
            "active": await db.jobs.count_documents({"status": "active"}),
        },
        "applications": {
            "total": await db.applications.count_documents({}),
            "pending": await db.applications.count_documents({"status": "pending"}),
            "access_requests_pending": await db.applications.count_documents(
                {"details_access.state": "requested"}
            ),
            "access_granted": await db.applications.count_documents(
                {"details_access.state": "granted"}
            ),
        },
    }


# ✅ 9. AUDIT LOGS
@router.get("/audit-logs", response_model=List[AuditLogResponse])
async def get_audit_logs(
    action: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """Recent admin actions, newest first."""

    query = {"action": action} if action else {}
    logs = await db.audit_logs.find(query).sort("timestamp", DESCENDING).to_list(limit)
    return [{**log, "id": str(log["_id"])} for log in logs]
