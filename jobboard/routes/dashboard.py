# ========================================
# jobboard/routes/dashboard.py
# ========================================

from collections import Counter
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Query
from pymongo import DESCENDING

from jobboard.database import get_db
from jobboard.models.application import Application
from jobboard.routes.application import get_my_applications, project_many
from jobboard.schemas.dashboard import EmployerDashboard, JobSeekerDashboard
from jobboard.schemas.job import job_to_response
from jobboard.schemas.report import EmployerAnalytics
from jobboard.services.reports import employer_analytics
from jobboard.utils.auth import require_roles

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


# ✅ 1. EMPLOYER DASHBOARD
@router.get("/employer", response_model=EmployerDashboard)
async def get_employer_dashboard(
    current_user: dict = Depends(require_roles("employer", "admin")),
    db=Depends(get_db),
):
    """Counters for the employer's jobs and the applications they received."""

    employer_id = str(current_user["_id"])

    jobs = await db.jobs.find({"company_id": employer_id}).sort("created_at", DESCENDING).to_list(None)
    documents = (
        await db.applications.find({"employer_id": employer_id})
        .sort("created_at", DESCENDING)
        .to_list(None)
    )

    job_status = Counter(job.get("status", "active") for job in jobs)
    app_status = Counter(doc["status"] for doc in documents)
    access_state = Counter(doc.get("details_access", {}).get("state", "hidden") for doc in documents)

    recent = [Application.from_mongo(doc) for doc in documents[:10]]

    return {
        "stats": {
            "total_jobs": len(jobs),
            "active_jobs": job_status["active"],
            "closed_jobs": job_status["closed"],
            "total_applications": len(documents),
            "pending_applications": app_status["pending"],
            "shortlisted": app_status["shortlisted"],
            "interviewed": app_status["interview_scheduled"],
            "hired": app_status["hired"],
            "rejected": app_status["rejected"],
            "access_requests_pending": access_state["requested"],
            "access_granted": access_state["granted"],
            "total_views": sum(job.get("views", 0) for job in jobs),
        },
        "jobs": [job_to_response(job) for job in jobs[:5]],
        "recent_applications": await project_many(db, recent, current_user),
    }


# ✅ 2. JOBSEEKER DASHBOARD
@router.get("/jobseeker", response_model=JobSeekerDashboard)
async def get_jobseeker_dashboard(
    current_user: dict = Depends(require_roles("jobseeker")),
    db=Depends(get_db),
):
    """Application counters, latest applications and fresh job postings."""

    applications = await get_my_applications(current_user=current_user, db=db)
    app_status = Counter(app["status"] for app in applications)

    recent_jobs = (
        await db.jobs.find({"status": "active"}).sort("created_at", DESCENDING).to_list(10)
    )

    return {
        "stats": {
            "total_applications": len(applications),
            "pending_applications": app_status["pending"],
            "reviewing": app_status["reviewing"],
            "shortlisted": app_status["shortlisted"],
            "interviewed": app_status["interview_scheduled"],
            "rejected": app_status["rejected"],
            "hired": app_status["hired"],
            "withdrawn": app_status["withdrawn"],
        },
        "applications": applications[:10],
        "recent_jobs": [job_to_response(job) for job in recent_jobs[:10]],
    }


# ✅ 3. EMPLOYER ANALYTICS
@router.get("/analytics", response_model=EmployerAnalytics)
async def get_employer_analytics(
    period: int = Query(30, ge=1, le=365, description="Days to look back"),
    current_user: dict = Depends(require_roles("employer", "admin")),
    db=Depends(get_db),
):
    """Application trend, status split and best performing jobs for the last ``period`` days."""

    employer_id = str(current_user["_id"])
    recent = {"created_at": {"$gte": datetime.utcnow() - timedelta(days=period)}}

    jobs = await db.jobs.find({"company_id": employer_id, **recent}).to_list(None)
    applications = await db.applications.find(
        {"employer_id": employer_id, **recent}, {"status": 1, "created_at": 1}
    ).to_list(None)

    return {"period": period, **employer_analytics(jobs, applications)}
