# ========================================
# jobboard/routes/analytics.py
# ========================================

from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Query

from jobboard.database import get_db
from jobboard.schemas.report import BarChart, LineChart
from jobboard.services import reports
from jobboard.utils.auth import require_roles

router = APIRouter(prefix="/analytics", tags=["Admin - Analytics"])

admin_required = require_roles("admin")


def since_start_of_day(days: int, now: datetime) -> dict:
    """created_at filter covering the same calendar days as reports.day_labels."""
    first_day = datetime.combine(now.date() - timedelta(days=days - 1), datetime.min.time())
    return {"created_at": {"$gte": first_day}}


# ✅ 1. USER ACQUISITION
@router.get("/user-acquisition", response_model=LineChart)
async def get_user_acquisition(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """Daily jobseeker and employer sign-ups, zero-filled. Admin only."""

    now = datetime.utcnow()
    users = await db.users.find(since_start_of_day(days, now), {"role": 1, "created_at": 1}).to_list(None)
    return reports.user_acquisition(users, days, now)


# ✅ 2. APPLICATION STATUS BREAKDOWN
@router.get("/job-success-rate", response_model=BarChart)
async def get_job_success_rate(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """How recent applications are spread over the pipeline statuses. Admin only."""

    since = datetime.utcnow() - timedelta(days=days)
    applications = await db.applications.find({"created_at": {"$gte": since}}, {"status": 1}).to_list(None)
    return reports.status_breakdown(applications)


# ✅ 3. APPLICATION FUNNEL
@router.get("/application-funnel", response_model=BarChart)
async def get_application_funnel(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """Jobs posted down to hires, for the last ``days`` days. Admin only."""

    recent = {"created_at": {"$gte": datetime.utcnow() - timedelta(days=days)}}
    jobs = await db.jobs.find(recent, {"application_count": 1}).to_list(None)
    applications = await db.applications.find(recent, {"status": 1}).to_list(None)
    return reports.application_funnel(jobs, applications)


# ✅ 4. PLATFORM GROWTH
@router.get("/platform-growth", response_model=LineChart)
async def get_platform_growth(
    days: int = Query(30, ge=1, le=365),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """New users, jobs and applications per day. Admin only."""

    now = datetime.utcnow()
    window = since_start_of_day(days, now)
    projection = {"created_at": 1}

    users = await db.users.find(window, projection).to_list(None)
    jobs = await db.jobs.find(window, projection).to_list(None)
    applications = await db.applications.find(window, projection).to_list(None)
    return reports.platform_growth(users, jobs, applications, days, now)
