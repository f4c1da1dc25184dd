# ========================================
# jobboard/routes/report.py
# ========================================

from collections import Counter
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query

from jobboard.database import get_db
from jobboard.schemas.report import (
    ApplicationsReport,
    CompanyPerformanceReport,
    JobsReport,
    PlatformOverviewReport,
    UserGrowthReport,
)
from jobboard.services import reports
from jobboard.utils.auth import require_roles

router = APIRouter(prefix="/reports", tags=["Admin - Reports"])

admin_required = require_roles("admin")


def window_payload(period: int, start: datetime, end: datetime) -> dict:
    return {"period": f"{period} days", "date_range": {"start": start, "end": end}}


# ✅ 1. USER GROWTH
@router.get("/user-growth", response_model=UserGrowthReport)
async def get_user_growth_report(
    period: int = Query(30, ge=1, le=365, description="Days to look back when no dates are given"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """Registrations in the window, by role and by day. Admin only."""

    start, end = reports.report_window(period, start_date, end_date)
    users = await db.users.find(reports.in_window(start, end), {"role": 1, "created_at": 1}).to_list(None)

    return {**window_payload(period, start, end), **reports.user_growth(users)}


# ✅ 2. JOBS
@router.get("/jobs", response_model=JobsReport)
async def get_jobs_report(
    period: int = Query(30, ge=1, le=365, description="Days to look back when no dates are given"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """Postings in the window by type, work mode and company. Admin only."""

    start, end = reports.report_window(period, start_date, end_date)
    jobs = await db.jobs.find(reports.in_window(start, end)).to_list(None)

    return {**window_payload(period, start, end), **reports.jobs_summary(jobs)}


# ✅ 3. APPLICATIONS
@router.get("/applications", response_model=ApplicationsReport)
async def get_applications_report(
    period: int = Query(30, ge=1, le=365, description="Days to look back when no dates are given"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """Application volume, outcomes and conversion rates in the window. Admin only."""

    start, end = reports.report_window(period, start_date, end_date)
    applications = await db.applications.find(
        reports.in_window(start, end), {"status": 1, "created_at": 1}
    ).to_list(None)

    return {**window_payload(period, start, end), **reports.applications_summary(applications)}


# ✅ 4. COMPANY PERFORMANCE
@router.get("/companies", response_model=CompanyPerformanceReport)
async def get_company_performance_report(
    period: int = Query(30, ge=1, le=365, description="Days to look back when no dates are given"),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """Top employers by applications received on jobs posted in the window. Admin only."""

    since = datetime.utcnow() - timedelta(days=period)

    employers = await db.users.find({"role": "employer"}, {"password": 0}).to_list(None)
    jobs = await db.jobs.find(
        {"created_at": {"$gte": since}}, {"company_id": 1, "created_at": 1}
    ).to_list(None)
    applications = await db.applications.find(
        {"job_id": {"$in": [str(job["_id"]) for job in jobs]}}, {"job_id": 1, "status": 1}
    ).to_list(None)

    return {
        "period": f"{period} days",
        "total_companies": len(employers),
        "companies": reports.company_performance(employers, jobs, applications),
    }


# ✅ 5. PLATFORM OVERVIEW
@router.get("/platform-overview", response_model=PlatformOverviewReport)
async def get_platform_overview_report(
    period: int = Query(30, ge=1, le=365, description="Days to look back when no dates are given"),
    current_user: dict = Depends(admin_required),
    db=Depends(get_db),
):
    """All-time totals next to activity in the last ``period`` days. Admin only."""

    now = datetime.utcnow()
    recent = {"created_at": {"$gte": now - timedelta(days=period)}}

    users = await db.users.find({}, {"role": 1}).to_list(None)
    users_by_role = dict(Counter(user["role"] for user in users))
    total_jobs = await db.jobs.count_documents({})
    total_applications = await db.applications.count_documents({})
    hired = await db.applications.count_documents({"status": "hired"})

    # Open postings that have not passed their expiry date
    active_jobs = await db.jobs.count_documents({
        "status": "active",
        "$or": [{"expiry_date": None}, {"expiry_date": {"$gt": now}}],
    })

    return {
        "period": f"{period} days",
        "overview": {
            "total_users": len(users),
            "total_jobs": total_jobs,
            "total_applications": total_applications,
            "active_jobs": active_jobs,
            "success_rate": reports.percent(hired, total_applications),
        },
        "recent_activity": {
            "new_users": await db.users.count_documents(recent),
            "new_jobs": await db.jobs.count_documents(recent),
            "new_applications": await db.applications.count_documents(recent),
        },
        "users_by_role": users_by_role,
        "metrics": {
            "avg_applications_per_job": reports.average(total_applications, total_jobs),
            "avg_jobs_per_company": reports.average(total_jobs, users_by_role.get("employer", 0)),
        },
    }
