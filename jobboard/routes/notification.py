# ========================================
# jobboard/routes/notification.py
# ========================================

from datetime import datetime

from fastapi import APIRouter, Depends
from pymongo import DESCENDING

from jobboard.database import get_db
from jobboard.models.application import AccessGranted, Application
from jobboard.routes.application import load_jobs, load_users
from jobboard.schemas.notification import NotificationFeed
from jobboard.services import notifications
from jobboard.utils.auth import require_roles

router = APIRouter(prefix="/notifications", tags=["Notifications"])


# ✅ 1. JOBSEEKER NOTIFICATIONS
@router.get("/jobseeker", response_model=NotificationFeed)
async def get_jobseeker_notifications(
    current_user: dict = Depends(require_roles("jobseeker")),
    db=Depends(get_db),
):
    """Recent status changes on your applications and today's new postings."""

    now = datetime.utcnow()
    since = now - notifications.RECENT

    documents = await db.applications.find({
        "applicant_id": str(current_user["_id"]),
        "$or": [{"created_at": {"$gte": since}}, {"updated_at": {"$gte": since}}],
    }).to_list(None)
    applications = [Application.from_mongo(doc) for doc in documents]
    jobs = await load_jobs(db, (app.job_id for app in applications))

    new_jobs = await db.jobs.find(
        {"status": "active", "created_at": {"$gte": now - notifications.FRESH}},
        {"created_at": 1},
    ).to_list(None)

    return notifications.jobseeker_notifications(
        applications,
        {job_id: job["title"] for job_id, job in jobs.items()},
        new_jobs,
        now,
    )


# ✅ 2. EMPLOYER NOTIFICATIONS
@router.get("/employer", response_model=NotificationFeed)
async def get_employer_notifications(
    current_user: dict = Depends(require_roles("employer")),
    db=Depends(get_db),
):
    """New applications, unlocked applicant details and postings about to expire."""

    now = datetime.utcnow()
    since = now - notifications.RECENT
    employer_id = str(current_user["_id"])

    jobs = await db.jobs.find({"company_id": employer_id}).to_list(None)
    documents = await db.applications.find({
        "employer_id": employer_id,
        "$or": [{"created_at": {"$gte": since}}, {"details_access.granted_at": {"$gte": since}}],
    }).to_list(None)
    applications = [Application.from_mongo(doc) for doc in documents]

    # Names are only looked up where the employer is allowed to see them
    applicants = await load_users(
        db, [app.applicant_id for app in applications if isinstance(app.details_access, AccessGranted)]
    )

    return notifications.employer_notifications(applications, jobs, applicants, now)


# ✅ 3. ADMIN NOTIFICATIONS
@router.get("/admin", response_model=NotificationFeed)
async def get_admin_notifications(
    current_user: dict = Depends(require_roles("admin")),
    db=Depends(get_db),
):
    """Registrations, postings, weekly volume and queues that need attention."""

    now = datetime.utcnow()
    since = now - notifications.RECENT

    new_users = await db.users.find({"created_at": {"$gte": since}}, {"created_at": 1}).to_list(None)
    new_jobs = (
        await db.jobs.find({"created_at": {"$gte": since}}, {"company_name": 1, "created_at": 1})
        .sort("created_at", DESCENDING)
        .limit(10)
        .to_list(None)
    )

    return notifications.admin_notifications(
        new_users=new_users,
        new_jobs=new_jobs,
        applications_this_week=await db.applications.count_documents({"created_at": {"$gte": since}}),
        stale_pending=await db.applications.count_documents(
            {"status": "pending", "created_at": {"$lte": now - notifications.STALE_PENDING}}
        ),
        access_requests_pending=await db.applications.count_documents({"details_access.state": "requested"}),
        now=now,
    )
