# ========================================
# jobboard/routes/application.py
# ========================================

import io
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import StreamingResponse
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from jobboard.database import get_db, get_resume_storage, to_object_id
from jobboard.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from jobboard.models.application import (
    NO_RESUME,
    Application,
    Interview,
    StatusHistoryEntry,
    SupplementaryData,
)
from jobboard.schemas.application import (
    AccessRequestItem,
    AccessTransitionResponse,
    ApplicationStatusUpdate,
    ApplicationView,
    InterviewSchedule,
    MyApplicationItem,
    split_skills,
)
from jobboard.services import access
from jobboard.services.audit import log_admin_action
from jobboard.services.views import can_view_identity, project_application_view
from jobboard.storage import validate_resume_upload
from jobboard.utils.auth import get_current_user, require_roles

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])


# ===========================
# HELPERS
# ===========================

async def load_application(db, application_id: str) -> Application:
    document = await db.applications.find_one(
        {"_id": to_object_id(application_id, "application ID")}
    )
    if not document:
        raise NotFoundError("Application not found")
    return Application.from_mongo(document)


async def load_users(db, user_ids: Iterable[str]) -> Dict[str, dict]:
    oids = [ObjectId(uid) for uid in set(user_ids) if ObjectId.is_valid(uid)]
    if not oids:
        return {}
    users = await db.users.find({"_id": {"$in": oids}}, {"password": 0}).to_list(None)
    return {str(user["_id"]): user for user in users}


async def load_jobs(db, job_ids: Iterable[str]) -> Dict[str, dict]:
    oids = [ObjectId(jid) for jid in set(job_ids) if ObjectId.is_valid(jid)]
    if not oids:
        return {}
    jobs = await db.jobs.find({"_id": {"$in": oids}}).to_list(None)
    return {str(job["_id"]): job for job in jobs}


async def project_many(db, applications: List[Application], viewer: dict) -> List[ApplicationView]:
    """Project a batch of applications, fetching identities only where they will be shown."""
    revealed_ids = [
        app.applicant_id for app in applications if can_view_identity(app, viewer)
    ]
    applicants = await load_users(db, revealed_ids)
    jobs = await load_jobs(db, (app.job_id for app in applications))

    views = []
    for app in applications:
        view = project_application_view(app, applicants.get(app.applicant_id), viewer)
        job = jobs.get(app.job_id)
        if job:
            view.job_title = job.get("title")
            view.company_name = job.get("company_name")
        views.append(view)
    return views


def ensure_can_manage(application: Application, current_user: dict) -> None:
    """Pipeline changes belong to the owning employer or an admin."""
    if current_user["role"] == "admin":
        return
    if application.employer_id != str(current_user["_id"]):
        raise ForbiddenError("Not authorized to update this application")


async def set_status(db, application: Application, new_status: str, note: str, actor: dict, extra: Optional[dict] = None):
    now = datetime.utcnow()
    entry = StatusHistoryEntry(status=new_status, note=note, changed_by=str(actor["_id"]), timestamp=now)
    await db.applications.update_one(
        {"_id": ObjectId(application.id)},
        {
            "$set": {"status": new_status, "updated_at": now, **(extra or {})},
            "$push": {"status_history": entry.model_dump()},
        },
    )
    return await load_application(db, application.id)


async def insert_application(db, storage, application: Application, uploaded_ref: Optional[str] = None) -> str:
    """
    Insert a new application and return its id.

    The unique (job_id, applicant_id) index is the final word on duplicates.
    When it fires, a resume uploaded for this attempt is removed again.
    """
    try:
        result = await db.applications.insert_one(application.to_mongo())
    except DuplicateKeyError:
        if uploaded_ref:
            await storage.delete(uploaded_ref)
        raise ConflictError("You have already applied for this job")
    return str(result.inserted_id)


def transition_response(message: str, application: Application) -> dict:
    return {
        "message": message,
        "application_id": application.id,
        **access.access_flags(application.details_access),
    }


# ===========================
# JOBSEEKER ENDPOINTS
# ===========================

# ✅ 1. GET MY APPLICATIONS (Jobseeker)
@router.get("/my-applications", response_model=List[MyApplicationItem])
async def get_my_applications(
    current_user: dict = Depends(require_roles("jobseeker")),
    db=Depends(get_db),
):
    """Applications submitted by the current jobseeker, newest first."""

    documents = (
        await db.applications.find({"applicant_id": str(current_user["_id"])})
        .sort("created_at", DESCENDING)
        .to_list(None)
    )
    jobs = await load_jobs(db, (doc["job_id"] for doc in documents))

    result = []
    for doc in documents:
        job = jobs.get(doc["job_id"], {})
        result.append({
            "id": str(doc["_id"]),
            "job_id": doc["job_id"],
            "job_title": job.get("title"),
            "company_name": job.get("company_name"),
            "location": job.get("location"),
            "job_type": job.get("job_type"),
            "status": doc["status"],
            "applied_at": doc["created_at"],
            "interview": doc.get("interview"),
        })
    return result


# ===========================
# EMPLOYER / ADMIN LISTS
# ===========================

# ✅ 2. GET EMPLOYER'S APPLICATIONS (Employer/Admin)
@router.get("/employer-applications", response_model=List[ApplicationView])
async def get_employer_applications(
    status_filter: Optional[str] = Query(None, alias="status"),
    current_user: dict = Depends(require_roles("employer", "admin")),
    db=Depends(get_db),
):
    """Applications received by the employer; applicants stay anonymous until access is granted."""

    query = {}
    if current_user["role"] == "employer":
        query["employer_id"] = str(current_user["_id"])
    if status_filter:
        query["status"] = status_filter

    documents = await db.applications.find(query).sort("created_at", DESCENDING).to_list(None)
    applications = [Application.from_mongo(doc) for doc in documents]
    return await project_many(db, applications, current_user)


# ✅ 3. PENDING ACCESS REQUESTS (Admin)
@router.get("/access-requests", response_model=List[AccessRequestItem])
async def get_pending_access_requests(
    current_user: dict = Depends(require_roles("admin")),
    db=Depends(get_db),
):
    """Applications whose employer asked to see applicant details and is still waiting."""

    documents = (
        await db.applications.find({"details_access.state": "requested"})
        .sort("details_access.requested_at", DESCENDING)
        .to_list(None)
    )
    applications = [Application.from_mongo(doc) for doc in documents]

    users = await load_users(
        db,
        [a.applicant_id for a in applications] + [a.employer_id for a in applications],
    )
    jobs = await load_jobs(db, (a.job_id for a in applications))

    result = []
    for app in applications:
        job = jobs.get(app.job_id)
        employer = users.get(app.employer_id)
        applicant = users.get(app.applicant_id)
        result.append({
            "id": app.id,
            "requested_at": app.details_access.requested_at,
            "status": app.status,
            "job": {"id": app.job_id, "title": job.get("title"), "company_name": job.get("company_name")} if job else None,
            "employer": {
                "id": app.employer_id,
                "name": employer.get("name"),
                "company_name": employer.get("company_name"),
                "email": employer.get("email"),
            } if employer else None,
            "applicant": {
                "id": app.applicant_id,
                "name": applicant.get("name"),
                "email": applicant.get("email"),
                "phone": applicant.get("phone"),
            } if applicant else None,
        })

    logger.debug("Found %d pending access requests", len(result))
    return result


# ✅ 4. GET APPLICATIONS FOR ONE JOB (Owner/Admin)
@router.get("/job/{job_id}", response_model=List[ApplicationView])
async def get_job_applications(
    job_id: str,
    current_user: dict = Depends(require_roles("employer", "admin")),
    db=Depends(get_db),
):
    """All applications for a job the current user owns."""

    job = await db.jobs.find_one({"_id": to_object_id(job_id, "job ID")})
    if not job:
        raise NotFoundError("Job not found")

    if current_user["role"] != "admin" and job.get("company_id") != str(current_user["_id"]):
        raise ForbiddenError("Not authorized to view these applications")

    documents = await db.applications.find({"job_id": str(job["_id"])}).sort("created_at", DESCENDING).to_list(None)
    applications = [Application.from_mongo(doc) for doc in documents]
    return await project_many(db, applications, current_user)


# ===========================
# SUBMISSION
# ===========================

# ✅ 5. APPLY FOR JOB (Jobseeker)
@router.post("/{job_id}", response_model=ApplicationView, status_code=status.HTTP_201_CREATED)
async def apply_for_job(
    job_id: str,
    cover_letter: str = Form(""),
    experience: Optional[str] = Form(None),
    current_location: Optional[str] = Form(None),
    current_job_title: Optional[str] = Form(None),
    skills: Optional[str] = Form(None, description="Comma-separated"),
    education: Optional[str] = Form(None),
    expected_salary: Optional[str] = Form(None),
    notice_period: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
    current_user: dict = Depends(require_roles("jobseeker")),
    db=Depends(get_db),
    storage=Depends(get_resume_storage),
):
    """Submit an application, optionally with a resume file."""

    job = await db.jobs.find_one({"_id": to_object_id(job_id, "job ID")})
    if not job:
        raise NotFoundError(f"Job not found with ID: {job_id}")

    if job.get("status") != "active":
        raise ValidationError("This job is no longer accepting applications")

    # Hex ids are case-insensitive; key everything on the stored spelling
    job_id = str(job["_id"])
    applicant_id = str(current_user["_id"])

    contents = None
    if resume is not None and resume.filename:
        contents = await resume.read()
        validate_resume_upload(resume.filename, len(contents))

    existing = await db.applications.find_one({"job_id": job_id, "applicant_id": applicant_id})
    if existing:
        raise ConflictError("You have already applied for this job")

    resume_ref = current_user.get("resume_id") or NO_RESUME
    uploaded_ref = None
    if contents is not None:
        uploaded_ref = resume_ref = await storage.save(
            resume.filename,
            contents,
            resume.content_type or "application/octet-stream",
            {"user_id": applicant_id, "job_id": job_id, "original_filename": resume.filename},
        )

    application = Application(
        job_id=job_id,
        applicant_id=applicant_id,
        employer_id=job["company_id"],
        cover_letter=cover_letter,
        resume=resume_ref,
        additional_data=SupplementaryData(
            experience=experience,
            current_location=current_location,
            current_job_title=current_job_title,
            skills=split_skills(skills),
            education=education,
            expected_salary=expected_salary,
            notice_period=notice_period,
        ),
        status_history=[
            StatusHistoryEntry(status="pending", note="Application submitted", changed_by=applicant_id)
        ],
    )

    application.id = await insert_application(db, storage, application, uploaded_ref)
    await db.jobs.update_one({"_id": job["_id"]}, {"$inc": {"application_count": 1}})

    logger.info("Application %s submitted for job %s by %s", application.id, job_id, applicant_id)

    return project_application_view(application, current_user, current_user)


# ===========================
# SINGLE APPLICATION
# ===========================

# ✅ 6. GET APPLICATION (Applicant / Owning Employer / Admin)
@router.get("/{application_id}", response_model=ApplicationView)
async def get_application(
    application_id: str,
    current_user: dict = Depends(get_current_user),
    db=Depends(get_db),
):
    """One application, shaped for the viewer's role."""

    application = await load_application(db, application_id)
    views = await project_many(db, [application], current_user)
    return views[0]


# ✅ 7. DOWNLOAD RESUME
@router.get("/{application_id}/resume")
async def download_resume(
    application_id: str,
    current_user: dict = Depends(get_current_user),
    db=Depends(get_db),
    storage=Depends(get_resume_storage),
):
    """Stream the resume attached to an application, if the viewer may see identity."""

    application = await load_application(db, application_id)
    if not can_view_identity(application, current_user):
        raise ForbiddenError("Applicant details access has not been granted")

    if not application.has_resume:
        raise NotFoundError("No resume attached to this application")

    filename, content_type, contents = await storage.open(application.resume)
    return StreamingResponse(
        io.BytesIO(contents),
        media_type=content_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ✅ 8. UPDATE APPLICATION STATUS (Employer/Admin)
@router.put("/{application_id}/status", response_model=ApplicationView)
async def update_application_status(
    application_id: str,
    status_update: ApplicationStatusUpdate,
    current_user: dict = Depends(require_roles("employer", "admin")),
    db=Depends(get_db),
):
    """Move the application through the hiring pipeline."""

    application = await load_application(db, application_id)
    ensure_can_manage(application, current_user)

    updated = await set_status(db, application, status_update.status, status_update.notes or "", current_user)
    return (await project_many(db, [updated], current_user))[0]


# ✅ 9. SCHEDULE INTERVIEW (Employer/Admin)
@router.put("/{application_id}/interview", response_model=ApplicationView)
async def schedule_interview(
    application_id: str,
    schedule: InterviewSchedule,
    current_user: dict = Depends(require_roles("employer", "admin")),
    db=Depends(get_db),
):
    """Record interview details and mark the application interview_scheduled."""

    application = await load_application(db, application_id)
    ensure_can_manage(application, current_user)

    interview = Interview(**schedule.model_dump())
    note = f"Interview on {interview.date}" + (f" at {interview.time}" if interview.time else "")
    updated = await set_status(
        db, application, "interview_scheduled", note, current_user,
        extra={"interview": interview.model_dump()},
    )
    return (await project_many(db, [updated], current_user))[0]


# ✅ 10. WITHDRAW APPLICATION (Jobseeker)
@router.delete("/{application_id}")
async def withdraw_application(
    application_id: str,
    current_user: dict = Depends(require_roles("jobseeker")),
    db=Depends(get_db),
):
    """Withdraw one of your own applications."""

    application = await load_application(db, application_id)
    if application.applicant_id != str(current_user["_id"]):
        raise ForbiddenError("Not authorized to withdraw this application")

    if application.status == "withdrawn":
        raise ConflictError("Application already withdrawn")

    await set_status(db, application, "withdrawn", "Withdrawn by applicant", current_user)
    return {"message": "Application withdrawn successfully", "application_id": application.id}


# ===========================
# DETAILS ACCESS WORKFLOW
# ===========================

# ✅ 11. REQUEST DETAILS ACCESS (Owning Employer)
@router.post("/{application_id}/request-details", response_model=AccessTransitionResponse)
async def request_details_access(
    application_id: str,
    current_user: dict = Depends(require_roles("employer")),
    db=Depends(get_db),
):
    """Ask an admin to reveal the applicant's identity on this application."""

    application = await load_application(db, application_id)
    access.ensure_can_request(application, current_user)

    new_state = access.request_access(application.details_access)
    application = await access.save_transition(db, application, new_state)

    return transition_response("Access request submitted. Waiting for admin approval.", application)


# ✅ 12. GRANT DETAILS ACCESS (Admin)
@router.post("/{application_id}/grant-details", response_model=AccessTransitionResponse)
async def grant_details_access(
    application_id: str,
    current_user: dict = Depends(require_roles("admin")),
    db=Depends(get_db),
):
    """Approve a pending access request; the employer then sees the applicant's identity."""

    application = await load_application(db, application_id)
    access.ensure_can_grant(current_user)

    new_state = access.grant_access(application.details_access, str(current_user["_id"]))
    application = await access.save_transition(db, application, new_state)

    await log_admin_action(
        db, current_user, "grant_details_access", "application", application.id,
        {"employer_id": application.employer_id, "applicant_id": application.applicant_id},
    )

    return transition_response("Access granted successfully", application)
