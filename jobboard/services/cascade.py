"""Deletes that follow ownership links, as foreign-key cascades would."""

import logging

from bson import ObjectId

logger = logging.getLogger(__name__)


async def delete_job_cascade(db, job_id: str) -> int:
    """Delete a job, its applications and any bookmarks of it. Returns how many applications went with it."""
    job_id = str(ObjectId(job_id))
    removed = await db.applications.delete_many({"job_id": job_id})
    await db.saved_jobs.delete_many({"job_id": job_id})
    await db.jobs.delete_one({"_id": ObjectId(job_id)})
    logger.info("Deleted job %s and %d application(s)", job_id, removed.deleted_count)
    return removed.deleted_count


async def delete_user_cascade(db, user_id: str) -> dict:
    """Delete a user, their jobs, and every application or bookmark they are a party to."""
    user_id = str(ObjectId(user_id))
    job_ids = [
        str(job["_id"])
        for job in await db.jobs.find({"company_id": user_id}, {"_id": 1}).to_list(None)
    ]

    apps = await db.applications.delete_many(
        {
            "$or": [
                {"job_id": {"$in": job_ids}},
                {"applicant_id": user_id},
                {"employer_id": user_id},
            ]
        }
    )
    await db.saved_jobs.delete_many(
        {"$or": [{"job_id": {"$in": job_ids}}, {"user_id": user_id}]}
    )
    jobs = await db.jobs.delete_many({"company_id": user_id})
    await db.users.delete_one({"_id": ObjectId(user_id)})

    logger.info(
        "Deleted user %s with %d job(s) and %d application(s)",
        user_id, jobs.deleted_count, apps.deleted_count,
    )
    return {"jobs_deleted": jobs.deleted_count, "applications_deleted": apps.deleted_count}
