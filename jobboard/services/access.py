"""
Details-access workflow for applications.

An employer may ask to see the real identity of an applicant on one of
their own applications; an admin approves. States only move forward:

    hidden -> requested -> granted

The pure transition functions below never touch the database. Persisting
a transition goes through ``save_transition``, which only writes if the
stored state is still the one the transition started from.
"""

import logging
from datetime import datetime
from typing import Optional

from bson import ObjectId

from jobboard.errors import ConflictError, ForbiddenError
from jobboard.models.application import (
    AccessGranted,
    AccessHidden,
    AccessRequested,
    Application,
)

logger = logging.getLogger(__name__)


# ===========================
# TRANSITIONS
# ===========================

def request_access(access, now: Optional[datetime] = None) -> AccessRequested:
    if isinstance(access, AccessGranted):
        raise ConflictError("Access already granted")
    if isinstance(access, AccessRequested):
        raise ConflictError("Access request already pending")
    return AccessRequested(requested_at=now or datetime.utcnow())


def grant_access(access, admin_id: str, now: Optional[datetime] = None) -> AccessGranted:
    if isinstance(access, AccessGranted):
        raise ConflictError("Access already granted")
    if isinstance(access, AccessHidden):
        raise ConflictError("No pending access request for this application")
    return AccessGranted(
        requested_at=access.requested_at,
        granted_at=now or datetime.utcnow(),
        granted_by=str(admin_id),
    )


def access_flags(access) -> dict:
    """Flat view of the access state, as returned in API payloads."""
    return {
        "details_access_requested": not isinstance(access, AccessHidden),
        "details_access_requested_at": getattr(access, "requested_at", None),
        "details_access_granted": isinstance(access, AccessGranted),
        "details_access_granted_at": getattr(access, "granted_at", None),
        "details_access_granted_by": getattr(access, "granted_by", None),
    }


# ===========================
# AUTHORIZATION
# ===========================

def ensure_can_request(application: Application, user: dict) -> None:
    if user.get("role") != "employer" or application.employer_id != str(user["_id"]):
        raise ForbiddenError("Not authorized to request access to this application")


def ensure_can_grant(user: dict) -> None:
    if user.get("role") != "admin":
        raise ForbiddenError("Only admins can grant access to applicant details")


# ===========================
# PERSISTENCE
# ===========================

async def save_transition(db, application: Application, new_access) -> Application:
    """Write new_access if the stored state is unchanged; Conflict otherwise."""
    now = datetime.utcnow()
    result = await db.applications.update_one(
        {
            "_id": ObjectId(application.id),
            "details_access.state": application.details_access.state,
        },
        {"$set": {"details_access": new_access.model_dump(), "updated_at": now}},
    )
    if result.matched_count == 0:
        raise ConflictError("Application access state changed, please reload and retry")

    logger.info(
        "Application %s details access %s -> %s",
        application.id,
        application.details_access.state,
        new_access.state,
    )
    return application.model_copy(update={"details_access": new_access, "updated_at": now})
