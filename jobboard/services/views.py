"""
Shape an application for whoever is looking at it.

Employers see applicants anonymously until an admin grants details access
on that application. Supplementary data (skills, experience, ...) is not
identity and stays visible either way; name, email, phone and the resume
are what the grant unlocks.
"""

from typing import Optional

from jobboard.errors import ForbiddenError
from jobboard.models.application import AccessGranted, AccessRequested, Application
from jobboard.schemas.application import (
    AnonymousApplicant,
    ApplicationView,
    RevealedApplicant,
)
from jobboard.services.access import access_flags


def anonymous_label(applicant_id: str) -> str:
    return f"Applicant {applicant_id}"


def can_view_identity(application: Application, viewer: dict) -> bool:
    """True if viewer may see who the applicant is. Raises for outsiders."""
    viewer_id = str(viewer["_id"])
    if viewer_id == application.applicant_id:
        return True
    if viewer.get("role") == "admin":
        return True
    if viewer.get("role") == "employer" and viewer_id == application.employer_id:
        return isinstance(application.details_access, AccessGranted)
    raise ForbiddenError("Not authorized to view this application")


def project_application_view(
    application: Application,
    applicant: Optional[dict],
    viewer: dict,
) -> ApplicationView:
    """
    Build the view of ``application`` for ``viewer``.

    ``applicant`` is the applicant's user document; it is only read when
    the viewer may see identity, and a missing document falls back to the
    anonymous label.
    """
    revealed = can_view_identity(application, viewer)

    if revealed and applicant is not None:
        identity = RevealedApplicant(
            id=application.applicant_id,
            name=applicant.get("name", ""),
            email=applicant.get("email", ""),
            phone=applicant.get("phone"),
        )
    else:
        identity = AnonymousApplicant(
            id=application.applicant_id,
            anonymous_name=anonymous_label(application.applicant_id),
        )

    access = application.details_access
    return ApplicationView(
        id=application.id,
        job_id=application.job_id,
        employer_id=application.employer_id,
        status=application.status,
        cover_letter=application.cover_letter,
        applied_at=application.created_at,
        updated_at=application.updated_at,
        status_history=application.status_history,
        interview=application.interview,
        applicant=identity,
        additional_data=application.additional_data,
        resume=application.resume if revealed else None,
        has_resume=application.has_resume,
        identity_visible=revealed,
        access_requested=isinstance(access, (AccessRequested, AccessGranted)),
        **access_flags(access),
    )
