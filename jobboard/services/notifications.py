"""
Notification feeds derived from recent activity.

Nothing is stored: each feed is rebuilt from applications, jobs and users
on request. The builders here are pure; the routes fetch the documents and
pass ``now`` in. Employers only ever see an applicant's name once details
access was granted on that application.
"""

import math
from collections import Counter, OrderedDict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from jobboard.models.application import AccessGranted, Application
from jobboard.services.views import anonymous_label

RECENT = timedelta(days=7)
FRESH = timedelta(days=1)
STALE_PENDING = timedelta(days=3)

JOBSEEKER_LIMIT = 10
EMPLOYER_LIMIT = 15
ADMIN_LIMIT = 20

# Applications from one job in the window before a summary line is added
SUMMARY_THRESHOLD = 3
STALE_PENDING_ALERT = 10

# status -> (icon, color, title, message template)
STATUS_NOTICES = {
    "hired": ("fa-check-circle", "green", "Application Accepted", 'Your application for "{title}" has been accepted!'),
    "rejected": ("fa-times-circle", "red", "Application Update", 'Status changed for "{title}"'),
    "shortlisted": ("fa-star", "yellow", "Application Shortlisted", 'You\'ve been shortlisted for "{title}"'),
    "interview_scheduled": ("fa-comment", "purple", "Interview Scheduled", 'Interview scheduled for "{title}"'),
}
DEFAULT_NOTICE = ("fa-file-alt", "blue", "Application Update", 'Application updated for "{title}"')

UNKNOWN_JOB = "Unknown Job"


def notification(id: str, icon: str, color: str, title: str, message: str, time: datetime, unread: bool) -> dict:
    return {
        "id": id,
        "icon": icon,
        "color": color,
        "title": title,
        "message": message,
        "time": time,
        "unread": unread,
    }


def feed(items: List[dict], limit: Optional[int] = None) -> dict:
    """Newest first, capped at limit, with the unread count of what is returned."""
    items = sorted(items, key=lambda item: item["time"], reverse=True)
    if limit is not None:
        items = items[:limit]
    return {
        "count": len(items),
        "unread_count": sum(1 for item in items if item["unread"]),
        "data": items,
    }


def plural(count: int, word: str) -> str:
    return f"{count} {word}" + ("" if count == 1 else "s")


def last_touched(application: Application) -> datetime:
    return application.updated_at or application.created_at


# ===========================
# JOBSEEKER
# ===========================

def jobseeker_notifications(
    applications: Iterable[Application],
    job_titles: Dict[str, str],
    new_jobs: List[dict],
    now: datetime,
) -> dict:
    """Status changes on the seeker's recent applications plus a new-jobs nudge."""
    recent = sorted(
        (app for app in applications if last_touched(app) >= now - RECENT),
        key=last_touched,
        reverse=True,
    )[:JOBSEEKER_LIMIT]

    items = []
    for app in recent:
        icon, color, title, template = STATUS_NOTICES.get(app.status, DEFAULT_NOTICE)
        items.append(notification(
            app.id, icon, color, title,
            template.format(title=job_titles.get(app.job_id, UNKNOWN_JOB)),
            last_touched(app),
            app.status in STATUS_NOTICES,
        ))

    if new_jobs:
        items.append(notification(
            f"jobs-{now:%Y%m%d}", "fa-briefcase", "green", "New Job Matches",
            f"{plural(len(new_jobs), 'new job')} posted today!",
            max(job["created_at"] for job in new_jobs),
            True,
        ))

    return feed(items)


# ===========================
# EMPLOYER
# ===========================

def applicant_label(application: Application, applicants: Dict[str, dict]) -> str:
    applicant = applicants.get(application.applicant_id)
    if isinstance(application.details_access, AccessGranted) and applicant:
        return applicant["name"]
    return anonymous_label(application.applicant_id)


def employer_notifications(
    applications: Iterable[Application],
    jobs: List[dict],
    applicants: Dict[str, dict],
    now: datetime,
) -> dict:
    """
    New applications, details-access grants and expiring postings for one employer.

    ``applicants`` only needs the users whose details were granted; everyone
    else is shown under their anonymous label.
    """
    titles = {str(job["_id"]): job["title"] for job in jobs}
    items = []
    per_job = Counter()

    for app in applications:
        title = titles.get(app.job_id, UNKNOWN_JOB)
        label = applicant_label(app, applicants)

        if app.created_at >= now - RECENT:
            per_job[title] += 1
            items.append(notification(
                app.id, "fa-user-check", "blue", "New Application",
                f'{label} applied for "{title}"',
                app.created_at,
                now - app.created_at < FRESH,
            ))

        access = app.details_access
        if isinstance(access, AccessGranted) and access.granted_at >= now - RECENT:
            items.append(notification(
                f"access-{app.id}", "fa-unlock", "green", "Applicant Details Unlocked",
                f'You can now see {label}\'s details for "{title}"',
                access.granted_at,
                now - access.granted_at < FRESH,
            ))

    for job in jobs:
        expiry = job.get("expiry_date")
        if not expiry or job.get("status") != "active":
            continue
        days_left = math.ceil((expiry - now) / timedelta(days=1))
        if 0 < days_left <= 7:
            items.append(notification(
                f"expire-{job['_id']}", "fa-clock", "yellow", "Job Expiring Soon",
                f'"{job["title"]}" expires in {plural(days_left, "day")}',
                expiry,
                True,
            ))

    for title, count in per_job.items():
        if count >= SUMMARY_THRESHOLD:
            items.append(notification(
                f"summary-{title}", "fa-file-alt", "green", "Application Received",
                f'{count} applications received for "{title}"',
                now,
                True,
            ))

    return feed(items, EMPLOYER_LIMIT)


# ===========================
# ADMIN
# ===========================

def admin_notifications(
    new_users: List[dict],
    new_jobs: List[dict],
    applications_this_week: int,
    stale_pending: int,
    access_requests_pending: int,
    now: datetime,
) -> dict:
    """Platform activity summary for admins."""
    items = []

    today_users = [user for user in new_users if user["created_at"].date() == now.date()]
    if today_users:
        items.append(notification(
            "users-today", "fa-user-plus", "blue", "New User Registration",
            f"{plural(len(today_users), 'new user')} registered today",
            max(user["created_at"] for user in today_users),
            True,
        ))

    by_company = OrderedDict()
    for job in sorted(new_jobs, key=lambda job: job["created_at"], reverse=True):
        entry = by_company.setdefault(job.get("company_name") or "Unknown Company", [0, job["created_at"]])
        entry[0] += 1
    for company, (count, latest) in by_company.items():
        items.append(notification(
            f"jobs-{company}", "fa-briefcase", "green", "New Job Posted",
            f"{company} posted {plural(count, 'new job')}",
            latest,
            True,
        ))

    if access_requests_pending:
        items.append(notification(
            "access-requests", "fa-user-lock", "yellow", "Access Requests Pending",
            f"{plural(access_requests_pending, 'employer request')} to view applicant details awaiting approval",
            now,
            True,
        ))

    if applications_this_week:
        items.append(notification(
            "apps-week", "fa-chart-line", "purple", "Weekly Activity Report",
            f"{applications_this_week} applications submitted this week",
            now,
            False,
        ))

    if stale_pending > STALE_PENDING_ALERT:
        items.append(notification(
            "pending-apps", "fa-exclamation-triangle", "yellow", "System Alert",
            f"{stale_pending} applications pending review for 3+ days",
            now,
            True,
        ))

    return feed(items, ADMIN_LIMIT)
