"""
Aggregates behind the admin reports, the chart endpoints and the employer
analytics page.

Routes fetch the documents in the requested window; everything here is
plain counting over those lists so it runs the same against any Mongo.
"""

from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple, get_args

from jobboard.errors import ValidationError
from jobboard.models.application import ApplicationStatus

STATUSES = get_args(ApplicationStatus)


def report_window(
    period: int,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """Explicit dates win; otherwise the last ``period`` days up to now."""
    end = end_date or now or datetime.utcnow()
    start = start_date or end - timedelta(days=period)
    if start > end:
        raise ValidationError("start_date must be before end_date")
    return start, end


def in_window(start: datetime, end: datetime) -> dict:
    return {"created_at": {"$gte": start, "$lte": end}}


def day_key(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d")


def day_labels(days: int, now: datetime) -> List[str]:
    """The last ``days`` calendar days, oldest first, ending today."""
    today = now.date()
    return [(today - timedelta(days=offset)).isoformat() for offset in range(days - 1, -1, -1)]


def percent(part: int, total: int) -> float:
    return round(part * 100 / total, 2) if total else 0.0


def average(total: float, count: int) -> float:
    return round(total / count, 1) if count else 0.0


def humanize(status: str) -> str:
    return status.replace("_", " ").title()


def daily_counts(documents: Iterable[dict]) -> Dict[str, int]:
    counts = Counter(day_key(doc["created_at"]) for doc in documents)
    return dict(sorted(counts.items()))


def salary_midpoint(job: dict) -> Optional[float]:
    salary = job.get("salary") or {}
    figures = [value for value in (salary.get("min"), salary.get("max")) if value is not None]
    if not figures:
        return None
    return sum(figures) / len(figures)


# ===========================
# REPORTS
# ===========================

def user_growth(users: List[dict]) -> dict:
    per_day = defaultdict(Counter)
    for user in users:
        per_day[day_key(user["created_at"])][user["role"]] += 1

    return {
        "total_users": len(users),
        "users_by_role": dict(Counter(user["role"] for user in users)),
        "daily_growth": [
            {"date": date, "role": role, "count": count}
            for date in sorted(per_day)
            for role, count in sorted(per_day[date].items())
        ],
    }


def jobs_summary(jobs: List[dict], top: int = 10) -> dict:
    companies = Counter(job.get("company_name") or "Unknown Company" for job in jobs)
    salaries = [mid for mid in (salary_midpoint(job) for job in jobs) if mid is not None]

    return {
        "total_jobs": len(jobs),
        "jobs_by_type": dict(Counter(job.get("job_type", "fulltime") for job in jobs)),
        "jobs_by_work_mode": dict(Counter(job.get("work_mode", "office") for job in jobs)),
        "top_companies": [
            {"company_name": name, "job_count": count}
            for name, count in companies.most_common(top)
        ],
        "average_salary": round(sum(salaries) / len(salaries), 2) if salaries else 0.0,
    }


def applications_summary(applications: List[dict]) -> dict:
    total = len(applications)
    by_status = Counter(app["status"] for app in applications)

    return {
        "total_applications": total,
        "applications_by_status": dict(by_status),
        "daily_applications": [
            {"date": date, "count": count}
            for date, count in daily_counts(applications).items()
        ],
        "metrics": {
            "hired": by_status["hired"],
            "shortlisted": by_status["shortlisted"],
            "rejected": by_status["rejected"],
            "conversion_rate": percent(by_status["hired"], total),
            "shortlist_rate": percent(by_status["shortlisted"], total),
            "rejection_rate": percent(by_status["rejected"], total),
        },
    }


def company_performance(employers: List[dict], jobs: List[dict], applications: List[dict], top: int = 20) -> List[dict]:
    """
    Per-employer totals, busiest first.

    ``jobs`` are the postings in the report window and ``applications``
    every application on those postings.
    """
    jobs_per_employer = Counter(job["company_id"] for job in jobs)
    owner = {str(job["_id"]): job["company_id"] for job in jobs}

    received = Counter()
    hired = Counter()
    for app in applications:
        employer_id = owner.get(app["job_id"])
        if employer_id is None:
            continue
        received[employer_id] += 1
        if app["status"] == "hired":
            hired[employer_id] += 1

    rows = []
    for employer in employers:
        employer_id = str(employer["_id"])
        rows.append({
            "id": employer_id,
            "company_name": employer.get("company_name") or employer["name"],
            "email": employer["email"],
            "member_since": employer.get("created_at"),
            "total_jobs": jobs_per_employer[employer_id],
            "total_applications": received[employer_id],
            "hired_count": hired[employer_id],
            "avg_applications_per_job": average(received[employer_id], jobs_per_employer[employer_id]),
        })

    rows.sort(key=lambda row: row["total_applications"], reverse=True)
    return rows[:top]


# ===========================
# CHARTS
# ===========================

def user_acquisition(users: List[dict], days: int, now: datetime) -> dict:
    per_day = defaultdict(Counter)
    for user in users:
        per_day[day_key(user["created_at"])][user["role"]] += 1

    labels = day_labels(days, now)
    return {
        "labels": labels,
        "datasets": [
            {"label": "Job Seekers", "data": [per_day[date]["jobseeker"] for date in labels]},
            {"label": "Employers", "data": [per_day[date]["employer"] for date in labels]},
        ],
    }


def status_breakdown(applications: List[dict]) -> dict:
    counts = Counter(app["status"] for app in applications)
    return {
        "labels": [humanize(status) for status in STATUSES],
        "values": [counts[status] for status in STATUSES],
    }


def application_funnel(jobs: List[dict], applications: List[dict]) -> dict:
    by_status = Counter(app["status"] for app in applications)
    return {
        "labels": ["Jobs Posted", "Jobs with Apps", "Total Applications", "Shortlisted", "Interviews", "Hired"],
        "values": [
            len(jobs),
            sum(1 for job in jobs if job.get("application_count", 0) > 0),
            len(applications),
            by_status["shortlisted"],
            by_status["interview_scheduled"],
            by_status["hired"],
        ],
    }


def platform_growth(users: List[dict], jobs: List[dict], applications: List[dict], days: int, now: datetime) -> dict:
    labels = day_labels(days, now)
    series = [
        ("New Users", daily_counts(users)),
        ("Jobs Posted", daily_counts(jobs)),
        ("Applications", daily_counts(applications)),
    ]
    return {
        "labels": labels,
        "datasets": [
            {"label": label, "data": [counts.get(date, 0) for date in labels]}
            for label, counts in series
        ],
    }


# ===========================
# EMPLOYER
# ===========================

def employer_analytics(jobs: List[dict], applications: List[dict], top: int = 5) -> dict:
    by_status = Counter(app["status"] for app in applications)
    busiest = sorted(jobs, key=lambda job: job.get("application_count", 0), reverse=True)[:top]

    return {
        "applications_by_date": daily_counts(applications),
        "applications_by_status": {status: by_status[status] for status in STATUSES},
        "top_jobs": [
            {
                "id": str(job["_id"]),
                "title": job["title"],
                "applications": job.get("application_count", 0),
                "views": job.get("views", 0),
            }
            for job in busiest
        ],
        "total_applications": len(applications),
        "total_jobs": len(jobs),
    }
