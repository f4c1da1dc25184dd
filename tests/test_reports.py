from datetime import datetime, timedelta

import pytest

from conftest import apply, auth, post_job, register
from jobboard.errors import ValidationError
from jobboard.services.reports import (
    application_funnel,
    applications_summary,
    company_performance,
    day_labels,
    jobs_summary,
    percent,
    report_window,
    status_breakdown,
    user_acquisition,
)

NOW = datetime(2024, 6, 10, 12, 0)


# ===========================
# AGGREGATES
# ===========================

def test_report_window_defaults_and_validation():
    assert report_window(7, now=NOW) == (NOW - timedelta(days=7), NOW)

    start = datetime(2024, 1, 1)
    assert report_window(30, start_date=start, now=NOW) == (start, NOW)

    with pytest.raises(ValidationError):
        report_window(30, start_date=NOW, end_date=NOW - timedelta(days=1))


def test_percent_handles_empty_totals():
    assert percent(1, 3) == 33.33
    assert percent(5, 0) == 0.0


def test_day_labels_end_today():
    assert day_labels(3, NOW) == ["2024-06-08", "2024-06-09", "2024-06-10"]


def test_user_acquisition_zero_fills_missing_days():
    users = [
        {"role": "jobseeker", "created_at": datetime(2024, 6, 10, 9)},
        {"role": "jobseeker", "created_at": datetime(2024, 6, 10, 10)},
        {"role": "employer", "created_at": datetime(2024, 6, 8, 15)},
    ]
    chart = user_acquisition(users, 3, NOW)

    assert chart["labels"] == ["2024-06-08", "2024-06-09", "2024-06-10"]
    assert chart["datasets"][0] == {"label": "Job Seekers", "data": [0, 0, 2]}
    assert chart["datasets"][1] == {"label": "Employers", "data": [1, 0, 0]}


def test_status_breakdown_lists_every_status():
    chart = status_breakdown([{"status": "pending"}, {"status": "interview_scheduled"}])

    assert chart["labels"][0] == "Pending"
    assert "Interview Scheduled" in chart["labels"]
    assert sum(chart["values"]) == 2
    assert len(chart["labels"]) == len(chart["values"])


def test_jobs_summary():
    jobs = [
        {"company_name": "Golden Traders", "job_type": "fulltime", "work_mode": "office", "salary": {"min": 10000, "max": 20000}},
        {"company_name": "Golden Traders", "job_type": "parttime", "work_mode": "office", "salary": {"min": 8000}},
        {"company_name": "Ranjit Avenue Foods", "job_type": "fulltime", "work_mode": "hybrid", "salary": {}},
    ]
    summary = jobs_summary(jobs)

    assert summary["total_jobs"] == 3
    assert summary["jobs_by_type"] == {"fulltime": 2, "parttime": 1}
    assert summary["jobs_by_work_mode"] == {"office": 2, "hybrid": 1}
    assert summary["top_companies"][0] == {"company_name": "Golden Traders", "job_count": 2}
    assert summary["average_salary"] == 11500.0


def test_applications_summary_rates():
    applications = [
        {"status": "hired", "created_at": datetime(2024, 6, 9)},
        {"status": "rejected", "created_at": datetime(2024, 6, 9)},
        {"status": "pending", "created_at": datetime(2024, 6, 10)},
        {"status": "pending", "created_at": datetime(2024, 6, 10)},
    ]
    summary = applications_summary(applications)

    assert summary["daily_applications"] == [
        {"date": "2024-06-09", "count": 2},
        {"date": "2024-06-10", "count": 2},
    ]
    assert summary["metrics"]["conversion_rate"] == 25.0
    assert summary["metrics"]["rejection_rate"] == 25.0
    assert summary["metrics"]["shortlist_rate"] == 0.0


def test_company_performance_orders_by_applications():
    employers = [
        {"_id": "e1", "name": "Ravi", "company_name": "Golden Traders", "email": "ravi@example.com"},
        {"_id": "e2", "name": "Simran", "email": "simran@example.com"},
    ]
    jobs = [{"_id": "j1", "company_id": "e1"}, {"_id": "j2", "company_id": "e2"}, {"_id": "j3", "company_id": "e2"}]
    applications = [
        {"job_id": "j2", "status": "hired"},
        {"job_id": "j3", "status": "pending"},
        {"job_id": "j3", "status": "pending"},
    ]
    rows = company_performance(employers, jobs, applications)

    assert [row["id"] for row in rows] == ["e2", "e1"]
    assert rows[0]["company_name"] == "Simran"
    assert rows[0]["hired_count"] == 1
    assert rows[0]["avg_applications_per_job"] == 1.5
    assert rows[1]["avg_applications_per_job"] == 0.0


def test_application_funnel():
    jobs = [{"application_count": 2}, {"application_count": 0}]
    applications = [{"status": "shortlisted"}, {"status": "hired"}]

    assert application_funnel(jobs, applications)["values"] == [2, 1, 2, 1, 0, 1]


# ===========================
# API
# ===========================

def test_reports_are_admin_only(client, employer):
    for path in ("/reports/user-growth", "/reports/platform-overview", "/analytics/platform-growth"):
        assert client.get(path, headers=auth(employer)).status_code == 403


def test_applications_report(client, admin, application):
    body = client.get("/reports/applications", headers=auth(admin)).json()

    assert body["period"] == "30 days"
    assert body["total_applications"] == 1
    assert body["applications_by_status"] == {"pending": 1}


def test_user_growth_report(client, admin, employer, seeker):
    body = client.get("/reports/user-growth", params={"period": 7}, headers=auth(admin)).json()

    assert body["total_users"] == 3
    assert body["users_by_role"] == {"admin": 1, "employer": 1, "jobseeker": 1}


def test_report_rejects_inverted_dates(client, admin):
    response = client.get(
        "/reports/jobs",
        params={"start_date": "2024-06-10T00:00:00", "end_date": "2024-06-01T00:00:00"},
        headers=auth(admin),
    )
    assert response.status_code == 400


def test_company_report(client, admin, employer, other_employer, seeker, job, application):
    body = client.get("/reports/companies", headers=auth(admin)).json()

    assert body["total_companies"] == 2
    assert body["companies"][0]["company_name"] == "Golden Traders"
    assert body["companies"][0]["total_applications"] == 1


def test_platform_overview(client, admin, employer, seeker, job, application):
    post_job(client, employer, title="Night Watchman", expiry_date="2000-01-01T00:00:00")

    body = client.get("/reports/platform-overview", headers=auth(admin)).json()

    assert body["overview"]["total_jobs"] == 2
    assert body["overview"]["active_jobs"] == 1
    assert body["recent_activity"]["new_applications"] == 1
    assert body["metrics"]["avg_jobs_per_company"] == 2.0


def test_growth_chart_counts_today(client, admin, employer, seeker, job, application):
    body = client.get("/analytics/platform-growth", params={"days": 7}, headers=auth(admin)).json()

    assert len(body["labels"]) == 7
    series = {dataset["label"]: dataset["data"] for dataset in body["datasets"]}
    assert series["Jobs Posted"][-1] == 1
    assert series["Applications"][-1] == 1
    assert series["New Users"][-1] == 3


def test_funnel_endpoint(client, admin, job, application):
    body = client.get("/analytics/application-funnel", headers=auth(admin)).json()
    assert body["values"][:3] == [1, 1, 1]


def test_employer_analytics(client, employer, seeker, job, application):
    other_job = post_job(client, employer, title="Store Manager")
    apply(client, register(client, "jobseeker"), other_job["id"])
    apply(client, register(client, "jobseeker"), other_job["id"])

    body = client.get("/dashboard/analytics", headers=auth(employer)).json()

    assert body["total_jobs"] == 2
    assert body["total_applications"] == 3
    assert body["applications_by_status"]["pending"] == 3
    assert body["top_jobs"][0]["title"] == "Store Manager"
    assert body["top_jobs"][0]["applications"] == 2
