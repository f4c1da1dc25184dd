# ========================================
# jobboard/schemas/report.py
# ========================================

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel


class DateRange(BaseModel):
    start: datetime
    end: datetime


# ---------- Admin reports ----------

class DailyRoleCount(BaseModel):
    date: str
    role: str
    count: int


class UserGrowthReport(BaseModel):
    period: str
    date_range: DateRange
    total_users: int
    users_by_role: Dict[str, int]
    daily_growth: List[DailyRoleCount]


class CompanyJobCount(BaseModel):
    company_name: str
    job_count: int


class JobsReport(BaseModel):
    period: str
    date_range: DateRange
    total_jobs: int
    jobs_by_type: Dict[str, int]
    jobs_by_work_mode: Dict[str, int]
    top_companies: List[CompanyJobCount]
    average_salary: float


class DailyCount(BaseModel):
    date: str
    count: int


class ApplicationMetrics(BaseModel):
    hired: int
    shortlisted: int
    rejected: int
    conversion_rate: float
    shortlist_rate: float
    rejection_rate: float


class ApplicationsReport(BaseModel):
    period: str
    date_range: DateRange
    total_applications: int
    applications_by_status: Dict[str, int]
    daily_applications: List[DailyCount]
    metrics: ApplicationMetrics


class CompanyPerformance(BaseModel):
    id: str
    company_name: str
    email: str
    member_since: Optional[datetime] = None
    total_jobs: int
    total_applications: int
    hired_count: int
    avg_applications_per_job: float


class CompanyPerformanceReport(BaseModel):
    period: str
    total_companies: int
    companies: List[CompanyPerformance]


class PlatformTotals(BaseModel):
    total_users: int
    total_jobs: int
    total_applications: int
    active_jobs: int
    success_rate: float


class RecentActivity(BaseModel):
    new_users: int
    new_jobs: int
    new_applications: int


class PlatformAverages(BaseModel):
    avg_applications_per_job: float
    avg_jobs_per_company: float


class PlatformOverviewReport(BaseModel):
    period: str
    overview: PlatformTotals
    recent_activity: RecentActivity
    users_by_role: Dict[str, int]
    metrics: PlatformAverages


# ---------- Chart data ----------

class ChartDataset(BaseModel):
    label: str
    data: List[int]


class LineChart(BaseModel):
    labels: List[str]
    datasets: List[ChartDataset]


class BarChart(BaseModel):
    labels: List[str]
    values: List[int]


# ---------- Employer analytics ----------

class TopJob(BaseModel):
    id: str
    title: str
    applications: int
    views: int


class EmployerAnalytics(BaseModel):
    period: int
    applications_by_date: Dict[str, int]
    applications_by_status: Dict[str, int]
    top_jobs: List[TopJob]
    total_applications: int
    total_jobs: int
