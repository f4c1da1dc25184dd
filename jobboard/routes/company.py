from typing import List

from fastapi import APIRouter, Depends
from pymongo import DESCENDING

from jobboard.database import get_db, to_object_id
from jobboard.errors import NotFoundError
from jobboard.schemas.dashboard import CompanyResponse
from jobboard.schemas.job import JobResponse, job_to_response

router = APIRouter(prefix="/companies", tags=["Companies"])

PUBLIC_COMPANY_FIELDS = {
    "name": 1,
    "company_name": 1,
    "company_description": 1,
    "company_website": 1,
    "company_size": 1,
    "is_verified": 1,
}


def company_to_response(user: dict) -> dict:
    return {**user, "id": str(user["_id"])}


@router.get("", response_model=List[CompanyResponse])
async def get_companies(db=Depends(get_db)):
    """Active employers and their public company details."""
    companies = await db.users.find(
        {"role": "employer", "is_active": True}, PUBLIC_COMPANY_FIELDS
    ).to_list(None)
    return [company_to_response(c) for c in companies]


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: str, db=Depends(get_db)):
    oid = to_object_id(company_id, "company ID")
    company = await db.users.find_one(
        {"_id": oid, "role": "employer"},
        PUBLIC_COMPANY_FIELDS,
    )
    if not company:
        raise NotFoundError("Company not found")

    result = company_to_response(company)
    result["active_jobs_count"] = await db.jobs.count_documents(
        {"company_id": str(oid), "status": "active"}
    )
    return result


@router.get("/{company_id}/jobs", response_model=List[JobResponse])
async def get_company_jobs(company_id: str, db=Depends(get_db)):
    company_id = str(to_object_id(company_id, "company ID"))
    jobs = (
        await db.jobs.find({"company_id": company_id, "status": "active"})
        .sort("created_at", DESCENDING)
        .to_list(None)
    )
    return [job_to_response(job) for job in jobs]
