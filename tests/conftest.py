import asyncio
import itertools

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from jobboard.create_admin import create_admin
from jobboard.main import create_app
from jobboard.storage import LocalResumeStorage

PASSWORD = "secret123"

_phones = itertools.count(9000000001)


def auth(user: dict) -> dict:
    return {"Authorization": f"Bearer {user['token']}"}


def login(client, email, password=PASSWORD) -> dict:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    body = response.json()
    return {"token": body["access_token"], "id": body["user"]["id"], **body["user"]}


def register(client, role="jobseeker", name=None, **extra) -> dict:
    phone = str(next(_phones))
    name = name or f"{role.title()} {phone[-4:]}"
    payload = {
        "name": name,
        "email": f"{role}{phone}@example.com",
        "phone": phone,
        "password": PASSWORD,
        "role": role,
        **extra,
    }
    response = client.post("/auth/register", json=payload)
    assert response.status_code == 201, response.text
    body = response.json()
    return {"token": body["access_token"], "id": body["user"]["id"], **body["user"]}


def post_job(client, employer, **overrides) -> dict:
    payload = {
        "title": "Counter Sales Executive",
        "description": "Handle walk-in customers at our Hall Bazaar store.",
        "category": "Retail",
        "experience_required": "0-1 years",
        "education_required": "12th pass",
        "skills": ["Sales", "Punjabi"],
        **overrides,
    }
    response = client.post("/jobs", json=payload, headers=auth(employer))
    assert response.status_code == 201, response.text
    return response.json()


def apply(client, seeker, job_id, files=None, **fields):
    data = {
        "cover_letter": "I live nearby and can start immediately.",
        "experience": "2 years",
        "current_location": "Amritsar",
        "current_job_title": "Sales Associate",
        "skills": "Sales, Customer Service",
        "education": "B.Com",
        "expected_salary": "18000",
        "notice_period": "15 days",
        **fields,
    }
    return client.post(f"/applications/{job_id}", data=data, files=files, headers=auth(seeker))


@pytest.fixture
def db():
    return AsyncMongoMockClient()["jobboard_test"]


@pytest.fixture
def client(db, tmp_path):
    app = create_app(db=db, resume_storage=LocalResumeStorage(str(tmp_path)))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(client, db):
    asyncio.run(create_admin(db, "Site Admin", "admin@example.com", "9999999999", PASSWORD))
    return login(client, "admin@example.com")


@pytest.fixture
def employer(client):
    return register(client, "employer", name="Ravi Kapoor", company_name="Golden Traders")


@pytest.fixture
def other_employer(client):
    return register(client, "employer", name="Simran Gill", company_name="Ranjit Avenue Foods")


@pytest.fixture
def seeker(client):
    return register(client, "jobseeker", name="Harpreet Kaur")


@pytest.fixture
def job(client, employer):
    return post_job(client, employer)


@pytest.fixture
def application(client, seeker, job):
    response = apply(client, seeker, job["id"])
    assert response.status_code == 201, response.text
    return response.json()
