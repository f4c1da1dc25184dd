import logging

from bson import ObjectId
from fastapi import FastAPI, Request
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING

from jobboard import config
from jobboard.errors import ValidationError
from jobboard.storage import build_resume_storage

logger = logging.getLogger(__name__)


async def connect_to_mongo(app: FastAPI) -> None:
    """Open the Mongo client and attach db + resume storage to app.state."""
    if not config.MONGO_URI:
        raise ValueError("MONGO_URI environment variable is not set! Check your .env file.")

    client = AsyncIOMotorClient(config.MONGO_URI)
    await client.admin.command("ping")
    db = client[config.DATABASE_NAME]

    app.state.mongo_client = client
    app.state.db = db
    if getattr(app.state, "resume_storage", None) is None:
        app.state.resume_storage = build_resume_storage(db)

    if "mongodb+srv" in config.MONGO_URI:
        logger.info("Connected to MongoDB Atlas (database=%s)", config.DATABASE_NAME)
    else:
        logger.info("Connected to MongoDB at %s (database=%s)", config.MONGO_URI, config.DATABASE_NAME)


async def close_mongo_connection(app: FastAPI) -> None:
    client = getattr(app.state, "mongo_client", None)
    if client:
        client.close()
        app.state.mongo_client = None
        logger.info("MongoDB connection closed")


async def ensure_indexes(db) -> None:
    """Create the unique and lookup indexes the API relies on."""
    await db.users.create_index("email", unique=True)
    await db.users.create_index("phone")
    await db.jobs.create_index("company_id")
    await db.jobs.create_index([("status", ASCENDING), ("created_at", DESCENDING)])
    # One application per (job, applicant)
    await db.applications.create_index(
        [("job_id", ASCENDING), ("applicant_id", ASCENDING)], unique=True
    )
    await db.applications.create_index("employer_id")
    await db.applications.create_index("details_access.state")
    await db.saved_jobs.create_index(
        [("user_id", ASCENDING), ("job_id", ASCENDING)], unique=True
    )
    await db.password_resets.create_index("email")


def get_db(request: Request):
    return request.app.state.db


def get_resume_storage(request: Request):
    return request.app.state.resume_storage


def to_object_id(value: str, label: str = "ID") -> ObjectId:
    if not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {label}")
    return ObjectId(value)
