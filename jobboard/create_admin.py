"""
Create an admin account. Admins cannot self-register through the API.

    python -m jobboard.create_admin --name "Site Admin" --email admin@example.com \
        --phone 9876543210 --password secret123
"""

import argparse
import asyncio
import logging

from motor.motor_asyncio import AsyncIOMotorClient

from jobboard import config
from jobboard.logging_config import configure_logging
from jobboard.models.user import User
from jobboard.utils.security import get_password_hash

logger = logging.getLogger(__name__)


async def create_admin(db, name: str, email: str, phone: str, password: str) -> str:
    """Insert an admin user, or promote an existing one with that email. Returns the id."""
    existing = await db.users.find_one({"email": email})
    if existing:
        await db.users.update_one(
            {"_id": existing["_id"]},
            {"$set": {"role": "admin", "is_active": True, "is_verified": True}},
        )
        logger.info("Promoted existing user %s to admin", email)
        return str(existing["_id"])

    admin = User(
        name=name,
        email=email,
        phone=phone,
        password=get_password_hash(password),
        role="admin",
        is_verified=True,
    )
    result = await db.users.insert_one(admin.to_mongo())
    logger.info("Created admin %s", email)
    return str(result.inserted_id)


async def _main(args) -> None:
    client = AsyncIOMotorClient(config.MONGO_URI)
    try:
        db = client[config.DATABASE_NAME]
        admin_id = await create_admin(db, args.name, args.email, args.phone, args.password)
        print(f"Admin ready: {args.email} (id={admin_id})")
    finally:
        client.close()


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("--name", default="Admin")
    parser.add_argument("--email", required=True)
    parser.add_argument("--phone", required=True)
    parser.add_argument("--password", required=True)
    args = parser.parse_args(argv)

    configure_logging()
    asyncio.run(_main(args))


if __name__ == "__main__":
    main()
