# ========================================
# jobboard/routes/auth.py
# ========================================

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, File, UploadFile, status
from pymongo.errors import DuplicateKeyError

from jobboard.database import get_db, get_resume_storage
from jobboard.errors import AuthenticationError, ConflictError
from jobboard.models.user import User
from jobboard.schemas.user import (
    PasswordUpdate,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserProfileUpdate,
    UserResponse,
    user_to_response,
)
from jobboard.storage import validate_resume_upload
from jobboard.utils.auth import create_access_token, get_current_user, require_roles
from jobboard.utils.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def token_response(user: dict) -> dict:
    access_token = create_access_token(data={"sub": str(user["_id"]), "role": user["role"]})
    return {"access_token": access_token, "token_type": "bearer", "user": user_to_response(user)}


async def insert_user(db, document: dict):
    """Insert a user document; the unique email index turns a lost race into a Conflict."""
    try:
        result = await db.users.insert_one(document)
    except DuplicateKeyError:
        raise ConflictError("User with this email or phone already exists")
    return result.inserted_id


# ===========================
# PUBLIC ENDPOINTS
# ===========================

# ✅ 1. REGISTER
@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user: UserCreate, db=Depends(get_db)):
    """Register a new jobseeker or employer."""

    existing_user = await db.users.find_one(
        {"$or": [{"email": user.email}, {"phone": user.phone}]}
    )
    if existing_user:
        raise ConflictError("User with this email or phone already exists")

    new_user = User(
        name=user.name,
        email=user.email,
        phone=user.phone,
        password=get_password_hash(user.password),
        role=user.role,
        company_name=user.company_name if user.role == "employer" else None,
    ).to_mongo()

    new_user["_id"] = await insert_user(db, new_user)
    logger.info("Registered %s %s", user.role, new_user["_id"])

    return token_response(new_user)


# ✅ 2. LOGIN
@router.post("/login", response_model=TokenResponse)
async def login(user_credentials: UserLogin, db=Depends(get_db)):
    """Login and get JWT access token."""

    user = await db.users.find_one({"email": user_credentials.email})
    if not user or not verify_password(user_credentials.password, user["password"]):
        raise AuthenticationError("Invalid credentials")

    if not user.get("is_active", True):
        raise AuthenticationError("Account is deactivated")

    user["last_login"] = datetime.utcnow()
    await db.users.update_one({"_id": user["_id"]}, {"$set": {"last_login": user["last_login"]}})

    return token_response(user)


# ===========================
# AUTHENTICATED USER ENDPOINTS
# ===========================

# ✅ 3. GET ME
@router.get("/me", response_model=UserResponse)
async def get_me(current_user: dict = Depends(get_current_user)):
    """Get the current user's profile."""
    return user_to_response(current_user)


# ✅ 4. UPDATE MY PROFILE
@router.put("/profile", response_model=UserResponse)
async def update_profile(
    profile_data: UserProfileUpdate,
    current_user: dict = Depends(get_current_user),
    db=Depends(get_db),
):
    """Update the current user's profile."""

    update_data = profile_data.model_dump(exclude_unset=True)

    if "phone" in update_data:
        clash = await db.users.find_one(
            {"phone": update_data["phone"], "_id": {"$ne": current_user["_id"]}}
        )
        if clash:
            raise ConflictError("Phone number already in use")

    if update_data:
        await db.users.update_one({"_id": current_user["_id"]}, {"$set": update_data})
        current_user.update(update_data)

    return user_to_response(current_user)


# ✅ 5. CHANGE PASSWORD
@router.put("/password", response_model=TokenResponse)
async def update_password(
    passwords: PasswordUpdate,
    current_user: dict = Depends(get_current_user),
    db=Depends(get_db),
):
    """Change password after checking the current one."""

    if not verify_password(passwords.current_password, current_user["password"]):
        raise AuthenticationError("Current password is incorrect")

    await db.users.update_one(
        {"_id": current_user["_id"]},
        {"$set": {"password": get_password_hash(passwords.new_password)}},
    )

    return token_response(current_user)


# ✅ 6. UPLOAD PROFILE RESUME (Jobseeker)
@router.post("/resume")
async def upload_profile_resume(
    file: UploadFile = File(...),
    current_user: dict = Depends(require_roles("jobseeker")),
    db=Depends(get_db),
    storage=Depends(get_resume_storage),
):
    """Store a default resume used when applying without attaching one."""

    contents = await file.read()
    validate_resume_upload(file.filename, len(contents))

    resume_ref = await storage.save(
        file.filename,
        contents,
        file.content_type or "application/octet-stream",
        {"user_id": str(current_user["_id"]), "original_filename": file.filename},
    )
    await db.users.update_one({"_id": current_user["_id"]}, {"$set": {"resume_id": resume_ref}})

    return {
        "message": "Resume uploaded successfully!",
        "resume_id": resume_ref,
        "filename": file.filename,
        "size_kb": round(len(contents) / 1024, 2),
    }
