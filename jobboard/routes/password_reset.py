# ========================================
# jobboard/routes/password_reset.py
# ========================================

import logging
import secrets
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends

from jobboard import config
from jobboard.database import get_db
from jobboard.errors import NotFoundError, TooManyRequestsError, ValidationError
from jobboard.schemas.password_reset import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    ResetPasswordRequest,
    VerifyOTPRequest,
    VerifyOTPResponse,
)
from jobboard.utils.email import send_otp_email
from jobboard.utils.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Password Reset"])


def generate_otp() -> str:
    return f"{secrets.randbelow(10**6):06d}"


async def find_account(db, email: str) -> dict:
    user = await db.users.find_one({"email": email})
    if not user:
        raise NotFoundError("No account found with this email address")
    return user


async def issue_otp(db, user: dict) -> dict:
    """Replace any outstanding code for this account with a fresh one and mail it."""
    otp = generate_otp()
    now = datetime.utcnow()

    await db.password_resets.delete_many({"email": user["email"]})
    await db.password_resets.insert_one({
        "email": user["email"],
        "otp_hash": get_password_hash(otp),
        "created_at": now,
        "expires_at": now + timedelta(minutes=config.OTP_EXPIRE_MINUTES),
        "verified": False,
        "attempts": 0,
    })

    await send_otp_email(email=user["email"], otp=otp, name=user.get("name", "User"))
    logger.info("Password reset code issued for user %s", user["_id"])

    return {
        "message": "OTP sent successfully to your email",
        "email": user["email"],
        "expires_in_minutes": config.OTP_EXPIRE_MINUTES,
    }


async def discard_if_expired(db, record: dict, detail: str) -> None:
    if datetime.utcnow() > record["expires_at"]:
        await db.password_resets.delete_one({"_id": record["_id"]})
        raise ValidationError(detail)


# ✅ 1. FORGOT PASSWORD (send code)
@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(request: ForgotPasswordRequest, db=Depends(get_db)):
    """Step 1: email a 6-digit reset code to the account holder."""

    user = await find_account(db, request.email)
    return await issue_otp(db, user)


# ✅ 2. VERIFY CODE
@router.post("/verify-otp", response_model=VerifyOTPResponse)
async def verify_otp(request: VerifyOTPRequest, db=Depends(get_db)):
    """Step 2: check the code. Each wrong guess uses up one attempt."""

    record = await db.password_resets.find_one({"email": request.email, "verified": False})
    if not record:
        raise NotFoundError("No pending OTP found for this email")

    await discard_if_expired(db, record, "OTP has expired. Please request a new one.")

    if record["attempts"] >= config.OTP_MAX_ATTEMPTS:
        await db.password_resets.delete_one({"_id": record["_id"]})
        raise TooManyRequestsError("Too many failed attempts. Please request a new OTP.")

    if not verify_password(request.otp, record["otp_hash"]):
        await db.password_resets.update_one({"_id": record["_id"]}, {"$inc": {"attempts": 1}})
        remaining = config.OTP_MAX_ATTEMPTS - (record["attempts"] + 1)
        raise ValidationError(f"Invalid OTP. {remaining} attempts remaining.")

    await db.password_resets.update_one(
        {"_id": record["_id"]},
        {"$set": {"verified": True, "verified_at": datetime.utcnow()}},
    )
    return {"message": "OTP verified successfully", "verified": True}


# ✅ 3. RESET PASSWORD
@router.post("/reset-password")
async def reset_password(request: ResetPasswordRequest, db=Depends(get_db)):
    """Step 3: set a new password using a verified code."""

    record = await db.password_resets.find_one({"email": request.email, "verified": True})
    if not record or not verify_password(request.otp, record["otp_hash"]):
        raise ValidationError("OTP not verified or invalid")

    await discard_if_expired(db, record, "OTP has expired. Please start the process again.")

    result = await db.users.update_one(
        {"email": request.email},
        {"$set": {"password": get_password_hash(request.new_password), "password_reset_at": datetime.utcnow()}},
    )
    if result.matched_count == 0:
        raise NotFoundError("User not found")

    await db.password_resets.delete_many({"email": request.email})
    logger.info("Password reset completed for %s", request.email)

    return {
        "message": "Password reset successfully. You can now login with your new password.",
        "email": request.email,
    }


# ✅ 4. RESEND CODE
@router.post("/resend-otp", response_model=ForgotPasswordResponse)
async def resend_otp(request: ForgotPasswordRequest, db=Depends(get_db)):
    """Send a new code; only hashes are stored, so the previous one is replaced."""

    user = await find_account(db, request.email)
    return await issue_otp(db, user)
