from pydantic import BaseModel, EmailStr, Field, field_validator


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class VerifyOTPRequest(BaseModel):
    email: EmailStr
    otp: str

    @field_validator("otp")
    @classmethod
    def validate_otp(cls, value: str) -> str:
        if not value.isdigit() or len(value) != 6:
            raise ValueError("OTP must be a 6-digit number")
        return value


class ResetPasswordRequest(VerifyOTPRequest):
    new_password: str = Field(..., min_length=6)


class ForgotPasswordResponse(BaseModel):
    message: str
    email: str
    expires_in_minutes: int


class VerifyOTPResponse(BaseModel):
    message: str
    verified: bool
