"""Password reset schemas."""
from pydantic import BaseModel, EmailStr, Field

OTP_PATTERN = r"^\d{6}$"


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(pattern=OTP_PATTERN)


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str = Field(pattern=OTP_PATTERN)
    new_password: str = Field(min_length=1, max_length=128)


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class VerifyOtpResponse(BaseModel):
    valid: bool
    message: str
