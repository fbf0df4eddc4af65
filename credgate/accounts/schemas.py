"""
Account Schemas
===============
Pydantic request and response models for the credential flows.

Request models normalize contact details on the way in (emails lowercased,
phone separators stripped) so the service only ever sees canonical values.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field

from credgate.validation import (
    clean_phone,
    normalize_email,
    validate_email,
    validate_otp_format,
    validate_phone,
)

from .models import User


def _check_email(value: str) -> str:
    email = normalize_email(value)
    if not validate_email(email):
        raise ValueError("Invalid email format")
    return email


def _check_phone(value: str) -> str:
    phone = clean_phone(value)
    if not validate_phone(phone):
        raise ValueError("Invalid phone number format")
    return phone


def _check_otp(value: str) -> str:
    code = value.strip()
    if not validate_otp_format(code):
        raise ValueError("OTP must be 6 digits")
    return code


Email = Annotated[str, AfterValidator(_check_email)]
Phone = Annotated[str, AfterValidator(_check_phone)]
OtpCode = Annotated[str, AfterValidator(_check_otp)]
ProfileField = Annotated[Optional[str], Field(max_length=100)]


# ---------------------------------------------------------------------------
# Signup and verification
# ---------------------------------------------------------------------------

class SignupRequest(BaseModel):
    email: Email
    phone: Phone
    password: str
    confirm_password: str
    first_name: ProfileField = None
    last_name: ProfileField = None
    city: ProfileField = None


class VerifyAccountRequest(BaseModel):
    """Both codes issued at signup, submitted together."""
    email: Email
    phone: Phone
    email_otp: OtpCode
    phone_otp: OtpCode


class VerifyEmailRequest(BaseModel):
    email: Email
    otp: OtpCode


class VerifyPhoneRequest(BaseModel):
    phone: Phone
    otp: OtpCode


class ResendVerificationRequest(BaseModel):
    email: Email


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

class LoginRequest(BaseModel):
    email: Email
    password: str = Field(min_length=1)


class PhoneLoginRequest(BaseModel):
    phone: Phone


class VerifyPhoneLoginRequest(BaseModel):
    phone: Phone
    otp: OtpCode


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

class ChangePasswordRequest(BaseModel):
    old_password: str = Field(min_length=1)
    new_password: str
    confirm_password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: Email


class ResetPasswordRequest(BaseModel):
    email: Email
    otp: OtpCode
    new_password: str
    confirm_password: str


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------

class UpdateProfileRequest(BaseModel):
    """Only fields that are set are applied."""
    first_name: ProfileField = None
    last_name: ProfileField = None
    city: ProfileField = None
    email: Optional[Email] = None
    phone: Optional[Phone] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    id: str
    email: str
    phone: str
    email_verified: bool
    phone_verified: bool
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    city: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            phone=user.phone,
            email_verified=user.email_verified,
            phone_verified=user.phone_verified,
            first_name=user.first_name,
            last_name=user.last_name,
            city=user.city,
            created_at=user.created_at,
        )


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class MessageResponse(BaseModel):
    message: str
