"""
Accounts
========
User model and request schemas for the credential flows.

The service lives in ``credgate.accounts.service``; it is not imported here
because the stores depend on the user model.
"""

from .models import User, utcnow
from .schemas import (
    SignupRequest,
    VerifyAccountRequest,
    VerifyEmailRequest,
    VerifyPhoneRequest,
    ResendVerificationRequest,
    LoginRequest,
    PhoneLoginRequest,
    VerifyPhoneLoginRequest,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
    UserResponse,
    TokenResponse,
    MessageResponse,
)

__all__ = [
    # Models
    "User",
    "utcnow",
    # Requests
    "SignupRequest",
    "VerifyAccountRequest",
    "VerifyEmailRequest",
    "VerifyPhoneRequest",
    "ResendVerificationRequest",
    "LoginRequest",
    "PhoneLoginRequest",
    "VerifyPhoneLoginRequest",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "UpdateProfileRequest",
    # Responses
    "UserResponse",
    "TokenResponse",
    "MessageResponse",
]
