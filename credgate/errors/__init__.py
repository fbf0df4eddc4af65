"""
Errors
======
Error taxonomy and its translation to HTTP responses.
"""

from .exceptions import (
    CredgateError,
    ValidationError,
    PolicyViolation,
    VerificationMismatch,
    Conflict,
    AlreadyExists,
    NotFound,
    InvalidCredentials,
    Unauthorized,
    TokenInvalid,
    NotVerified,
    RateLimited,
    OtpError,
    OtpNotFound,
    OtpAlreadyUsed,
    OtpExpired,
    OtpAttemptsExhausted,
    OtpInvalid,
    DeliveryFailed,
    InternalError,
)

__all__ = [
    "CredgateError",
    "ValidationError",
    "PolicyViolation",
    "VerificationMismatch",
    "Conflict",
    "AlreadyExists",
    "NotFound",
    "InvalidCredentials",
    "Unauthorized",
    "TokenInvalid",
    "NotVerified",
    "RateLimited",
    "OtpError",
    "OtpNotFound",
    "OtpAlreadyUsed",
    "OtpExpired",
    "OtpAttemptsExhausted",
    "OtpInvalid",
    "DeliveryFailed",
    "InternalError",
]
