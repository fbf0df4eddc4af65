"""
Credential Errors
=================
Error taxonomy for the OTP engine and credential flows.

Every error carries a stable ``code``, a user-facing ``message``, the HTTP
status the boundary should answer with, and caller-actionable ``details``
(attempts remaining, retry-after seconds, ...). Messages never contain codes,
hashes or which of several identifiers failed a check.
"""

from typing import Any, Dict, Optional


class CredgateError(Exception):
    """Base exception for all credential and OTP failures."""

    code: str = "ERROR"
    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------

class ValidationError(CredgateError):
    """Malformed input or a rejected value."""
    code = "VALIDATION_ERROR"
    status_code = 400
    default_message = "Validation failed"


class PolicyViolation(ValidationError):
    """A password failed one rule of the password policy."""
    code = "PASSWORD_POLICY"

    def __init__(self, rule, message: str):
        self.rule = rule
        super().__init__(message, details={"rule": rule.value})


class VerificationMismatch(ValidationError):
    """Submitted contact details do not match the account (field not disclosed)."""
    code = "VERIFICATION_MISMATCH"
    default_message = "Verification details do not match our records"


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

class Conflict(CredgateError):
    """A uniqueness or concurrent-modification conflict."""
    code = "CONFLICT"
    status_code = 409
    default_message = "Conflicting update"


class AlreadyExists(Conflict):
    """Email or phone already registered to an account."""
    code = "ALREADY_EXISTS"
    default_message = "Account already exists"


class NotFound(CredgateError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Not found"


class InvalidCredentials(CredgateError):
    """Unknown account or wrong password; the two are indistinguishable."""
    code = "INVALID_CREDENTIALS"
    status_code = 401
    default_message = "Invalid credentials"


class Unauthorized(CredgateError):
    """Missing or unusable session subject."""
    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Unauthorized"


class TokenInvalid(Unauthorized):
    """Expired, malformed and tampered tokens all raise this one error."""
    code = "TOKEN_INVALID"
    default_message = "Invalid or expired token"


class NotVerified(CredgateError):
    code = "NOT_VERIFIED"
    status_code = 403
    default_message = "Account not verified"


# ---------------------------------------------------------------------------
# OTP
# ---------------------------------------------------------------------------

class RateLimited(CredgateError):
    """A code was issued for this key too recently."""
    code = "RATE_LIMITED"
    status_code = 429

    def __init__(self, retry_after: int, cooldown_minutes: int):
        self.retry_after = retry_after
        self.cooldown_minutes = cooldown_minutes
        super().__init__(
            f"Please wait {cooldown_minutes} minute(s) before requesting another OTP",
            details={"retry_after": retry_after, "cooldown_minutes": cooldown_minutes},
        )


class OtpError(CredgateError):
    """Base for verification failures of a challenge."""
    code = "OTP_ERROR"
    status_code = 400


class OtpNotFound(OtpError):
    code = "OTP_NOT_FOUND"
    default_message = "No OTP found. Please request a new one."


class OtpAlreadyUsed(OtpError):
    code = "OTP_ALREADY_USED"
    default_message = "OTP already used. Please request a new one."


class OtpExpired(OtpError):
    code = "OTP_EXPIRED"

    def __init__(self, ttl_minutes: int):
        self.ttl_minutes = ttl_minutes
        super().__init__(
            f"OTP expired. Please request a new one. (Valid for {ttl_minutes} minutes)",
            details={"ttl_minutes": ttl_minutes},
        )


class OtpAttemptsExhausted(OtpError):
    code = "OTP_ATTEMPTS_EXHAUSTED"
    default_message = "OTP blocked due to too many failed attempts. Please request a new one."


class OtpInvalid(OtpError):
    code = "OTP_INVALID"

    def __init__(self, remaining: int):
        self.remaining = remaining
        super().__init__(
            f"Invalid OTP. {remaining} attempt(s) remaining.",
            details={"remaining": remaining},
        )


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------

class DeliveryFailed(CredgateError):
    """The code could not be delivered; safe to retry later."""
    code = "DELIVERY_FAILED"
    status_code = 503
    default_message = "Could not deliver the verification code. Please try again."
    retryable = True


class InternalError(CredgateError):
    code = "INTERNAL_ERROR"
    status_code = 500
    default_message = "Internal server error"
