"""
credgate
========
OTP challenges, password policy and session tokens for an account system.
"""

__version__ = "0.1.0"

# Errors
from credgate.errors import (
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
    OtpInvalid,
    OtpExpired,
    OtpAlreadyUsed,
    OtpAttemptsExhausted,
    DeliveryFailed,
    InternalError,
)

# Configuration
from credgate.config import Settings, TokenConfig, DeliveryConfig, SMTPConfig, TwilioConfig

# OTP
from credgate.otp import OTPConfig, OtpChallenge, OtpChannel, OtpPurpose, OtpEngine, KeyedLock

# Passwords
from credgate.password import PasswordPolicy, PolicyRule, hash_password, verify_password

# Tokens
from credgate.tokens import TokenBackend, JwtTokenBackend, TokenIssuer

# Delivery
from credgate.delivery import CodeSender, DeliveryResult, build_code_sender

# Stores
from credgate.stores import ChallengeStore, UserStore, InMemoryChallengeStore, InMemoryUserStore

# Accounts
from credgate.accounts import User
from credgate.accounts.service import CredentialService

# Logging
from credgate.logging import setup_logging, mask_email, mask_phone

__all__ = [
    "__version__",
    # Errors
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
    "OtpInvalid",
    "OtpExpired",
    "OtpAlreadyUsed",
    "OtpAttemptsExhausted",
    "DeliveryFailed",
    "InternalError",
    # Configuration
    "Settings",
    "TokenConfig",
    "DeliveryConfig",
    "SMTPConfig",
    "TwilioConfig",
    # OTP
    "OTPConfig",
    "OtpChallenge",
    "OtpChannel",
    "OtpPurpose",
    "OtpEngine",
    "KeyedLock",
    # Passwords
    "PasswordPolicy",
    "PolicyRule",
    "hash_password",
    "verify_password",
    # Tokens
    "TokenBackend",
    "JwtTokenBackend",
    "TokenIssuer",
    # Delivery
    "CodeSender",
    "DeliveryResult",
    "build_code_sender",
    # Stores
    "ChallengeStore",
    "UserStore",
    "InMemoryChallengeStore",
    "InMemoryUserStore",
    # Accounts
    "User",
    "CredentialService",
    # Logging
    "setup_logging",
    "mask_email",
    "mask_phone",
]
