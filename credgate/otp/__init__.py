"""
OTP Engine
==========
One-time passcode issuance and verification.
"""

from .models import OTPConfig, OtpChallenge, OtpChannel, OtpPurpose, challenge_key
from .hashing import OTP_MAX, OTP_MIN, generate_otp, generate_salt, hash_otp, verify_otp_hash
from .locks import KeyedLock
from .engine import OtpEngine

__all__ = [
    # Models
    "OTPConfig",
    "OtpChallenge",
    "OtpChannel",
    "OtpPurpose",
    "challenge_key",
    # Hashing
    "OTP_MIN",
    "OTP_MAX",
    "generate_otp",
    "generate_salt",
    "hash_otp",
    "verify_otp_hash",
    # Engine
    "KeyedLock",
    "OtpEngine",
]
