"""
OTP Hashing Utilities
=====================
Secure generation, hashing and verification of numeric OTP codes.
"""

import hashlib
import hmac
import secrets

OTP_MIN = 100000
OTP_MAX = 999999


def generate_otp() -> str:
    """
    Generate a 6-digit OTP.

    Drawn uniformly from [100000, 999999] with a CSPRNG, so codes never have a
    leading zero.

    Returns:
        OTP string
    """
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def generate_salt() -> str:
    """Generate a random salt for OTP hashing."""
    return secrets.token_hex(16)


def hash_otp(otp: str, salt: str, pepper: str = "") -> str:
    """
    Hash an OTP with salt and an optional server-side pepper using SHA-256.

    Args:
        otp: Plain OTP
        salt: Per-challenge random salt
        pepper: Secret shared by all challenges, never stored with them

    Returns:
        Hex digest
    """
    return hashlib.sha256(f"{pepper}:{salt}:{otp}".encode()).hexdigest()


def verify_otp_hash(otp: str, salt: str, stored_hash: str, pepper: str = "") -> bool:
    """
    Verify an OTP against its hash.

    Uses constant-time comparison to prevent timing attacks.

    Args:
        otp: User-provided OTP
        salt: Original salt
        stored_hash: Stored hash to compare
        pepper: Pepper used when hashing

    Returns:
        True if OTP matches
    """
    computed_hash = hash_otp(otp, salt, pepper)
    return hmac.compare_digest(computed_hash, stored_hash)
