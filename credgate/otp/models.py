"""
OTP Models
==========
Data models and enums for OTP challenges.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict
import uuid


class OtpChannel(str, Enum):
    """Where a challenge's code is delivered."""
    EMAIL = "email"
    PHONE = "phone"


class OtpPurpose(str, Enum):
    """Why a challenge was issued. Purposes never satisfy each other."""
    EMAIL_VERIFICATION = "email_verification"
    PHONE_VERIFICATION = "phone_verification"
    PHONE_LOGIN = "phone_login"
    FORGOT_PASSWORD = "forgot_password"


@dataclass
class OTPConfig:
    """Configuration for OTP issuance and verification."""
    ttl_minutes: int = 5
    max_attempts: int = 3
    cooldown_minutes: int = 1  # Min time between codes for one key
    pepper: str = ""
    # Account verification tolerates more typos than login/reset
    max_attempts_by_purpose: Dict[OtpPurpose, int] = field(
        default_factory=lambda: {
            OtpPurpose.EMAIL_VERIFICATION: 5,
            OtpPurpose.PHONE_VERIFICATION: 5,
        }
    )

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self.ttl_minutes)

    @property
    def cooldown(self) -> timedelta:
        return timedelta(minutes=self.cooldown_minutes)

    def attempts_for(self, purpose: OtpPurpose) -> int:
        return self.max_attempts_by_purpose.get(purpose, self.max_attempts)


@dataclass
class OtpChallenge:
    """A single issued code. Only the salted hash of the code is kept."""
    identifier: str
    channel: OtpChannel
    purpose: OtpPurpose
    code_hash: str
    salt: str
    created_at: datetime
    expires_at: datetime
    verified: bool = False
    attempts: int = 0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def in_cooldown(self, now: datetime, cooldown: timedelta) -> bool:
        """True while this challenge still blocks a reissue for its key."""
        if self.verified or self.is_expired(now):
            return False
        return now - self.created_at < cooldown

    def retry_after(self, now: datetime, cooldown: timedelta) -> int:
        """Whole seconds until the cooldown elapses."""
        remaining = (self.created_at + cooldown) - now
        return max(1, int(remaining.total_seconds() + 0.999))

    @property
    def key(self) -> str:
        return challenge_key(self.identifier, self.purpose)


def challenge_key(identifier: str, purpose: OtpPurpose) -> str:
    """Lock/lookup key for an (identifier, purpose) pair."""
    return f"otp:{purpose.value}:{identifier}"

