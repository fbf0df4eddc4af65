"""
Account Models
==============
The user record the credential flows read and mutate.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class User:
    """An account. Email and phone are each unique across all users."""
    email: str
    phone: str
    password_hash: str
    email_verified: bool = False
    phone_verified: bool = False
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    city: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None
    # Optimistic lock; 0 means never persisted
    version: int = 0

    @property
    def is_verified(self) -> bool:
        return self.email_verified and self.phone_verified
