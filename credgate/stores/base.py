"""
Store Interfaces
================
Persistence contracts the OTP engine and credential service depend on.
"""

from abc import ABC, abstractmethod
from typing import Optional

from credgate.accounts.models import User
from credgate.otp.models import OtpChallenge, OtpPurpose


class ChallengeStore(ABC):
    """
    Storage for OTP challenges.

    Implementations must return the newest challenge for a key regardless of
    its state (verified, expired, exhausted); the engine decides what that
    state means.
    """

    @abstractmethod
    async def save(self, challenge: OtpChallenge) -> None:
        """Insert a newly issued challenge."""

    @abstractmethod
    async def most_recent(
        self,
        identifier: str,
        purpose: OtpPurpose,
    ) -> Optional[OtpChallenge]:
        """Newest challenge by creation time for (identifier, purpose), or None."""

    @abstractmethod
    async def update(self, challenge: OtpChallenge, expected_attempts: int) -> bool:
        """
        Conditionally persist ``attempts`` and ``verified`` of a challenge.

        The write only applies if the stored row still has
        ``attempts == expected_attempts`` and ``verified == False``.

        Returns:
            True if the row was updated, False if another writer got there first
        """

    @abstractmethod
    async def delete(self, challenge_id: str) -> None:
        """Remove a challenge (rollback of an undelivered code)."""


class UserStore(ABC):
    """Storage for user records."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    async def find_by_phone(self, phone: str) -> Optional[User]:
        ...

    async def exists_by_email(self, email: str) -> bool:
        return await self.find_by_email(email) is not None

    async def exists_by_phone(self, phone: str) -> bool:
        return await self.find_by_phone(phone) is not None

    @abstractmethod
    async def save(self, user: User) -> User:
        """
        Insert a new user (``version == 0``) or update an existing one.

        Updates are optimistic: they apply only if the stored version equals
        ``user.version``, after which the version is incremented.

        Raises:
            AlreadyExists: email or phone taken by another row
            Conflict: the row changed since it was read
        """
