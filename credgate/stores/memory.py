"""
In-Memory Stores
================
Dict-backed stores for development and testing.

For development and testing only.
Use the SQL stores in production.
"""

from dataclasses import replace
from typing import Dict, List, Optional

from credgate.accounts.models import User, utcnow
from credgate.errors import AlreadyExists, Conflict
from credgate.otp.models import OtpChallenge, OtpPurpose, challenge_key

from .base import ChallengeStore, UserStore


class InMemoryChallengeStore(ChallengeStore):
    """Challenges grouped by key, oldest first."""

    def __init__(self):
        self._by_key: Dict[str, List[OtpChallenge]] = {}

    async def save(self, challenge: OtpChallenge) -> None:
        self._by_key.setdefault(challenge.key, []).append(replace(challenge))

    async def most_recent(
        self,
        identifier: str,
        purpose: OtpPurpose,
    ) -> Optional[OtpChallenge]:
        challenges = self._by_key.get(challenge_key(identifier, purpose))
        if not challenges:
            return None
        # Ties go to the most recently saved challenge
        newest = max(reversed(challenges), key=lambda c: c.created_at)
        # Hand out copies so callers can't mutate stored state without update()
        return replace(newest)

    async def update(self, challenge: OtpChallenge, expected_attempts: int) -> bool:
        for stored in self._by_key.get(challenge.key, []):
            if stored.id != challenge.id:
                continue
            if stored.verified or stored.attempts != expected_attempts:
                return False
            stored.attempts = challenge.attempts
            stored.verified = challenge.verified
            return True
        return False

    async def delete(self, challenge_id: str) -> None:
        for key, challenges in list(self._by_key.items()):
            remaining = [c for c in challenges if c.id != challenge_id]
            if remaining:
                self._by_key[key] = remaining
            else:
                del self._by_key[key]

    def count(self) -> int:
        """Total stored challenges (for tests and diagnostics)."""
        return sum(len(c) for c in self._by_key.values())


class InMemoryUserStore(UserStore):
    """Users indexed by id with email/phone lookups."""

    def __init__(self):
        self._users: Dict[str, User] = {}

    async def find_by_email(self, email: str) -> Optional[User]:
        for user in self._users.values():
            if user.email == email:
                return replace(user)
        return None

    async def find_by_phone(self, phone: str) -> Optional[User]:
        for user in self._users.values():
            if user.phone == phone:
                return replace(user)
        return None

    async def save(self, user: User) -> User:
        for other in self._users.values():
            if other.id == user.id:
                continue
            if other.email == user.email or other.phone == user.phone:
                raise AlreadyExists()

        stored = self._users.get(user.id)
        if user.version == 0:
            if stored is not None:
                raise Conflict()
        elif stored is None or stored.version != user.version:
            raise Conflict("Account was modified concurrently. Please retry.")

        user.version += 1
        if user.version > 1:
            user.updated_at = utcnow()
        self._users[user.id] = replace(user)
        return user
