"""
SQL Stores
==========
SQLAlchemy async implementations of the challenge and user stores.

Challenge updates are conditional ``UPDATE ... WHERE attempts = :expected AND
NOT verified`` statements, so concurrent writers across processes can't both
win. User updates use an optimistic ``version`` column.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Mapped, mapped_column
import structlog

from credgate.accounts.models import User, utcnow
from credgate.database import Base, Database
from credgate.errors import AlreadyExists, Conflict
from credgate.otp.models import OtpChallenge, OtpChannel, OtpPurpose

from .base import ChallengeStore, UserStore

logger = structlog.get_logger(__name__)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo; everything is stored in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    phone: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    phone_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=1)

    def to_model(self) -> User:
        return User(
            id=self.id,
            email=self.email,
            phone=self.phone,
            password_hash=self.password_hash,
            email_verified=self.email_verified,
            phone_verified=self.phone_verified,
            first_name=self.first_name,
            last_name=self.last_name,
            city=self.city,
            created_at=_aware(self.created_at),
            updated_at=_aware(self.updated_at),
            version=self.version,
        )


class OtpChallengeRow(Base):
    __tablename__ = "otp_challenges"
    __table_args__ = (
        Index("ix_otp_challenges_key", "identifier", "purpose", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    identifier: Mapped[str] = mapped_column(String(255))
    channel: Mapped[str] = mapped_column(String(10))
    purpose: Mapped[str] = mapped_column(String(32))
    code_hash: Mapped[str] = mapped_column(String(64))
    salt: Mapped[str] = mapped_column(String(32))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    attempts: Mapped[int] = mapped_column(Integer, default=0)

    @classmethod
    def from_model(cls, challenge: OtpChallenge) -> "OtpChallengeRow":
        return cls(
            id=challenge.id,
            identifier=challenge.identifier,
            channel=challenge.channel.value,
            purpose=challenge.purpose.value,
            code_hash=challenge.code_hash,
            salt=challenge.salt,
            created_at=challenge.created_at,
            expires_at=challenge.expires_at,
            verified=challenge.verified,
            attempts=challenge.attempts,
        )

    def to_model(self) -> OtpChallenge:
        return OtpChallenge(
            id=self.id,
            identifier=self.identifier,
            channel=OtpChannel(self.channel),
            purpose=OtpPurpose(self.purpose),
            code_hash=self.code_hash,
            salt=self.salt,
            created_at=_aware(self.created_at),
            expires_at=_aware(self.expires_at),
            verified=self.verified,
            attempts=self.attempts,
        )


class SqlChallengeStore(ChallengeStore):
    """Challenges in the ``otp_challenges`` table."""

    def __init__(self, db: Database):
        self.db = db

    async def save(self, challenge: OtpChallenge) -> None:
        async with self.db.session() as session:
            session.add(OtpChallengeRow.from_model(challenge))

    async def most_recent(
        self,
        identifier: str,
        purpose: OtpPurpose,
    ) -> Optional[OtpChallenge]:
        stmt = (
            select(OtpChallengeRow)
            .where(
                OtpChallengeRow.identifier == identifier,
                OtpChallengeRow.purpose == purpose.value,
            )
            .order_by(OtpChallengeRow.created_at.desc())
            .limit(1)
        )
        async with self.db.session() as session:
            row = (await session.execute(stmt)).scalars().first()
            return row.to_model() if row else None

    async def update(self, challenge: OtpChallenge, expected_attempts: int) -> bool:
        stmt = (
            update(OtpChallengeRow)
            .where(
                OtpChallengeRow.id == challenge.id,
                OtpChallengeRow.attempts == expected_attempts,
                OtpChallengeRow.verified.is_(False),
            )
            .values(attempts=challenge.attempts, verified=challenge.verified)
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def delete(self, challenge_id: str) -> None:
        async with self.db.session() as session:
            await session.execute(
                delete(OtpChallengeRow).where(OtpChallengeRow.id == challenge_id)
            )


class SqlUserStore(UserStore):
    """Users in the ``users`` table."""

    def __init__(self, db: Database):
        self.db = db

    async def _find_one(self, *criteria) -> Optional[User]:
        async with self.db.session() as session:
            row = (await session.execute(select(UserRow).where(*criteria))).scalars().first()
            return row.to_model() if row else None

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self._find_one(UserRow.email == email)

    async def find_by_phone(self, phone: str) -> Optional[User]:
        return await self._find_one(UserRow.phone == phone)

    async def save(self, user: User) -> User:
        try:
            if user.version == 0:
                await self._insert(user)
            else:
                await self._update(user)
        except IntegrityError:
            logger.info("User save hit a uniqueness constraint", user_id=user.id)
            raise AlreadyExists()
        return user

    async def _insert(self, user: User) -> None:
        async with self.db.session() as session:
            session.add(
                UserRow(
                    id=user.id,
                    email=user.email,
                    phone=user.phone,
                    password_hash=user.password_hash,
                    email_verified=user.email_verified,
                    phone_verified=user.phone_verified,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    city=user.city,
                    created_at=user.created_at,
                    updated_at=None,
                    version=1,
                )
            )
        user.version = 1

    async def _update(self, user: User) -> None:
        now = utcnow()
        stmt = (
            update(UserRow)
            .where(UserRow.id == user.id, UserRow.version == user.version)
            .values(
                email=user.email,
                phone=user.phone,
                password_hash=user.password_hash,
                email_verified=user.email_verified,
                phone_verified=user.phone_verified,
                first_name=user.first_name,
                last_name=user.last_name,
                city=user.city,
                updated_at=now,
                version=user.version + 1,
            )
        )
        async with self.db.session() as session:
            result = await session.execute(stmt)
            if result.rowcount != 1:
                raise Conflict("Account was modified concurrently. Please retry.")
        user.version += 1
        user.updated_at = now
