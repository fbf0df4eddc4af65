"""
OTP Engine
==========
Issues and verifies one-time passcodes bound to an identifier and purpose.

Each (identifier, purpose) pair is an independent state machine:

    none -> issued -> verified | expired | attempts exhausted

Only the newest challenge for a key can succeed. Issuing again supersedes the
previous challenge once the cooldown has elapsed.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Optional

import structlog

from credgate.errors import (
    Conflict,
    DeliveryFailed,
    OtpAlreadyUsed,
    OtpAttemptsExhausted,
    OtpExpired,
    OtpInvalid,
    OtpNotFound,
    RateLimited,
)
from credgate.logging import mask_identifier

from .hashing import generate_otp, generate_salt, hash_otp, verify_otp_hash
from .locks import KeyedLock
from .models import OTPConfig, OtpChallenge, OtpChannel, OtpPurpose, challenge_key

if TYPE_CHECKING:
    from credgate.delivery.base import CodeSender
    from credgate.stores.base import ChallengeStore

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OtpEngine:
    """
    OTP lifecycle on top of a ChallengeStore and a CodeSender.

    All work on one key runs under a per-key lock. Store writes are also
    conditional, so a store shared with another writer still cannot lose an
    attempt increment.
    """

    # Re-reads after a failed conditional update
    MAX_UPDATE_RETRIES = 3

    def __init__(
        self,
        store: "ChallengeStore",
        sender: "CodeSender",
        config: Optional[OTPConfig] = None,
        clock: Optional[Clock] = None,
        locks: Optional[KeyedLock] = None,
    ):
        self.store = store
        self.sender = sender
        self.config = config or OTPConfig()
        self._clock = clock or _utcnow
        self._locks = locks or KeyedLock()

    async def issue(
        self,
        identifier: str,
        channel: OtpChannel,
        purpose: OtpPurpose,
    ) -> OtpChallenge:
        """
        Create, persist and deliver a new challenge.

        Args:
            identifier: Normalized email or phone number
            channel: Which sender method delivers the code
            purpose: What a successful verification will authorize

        Returns:
            The stored challenge (the raw code only ever goes to the sender)

        Raises:
            RateLimited: a live challenge for this key is still in its cooldown
            DeliveryFailed: the sender failed; nothing was persisted
        """
        async with self._locks.hold(challenge_key(identifier, purpose)):
            now = self._clock()
            latest = await self.store.most_recent(identifier, purpose)
            if latest is not None and latest.in_cooldown(now, self.config.cooldown):
                retry_after = latest.retry_after(now, self.config.cooldown)
                logger.warning(
                    "OTP requested during cooldown",
                    identifier=mask_identifier(identifier),
                    purpose=purpose.value,
                    retry_after=retry_after,
                )
                raise RateLimited(retry_after, self.config.cooldown_minutes)

            code = generate_otp()
            salt = generate_salt()
            challenge = OtpChallenge(
                identifier=identifier,
                channel=channel,
                purpose=purpose,
                code_hash=hash_otp(code, salt, self.config.pepper),
                salt=salt,
                created_at=now,
                expires_at=now + self.config.ttl,
            )
            await self.store.save(challenge)
            await self._deliver(challenge, code)

            logger.info(
                "OTP issued",
                challenge_id=challenge.id,
                identifier=mask_identifier(identifier),
                channel=channel.value,
                purpose=purpose.value,
                expires_in=self.config.ttl_minutes * 60,
            )
            return challenge

    async def issue_email(self, email: str, purpose: OtpPurpose) -> OtpChallenge:
        return await self.issue(email, OtpChannel.EMAIL, purpose)

    async def issue_phone(self, phone: str, purpose: OtpPurpose) -> OtpChallenge:
        return await self.issue(phone, OtpChannel.PHONE, purpose)

    async def _deliver(self, challenge: OtpChallenge, code: str) -> None:
        try:
            if challenge.channel == OtpChannel.EMAIL:
                result = await self.sender.send_email_code(challenge.identifier, code)
            else:
                result = await self.sender.send_phone_code(challenge.identifier, code)
        except Exception as e:
            logger.exception(
                "OTP sender raised",
                challenge_id=challenge.id,
                identifier=mask_identifier(challenge.identifier),
            )
            await self.store.delete(challenge.id)
            raise DeliveryFailed() from e

        if not result.success:
            logger.error(
                "OTP delivery failed",
                challenge_id=challenge.id,
                identifier=mask_identifier(challenge.identifier),
                provider=result.provider,
                error_code=result.error_code,
            )
            await self.store.delete(challenge.id)
            raise DeliveryFailed()

    async def verify(
        self,
        identifier: str,
        purpose: OtpPurpose,
        code: str,
        consume: bool = True,
    ) -> OtpChallenge:
        """
        Check a submitted code against the newest challenge for the key.

        Checks run in order: missing, already used, expired, attempts
        exhausted, then the constant-time comparison. A wrong code consumes
        one attempt.

        Args:
            consume: Mark the challenge verified on a match. With False a
                correct code leaves the challenge usable, so a flow that
                needs several codes can consume them only once all match.

        Returns:
            The challenge, marked verified when ``consume`` is set

        Raises:
            OtpNotFound, OtpAlreadyUsed, OtpExpired, OtpAttemptsExhausted, OtpInvalid
            Conflict: the challenge kept changing under concurrent writers
        """
        max_attempts = self.config.attempts_for(purpose)

        async with self._locks.hold(challenge_key(identifier, purpose)):
            for _ in range(self.MAX_UPDATE_RETRIES + 1):
                challenge = await self.store.most_recent(identifier, purpose)
                self._check_usable(challenge, max_attempts)

                expected_attempts = challenge.attempts
                matched = verify_otp_hash(
                    code or "",
                    challenge.salt,
                    challenge.code_hash,
                    self.config.pepper,
                )
                if matched and not consume:
                    logger.info(
                        "OTP checked",
                        challenge_id=challenge.id,
                        identifier=mask_identifier(identifier),
                        purpose=purpose.value,
                    )
                    return challenge

                if matched:
                    challenge.verified = True
                else:
                    challenge.attempts += 1

                if not await self.store.update(challenge, expected_attempts):
                    logger.warning(
                        "OTP challenge changed concurrently, re-reading",
                        challenge_id=challenge.id,
                    )
                    continue

                if matched:
                    logger.info(
                        "OTP verified",
                        challenge_id=challenge.id,
                        identifier=mask_identifier(identifier),
                        purpose=purpose.value,
                    )
                    return challenge

                remaining = max(0, max_attempts - challenge.attempts)
                logger.warning(
                    "Invalid OTP submitted",
                    challenge_id=challenge.id,
                    identifier=mask_identifier(identifier),
                    purpose=purpose.value,
                    remaining=remaining,
                )
                raise OtpInvalid(remaining)

        logger.error("OTP verification gave up after retries", identifier=mask_identifier(identifier))
        raise Conflict("Verification could not be completed. Please retry.")

    def _check_usable(self, challenge: Optional[OtpChallenge], max_attempts: int) -> None:
        if challenge is None:
            raise OtpNotFound()
        if challenge.verified:
            raise OtpAlreadyUsed()
        if challenge.is_expired(self._clock()):
            raise OtpExpired(self.config.ttl_minutes)
        if challenge.attempts >= max_attempts:
            logger.warning("OTP attempts exhausted", challenge_id=challenge.id)
            raise OtpAttemptsExhausted()
