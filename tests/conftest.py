"""
Shared Test Fixtures
====================
Fake clock, recording sender and a fully wired in-memory service.
"""

import os

# Cheap Argon2 parameters; must be set before the hasher is first built
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")
os.environ.setdefault("ARGON2_PARALLELISM", "1")

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Set, Tuple

import pytest

from credgate.accounts.schemas import SignupRequest, VerifyAccountRequest
from credgate.accounts.service import CredentialService
from credgate.delivery import CodeSender, DeliveryResult
from credgate.otp import OTPConfig, OtpChannel, OtpEngine
from credgate.password import PasswordPolicy
from credgate.stores import InMemoryChallengeStore, InMemoryUserStore
from credgate.tokens import JwtTokenBackend, TokenIssuer

TEST_SECRET = "test-secret-key-for-credgate-tests"
PASSWORD = "Str0ng!Pass"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingCodeSender(CodeSender):
    """Keeps every code it is asked to send; can be told to fail (per channel) or raise."""

    name = "recording"

    def __init__(self):
        super().__init__()
        self.sent: List[Tuple[OtpChannel, str, str]] = []
        self.fail = False
        self.fail_channels: Set[OtpChannel] = set()
        self.raise_error = False

    async def _record(self, channel: OtpChannel, identifier: str, code: str) -> DeliveryResult:
        if self.raise_error:
            raise ConnectionError("provider unreachable")
        if self.fail or channel in self.fail_channels:
            return DeliveryResult(success=False, provider=self.name, error_code="REJECTED")
        self.sent.append((channel, identifier, code))
        return DeliveryResult(success=True, provider=self.name, provider_message_id=str(len(self.sent)))

    async def send_email_code(self, email: str, code: str) -> DeliveryResult:
        return await self._record(OtpChannel.EMAIL, email, code)

    async def send_phone_code(self, phone: str, code: str) -> DeliveryResult:
        return await self._record(OtpChannel.PHONE, phone, code)

    def codes_for(self, identifier: str) -> List[str]:
        return [code for _, target, code in self.sent if target == identifier]

    def last_code(self, identifier: str) -> str:
        codes = self.codes_for(identifier)
        assert codes, f"no code sent to {identifier}"
        return codes[-1]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sender():
    return RecordingCodeSender()


@pytest.fixture
def otp_config():
    return OTPConfig()


@pytest.fixture
def challenge_store():
    return InMemoryChallengeStore()


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def engine(challenge_store, sender, otp_config, clock):
    return OtpEngine(challenge_store, sender, otp_config, clock=clock)


@pytest.fixture
def issuer():
    return TokenIssuer(JwtTokenBackend(TEST_SECRET), ttl=timedelta(minutes=60))


@pytest.fixture
def service(user_store, engine, issuer):
    return CredentialService(user_store, engine, issuer, PasswordPolicy())


@pytest.fixture
def signup_request():
    def _build(email="alice@example.com", phone="+14155552671", password=PASSWORD, **extra):
        extra.setdefault("confirm_password", password)
        return SignupRequest(email=email, phone=phone, password=password, **extra)

    return _build


@pytest.fixture
def verified_user(service, sender, signup_request):
    """Async factory: sign up and verify an account, return the user."""

    async def _create(email="alice@example.com", phone="+14155552671", password=PASSWORD):
        await service.signup(signup_request(email=email, phone=phone, password=password))
        return await service.verify_account(
            VerifyAccountRequest(
                email=email,
                phone=phone,
                email_otp=sender.last_code(email),
                phone_otp=sender.last_code(phone),
            )
        )

    return _create
