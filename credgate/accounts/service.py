"""
Credential Service
==================
Signup, verification, login, password and profile flows.

The service owns no transport: callers hand it validated request models (or
plain identifiers) and an authenticated subject where one is needed, and get
back users or session tokens. Every failure is a ``CredgateError``.
"""

from typing import List, Optional, Tuple

import structlog

from credgate.errors import (
    AlreadyExists,
    Conflict,
    CredgateError,
    DeliveryFailed,
    InvalidCredentials,
    NotFound,
    NotVerified,
    RateLimited,
    Unauthorized,
    ValidationError,
    VerificationMismatch,
)
from credgate.logging import mask_email, mask_phone
from credgate.otp import OtpChannel, OtpEngine, OtpPurpose
from credgate.password import (
    PasswordPolicy,
    dummy_hash,
    hash_password,
    verify_and_upgrade,
    verify_password,
)
from credgate.stores.base import UserStore
from credgate.tokens import TokenIssuer

from .models import User
from .schemas import (
    ChangePasswordRequest,
    ResetPasswordRequest,
    SignupRequest,
    UpdateProfileRequest,
    VerifyAccountRequest,
)

logger = structlog.get_logger(__name__)


class CredentialService:
    """
    Orchestrates the credential lifecycle.

    Args:
        users: User persistence
        otp: Engine used for every code issued or checked
        tokens: Session token issuer
        policy: Strength rules for new passwords
    """

    def __init__(
        self,
        users: UserStore,
        otp: OtpEngine,
        tokens: TokenIssuer,
        policy: Optional[PasswordPolicy] = None,
    ):
        self.users = users
        self.otp = otp
        self.tokens = tokens
        self.policy = policy or PasswordPolicy()

    # =========================================================================
    # Signup and verification
    # =========================================================================

    async def signup(self, request: SignupRequest) -> User:
        """
        Register an unverified account and send both verification codes.

        The user is saved before any code goes out. Both channels are always
        attempted; if either fails the first error is raised and the account
        stays in place so the caller can resend.
        """
        if request.password != request.confirm_password:
            raise ValidationError("Passwords do not match")
        if await self.users.exists_by_email(request.email):
            raise AlreadyExists("Email already registered")
        if await self.users.exists_by_phone(request.phone):
            raise AlreadyExists("Phone number already registered")
        self.policy.validate(request.password)

        user = User(
            email=request.email,
            phone=request.phone,
            password_hash=await hash_password(request.password),
            first_name=request.first_name,
            last_name=request.last_name,
            city=request.city,
        )
        user = await self.users.save(user)
        logger.info("User registered", user_id=user.id, email=mask_email(user.email))

        _, errors = await self._issue_codes(
            (OtpChannel.EMAIL, user.email, OtpPurpose.EMAIL_VERIFICATION),
            (OtpChannel.PHONE, user.phone, OtpPurpose.PHONE_VERIFICATION),
        )
        if errors:
            raise errors[0]
        return user

    async def _issue_codes(
        self,
        *targets: Tuple[OtpChannel, str, OtpPurpose],
    ) -> Tuple[List[OtpChannel], List[CredgateError]]:
        """
        Issue a code to every target, carrying on past failures.

        Returns:
            Channels a code was sent to, and the errors of the others in order
        """
        sent: List[OtpChannel] = []
        errors: List[CredgateError] = []
        for channel, identifier, purpose in targets:
            try:
                await self.otp.issue(identifier, channel, purpose)
            except (RateLimited, DeliveryFailed) as e:
                logger.warning(
                    "Verification code not sent",
                    channel=channel.value,
                    purpose=purpose.value,
                    reason=e.code,
                )
                errors.append(e)
            else:
                sent.append(channel)
        return sent, errors

    async def verify_account(self, request: VerifyAccountRequest) -> User:
        """
        Confirm both contact details with the codes sent at signup.

        The email code is checked first without using it up, then the phone
        code is verified, and only then is the email code consumed. A wrong
        phone code therefore leaves the email code valid for a retry. Both
        flags flip together, and only when both codes pass.

        Raises:
            VerificationMismatch: unknown email, or phone not on the account
        """
        user = await self.users.find_by_email(request.email)
        if user is None or user.phone != request.phone:
            logger.warning("Account verification mismatch", email=mask_email(request.email))
            raise VerificationMismatch()

        await self.otp.verify(
            user.email, OtpPurpose.EMAIL_VERIFICATION, request.email_otp, consume=False
        )
        await self.otp.verify(user.phone, OtpPurpose.PHONE_VERIFICATION, request.phone_otp)
        await self.otp.verify(user.email, OtpPurpose.EMAIL_VERIFICATION, request.email_otp)

        user.email_verified = True
        user.phone_verified = True
        user = await self.users.save(user)
        logger.info("Account verified", user_id=user.id)
        return user

    async def verify_email(self, email: str, code: str) -> User:
        """Confirm an email address on its own (after a profile change)."""
        user = await self.users.find_by_email(email)
        if user is None:
            raise VerificationMismatch()

        await self.otp.verify(email, OtpPurpose.EMAIL_VERIFICATION, code)
        user.email_verified = True
        user = await self.users.save(user)
        logger.info("Email verified", user_id=user.id)
        return user

    async def verify_phone(self, phone: str, code: str) -> User:
        """Confirm a phone number on its own (after a profile change)."""
        user = await self.users.find_by_phone(phone)
        if user is None:
            raise VerificationMismatch()

        await self.otp.verify(phone, OtpPurpose.PHONE_VERIFICATION, code)
        user.phone_verified = True
        user = await self.users.save(user)
        logger.info("Phone verified", user_id=user.id)
        return user

    async def resend_verification(self, email: str) -> List[OtpChannel]:
        """
        Re-issue codes for every channel of the account still unverified.

        A channel whose last code is still in its cooldown keeps that code
        and is skipped. Unknown emails get the same empty-handed success as
        fully verified accounts.

        Returns:
            Channels a code was sent to

        Raises:
            DeliveryFailed: a code could not be delivered
            RateLimited: every unverified channel is still in its cooldown
        """
        user = await self.users.find_by_email(email)
        if user is None:
            logger.info("Verification resend for unknown email", email=mask_email(email))
            return []

        targets = []
        if not user.email_verified:
            targets.append((OtpChannel.EMAIL, user.email, OtpPurpose.EMAIL_VERIFICATION))
        if not user.phone_verified:
            targets.append((OtpChannel.PHONE, user.phone, OtpPurpose.PHONE_VERIFICATION))

        sent, errors = await self._issue_codes(*targets)
        for error in errors:
            if isinstance(error, DeliveryFailed):
                raise error
        if errors and not sent:
            raise errors[0]
        return sent

    # =========================================================================
    # Login
    # =========================================================================

    async def login(self, email: str, password: str) -> str:
        """
        Exchange email and password for a session token.

        A legacy bcrypt hash that verifies is replaced with an Argon2id hash.

        Raises:
            InvalidCredentials: unknown email or wrong password (indistinguishable)
            NotVerified: credentials are right but the account is unverified
        """
        user = await self.users.find_by_email(email)

        # Unknown emails pay for one hash check too, so timing matches
        stored_hash = user.password_hash if user is not None else await dummy_hash()
        ok, upgraded_hash = await verify_and_upgrade(password, stored_hash)
        if user is None or not ok:
            logger.info("Login failed", email=mask_email(email))
            raise InvalidCredentials()

        if not user.is_verified:
            raise NotVerified()

        if upgraded_hash is not None:
            await self._upgrade_hash(user, upgraded_hash)

        logger.info("Login succeeded", user_id=user.id)
        return self.tokens.mint(user.email)

    async def _upgrade_hash(self, user: User, new_hash: str) -> None:
        user.password_hash = new_hash
        try:
            await self.users.save(user)
        except Conflict:
            # Next login retries the upgrade
            logger.warning("Password hash upgrade skipped", user_id=user.id)
            return
        logger.info("Password hash upgraded to argon2id", user_id=user.id)

    async def send_phone_login_otp(self, phone: str) -> None:
        """
        Send a login code to a registered, verified phone.

        Raises:
            InvalidCredentials: phone not registered
            NotVerified: account not fully verified
        """
        user = await self.users.find_by_phone(phone)
        if user is None:
            logger.info("Phone login requested for unknown phone", phone=mask_phone(phone))
            raise InvalidCredentials()
        if not user.is_verified:
            raise NotVerified()

        await self.otp.issue_phone(phone, OtpPurpose.PHONE_LOGIN)

    async def verify_phone_login(self, phone: str, code: str) -> str:
        """Exchange a phone login code for a session token."""
        await self.otp.verify(phone, OtpPurpose.PHONE_LOGIN, code)

        # The account may have changed while the code was outstanding
        user = await self.users.find_by_phone(phone)
        if user is None:
            raise InvalidCredentials()
        if not user.is_verified:
            raise NotVerified()

        logger.info("Phone login succeeded", user_id=user.id)
        return self.tokens.mint(user.email)

    # =========================================================================
    # Passwords
    # =========================================================================

    async def change_password(self, subject: str, request: ChangePasswordRequest) -> None:
        """
        Change the password of an authenticated user.

        Raises:
            Unauthorized: subject no longer resolves to a user
            ValidationError: wrong old password, confirmation mismatch or reuse
            PolicyViolation: new password too weak
        """
        user = await self.get_user(subject)

        if not await verify_password(request.old_password, user.password_hash):
            logger.info("Password change rejected", user_id=user.id, reason="old_password")
            raise ValidationError("Old password is incorrect")
        if request.confirm_password is not None and request.confirm_password != request.new_password:
            raise ValidationError("Passwords do not match")
        if request.new_password == request.old_password:
            raise ValidationError("New password must be different from the old password")
        self.policy.validate(request.new_password)

        user.password_hash = await hash_password(request.new_password)
        await self.users.save(user)
        logger.info("Password changed", user_id=user.id)

    async def forgot_password(self, email: str) -> None:
        """
        Send a reset code if the email is registered.

        Always returns normally so the response never reveals whether the
        account exists.
        """
        if not await self.users.exists_by_email(email):
            logger.info("Password reset requested for unknown email", email=mask_email(email))
            return

        try:
            await self.otp.issue_email(email, OtpPurpose.FORGOT_PASSWORD)
        except (RateLimited, DeliveryFailed) as e:
            logger.warning("Password reset code not sent", email=mask_email(email), reason=e.code)

    async def reset_password(self, request: ResetPasswordRequest) -> None:
        """
        Set a new password using a code from ``forgot_password``.

        Raises:
            ValidationError: confirmation mismatch (checked before the code)
            OtpError: the code did not verify
            PolicyViolation: new password too weak
            NotFound: the account disappeared after the code was issued
        """
        if request.new_password != request.confirm_password:
            raise ValidationError("Passwords do not match")

        await self.otp.verify(request.email, OtpPurpose.FORGOT_PASSWORD, request.otp)
        self.policy.validate(request.new_password)

        user = await self.users.find_by_email(request.email)
        if user is None:
            raise NotFound("User not found")

        user.password_hash = await hash_password(request.new_password)
        await self.users.save(user)
        logger.info("Password reset", user_id=user.id)

    # =========================================================================
    # Profile and sessions
    # =========================================================================

    async def update_profile(self, subject: str, request: UpdateProfileRequest) -> User:
        """
        Apply profile changes for an authenticated user.

        Name and city are applied as given. A new email or phone is checked
        against other accounts before anything changes, marks that channel
        unverified and gets a fresh verification code once the user is saved.
        After an email change the old subject no longer resolves, so the
        client has to log in again.
        """
        user = await self.get_user(subject)

        new_email = request.email if request.email and request.email != user.email else None
        new_phone = request.phone if request.phone and request.phone != user.phone else None

        if new_email and await self.users.exists_by_email(new_email):
            raise AlreadyExists("Email already in use")
        if new_phone and await self.users.exists_by_phone(new_phone):
            raise AlreadyExists("Phone number already in use")

        if request.first_name is not None:
            user.first_name = request.first_name
        if request.last_name is not None:
            user.last_name = request.last_name
        if request.city is not None:
            user.city = request.city
        if new_email:
            user.email = new_email
            user.email_verified = False
        if new_phone:
            user.phone = new_phone
            user.phone_verified = False

        user = await self.users.save(user)
        logger.info(
            "Profile updated",
            user_id=user.id,
            email_changed=bool(new_email),
            phone_changed=bool(new_phone),
        )

        targets = []
        if new_email:
            targets.append((OtpChannel.EMAIL, new_email, OtpPurpose.EMAIL_VERIFICATION))
        if new_phone:
            targets.append((OtpChannel.PHONE, new_phone, OtpPurpose.PHONE_VERIFICATION))
        _, errors = await self._issue_codes(*targets)
        if errors:
            raise errors[0]
        return user

    async def refresh_token(self, subject: str) -> str:
        """Mint a fresh token for a subject that still exists."""
        user = await self.get_user(subject)
        return self.tokens.mint(user.email)

    async def get_user(self, subject: str) -> User:
        """
        Resolve a token subject to its user.

        Raises:
            Unauthorized: no user with that email
        """
        user = await self.users.find_by_email(subject)
        if user is None:
            raise Unauthorized()
        return user
