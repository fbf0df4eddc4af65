"""
Auth Router
===========
HTTP endpoints for the credential flows.

Handlers only translate between JSON and the service; every rule lives in
``CredentialService``. Errors propagate to the handlers installed by
``credgate.errors.http``.
"""

from fastapi import APIRouter, Depends, status

from credgate.accounts.schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    PhoneLoginRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    SignupRequest,
    TokenResponse,
    UpdateProfileRequest,
    UserResponse,
    VerifyAccountRequest,
    VerifyEmailRequest,
    VerifyPhoneLoginRequest,
    VerifyPhoneRequest,
)
from credgate.accounts.service import CredentialService

from .deps import subject_dependency

FORGOT_PASSWORD_MESSAGE = "If the email is registered, a reset code has been sent"


def create_auth_router(service: CredentialService, prefix: str = "/api/v1/auth") -> APIRouter:
    """
    Build the auth router around one service instance.

    Args:
        service: Credential service wired by the composition root
        prefix: Mount path for every endpoint
    """
    router = APIRouter(prefix=prefix, tags=["Auth"])
    current_subject = subject_dependency(service.tokens)

    def token_response(token: str) -> TokenResponse:
        return TokenResponse(
            access_token=token,
            expires_in=int(service.tokens.ttl.total_seconds()),
        )

    # -------------------------------------------------------------------------
    # Signup and verification
    # -------------------------------------------------------------------------

    @router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    async def signup(request: SignupRequest) -> UserResponse:
        user = await service.signup(request)
        return UserResponse.from_user(user)

    @router.post("/verify", response_model=UserResponse)
    async def verify_account(request: VerifyAccountRequest) -> UserResponse:
        user = await service.verify_account(request)
        return UserResponse.from_user(user)

    @router.post("/verify/email", response_model=UserResponse)
    async def verify_email(request: VerifyEmailRequest) -> UserResponse:
        user = await service.verify_email(request.email, request.otp)
        return UserResponse.from_user(user)

    @router.post("/verify/phone", response_model=UserResponse)
    async def verify_phone(request: VerifyPhoneRequest) -> UserResponse:
        user = await service.verify_phone(request.phone, request.otp)
        return UserResponse.from_user(user)

    @router.post("/verify/resend", response_model=MessageResponse)
    async def resend_verification(request: ResendVerificationRequest) -> MessageResponse:
        await service.resend_verification(request.email)
        return MessageResponse(message="Verification codes sent for any unverified contact details")

    # -------------------------------------------------------------------------
    # Login
    # -------------------------------------------------------------------------

    @router.post("/login", response_model=TokenResponse)
    async def login(request: LoginRequest) -> TokenResponse:
        return token_response(await service.login(request.email, request.password))

    @router.post("/login/phone", response_model=MessageResponse)
    async def send_phone_login_otp(request: PhoneLoginRequest) -> MessageResponse:
        await service.send_phone_login_otp(request.phone)
        return MessageResponse(message="OTP sent to phone")

    @router.post("/login/phone/verify", response_model=TokenResponse)
    async def verify_phone_login(request: VerifyPhoneLoginRequest) -> TokenResponse:
        return token_response(await service.verify_phone_login(request.phone, request.otp))

    @router.post("/token/refresh", response_model=TokenResponse)
    async def refresh_token(subject: str = Depends(current_subject)) -> TokenResponse:
        return token_response(await service.refresh_token(subject))

    # -------------------------------------------------------------------------
    # Passwords
    # -------------------------------------------------------------------------

    @router.post("/password/forgot", response_model=MessageResponse)
    async def forgot_password(request: ForgotPasswordRequest) -> MessageResponse:
        await service.forgot_password(request.email)
        return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)

    @router.post("/password/reset", response_model=MessageResponse)
    async def reset_password(request: ResetPasswordRequest) -> MessageResponse:
        await service.reset_password(request)
        return MessageResponse(message="Password reset successfully")

    @router.post("/password/change", response_model=MessageResponse)
    async def change_password(
        request: ChangePasswordRequest,
        subject: str = Depends(current_subject),
    ) -> MessageResponse:
        await service.change_password(subject, request)
        return MessageResponse(message="Password changed successfully")

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    @router.get("/me", response_model=UserResponse)
    async def me(subject: str = Depends(current_subject)) -> UserResponse:
        return UserResponse.from_user(await service.get_user(subject))

    @router.patch("/update", response_model=UserResponse)
    async def update_profile(
        request: UpdateProfileRequest,
        subject: str = Depends(current_subject),
    ) -> UserResponse:
        user = await service.update_profile(subject, request)
        return UserResponse.from_user(user)

    return router
