"""
Configuration
=============
Named, overridable options for the OTP engine, token issuer and delivery.

Every option has an environment variable and a default; ``Settings.from_env()``
is the single place the environment is read.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from credgate.otp.models import OTPConfig, OtpPurpose


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value not in (None, "") else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value in (None, ""):
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_otp_config() -> OTPConfig:
    """Build the OTP configuration from the environment."""
    verification_attempts = _env_int("OTP_VERIFICATION_MAX_ATTEMPTS", 5)
    return OTPConfig(
        ttl_minutes=_env_int("OTP_TTL_MINUTES", 5),
        max_attempts=_env_int("OTP_MAX_ATTEMPTS", 3),
        cooldown_minutes=_env_int("OTP_COOLDOWN_MINUTES", 1),
        pepper=os.environ.get("OTP_PEPPER", ""),
        max_attempts_by_purpose={
            OtpPurpose.EMAIL_VERIFICATION: verification_attempts,
            OtpPurpose.PHONE_VERIFICATION: verification_attempts,
        },
    )


@dataclass
class TokenConfig:
    """Configuration for session tokens."""
    secret: str = "dev-insecure-secret-change-me"
    ttl_minutes: int = 60
    algorithm: str = "HS256"
    issuer: str = "credgate"
    audience: str = "credgate-clients"

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self.ttl_minutes)

    @classmethod
    def from_env(cls) -> "TokenConfig":
        return cls(
            secret=os.environ.get("TOKEN_SECRET", cls.secret),
            ttl_minutes=_env_int("TOKEN_TTL_MINUTES", 60),
            algorithm=os.environ.get("TOKEN_ALGORITHM", "HS256"),
            issuer=os.environ.get("TOKEN_ISSUER", "credgate"),
            audience=os.environ.get("TOKEN_AUDIENCE", "credgate-clients"),
        )


@dataclass
class SMTPConfig:
    """SMTP connection for email delivery."""
    host: str
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    from_address: str = "no-reply@localhost"
    use_tls: bool = True
    timeout: float = 10.0


@dataclass
class TwilioConfig:
    """Twilio credentials for SMS delivery."""
    account_sid: str
    auth_token: str
    from_number: Optional[str] = None
    messaging_service_sid: Optional[str] = None
    timeout: float = 30.0


@dataclass
class DeliveryConfig:
    """Which senders to wire; unset providers fall back to the log-only sender."""
    smtp: Optional[SMTPConfig] = None
    twilio: Optional[TwilioConfig] = None

    @classmethod
    def from_env(cls) -> "DeliveryConfig":
        smtp = None
        if os.environ.get("SMTP_HOST"):
            smtp = SMTPConfig(
                host=os.environ["SMTP_HOST"],
                port=_env_int("SMTP_PORT", 587),
                username=os.environ.get("SMTP_USERNAME") or None,
                password=os.environ.get("SMTP_PASSWORD") or None,
                from_address=os.environ.get("SMTP_FROM", "no-reply@localhost"),
                use_tls=_env_bool("SMTP_USE_TLS", True),
            )

        twilio = None
        if os.environ.get("TWILIO_ACCOUNT_SID") and os.environ.get("TWILIO_AUTH_TOKEN"):
            twilio = TwilioConfig(
                account_sid=os.environ["TWILIO_ACCOUNT_SID"],
                auth_token=os.environ["TWILIO_AUTH_TOKEN"],
                from_number=os.environ.get("TWILIO_FROM_NUMBER") or None,
                messaging_service_sid=os.environ.get("TWILIO_MESSAGING_SERVICE_SID") or None,
            )

        return cls(smtp=smtp, twilio=twilio)


@dataclass
class Settings:
    """Top-level settings consumed by the composition root."""
    service_name: str = "credgate"
    otp: OTPConfig = field(default_factory=OTPConfig)
    token: TokenConfig = field(default_factory=TokenConfig)
    delivery: DeliveryConfig = field(default_factory=DeliveryConfig)
    database_url: Optional[str] = None
    log_level: str = "INFO"
    log_json: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            service_name=os.environ.get("SERVICE_NAME", "credgate"),
            otp=load_otp_config(),
            token=TokenConfig.from_env(),
            delivery=DeliveryConfig.from_env(),
            database_url=os.environ.get("DATABASE_URL") or None,
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            log_json=_env_bool("LOG_JSON", True),
        )
