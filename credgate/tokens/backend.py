"""
Token Backends
==============
Signing and verification of session tokens.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog

logger = structlog.get_logger(__name__)


class TokenBackend(ABC):
    """Signs a subject into a bearer token and reads it back."""

    @abstractmethod
    def sign(self, subject: str, ttl: timedelta) -> str:
        ...

    @abstractmethod
    def verify(self, token: str) -> Optional[str]:
        """Return the subject of a valid token, or None for any invalid token."""


class JwtTokenBackend(TokenBackend):
    """
    JWT backend using PyJWT.

    Tokens carry ``sub``, ``iat``, ``exp``, ``iss`` and ``aud``; all five are
    required on decode.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        issuer: str = "credgate",
        audience: str = "credgate-clients",
    ):
        if not secret:
            raise ValueError("Token secret cannot be empty")
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.audience = audience

    def sign(self, subject: str, ttl: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": now + ttl,
            "sub": subject,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[str]:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "iss", "aud", "sub"]},
            )
        except jwt.PyJWTError as e:
            logger.info("Token rejected", reason=type(e).__name__)
            return None

        subject = payload.get("sub")
        return subject if isinstance(subject, str) and subject else None
