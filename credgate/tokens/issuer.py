"""
Token Issuer
============
Mints and reads session tokens for an authenticated subject.
"""

from datetime import timedelta
from typing import Optional

from credgate.config import TokenConfig
from credgate.errors import TokenInvalid

from .backend import JwtTokenBackend, TokenBackend


class TokenIssuer:
    """
    Session token facade.

    Expired, malformed and tampered tokens all raise the same
    ``TokenInvalid`` so callers learn nothing about why a token failed.
    """

    def __init__(self, backend: TokenBackend, ttl: timedelta = timedelta(minutes=60)):
        self.backend = backend
        self.ttl = ttl

    @classmethod
    def from_config(cls, config: Optional[TokenConfig] = None) -> "TokenIssuer":
        config = config or TokenConfig()
        backend = JwtTokenBackend(
            secret=config.secret,
            algorithm=config.algorithm,
            issuer=config.issuer,
            audience=config.audience,
        )
        return cls(backend, ttl=config.ttl)

    def mint(self, subject: str) -> str:
        return self.backend.sign(subject, self.ttl)

    def read(self, token: Optional[str]) -> str:
        """
        Resolve a token to its subject.

        Raises:
            TokenInvalid: for any token that does not verify
        """
        if not token:
            raise TokenInvalid()
        subject = self.backend.verify(token)
        if subject is None:
            raise TokenInvalid()
        return subject
