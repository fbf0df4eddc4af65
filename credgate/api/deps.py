"""
API Dependencies
================
Bearer token resolution for authenticated endpoints.
"""

from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from credgate.errors import TokenInvalid
from credgate.tokens import TokenIssuer

_bearer = HTTPBearer(auto_error=False)


def subject_dependency(issuer: TokenIssuer) -> Callable:
    """
    Build a dependency that yields the subject of the request's bearer token.

    A missing header raises the same ``TokenInvalid`` as a bad token.
    """

    async def current_subject(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    ) -> str:
        if credentials is None:
            raise TokenInvalid()
        return issuer.read(credentials.credentials)

    return current_subject
