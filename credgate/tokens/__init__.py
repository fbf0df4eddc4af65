"""
Session Tokens
==============
Bearer tokens issued after successful authentication.
"""

from .backend import JwtTokenBackend, TokenBackend
from .issuer import TokenIssuer

__all__ = [
    "TokenBackend",
    "JwtTokenBackend",
    "TokenIssuer",
]
