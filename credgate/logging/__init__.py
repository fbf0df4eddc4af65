"""
credgate Logging Module

Structured logging setup and identifier masking.
"""

from .structured import (
    setup_logging,
    mask_email,
    mask_phone,
    mask_identifier,
    RequestLoggingMiddleware,
)

__all__ = [
    "setup_logging",
    "mask_email",
    "mask_phone",
    "mask_identifier",
    "RequestLoggingMiddleware",
]
