"""
Input Validation
================
Request-shape checks for emails, phone numbers and OTP codes.
"""

import re

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9_+&*-]+(?:\.[a-zA-Z0-9_+&*-]+)*@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,7}$"
)
PHONE_PATTERN = re.compile(r"\+?[1-9][0-9]{1,14}")
OTP_PATTERN = re.compile(r"[0-9]{6}")


def normalize_email(email: str) -> str:
    """Trim and lowercase an email address."""
    return email.strip().lower()


def validate_email(email: str) -> bool:
    """True if the address looks like ``local@domain.tld``."""
    return bool(email) and bool(EMAIL_PATTERN.fullmatch(email))


def clean_phone(phone: str) -> str:
    """
    Strip spaces, dashes, dots and parentheses from a phone number.

    A leading ``+`` is kept; nothing else is rewritten, so the stored value is
    what the user typed minus separators.
    """
    return re.sub(r"[\s\-().]", "", phone.strip())


def validate_phone(phone: str) -> bool:
    """
    Validate an international phone number (E.164 digits, ``+`` optional).

    Args:
        phone: Phone number, already passed through ``clean_phone``

    Returns:
        True if valid
    """
    return bool(phone) and bool(PHONE_PATTERN.fullmatch(phone))


def validate_otp_format(code: str) -> bool:
    """True for exactly six ASCII digits."""
    return bool(code) and bool(OTP_PATTERN.fullmatch(code))
