"""
Password Policy
===============
Strength rules for new passwords.

Rules run in a fixed order and only the first failure is reported, so a
client always gets one actionable message at a time.
"""

from enum import Enum
from typing import Optional
import re

from credgate.errors import PolicyViolation

SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")


class PolicyRule(str, Enum):
    """Password rules, in evaluation order."""
    EMPTY = "empty"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    MISSING_UPPERCASE = "missing_uppercase"
    MISSING_LOWERCASE = "missing_lowercase"
    MISSING_DIGIT = "missing_digit"
    MISSING_SPECIAL = "missing_special"


class PasswordPolicy:
    """Validate candidate passwords against length and character-class rules."""

    def __init__(self, min_length: int = 8, max_length: int = 128):
        self.min_length = min_length
        self.max_length = max_length

    def first_violation(self, password: Optional[str]) -> Optional[PolicyRule]:
        """Return the first rule the password breaks, or None if it passes."""
        if not password:
            return PolicyRule.EMPTY
        if len(password) < self.min_length:
            return PolicyRule.TOO_SHORT
        if len(password) > self.max_length:
            return PolicyRule.TOO_LONG
        if not _UPPER.search(password):
            return PolicyRule.MISSING_UPPERCASE
        if not _LOWER.search(password):
            return PolicyRule.MISSING_LOWERCASE
        if not _DIGIT.search(password):
            return PolicyRule.MISSING_DIGIT
        if not _SPECIAL.search(password):
            return PolicyRule.MISSING_SPECIAL
        return None

    def message(self, rule: PolicyRule) -> str:
        messages = {
            PolicyRule.EMPTY: "Password cannot be empty",
            PolicyRule.TOO_SHORT: f"Password must be at least {self.min_length} characters long",
            PolicyRule.TOO_LONG: f"Password must not exceed {self.max_length} characters",
            PolicyRule.MISSING_UPPERCASE: "Password must contain at least one uppercase letter",
            PolicyRule.MISSING_LOWERCASE: "Password must contain at least one lowercase letter",
            PolicyRule.MISSING_DIGIT: "Password must contain at least one digit",
            PolicyRule.MISSING_SPECIAL: (
                f"Password must contain at least one special character ({SPECIAL_CHARACTERS})"
            ),
        }
        return messages[rule]

    def validate(self, password: Optional[str]) -> None:
        """
        Raise on the first broken rule.

        Raises:
            PolicyViolation: carrying the rule and its message
        """
        rule = self.first_violation(password)
        if rule is not None:
            raise PolicyViolation(rule, self.message(rule))
