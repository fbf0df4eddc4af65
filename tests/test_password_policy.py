"""
Unit Tests for the Password Policy
==================================
"""

import pytest

from credgate.errors import PolicyViolation, ValidationError
from credgate.password import SPECIAL_CHARACTERS, PasswordPolicy, PolicyRule


class TestPolicyRules:
    """Each rule, in evaluation order."""

    @pytest.mark.parametrize(
        "password, rule",
        [
            ("", PolicyRule.EMPTY),
            (None, PolicyRule.EMPTY),
            ("Ab1!", PolicyRule.TOO_SHORT),
            ("A" * 60 + "b" * 60 + "1!" * 5, PolicyRule.TOO_LONG),
            ("lowercase1!", PolicyRule.MISSING_UPPERCASE),
            ("UPPERCASE1!", PolicyRule.MISSING_LOWERCASE),
            ("NoDigits!!", PolicyRule.MISSING_DIGIT),
            ("NoSpecial123", PolicyRule.MISSING_SPECIAL),
        ],
    )
    def test_first_violation(self, password, rule):
        """Should report the expected rule."""
        assert PasswordPolicy().first_violation(password) == rule

    def test_strong_password_passes(self):
        """A password meeting every rule validates without error."""
        policy = PasswordPolicy()

        assert policy.first_violation("Str0ng!Pass") is None
        policy.validate("Str0ng!Pass")

    def test_only_first_failure_reported(self):
        """Short and missing everything reports only the length rule."""
        with pytest.raises(PolicyViolation) as exc_info:
            PasswordPolicy().validate("abc")

        assert exc_info.value.rule == PolicyRule.TOO_SHORT
        assert exc_info.value.message == "Password must be at least 8 characters long"
        assert exc_info.value.details == {"rule": "too_short"}

    def test_boundaries(self):
        """Exactly 8 and exactly 128 characters are accepted."""
        policy = PasswordPolicy()

        assert policy.first_violation("Abcdef1!") is None
        assert policy.first_violation("Ab1!" + "x" * 124) is None
        assert policy.first_violation("Ab1!" + "x" * 125) == PolicyRule.TOO_LONG

    def test_every_special_character_counts(self):
        """Each listed special character satisfies the last rule."""
        policy = PasswordPolicy()

        for char in SPECIAL_CHARACTERS:
            assert policy.first_violation(f"Abcdef1{char}") is None, char

    def test_unlisted_symbols_do_not_count(self):
        """Symbols outside the list are not special characters."""
        assert PasswordPolicy().first_violation("Abcdef12~") == PolicyRule.MISSING_SPECIAL

    def test_non_ascii_letters_do_not_count(self):
        """Only ASCII letters satisfy the case rules."""
        policy = PasswordPolicy()

        assert policy.first_violation("Äbcdefg1!") == PolicyRule.MISSING_UPPERCASE
        assert policy.first_violation("ABCDEFä1!") == PolicyRule.MISSING_LOWERCASE


class TestPolicyOptions:
    """Configurable lengths and messages."""

    def test_custom_lengths(self):
        """Min and max lengths come from the constructor."""
        policy = PasswordPolicy(min_length=12, max_length=16)

        assert policy.first_violation("Abcdef1!xyz") == PolicyRule.TOO_SHORT
        assert policy.first_violation("Abcdef1!xyzw") is None
        assert policy.first_violation("Abcdef1!xyzw12345") == PolicyRule.TOO_LONG
        assert policy.message(PolicyRule.TOO_SHORT) == "Password must be at least 12 characters long"

    def test_violation_is_validation_error(self):
        """Callers can catch policy failures as plain validation errors."""
        with pytest.raises(ValidationError) as exc_info:
            PasswordPolicy().validate("")

        assert exc_info.value.message == "Password cannot be empty"
        assert exc_info.value.status_code == 400

    def test_messages(self):
        """Messages name the missing character class."""
        policy = PasswordPolicy()

        assert policy.message(PolicyRule.MISSING_UPPERCASE) == "Password must contain at least one uppercase letter"
        assert policy.message(PolicyRule.MISSING_DIGIT) == "Password must contain at least one digit"
        assert SPECIAL_CHARACTERS in policy.message(PolicyRule.MISSING_SPECIAL)
