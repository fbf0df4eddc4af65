"""
credgate - Passwords
====================
Strength policy for new passwords and Argon2id hashing for stored ones.

Hashing runs in the thread pool so login and signup never block the event
loop. Stored bcrypt hashes still verify and are swapped for Argon2id on the
next successful login (``verify_and_upgrade``).
"""

from .hasher import get_cached_hasher, needs_rehash
from .async_ops import dummy_hash, hash_password, verify_password, verify_and_upgrade
from .policy import PasswordPolicy, PolicyRule, SPECIAL_CHARACTERS

__all__ = [
    # Hasher
    "get_cached_hasher",
    "needs_rehash",
    # Async Operations
    "hash_password",
    "verify_password",
    "verify_and_upgrade",
    "dummy_hash",
    # Policy
    "PasswordPolicy",
    "PolicyRule",
    "SPECIAL_CHARACTERS",
]
