"""
Password Hasher
===============
Argon2id hasher built from the environment, plus hash-format detection.

Cost parameters come from ``ARGON2_TIME_COST``, ``ARGON2_MEMORY_COST`` (KiB)
and ``ARGON2_PARALLELISM``. The defaults take ~300ms on a typical server;
tests lower them before the first hash.
"""

import os
from functools import lru_cache

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError

ARGON2_PREFIX = "$argon2"
BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


@lru_cache(maxsize=1)
def get_cached_hasher() -> PasswordHasher:
    """Process-wide Argon2id hasher."""
    return PasswordHasher(
        time_cost=int(os.environ.get("ARGON2_TIME_COST", "3")),
        memory_cost=int(os.environ.get("ARGON2_MEMORY_COST", "65536")),  # 64MB
        parallelism=int(os.environ.get("ARGON2_PARALLELISM", "4")),
        hash_len=32,
        salt_len=16,
        type=Type.ID,
    )


def is_argon2_hash(hash: str) -> bool:
    return hash.startswith(ARGON2_PREFIX)


def is_bcrypt_hash(hash: str) -> bool:
    """bcrypt hashes belong to accounts carried over from the previous service."""
    return hash.startswith(BCRYPT_PREFIXES)


def needs_rehash(hash: str) -> bool:
    """
    Whether a stored hash should be replaced after the next successful login.

    Only an Argon2id hash with the current cost parameters is kept; bcrypt,
    empty, unparsable and unknown formats are all replaced.
    """
    if not hash or not is_argon2_hash(hash):
        return True
    try:
        return get_cached_hasher().check_needs_rehash(hash)
    except InvalidHashError:
        return True
