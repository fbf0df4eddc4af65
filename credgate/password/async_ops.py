"""
Async Password Hashing
======================
Async-safe password hashing and verification using Argon2id.

Hashing is CPU and memory heavy, so every call runs in the default thread
pool executor instead of blocking the event loop.
"""

import asyncio
import secrets
from typing import Optional, Tuple

import bcrypt
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from .hasher import get_cached_hasher, is_argon2_hash, is_bcrypt_hash, needs_rehash

_dummy_hash: Optional[str] = None


async def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Args:
        password: Plain text password to hash

    Returns:
        Argon2id hash string (includes algorithm, parameters, salt, and hash)
    """
    if not password:
        raise ValueError("Password cannot be empty")

    hasher = get_cached_hasher()
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, hasher.hash, password)


async def verify_password(password: str, hash: str) -> bool:
    """
    Verify a password against an Argon2id or bcrypt hash.

    bcrypt is accepted so that accounts migrated from the previous service
    keep working until their next successful login.

    Args:
        password: Plain text password to verify
        hash: Hash to verify against (Argon2id or bcrypt format)

    Returns:
        True if password matches, False otherwise
    """
    if not password or not hash:
        return False

    loop = asyncio.get_running_loop()

    if is_argon2_hash(hash):
        return await loop.run_in_executor(None, _verify_argon2, password, hash)
    if is_bcrypt_hash(hash):
        return await loop.run_in_executor(None, _verify_bcrypt, password, hash)
    return False


def _verify_argon2(password: str, hash: str) -> bool:
    try:
        return get_cached_hasher().verify(hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def _verify_bcrypt(password: str, hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hash.encode("utf-8"))
    except ValueError:
        return False


async def verify_and_upgrade(
    password: str,
    hash: str,
) -> Tuple[bool, Optional[str]]:
    """
    Verify password and return new hash if upgrade is needed.

    This is the recommended function for login flows.

    Args:
        password: Plain text password
        hash: Existing hash (bcrypt or Argon2id)

    Returns:
        Tuple of (is_valid, new_hash_or_none)
    """
    is_valid = await verify_password(password, hash)

    if not is_valid:
        return False, None

    if needs_rehash(hash):
        return True, await hash_password(password)

    return True, None


async def dummy_hash() -> str:
    """
    Argon2id hash of a random secret that no password matches.

    Verifying against it costs the same as verifying a real account, so a
    failed login for an unknown email takes as long as one with a wrong
    password. Built on first use with the current hasher parameters.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = await hash_password(secrets.token_urlsafe(32))
    return _dummy_hash
