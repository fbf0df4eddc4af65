"""
Stores
======
Persistence interfaces with in-memory and SQL implementations.
"""

from .base import ChallengeStore, UserStore
from .memory import InMemoryChallengeStore, InMemoryUserStore

__all__ = [
    # Interfaces
    "ChallengeStore",
    "UserStore",
    # In-memory
    "InMemoryChallengeStore",
    "InMemoryUserStore",
]
