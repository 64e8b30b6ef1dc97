from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """
    Port for one-way password hashing.

    Implementations must salt every hash (two calls with the same plaintext
    yield different strings) and compare in constant time.
    """

    def hash(self, plaintext: str) -> str:
        """Return a self-describing salted hash of ``plaintext``."""
        ...

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return ``True`` if ``plaintext`` matches; ``False`` for malformed hashes."""
        ...
