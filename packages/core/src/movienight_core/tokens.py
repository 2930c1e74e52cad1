"""Random sources for join codes, bearer tokens and winner selection.

Services take a :class:`RandomSource` so tests can swap the system CSPRNG
for a seeded generator and get reproducible codes and picks.
"""
from __future__ import annotations

import random
import secrets
import string
from typing import Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")

CODE_ALPHABET = string.ascii_uppercase + string.digits
TOKEN_BYTES = 24  # 192 bits


class RandomSource(Protocol):
    def code(self, length: int) -> str: ...

    def token(self) -> str: ...

    def choice(self, items: Sequence[T]) -> T: ...


class SystemRandomSource:
    """Backed by :mod:`secrets`; the one used in production."""

    def code(self, length: int) -> str:
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))

    def token(self) -> str:
        return secrets.token_urlsafe(TOKEN_BYTES)

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("cannot choose from an empty sequence")
        return items[secrets.randbelow(len(items))]


class SeededRandomSource:
    """Deterministic source for tests. Not suitable for real tokens."""

    def __init__(self, seed: Optional[int] = 0):
        self._rng = random.Random(seed)

    def code(self, length: int) -> str:
        return "".join(self._rng.choice(CODE_ALPHABET) for _ in range(length))

    def token(self) -> str:
        return self._rng.getrandbits(TOKEN_BYTES * 8).to_bytes(TOKEN_BYTES, "big").hex()

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("cannot choose from an empty sequence")
        return items[self._rng.randrange(len(items))]


__all__ = ["RandomSource", "SystemRandomSource", "SeededRandomSource", "CODE_ALPHABET"]
