"""Seeded pseudo-random number generator used by the statement generators."""

from __future__ import annotations

_MASK64 = (1 << 64) - 1
_MULTIPLIER = 6364136223846793005


class LcgRng:
    """Linear congruential generator that yields reproducible 31-bit values.

    The state is a 64-bit unsigned integer that wraps on overflow.
    """

    __slots__ = ("_state", "_base_seed")

    def __init__(self, seed: int = 0) -> None:
        self._state = 0
        self._base_seed = 0
        self.srand(seed)

    def rand(self) -> int:
        """Advance the generator and return a value in ``[0, 2**31)``."""
        self._state = (self._state * _MULTIPLIER + 1) & _MASK64
        return (self._state >> 33) & 0x7FFF_FFFF

    def srand(self, seed: int) -> None:
        """Restart the sequence from ``seed`` and remember it as the base seed."""
        seed = int(seed) & _MASK64
        self._state = seed
        self._base_seed = seed

    @property
    def base_seed(self) -> int:
        """The seed the current sequence was started from."""
        return self._base_seed

    def __repr__(self) -> str:
        return f"LcgRng(seed={self._base_seed})"