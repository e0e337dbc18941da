"""Seeded pseudo-random streams for reproducible level generation."""

from __future__ import annotations

from typing import Iterator, Protocol

_MASK = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_DIVISOR = 4294967296.0


class RandomSource(Protocol):
    def random(self) -> float:  # returns in [0.0, 1.0)
        ...


def seeded_stream(seed: int) -> Iterator[float]:
    """Yield an endless mulberry32 sequence of floats in [0, 1).

    The same 32-bit seed always reproduces the same sequence, independent of
    the interpreter's own ``random`` module. Only the low 32 bits of ``seed``
    are used.
    """
    state = seed & _MASK
    while True:
        state = (state + _INCREMENT) & _MASK
        t = ((state ^ (state >> 15)) * (state | 1)) & _MASK
        t = ((t + (((t ^ (t >> 7)) * (t | 61)) & _MASK)) & _MASK) ^ t
        yield ((t ^ (t >> 14)) & _MASK) / _DIVISOR


class SeededRandom:
    """``RandomSource`` adapter over :func:`seeded_stream`."""

    def __init__(self, seed: int) -> None:
        self._seed = seed & _MASK
        self._stream = seeded_stream(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def random(self) -> float:
        return next(self._stream)
