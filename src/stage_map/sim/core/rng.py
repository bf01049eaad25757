"""Injectable random source for map generation and walks.

Nothing in the engine touches the global ``random`` module.  Callers hand a
:class:`GameRNG` to whatever needs randomness, and a stream that must not
be disturbed by its neighbours (extra paths, per-map generation, ...) is
split off with :meth:`GameRNG.fork`.
"""

from __future__ import annotations

import hashlib
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class GameRNG:
    """Reproducible random stream identified by its seed.

    Parameters
    ----------
    seed:
        Seed for the underlying generator.  Two instances with the same
        seed yield the same values in the same order.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._stream = random.Random(seed)

    @classmethod
    def from_entropy(cls) -> GameRNG:
        """An RNG seeded from the operating system, for live sessions."""
        return cls(random.SystemRandom().getrandbits(63))

    @property
    def seed(self) -> int:
        return self._seed

    # -- draws ---------------------------------------------------------------

    def random_float(self) -> float:
        """Uniform float in ``[0.0, 1.0)``."""
        return self._stream.random()

    def random_int(self, low: int, high: int) -> int:
        """Uniform integer in ``[low, high]``, both ends included."""
        return self._stream.randint(low, high)

    def random_uniform(self, low: float, high: float) -> float:
        """Uniform float between *low* and *high*.

        A degenerate range returns *low* without consuming a draw.
        """
        if low == high:
            return low
        return low + (high - low) * self._stream.random()

    def random_choice(self, seq: Sequence[T]) -> T:
        """Uniformly pick one element of a non-empty sequence."""
        return self._stream.choice(seq)

    def weighted_choice(self, seq: Sequence[T], weights: Sequence[float]) -> T:
        """Pick one element of *seq*, each with odds proportional to its
        weight.

        Always consumes exactly one draw, whatever the candidate count.
        """
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        if len(seq) != len(weights):
            raise ValueError("seq and weights must have the same length")

        threshold = self._stream.random() * sum(weights)
        running = 0.0
        for item, weight in zip(seq, weights):
            running += weight
            if threshold < running:
                return item
        # threshold can land on the total through float rounding
        return seq[-1]

    # -- sub-streams ---------------------------------------------------------

    def fork(self, name: str) -> GameRNG:
        """Derive a named child stream.

        The child seed is a hash of this seed and *name*, so it depends on
        neither the draws made so far nor the order forks are taken in.
        Forking does not advance this stream.
        """
        digest = hashlib.sha256(f"{self._seed}:{name}".encode()).digest()
        return GameRNG(int.from_bytes(digest[:8], "big"))

    def __repr__(self) -> str:
        return f"GameRNG(seed={self._seed})"
