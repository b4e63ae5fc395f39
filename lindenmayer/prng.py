"""Position-addressed pseudo-random numbers.

Values come from a noise function of ``(seed, position)`` rather than from a
chained internal state, so a generator is fully described by those two
integers: the same seed replayed from position 0 yields the same values, and
any position can be inspected or rewound to directly.

The mixing function is Squirrel3 noise (Squirrel Eiserloh, "Math for Game
Programmers: Noise-Based RNG", GDC 2017).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from lindenmayer.config import _as_seed
from lindenmayer.errors import ProbabilityError, _require

T = TypeVar("T")

_MASK = 0xFFFFFFFF
_BIT_NOISE1 = 0xB5297A4D
_BIT_NOISE2 = 0x68E31DA4
_BIT_NOISE3 = 0x1B56C4E9

_RANGE = float(1 << 32)


def noise(seed: int, position: int) -> int:
    """Return a 32-bit unsigned pseudo-random value for ``(seed, position)``."""
    # Fold positions beyond 32 bits back in so they don't alias to low ones.
    m = (position ^ (position >> 32)) & _MASK
    m = (m * _BIT_NOISE1) & _MASK
    m = (m + (seed & _MASK)) & _MASK
    m ^= m >> 8
    m = (m + _BIT_NOISE2) & _MASK
    m ^= (m << 8) & _MASK
    m = (m * _BIT_NOISE3) & _MASK
    m ^= m >> 8
    return m


class SeededGenerator:
    """A seed plus a monotonically increasing position into its noise space."""

    def __init__(self, seed: int = 0) -> None:
        self._seed = _as_seed(seed)
        self.position = 0

    @property
    def seed(self) -> int:
        return self._seed

    def next(self) -> int:
        value = noise(self._seed, self.position)
        self.position += 1
        return value

    def reset(self, seed: int | None = None) -> None:
        if seed is not None:
            self._seed = _as_seed(seed)
        self.position = 0

    def __repr__(self) -> str:
        return f"SeededGenerator(seed={self._seed}, position={self.position})"


class RandomSource:
    """Probability helpers on top of a :class:`SeededGenerator`.

    Every helper consumes exactly one draw, so a sequence of mixed helper
    calls advances the position by the number of calls and replays
    identically against the same seed.
    """

    def __init__(self, generator: SeededGenerator | int = 0) -> None:
        if isinstance(generator, SeededGenerator):
            self._generator = generator
        else:
            self._generator = SeededGenerator(generator)

    @property
    def seed(self) -> int:
        return self._generator.seed

    @property
    def position(self) -> int:
        return self._generator.position

    def reset(self, seed: int | None = None) -> None:
        self._generator.reset(seed)

    def snapshot(self) -> tuple[int, int]:
        return (self._generator.seed, self._generator.position)

    def restore(self, snapshot: tuple[int, int]) -> None:
        seed, position = snapshot
        self._generator.reset(seed)
        self._generator.position = position

    def _unit(self) -> float:
        return self._generator.next() / _RANGE

    # -------------------------
    # Helpers (one draw each)
    # -------------------------

    def p(self) -> float:
        """Return a float in [0, 1)."""
        return self._unit()

    def boolean(self, probability: float) -> bool:
        """Return True with the given probability.

        ``probability`` must lie strictly between 0 and 1.
        """
        if isinstance(probability, bool) or not isinstance(probability, (int, float)):
            raise ProbabilityError(f"probability must be a number, got {probability!r}")
        if not 0.0 < probability < 1.0:
            raise ProbabilityError(
                f"probability must be in the open interval (0, 1), got {probability}"
            )
        return self._unit() < probability

    def coin(self) -> bool:
        return self._generator.next() >> 31 == 1

    def uniform(self, low: float, high: float) -> float:
        """Return a float in [low, high)."""
        _require(low <= high, f"uniform range is empty: {low} > {high}")
        return low + self._unit() * (high - low)

    def randint(self, low: int, high: int) -> int:
        """Return an int in [low, high], both ends included."""
        _require(low <= high, f"randint range is empty: {low} > {high}")
        return low + int(self._unit() * (high - low + 1))

    def choose(
        self, candidates: Sequence[T], weights: Sequence[float] | None = None
    ) -> T:
        """Pick one candidate, uniformly or by relative weight."""
        _require(len(candidates) > 0, "choose() needs at least one candidate")
        if weights is None:
            return candidates[int(self._unit() * len(candidates))]

        _require(
            len(weights) == len(candidates),
            "choose() needs exactly one weight per candidate",
        )
        _require(all(w >= 0 for w in weights), "choose() weights must be >= 0")
        total = float(sum(weights))
        _require(total > 0, "choose() weights must not all be zero")

        target = self._unit() * total
        cumulative = 0.0
        for candidate, weight in zip(candidates, weights):
            cumulative += weight
            if target < cumulative:
                return candidate
        # Float rounding can leave target == total; fall back to the last
        # candidate with a non-zero weight.
        for candidate, weight in zip(reversed(candidates), reversed(weights)):
            if weight > 0:
                return candidate
        raise AssertionError("unreachable")

    def __repr__(self) -> str:
        return f"RandomSource(seed={self.seed}, position={self.position})"


def create_random_source(seed: int = 0) -> RandomSource:
    return RandomSource(SeededGenerator(seed))
