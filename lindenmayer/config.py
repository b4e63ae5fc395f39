from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from lindenmayer.errors import _require

# L-systems grow exponentially; cap the state unless the caller opts out.
DEFAULT_MAX_SYMBOLS = 1_000_000


def _as_limit(x: Any, path: str) -> int | None:
    if x is None:
        return None
    _require(
        isinstance(x, int) and not isinstance(x, bool), f"{path} must be an integer"
    )
    _require(x > 0, f"{path} must be > 0")
    return int(x)


def _as_seed(x: Any, path: str = "seed") -> int:
    _require(
        isinstance(x, int) and not isinstance(x, bool), f"{path} must be an integer"
    )
    _require(x >= 0, f"{path} must be >= 0")
    return int(x) & 0xFFFFFFFF


@dataclass(frozen=True)
class EvolutionLimits:
    """Hard caps checked while evolving.

    max_generations: total generations a grammar may reach (None = no cap).
    max_symbols: largest state a single generation may produce (None = no cap).
    """

    max_generations: int | None = None
    max_symbols: int | None = DEFAULT_MAX_SYMBOLS

    def __post_init__(self) -> None:
        _as_limit(self.max_generations, "limits.max_generations")
        _as_limit(self.max_symbols, "limits.max_symbols")

    @classmethod
    def unbounded(cls) -> EvolutionLimits:
        return cls(max_generations=None, max_symbols=None)
