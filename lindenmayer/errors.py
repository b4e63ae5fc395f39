"""Exception types raised by the rewriting engine."""

from __future__ import annotations


class LSystemError(Exception):
    pass


class ConfigError(LSystemError, ValueError):
    pass


class ProbabilityError(ConfigError):
    pass


class RuleError(LSystemError):
    pass


class RuleMismatchError(RuleError):
    """A rule was asked to produce for a context its kinds do not match.

    Matching runs before production, so seeing this means the evolution loop
    is broken, not the grammar.
    """


class EvolutionError(LSystemError):
    """A guard or production failed while evolving one generation.

    The generation is abandoned as a whole; the grammar that was being
    evolved is still valid. The underlying exception is chained as
    ``__cause__``.
    """

    def __init__(
        self,
        msg: str,
        *,
        index: int | None = None,
        kind: str | None = None,
        generation: int | None = None,
    ) -> None:
        super().__init__(msg)
        self.index = index
        self.kind = kind
        self.generation = generation


class GrowthLimitError(EvolutionError):
    pass


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigError(msg)
