"""The L-system value and its evolution loop.

A :class:`Grammar` is immutable. Adding a rule, evolving, resetting or
swapping parameters each return a new value; the random source is the one
piece shared by reference between a grammar and everything derived from it,
so its position keeps advancing across generations until ``reset()``.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import Any

from lindenmayer.config import EvolutionLimits
from lindenmayer.context import ContextWindow, context_at
from lindenmayer.errors import (
    EvolutionError,
    GrowthLimitError,
    LSystemError,
    RuleMismatchError,
    _require,
)
from lindenmayer.modules import Module
from lindenmayer.prng import RandomSource, create_random_source
from lindenmayer.rules import Guard, Production, Rule

logger = logging.getLogger(__name__)


def _as_modules(x: Module | Iterable[Module], path: str) -> tuple[Module, ...]:
    if isinstance(x, Module):
        return (x,)
    out = tuple(x)
    _require(len(out) > 0, f"{path} must contain at least one module")
    for item in out:
        _require(isinstance(item, Module), f"{path} must only contain modules")
    return out


@dataclass(frozen=True)
class ModuleInfo:
    """A module in a grammar's state, with its position and provenance."""

    index: int
    module: Module
    is_new: bool
    properties: tuple[tuple[str, Any], ...]


@dataclass(frozen=True)
class Grammar:
    axiom: tuple[Module, ...]
    state: tuple[Module, ...] = ()
    rules: tuple[Rule, ...] = ()
    parameters: Any = None
    random: RandomSource | None = None
    # True where the module was written by a rule in the last generation.
    new_indicators: tuple[bool, ...] = ()
    generation: int = 0
    limits: EvolutionLimits = field(default_factory=EvolutionLimits)
    legacy_left_boundary: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "axiom", _as_modules(self.axiom, "axiom"))
        if not self.state:
            object.__setattr__(self, "state", self.axiom)
        else:
            object.__setattr__(self, "state", _as_modules(self.state, "state"))
        if not self.new_indicators:
            object.__setattr__(self, "new_indicators", (True,) * len(self.state))
        _require(
            len(self.new_indicators) == len(self.state),
            "new_indicators must have one entry per module in state",
        )
        object.__setattr__(self, "rules", tuple(self.rules))
        for rule in self.rules:
            self._check_rule(rule)

    @classmethod
    def create(
        cls,
        axiom: Module | Iterable[Module],
        random: RandomSource | int | None = None,
        parameters: Any = None,
        *,
        rules: Iterable[Rule] = (),
        limits: EvolutionLimits | None = None,
        legacy_left_boundary: bool = False,
    ) -> Grammar:
        """Start a grammar from its axiom.

        ``random`` may be a RandomSource or an integer seed. Once attached,
        parameters and randomness are passed to every rule registered through
        :meth:`rewrite`.
        """
        if isinstance(random, int) and not isinstance(random, bool):
            random = create_random_source(random)
        _require(
            random is None or isinstance(random, RandomSource),
            "random must be a RandomSource, an integer seed or None",
        )
        return cls(
            axiom=_as_modules(axiom, "axiom"),
            rules=tuple(rules),
            parameters=parameters,
            random=random,
            limits=limits if limits is not None else EvolutionLimits(),
            legacy_left_boundary=legacy_left_boundary,
        )

    # -------------------------
    # Rule registration
    # -------------------------

    def _check_rule(self, rule: Rule) -> None:
        _require(isinstance(rule, Rule), f"expected a Rule, got {rule!r}")
        _require(
            not rule.with_random or self.random is not None,
            f"{rule} needs a random source; create the grammar with a seed",
        )

    def add_rule(self, rule: Rule) -> Grammar:
        self._check_rule(rule)
        return replace(self, rules=self.rules + (rule,))

    def add_rules(self, *rules: Rule) -> Grammar:
        for rule in rules:
            self._check_rule(rule)
        return replace(self, rules=self.rules + tuple(rules))

    def rewrite(
        self,
        direct: str | Module,
        produces: Production,
        *,
        left: str | Module | None = None,
        right: str | Module | None = None,
        where: Guard | None = None,
        with_parameters: bool | None = None,
        with_random: bool | None = None,
    ) -> Grammar:
        """Append a rule and return the new grammar.

        By default the rule receives the parameters and random source this
        grammar carries.
        """
        rule = Rule.create(
            direct,
            produces,
            left=left,
            right=right,
            where=where,
            with_parameters=(
                self.parameters is not None
                if with_parameters is None
                else with_parameters
            ),
            with_random=(
                self.random is not None if with_random is None else with_random
            ),
        )
        return self.add_rule(rule)

    def with_parameters(self, parameters: Any) -> Grammar:
        return replace(self, parameters=parameters)

    def with_limits(self, limits: EvolutionLimits) -> Grammar:
        return replace(self, limits=limits)

    def set_seed(self, seed: int) -> Grammar:
        """Rebind the random source to ``seed`` and rewind it.

        The attached source is shared, so every grammar derived from this one
        sees the new seed.
        """
        if self.random is None:
            return replace(self, random=create_random_source(seed))
        self.random.reset(seed)
        return self

    # -------------------------
    # Evolution
    # -------------------------

    def context_at(self, index: int) -> ContextWindow:
        return context_at(
            self.state, index, legacy_left_boundary=self.legacy_left_boundary
        )

    def first_match(self, window: ContextWindow) -> Rule | None:
        for rule in self.rules:
            if rule.matches(window, self.parameters, self.random):
                return rule
        return None

    def evolve(self) -> Grammar:
        """Rewrite every module once against the current state."""
        limits = self.limits
        if (
            limits.max_generations is not None
            and self.generation >= limits.max_generations
        ):
            raise GrowthLimitError(
                f"refusing to evolve past {limits.max_generations} generations",
                generation=self.generation + 1,
            )

        snapshot = self.random.snapshot() if self.random is not None else None
        new_state: list[Module] = []
        indicators: list[bool] = []
        rewrites = 0
        index = 0
        try:
            for index in range(len(self.state)):
                window = self.context_at(index)
                rule = self.first_match(window)
                if rule is None:
                    new_state.append(window.current)
                    indicators.append(False)
                else:
                    produced = rule.produce(window, self.parameters, self.random)
                    new_state.extend(produced)
                    indicators.extend([True] * len(produced))
                    rewrites += 1

                if (
                    limits.max_symbols is not None
                    and len(new_state) > limits.max_symbols
                ):
                    raise GrowthLimitError(
                        f"generation {self.generation + 1} exceeds "
                        f"{limits.max_symbols} modules",
                        index=index,
                        kind=self.state[index].kind,
                        generation=self.generation + 1,
                    )
        except (EvolutionError, RuleMismatchError):
            self._rollback(snapshot)
            raise
        except Exception as e:
            self._rollback(snapshot)
            kind = self.state[index].kind
            logger.warning(
                "generation %d aborted at index %d (%s): %s",
                self.generation + 1,
                index,
                kind,
                e,
            )
            raise EvolutionError(
                f"generation {self.generation + 1} failed at index {index} "
                f"({kind}): {e}",
                index=index,
                kind=kind,
                generation=self.generation + 1,
            ) from e

        logger.debug(
            "generation %d: %d -> %d modules, %d rewrites",
            self.generation + 1,
            len(self.state),
            len(new_state),
            rewrites,
        )

        if not new_state:
            # A state is never empty.
            self._rollback(snapshot)
            raise EvolutionError(
                f"generation {self.generation + 1} deleted every module",
                generation=self.generation + 1,
            )

        return replace(
            self,
            state=tuple(new_state),
            new_indicators=tuple(indicators),
            generation=self.generation + 1,
        )

    def evolved(self, generations: int = 1) -> Grammar:
        _require(
            isinstance(generations, int) and not isinstance(generations, bool),
            "generations must be an integer",
        )
        _require(generations >= 0, "generations must be >= 0")
        # A failure in any generation rewinds the draws of the whole call.
        snapshot = self.random.snapshot() if self.random is not None else None
        grammar = self
        try:
            for _ in range(generations):
                grammar = grammar.evolve()
        except LSystemError:
            self._rollback(snapshot)
            raise
        return grammar

    def reset(self) -> Grammar:
        """Return to the axiom and rewind the random source."""
        if self.random is not None:
            self.random.reset()
        return replace(
            self,
            state=self.axiom,
            new_indicators=(True,) * len(self.axiom),
            generation=0,
        )

    def _rollback(self, snapshot: tuple[int, int] | None) -> None:
        if self.random is not None and snapshot is not None:
            self.random.restore(snapshot)

    # -------------------------
    # Inspection
    # -------------------------

    def __len__(self) -> int:
        return len(self.state)

    def __iter__(self) -> Iterator[Module]:
        return iter(self.state)

    def inspect(self, index: int) -> ModuleInfo:
        if not 0 <= index < len(self.state):
            raise IndexError(
                f"index {index} out of range for state of {len(self.state)}"
            )
        m = self.state[index]
        return ModuleInfo(
            index=index,
            module=m,
            is_new=self.new_indicators[index],
            properties=tuple(m.properties()),
        )

    def labels(self) -> list[str]:
        return [m.label for m in self.state]

    def summary(self, sep: str = "") -> str:
        return sep.join(self.labels())

    def kind_counts(self) -> Counter[str]:
        return Counter(m.kind for m in self.state)
