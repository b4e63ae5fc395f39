"""Lindenmayer systems: parallel, context-sensitive rewriting of modules.

    >>> import lindenmayer as ls
    >>> a, b = ls.module("A"), ls.module("B")
    >>> algae = ls.create(a).rewrite("A", lambda _: [a, b]).rewrite("B", lambda _: [a])
    >>> ls.evolve(algae, 3).summary()
    'ABAAB'
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from lindenmayer.config import EvolutionLimits
from lindenmayer.context import ContextWindow, context_at
from lindenmayer.errors import (
    ConfigError,
    EvolutionError,
    GrowthLimitError,
    LSystemError,
    ProbabilityError,
    RuleError,
    RuleMismatchError,
)
from lindenmayer.grammar import Grammar, ModuleInfo
from lindenmayer.modules import Module, module
from lindenmayer.prng import RandomSource, SeededGenerator, create_random_source, noise
from lindenmayer.render import Angle, Color
from lindenmayer.rules import Rule, RuleShape

__all__ = [
    "Angle",
    "Color",
    "ConfigError",
    "ContextWindow",
    "EvolutionError",
    "EvolutionLimits",
    "Grammar",
    "GrowthLimitError",
    "LSystemError",
    "Module",
    "ModuleInfo",
    "ProbabilityError",
    "RandomSource",
    "Rule",
    "RuleError",
    "RuleMismatchError",
    "RuleShape",
    "SeededGenerator",
    "context_at",
    "create",
    "create_random_source",
    "evolve",
    "module",
    "noise",
    "reset",
    "set_seed",
    "state",
]


def create(
    axiom: Module | Iterable[Module],
    rules: Iterable[Rule] | None = None,
    random: RandomSource | int | None = None,
    parameters: Any = None,
) -> Grammar:
    return Grammar.create(
        axiom, random=random, parameters=parameters, rules=rules or ()
    )


def evolve(grammar: Grammar, generations: int = 1) -> Grammar:
    return grammar.evolved(generations)


def reset(grammar: Grammar) -> Grammar:
    return grammar.reset()


def state(grammar: Grammar) -> tuple[Module, ...]:
    return grammar.state


def set_seed(grammar: Grammar, seed: int) -> Grammar:
    return grammar.set_seed(seed)
