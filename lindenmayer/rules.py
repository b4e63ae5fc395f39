"""Production rules.

One :class:`Rule` covers every rule shape. The shape is implied by which
neighbour kinds it names:

    Rule.create("A", produces)                      # A -> ...
    Rule.create("A", produces, left="B")            # B < A -> ...
    Rule.create("A", produces, right="C")           # A > C -> ...
    Rule.create("A", produces, left="B", right="C") # B < A > C -> ...

``where`` and ``produces`` are called with the matched modules in order
(left if named, current, right if named), then the grammar's parameters if
``with_parameters`` is set, then the random source if ``with_random`` is set.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from lindenmayer.context import ContextWindow
from lindenmayer.errors import RuleError, RuleMismatchError, _require
from lindenmayer.modules import Module
from lindenmayer.prng import RandomSource

Production = Callable[..., Iterable[Module]]
Guard = Callable[..., bool]


class RuleShape(Enum):
    DIRECT = "direct"
    LEFT_DIRECT = "left-direct"
    DIRECT_RIGHT = "direct-right"
    LEFT_DIRECT_RIGHT = "left-direct-right"


def _as_kind(x: Any, path: str) -> str:
    if isinstance(x, Module):
        return x.kind
    _require(
        isinstance(x, str) and len(x) > 0,
        f"{path} must be a module kind (non-empty string) or a Module",
    )
    return str(x)


@dataclass(frozen=True)
class Rule:
    direct: str
    produces: Production
    left: str | None = None
    right: str | None = None
    where: Guard | None = None
    with_parameters: bool = False
    with_random: bool = False

    def __post_init__(self) -> None:
        _require(callable(self.produces), "rule.produces must be callable")
        _require(
            self.where is None or callable(self.where),
            "rule.where must be callable or None",
        )

    @classmethod
    def create(
        cls,
        direct: str | Module,
        produces: Production,
        *,
        left: str | Module | None = None,
        right: str | Module | None = None,
        where: Guard | None = None,
        with_parameters: bool = False,
        with_random: bool = False,
    ) -> Rule:
        return cls(
            direct=_as_kind(direct, "rule.direct"),
            produces=produces,
            left=None if left is None else _as_kind(left, "rule.left"),
            right=None if right is None else _as_kind(right, "rule.right"),
            where=where,
            with_parameters=with_parameters,
            with_random=with_random,
        )

    @property
    def shape(self) -> RuleShape:
        if self.left is not None and self.right is not None:
            return RuleShape.LEFT_DIRECT_RIGHT
        if self.left is not None:
            return RuleShape.LEFT_DIRECT
        if self.right is not None:
            return RuleShape.DIRECT_RIGHT
        return RuleShape.DIRECT

    # -------------------------
    # Matching
    # -------------------------

    def matches_kinds(self, window: ContextWindow) -> bool:
        if window.current.kind != self.direct:
            return False
        if self.left is not None:
            if window.left is None or window.left.kind != self.left:
                return False
        if self.right is not None:
            if window.right is None or window.right.kind != self.right:
                return False
        return True

    def _arguments(
        self,
        window: ContextWindow,
        parameters: Any,
        random: RandomSource | None,
    ) -> list[Any]:
        args: list[Any] = []
        if self.left is not None:
            args.append(window.left)
        args.append(window.current)
        if self.right is not None:
            args.append(window.right)
        if self.with_parameters:
            args.append(parameters)
        if self.with_random:
            if random is None:
                raise RuleError(f"{self} needs a random source but none is attached")
            args.append(random)
        return args

    def matches(
        self,
        window: ContextWindow,
        parameters: Any = None,
        random: RandomSource | None = None,
    ) -> bool:
        """Kind match first; the guard only runs once the kinds line up."""
        if not self.matches_kinds(window):
            return False
        if self.where is None:
            return True
        return bool(self.where(*self._arguments(window, parameters, random)))

    def produce(
        self,
        window: ContextWindow,
        parameters: Any = None,
        random: RandomSource | None = None,
    ) -> list[Module]:
        if not self.matches_kinds(window):
            raise RuleMismatchError(
                f"{self} asked to produce for context {window.kinds} it does not match"
            )

        result = self.produces(*self._arguments(window, parameters, random))
        if isinstance(result, (Module, str)) or result is None:
            raise RuleError(
                f"{self} must return a sequence of modules, got {type(result).__name__}"
            )
        out = list(result)
        for item in out:
            if not isinstance(item, Module):
                raise RuleError(f"{self} produced {item!r}, which is not a Module")
        return out

    def __str__(self) -> str:
        pattern = self.direct
        if self.left is not None:
            pattern = f"{self.left} < {pattern}"
        if self.right is not None:
            pattern = f"{pattern} > {self.right}"
        extras = [
            name
            for name, on in (
                ("guarded", self.where is not None),
                ("parameters", self.with_parameters),
                ("random", self.with_random),
            )
            if on
        ]
        suffix = f" [{', '.join(extras)}]" if extras else ""
        return f"Rule({pattern}){suffix}"
