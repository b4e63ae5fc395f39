from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from lindenmayer.modules import Module


@dataclass(frozen=True)
class ContextWindow:
    """A module and its immediate neighbours at one position in a state."""

    current: Module
    index: int
    left: Module | None = None
    right: Module | None = None

    @property
    def kinds(self) -> tuple[str | None, str, str | None]:
        return (
            self.left.kind if self.left is not None else None,
            self.current.kind,
            self.right.kind if self.right is not None else None,
        )


def context_at(
    state: Sequence[Module], index: int, *, legacy_left_boundary: bool = False
) -> ContextWindow:
    """Build the context window for ``state[index]``.

    The first module has no left neighbour and the last has no right one.
    With ``legacy_left_boundary`` the module at index 1 is also treated as
    having no left neighbour, matching grammars tuned against that behaviour.
    """
    if not 0 <= index < len(state):
        raise IndexError(f"index {index} out of range for state of {len(state)}")

    first_with_left = 2 if legacy_left_boundary else 1
    left = state[index - 1] if index >= first_with_left else None
    right = state[index + 1] if index + 1 < len(state) else None
    return ContextWindow(current=state[index], index=index, left=left, right=right)
