"""Modules: the symbols an L-system rewrites.

A module is identified for matching purposes by its ``kind`` alone. Its
payload (``data``) is only visible to the guard and production of a rule that
already matched on kind.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from lindenmayer import render
from lindenmayer.errors import ConfigError, _require
from lindenmayer.render import IGNORE, Angle, Color, RenderCommand

# Built-in kinds
DRAW = "Draw"
MOVE = "Move"
TURN_LEFT = "TurnLeft"
TURN_RIGHT = "TurnRight"
BRANCH = "Branch"
END_BRANCH = "EndBranch"
ROLL_LEFT = "RollLeft"
ROLL_RIGHT = "RollRight"
PITCH_UP = "PitchUp"
PITCH_DOWN = "PitchDown"
ROLL_UP_TO_VERTICAL = "RollUpToVertical"
SET_LINE_WIDTH = "SetLineWidth"
SET_COLOR = "SetColor"
CYLINDER = "Cylinder"
CONE = "Cone"
SPHERE = "Sphere"


@dataclass(frozen=True)
class Module:
    kind: str
    label: str = ""
    data: Mapping[str, Any] = field(default_factory=dict)
    render_2d: tuple[RenderCommand, ...] = ()
    render_3d: RenderCommand = IGNORE

    def __post_init__(self) -> None:
        _require(
            isinstance(self.kind, str) and len(self.kind) > 0,
            "module kind must be a non-empty string",
        )
        if not self.label:
            object.__setattr__(self, "label", self.kind)
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))
        object.__setattr__(self, "render_2d", tuple(self.render_2d))

    def __hash__(self) -> int:
        return hash((self.kind, self.label, self.render_2d, self.render_3d))

    def __str__(self) -> str:
        return self.label

    def __getitem__(self, name: str) -> Any:
        return self.data[name]

    def __contains__(self, name: object) -> bool:
        return name in self.data

    def get(self, name: str, default: Any = None) -> Any:
        return self.data.get(name, default)

    def properties(self) -> list[tuple[str, Any]]:
        return sorted(self.data.items())

    def with_data(self, **changes: Any) -> Module:
        """Return a copy with the payload updated.

        Built-in modules are rebuilt through their constructor, so the new
        payload is validated and the draw instructions follow it.
        """
        data = {**self.data, **changes}
        constructor = _CONSTRUCTORS.get(self.kind)
        if constructor is None:
            return replace(self, data=data)
        try:
            rebuilt = constructor(**data)
        except TypeError as e:
            raise ConfigError(f"cannot update {self.kind} with {data}: {e}") from e
        return replace(rebuilt, label=self.label)


def module(
    kind: str,
    label: str | None = None,
    *,
    render_2d: tuple[RenderCommand, ...] | list[RenderCommand] = (),
    render_3d: RenderCommand = IGNORE,
    **data: Any,
) -> Module:
    """Create a user-defined module.

    >>> a = module("A")
    >>> stem = module("Stem", "I", render_2d=[render.Draw(5)], length=5)
    """
    return Module(
        kind=kind,
        label=label or kind,
        data=data,
        render_2d=tuple(render_2d),
        render_3d=render_3d,
    )


# -------------------------
# Built-in modules
# -------------------------

_Renders = tuple[tuple[RenderCommand, ...], RenderCommand]

_BUILTINS: dict[str, Callable[[Mapping[str, Any]], _Renders]] = {
    DRAW: lambda d: ((render.Draw(d["length"]),), render.Draw(d["length"])),
    MOVE: lambda d: ((render.Move(d["length"]),), render.Move(d["length"])),
    TURN_LEFT: lambda d: ((render.TurnLeft(d["angle"]),), render.TurnLeft(d["angle"])),
    TURN_RIGHT: lambda d: (
        (render.TurnRight(d["angle"]),),
        render.TurnRight(d["angle"]),
    ),
    BRANCH: lambda d: ((render.Branch(),), render.Branch()),
    END_BRANCH: lambda d: ((render.EndBranch(),), render.EndBranch()),
    ROLL_LEFT: lambda d: ((), render.RollLeft(d["angle"])),
    ROLL_RIGHT: lambda d: ((), render.RollRight(d["angle"])),
    PITCH_UP: lambda d: ((), render.PitchUp(d["angle"])),
    PITCH_DOWN: lambda d: ((), render.PitchDown(d["angle"])),
    ROLL_UP_TO_VERTICAL: lambda d: ((), render.RollUpToVertical()),
    SET_LINE_WIDTH: lambda d: ((render.SetLineWidth(d["width"]),), IGNORE),
    SET_COLOR: lambda d: ((render.SetColor(d["color"]),), IGNORE),
    CYLINDER: lambda d: (
        (),
        render.Cylinder(d["length"], d["radius"], d.get("color")),
    ),
    CONE: lambda d: (
        (),
        render.Cone(d["length"], d["radius_top"], d["radius_bottom"], d.get("color")),
    ),
    SPHERE: lambda d: ((), render.Sphere(d["radius"], d.get("color"))),
}


def _builtin(kind: str, label: str, **data: Any) -> Module:
    r2d, r3d = _BUILTINS[kind](data)
    return Module(kind=kind, label=label, data=data, render_2d=r2d, render_3d=r3d)


def _as_angle(angle: Angle | float) -> Angle:
    # Bare numbers are degrees.
    if isinstance(angle, Angle):
        return angle
    _require(isinstance(angle, (int, float)), "angle must be an Angle or a number")
    return Angle.from_degrees(float(angle))


def draw(length: float = 1.0) -> Module:
    return _builtin(DRAW, render.TurtleCode.DRAW.value, length=float(length))


def move(length: float = 1.0) -> Module:
    return _builtin(MOVE, render.TurtleCode.MOVE.value, length=float(length))


def turn_left(angle: Angle | float = 90) -> Module:
    return _builtin(
        TURN_LEFT, render.TurtleCode.TURN_LEFT.value, angle=_as_angle(angle)
    )


def turn_right(angle: Angle | float = 90) -> Module:
    return _builtin(
        TURN_RIGHT, render.TurtleCode.TURN_RIGHT.value, angle=_as_angle(angle)
    )


def branch() -> Module:
    return _builtin(BRANCH, render.TurtleCode.BRANCH.value)


def end_branch() -> Module:
    return _builtin(END_BRANCH, render.TurtleCode.END_BRANCH.value)


def roll_left(angle: Angle | float = 90) -> Module:
    return _builtin(
        ROLL_LEFT, render.TurtleCode.ROLL_LEFT.value, angle=_as_angle(angle)
    )


def roll_right(angle: Angle | float = 90) -> Module:
    return _builtin(
        ROLL_RIGHT, render.TurtleCode.ROLL_RIGHT.value, angle=_as_angle(angle)
    )


def pitch_up(angle: Angle | float = 30) -> Module:
    return _builtin(PITCH_UP, render.TurtleCode.PITCH_UP.value, angle=_as_angle(angle))


def pitch_down(angle: Angle | float = 30) -> Module:
    return _builtin(
        PITCH_DOWN, render.TurtleCode.PITCH_DOWN.value, angle=_as_angle(angle)
    )


def roll_up_to_vertical() -> Module:
    return _builtin(ROLL_UP_TO_VERTICAL, render.TurtleCode.ROLL_UP_TO_VERTICAL.value)


def set_line_width(width: float = 1.0) -> Module:
    _require(width >= 0, "line width must be >= 0")
    return _builtin(
        SET_LINE_WIDTH, render.TurtleCode.SET_LINE_WIDTH.value, width=float(width)
    )


def set_color(color: Color = Color.BLACK) -> Module:
    return _builtin(SET_COLOR, render.TurtleCode.SET_COLOR.value, color=color)


def cylinder(
    length: float = 1.0, radius: float = 0.1, color: Color | None = None
) -> Module:
    return _builtin(
        CYLINDER,
        render.TurtleCode.CYLINDER.value,
        length=float(length),
        radius=float(radius),
        color=color,
    )


def cone(
    length: float = 1.0,
    radius_top: float = 0.0,
    radius_bottom: float = 0.1,
    color: Color | None = None,
) -> Module:
    return _builtin(
        CONE,
        render.TurtleCode.CONE.value,
        length=float(length),
        radius_top=float(radius_top),
        radius_bottom=float(radius_bottom),
        color=color,
    )


def sphere(radius: float = 0.1, color: Color | None = None) -> Module:
    return _builtin(
        SPHERE, render.TurtleCode.SPHERE.value, radius=float(radius), color=color
    )


_CONSTRUCTORS: dict[str, Callable[..., Module]] = {
    DRAW: draw,
    MOVE: move,
    TURN_LEFT: turn_left,
    TURN_RIGHT: turn_right,
    BRANCH: branch,
    END_BRANCH: end_branch,
    ROLL_LEFT: roll_left,
    ROLL_RIGHT: roll_right,
    PITCH_UP: pitch_up,
    PITCH_DOWN: pitch_down,
    ROLL_UP_TO_VERTICAL: roll_up_to_vertical,
    SET_LINE_WIDTH: set_line_width,
    SET_COLOR: set_color,
    CYLINDER: cylinder,
    CONE: cone,
    SPHERE: sphere,
}


def iter_render_2d(state: Iterable[Module]) -> Iterator[RenderCommand]:
    """Flatten the 2D draw instructions of a state, in order."""
    for m in state:
        yield from m.render_2d
