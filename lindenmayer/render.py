"""Draw-instruction vocabulary attached to modules.

The engine carries these values around and hands them to renderers; it never
interprets them. Renderers walk the evolved state, read each module's
``render_2d`` list or ``render_3d`` instruction and apply it to a running
turtle (position, heading, pen), using ``Branch``/``EndBranch`` as a
save/restore stack.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from lindenmayer.errors import _require


class TurtleCode(str, Enum):
    # 2D only
    SET_LINE_WIDTH = "!"
    SET_COLOR = "'"
    # 2D and 3D
    BRANCH = "["
    END_BRANCH = "]"
    MOVE = "f"
    DRAW = "F"
    TURN_RIGHT = "-"
    TURN_LEFT = "+"
    IGNORE = " "
    # 3D only
    ROLL_LEFT = "\\"
    ROLL_RIGHT = "/"
    PITCH_UP = "^"
    PITCH_DOWN = "&"
    ROLL_UP_TO_VERTICAL = "$"
    CYLINDER = "||"
    CONE = "/\\"
    SPHERE = "o"


@dataclass(frozen=True)
class Angle:
    """An angle, stored in radians."""

    radians: float = 0.0

    @property
    def degrees(self) -> float:
        return math.degrees(self.radians)

    @classmethod
    def from_degrees(cls, degrees: float) -> Angle:
        return cls(math.radians(degrees))

    @classmethod
    def from_radians(cls, radians: float) -> Angle:
        return cls(float(radians))

    def __add__(self, other: Angle) -> Angle:
        return Angle(self.radians + other.radians)

    def __sub__(self, other: Angle) -> Angle:
        return Angle(self.radians - other.radians)

    def __neg__(self) -> Angle:
        return Angle(-self.radians)

    def __mul__(self, factor: float) -> Angle:
        return Angle(self.radians * factor)

    def __str__(self) -> str:
        return f"{self.degrees:g}°"


def degrees(value: float) -> Angle:
    return Angle.from_degrees(value)


def radians(value: float) -> Angle:
    return Angle.from_radians(value)


@dataclass(frozen=True)
class Color:
    red: float
    green: float
    blue: float
    alpha: float = 1.0

    BLACK: ClassVar[Color]

    def __post_init__(self) -> None:
        for name in ("red", "green", "blue", "alpha"):
            value = getattr(self, name)
            _require(
                isinstance(value, (int, float)) and 0.0 <= value <= 1.0,
                f"color.{name} must be a number between 0 and 1",
            )


Color.BLACK = Color(0.0, 0.0, 0.0)


# -------------------------
# Commands
# -------------------------


@dataclass(frozen=True)
class RenderCommand:
    code: ClassVar[TurtleCode] = TurtleCode.IGNORE
    is_2d: ClassVar[bool] = True
    is_3d: ClassVar[bool] = True

    @property
    def name(self) -> str:
        return self.code.value


@dataclass(frozen=True)
class Ignore(RenderCommand):
    code = TurtleCode.IGNORE


@dataclass(frozen=True)
class Branch(RenderCommand):
    code = TurtleCode.BRANCH


@dataclass(frozen=True)
class EndBranch(RenderCommand):
    code = TurtleCode.END_BRANCH


@dataclass(frozen=True)
class Move(RenderCommand):
    code = TurtleCode.MOVE
    length: float = 1.0


@dataclass(frozen=True)
class Draw(RenderCommand):
    code = TurtleCode.DRAW
    length: float = 1.0


@dataclass(frozen=True)
class TurnLeft(RenderCommand):
    code = TurtleCode.TURN_LEFT
    angle: Angle = Angle.from_degrees(90)


@dataclass(frozen=True)
class TurnRight(RenderCommand):
    code = TurtleCode.TURN_RIGHT
    angle: Angle = Angle.from_degrees(90)


@dataclass(frozen=True)
class SetLineWidth(RenderCommand):
    code = TurtleCode.SET_LINE_WIDTH
    is_3d = False
    width: float = 1.0


@dataclass(frozen=True)
class SetColor(RenderCommand):
    code = TurtleCode.SET_COLOR
    is_3d = False
    color: Color = Color.BLACK


@dataclass(frozen=True)
class PitchUp(RenderCommand):
    code = TurtleCode.PITCH_UP
    is_2d = False
    angle: Angle = Angle.from_degrees(30)


@dataclass(frozen=True)
class PitchDown(RenderCommand):
    code = TurtleCode.PITCH_DOWN
    is_2d = False
    angle: Angle = Angle.from_degrees(30)


@dataclass(frozen=True)
class RollLeft(RenderCommand):
    code = TurtleCode.ROLL_LEFT
    is_2d = False
    angle: Angle = Angle.from_degrees(90)


@dataclass(frozen=True)
class RollRight(RenderCommand):
    code = TurtleCode.ROLL_RIGHT
    is_2d = False
    angle: Angle = Angle.from_degrees(90)


@dataclass(frozen=True)
class RollUpToVertical(RenderCommand):
    """Roll the heading so the left vector is level with the horizon."""

    code = TurtleCode.ROLL_UP_TO_VERTICAL
    is_2d = False


@dataclass(frozen=True)
class Cylinder(RenderCommand):
    code = TurtleCode.CYLINDER
    is_2d = False
    length: float = 1.0
    radius: float = 0.1
    color: Color | None = None


@dataclass(frozen=True)
class Cone(RenderCommand):
    code = TurtleCode.CONE
    is_2d = False
    length: float = 1.0
    radius_top: float = 0.0
    radius_bottom: float = 0.1
    color: Color | None = None


@dataclass(frozen=True)
class Sphere(RenderCommand):
    code = TurtleCode.SPHERE
    is_2d = False
    radius: float = 0.1
    color: Color | None = None


IGNORE = Ignore()
