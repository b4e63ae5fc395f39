"""A catalog of example grammars.

Most come from "The Algorithmic Beauty of Plants" (Prusinkiewicz and
Lindenmayer). Each factory returns a fresh grammar at generation 0.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from lindenmayer import modules as m
from lindenmayer.errors import ConfigError
from lindenmayer.grammar import Grammar
from lindenmayer.modules import Module, module
from lindenmayer.prng import RandomSource
from lindenmayer.render import Color, Cylinder, Draw, SetColor, SetLineWidth

# -------------------------
# Algae
# -------------------------


def algae() -> Grammar:
    """A -> AB, B -> A; state lengths follow the Fibonacci sequence."""
    a = module("A")
    b = module("B")
    return (
        Grammar.create(a)
        .rewrite("A", lambda _: [a, b])
        .rewrite("B", lambda _: [a])
    )


# -------------------------
# Curves
# -------------------------


def koch_curve() -> Grammar:
    """Quadratic Koch curve: F -> F+F-F-F+F."""
    return Grammar.create(m.draw(10)).rewrite(
        m.DRAW,
        lambda _: [
            m.draw(10),
            m.turn_left(90),
            m.draw(10),
            m.turn_right(90),
            m.draw(10),
            m.turn_right(90),
            m.draw(10),
            m.turn_left(90),
            m.draw(10),
        ],
    )


_F = module("F", render_2d=[Draw(10)])
_G = module("G", render_2d=[Draw(10)])


def sierpinski_triangle() -> Grammar:
    return (
        Grammar.create(
            [_F, m.turn_right(120), _G, m.turn_right(120), _G, m.turn_right(120)]
        )
        .rewrite(
            "F",
            lambda _: [
                _F,
                m.turn_right(120),
                _G,
                m.turn_left(120),
                _F,
                m.turn_left(120),
                _G,
                m.turn_right(120),
                _F,
            ],
        )
        .rewrite("G", lambda _: [_G, _G])
    )


def dragon_curve() -> Grammar:
    return (
        Grammar.create(_F)
        .rewrite("F", lambda _: [_F, m.turn_left(90), _G])
        .rewrite("G", lambda _: [_F, m.turn_right(90), _G])
    )


# -------------------------
# Plants
# -------------------------

_LEAF_GREEN = Color(0.3, 0.56, 0.0)

_LEAF = module(
    "Leaf",
    "L",
    render_2d=[SetLineWidth(3), SetColor(_LEAF_GREEN), Draw(5)],
)
_STEM = module("Stem", "I", render_2d=[Draw(5)])


def fractal_tree() -> Grammar:
    return (
        Grammar.create(_LEAF)
        .rewrite(
            "Leaf",
            lambda leaf: [
                _STEM,
                m.branch(),
                m.turn_left(45),
                leaf,
                m.end_branch(),
                m.turn_right(45),
                leaf,
            ],
        )
        .rewrite("Stem", lambda stem: [stem, stem])
    )


_X = module("X")


def barnsley_fern() -> Grammar:
    return (
        Grammar.create(_X)
        .rewrite(
            "X",
            lambda x: [
                _F,
                m.turn_left(25),
                m.branch(),
                m.branch(),
                x,
                m.end_branch(),
                m.turn_right(25),
                x,
                m.end_branch(),
                m.turn_right(25),
                _F,
                m.branch(),
                m.turn_right(25),
                _F,
                x,
                m.end_branch(),
                m.turn_left(25),
                x,
            ],
        )
        .rewrite("F", lambda f: [f, f])
    )


_SPROUT = module("Sprout", "S")


def _grow_sprout(sprout: Module, random: RandomSource) -> list[Module]:
    angle = random.uniform(15, 35)
    turn = m.turn_left(angle) if random.boolean(0.5) else m.turn_right(angle)
    return [_STEM, m.branch(), turn, sprout, m.end_branch(), sprout]


def _grow_stem(stem: Module, random: RandomSource) -> list[Module]:
    if random.boolean(0.3):
        return [stem, stem]
    return [stem]


def random_bush(seed: int = 42) -> Grammar:
    """A stochastic bush; the same seed always grows the same bush."""
    return (
        Grammar.create(_SPROUT, random=seed)
        .rewrite("Sprout", _grow_sprout)
        .rewrite("Stem", _grow_stem)
    )


# -------------------------
# Monopodial tree (Honda)
# -------------------------


@dataclass(frozen=True)
class MonopodialParameters:
    trunk_contraction: float = 0.9  # r1
    branch_contraction: float = 0.6  # r2
    branch_angle: float = 45  # a0, from the trunk
    lateral_branch_angle: float = 45  # a2, for lateral axes
    divergence: float = 137.5  # d
    width_contraction: float = 0.707  # wr
    trunk_length: float = 10.0
    trunk_diameter: float = 1.0


# Figure 2.6 of ABOP, panels A-D.
FIGURE_2_6 = {
    "a": MonopodialParameters(),
    "b": MonopodialParameters(trunk_contraction=0.9, branch_contraction=0.9),
    "c": MonopodialParameters(trunk_contraction=0.9, branch_contraction=0.8),
    "d": MonopodialParameters(
        trunk_contraction=0.9,
        branch_contraction=0.7,
        branch_angle=30,
        lateral_branch_angle=-30,
    ),
}

_BARK = Color(0.7, 0.3, 0.1, 0.95)


def _segment(kind: str, label: str, length: float, diameter: float) -> Module:
    return module(kind, label, length=length, diameter=diameter)


def _wood(length: float, diameter: float) -> Module:
    return module(
        "Wood",
        "A°",
        render_3d=Cylinder(length, diameter / 2, _BARK),
        length=length,
        diameter=diameter,
    )


def _trunk(a: Module, p: MonopodialParameters) -> list[Module]:
    # A(s,w) -> !(w) F(s) [ &(a0) B(s*r2, w*wr) ] /(d) A(s*r1, w*wr)
    s, w = a["length"], a["diameter"]
    return [
        _wood(s, w),
        m.branch(),
        m.pitch_down(p.branch_angle),
        _segment("MainBranch", "B", s * p.branch_contraction, w * p.width_contraction),
        m.end_branch(),
        m.roll_left(p.divergence),
        _segment("Trunk", "A", s * p.trunk_contraction, w * p.width_contraction),
    ]


def _main_branch(b: Module, p: MonopodialParameters) -> list[Module]:
    # B(s,w) -> !(w) F(s) [ -(a2) @V C(s*r2, w*wr) ] C(s*r1, w*wr)
    s, w = b["length"], b["diameter"]
    return [
        _wood(s, w),
        m.branch(),
        m.turn_right(p.lateral_branch_angle),
        m.roll_up_to_vertical(),
        _segment(
            "SecondaryBranch", "C", s * p.branch_contraction, w * p.width_contraction
        ),
        m.end_branch(),
        _segment(
            "SecondaryBranch", "C", s * p.trunk_contraction, w * p.width_contraction
        ),
    ]


def _secondary_branch(c: Module, p: MonopodialParameters) -> list[Module]:
    # C(s,w) -> !(w) F(s) [ +(a2) @V B(s*r2, w*wr) ] B(s*r1, w*wr)
    s, w = c["length"], c["diameter"]
    return [
        _wood(s, w),
        m.branch(),
        m.turn_left(p.lateral_branch_angle),
        m.roll_up_to_vertical(),
        _segment("MainBranch", "B", s * p.branch_contraction, w * p.width_contraction),
        m.end_branch(),
        _segment("MainBranch", "B", s * p.trunk_contraction, w * p.width_contraction),
    ]


def monopodial_tree(parameters: MonopodialParameters | None = None) -> Grammar:
    p = parameters if parameters is not None else MonopodialParameters()
    return (
        Grammar.create(
            _segment("Trunk", "A", p.trunk_length, p.trunk_diameter), parameters=p
        )
        .rewrite("Trunk", _trunk)
        .rewrite("MainBranch", _main_branch)
        .rewrite("SecondaryBranch", _secondary_branch)
    )


# -------------------------
# Sympodial tree (Aono and Kunii)
# -------------------------


@dataclass(frozen=True)
class SympodialParameters:
    first_contraction: float = 0.9  # r1
    second_contraction: float = 0.7  # r2
    first_angle: float = 10  # a1
    second_angle: float = 60  # a2
    width_contraction: float = 0.707  # wr
    axiom_length: float = 10.0
    axiom_diameter: float = 1.0


# Figure 2.7 of ABOP, panels A-D.
FIGURE_2_7 = {
    "a": SympodialParameters(second_contraction=0.7, first_angle=5, second_angle=65),
    "b": SympodialParameters(second_contraction=0.7, first_angle=10, second_angle=60),
    "c": SympodialParameters(second_contraction=0.8, first_angle=20, second_angle=50),
    "d": SympodialParameters(second_contraction=0.8, first_angle=35, second_angle=35),
}


def _apex(a: Module, p: SympodialParameters) -> list[Module]:
    # A(l,w) -> !(w) F(l) [ &(a1) B(l*r1, w*wr) ] /(180) [ &(a2) B(l*r2, w*wr) ]
    s, w = a["length"], a["diameter"]
    return [
        _wood(s, w),
        m.branch(),
        m.pitch_down(p.first_angle),
        _segment("Lateral", "B", s * p.first_contraction, w * p.width_contraction),
        m.end_branch(),
        m.roll_left(180),
        m.branch(),
        m.pitch_down(p.second_angle),
        _segment("Lateral", "B", s * p.second_contraction, w * p.width_contraction),
        m.end_branch(),
    ]


def _lateral(b: Module, p: SympodialParameters) -> list[Module]:
    # B(l,w) -> !(w) F(l) [ +(a1) $ B(l*r1, w*wr) ] [ -(a2) $ B(l*r2, w*wr) ]
    s, w = b["length"], b["diameter"]
    return [
        _wood(s, w),
        m.branch(),
        m.turn_right(p.first_angle),
        m.roll_up_to_vertical(),
        _segment("Lateral", "B", s * p.first_contraction, w * p.width_contraction),
        m.end_branch(),
        m.branch(),
        m.turn_left(p.second_angle),
        m.roll_up_to_vertical(),
        _segment("Lateral", "B", s * p.second_contraction, w * p.width_contraction),
        m.end_branch(),
    ]


def sympodial_tree(parameters: SympodialParameters | None = None) -> Grammar:
    p = parameters if parameters is not None else FIGURE_2_7["a"]
    return (
        Grammar.create(
            _segment("Apex", "A", p.axiom_length, p.axiom_diameter), parameters=p
        )
        .rewrite("Apex", _apex)
        .rewrite("Lateral", _lateral)
    )


# -------------------------
# Context-sensitive signal
# -------------------------


def signal_propagation() -> Grammar:
    """A signal B travels one step right per generation: B < a -> B, B -> a."""
    signal = module("B")
    cell = module("a")
    return (
        Grammar.create([signal, cell, cell, cell, cell, cell])
        .rewrite("a", lambda _left, _a: [signal], left="B")
        .rewrite("B", lambda _: [cell])
    )


# -------------------------
# Catalog
# -------------------------


@dataclass(frozen=True)
class Example:
    name: str
    description: str
    factory: Callable[..., Grammar]
    stochastic: bool = False


CATALOG: dict[str, Example] = {
    ex.name: ex
    for ex in (
        Example("algae", "Lindenmayer's original algae, A -> AB, B -> A", algae),
        Example("koch_curve", "quadratic Koch curve", koch_curve),
        Example("sierpinski_triangle", "Sierpinski triangle", sierpinski_triangle),
        Example("dragon_curve", "Heighway dragon curve", dragon_curve),
        Example("fractal_tree", "binary fractal tree with leaves", fractal_tree),
        Example("barnsley_fern", "fern-like bracketed plant", barnsley_fern),
        Example("random_bush", "stochastic bush (seeded)", random_bush, True),
        Example("monopodial_tree", "Honda's monopodial tree (3D)", monopodial_tree),
        Example(
            "sympodial_tree", "Aono and Kunii's sympodial tree (3D)", sympodial_tree
        ),
        Example(
            "signal_propagation",
            "context-sensitive signal moving along a filament",
            signal_propagation,
        ),
    )
}


def get_example(name: str, seed: int | None = None) -> Grammar:
    example = CATALOG.get(name)
    if example is None:
        known = ", ".join(sorted(CATALOG))
        raise ConfigError(f"Unknown example '{name}' (known: {known})")
    if example.stochastic and seed is not None:
        return example.factory(seed)
    return example.factory()
