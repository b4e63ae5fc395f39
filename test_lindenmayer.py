#!/usr/bin/env python3
import dataclasses
import math
from typing import Any

import pytest

import lindenmayer as ls
from lindenmayer import modules as m
from lindenmayer import render
from lindenmayer.config import EvolutionLimits
from lindenmayer.context import context_at
from lindenmayer.errors import (
    ConfigError,
    EvolutionError,
    GrowthLimitError,
    ProbabilityError,
    RuleError,
    RuleMismatchError,
)
from lindenmayer.grammar import Grammar
from lindenmayer.modules import Module, module
from lindenmayer.prng import RandomSource, SeededGenerator, create_random_source, noise
from lindenmayer.rules import Rule, RuleShape

A = module("A")
B = module("B")
C = module("C")


def _kinds(grammar: Grammar) -> list[str]:
    return [mod.kind for mod in grammar.state]


def _coin_grammar(seed: int) -> Grammar:
    """One stochastic rule: Seed -> Left or Right on a fair draw."""
    return Grammar.create(module("Seed"), random=seed).rewrite(
        "Seed",
        lambda _s, rng: [module("Left")] if rng.boolean(0.5) else [module("Right")],
    )


class TestNoise:
    def test_pure(self) -> None:
        assert noise(42, 7) == noise(42, 7)
        assert [noise(1, i) for i in range(5)] == [noise(1, i) for i in range(5)]

    def test_unsigned_32_bit(self) -> None:
        for position in range(200):
            value = noise(123, position)
            assert 0 <= value < 2**32

    def test_seed_changes_sequence(self) -> None:
        a = [noise(1, i) for i in range(10)]
        b = [noise(2, i) for i in range(10)]
        assert a != b

    def test_positions_differ(self) -> None:
        values = {noise(9, i) for i in range(100)}
        assert len(values) > 95


class TestSeededGenerator:
    def test_next_advances_position(self) -> None:
        gen = SeededGenerator(5)
        assert gen.position == 0
        first = gen.next()
        assert gen.position == 1
        assert first == noise(5, 0)
        assert gen.next() == noise(5, 1)

    def test_reset_keeps_seed(self) -> None:
        gen = SeededGenerator(5)
        gen.next()
        gen.next()
        gen.reset()
        assert gen.position == 0
        assert gen.seed == 5

    def test_reset_with_new_seed(self) -> None:
        gen = SeededGenerator(5)
        gen.next()
        gen.reset(11)
        assert (gen.seed, gen.position) == (11, 0)

    def test_seed_is_masked_to_32_bits(self) -> None:
        assert SeededGenerator(2**32 + 5).seed == 5

    def test_negative_seed_rejected(self) -> None:
        with pytest.raises(ConfigError):
            SeededGenerator(-1)


class TestRandomSource:
    def setup_method(self) -> None:
        self.rng = create_random_source(42)

    def test_each_helper_draws_once(self) -> None:
        self.rng.p()
        self.rng.boolean(0.5)
        self.rng.coin()
        self.rng.uniform(0, 10)
        self.rng.randint(1, 6)
        self.rng.choose(["a", "b", "c"])
        self.rng.choose(["a", "b"], weights=[1, 3])
        assert self.rng.position == 7

    def test_replay_is_identical(self) -> None:
        def draws(rng: RandomSource) -> list[Any]:
            return [
                rng.p(),
                rng.boolean(0.25),
                rng.uniform(-1, 1),
                rng.randint(0, 100),
                rng.choose("xyz"),
                rng.coin(),
            ]

        assert draws(create_random_source(7)) == draws(create_random_source(7))

    def test_reset_replays(self) -> None:
        first = [self.rng.p() for _ in range(5)]
        self.rng.reset()
        assert self.rng.position == 0
        assert [self.rng.p() for _ in range(5)] == first

    @pytest.mark.parametrize("bad", [0, 1, 0.0, 1.0, -0.5, 1.5, True, "0.5"])
    def test_boolean_rejects_out_of_range(self, bad: Any) -> None:
        with pytest.raises(ProbabilityError):
            self.rng.boolean(bad)
        assert self.rng.position == 0

    def test_probability_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            self.rng.boolean(2)

    def test_p_in_unit_interval(self) -> None:
        for _ in range(200):
            assert 0.0 <= self.rng.p() < 1.0

    def test_uniform_bounds(self) -> None:
        for _ in range(200):
            assert 2.0 <= self.rng.uniform(2.0, 3.0) < 3.0
        with pytest.raises(ConfigError):
            self.rng.uniform(3.0, 2.0)

    def test_randint_inclusive(self) -> None:
        seen = {self.rng.randint(1, 3) for _ in range(300)}
        assert seen == {1, 2, 3}

    def test_choose_uniform(self) -> None:
        seen = {self.rng.choose(["a", "b", "c"]) for _ in range(300)}
        assert seen == {"a", "b", "c"}

    def test_choose_weighted_skips_zero_weight(self) -> None:
        for _ in range(100):
            assert self.rng.choose(["never", "always"], weights=[0, 1]) == "always"

    def test_choose_invalid(self) -> None:
        with pytest.raises(ConfigError):
            self.rng.choose([])
        with pytest.raises(ConfigError):
            self.rng.choose(["a", "b"], weights=[1])
        with pytest.raises(ConfigError):
            self.rng.choose(["a", "b"], weights=[0, 0])
        with pytest.raises(ConfigError):
            self.rng.choose(["a", "b"], weights=[-1, 2])

    def test_snapshot_restore(self) -> None:
        self.rng.p()
        snap = self.rng.snapshot()
        expected = self.rng.p()
        self.rng.p()
        self.rng.restore(snap)
        assert self.rng.position == 1
        assert self.rng.p() == expected


class TestModules:
    def test_user_module(self) -> None:
        stem = module("Stem", "I", render_2d=[render.Draw(5)], length=5)
        assert stem.kind == "Stem"
        assert stem.label == "I"
        assert str(stem) == "I"
        assert stem["length"] == 5
        assert stem.get("missing", 1) == 1
        assert "length" in stem
        assert stem.render_2d == (render.Draw(5),)
        assert stem.render_3d == render.IGNORE

    def test_label_defaults_to_kind(self) -> None:
        assert module("A").label == "A"

    def test_empty_kind_rejected(self) -> None:
        with pytest.raises(ConfigError):
            Module(kind="")

    def test_immutable(self) -> None:
        stem = module("Stem", length=5)
        with pytest.raises(dataclasses.FrozenInstanceError):
            stem.kind = "Leaf"  # type: ignore[misc]
        with pytest.raises(TypeError):
            stem.data["length"] = 6  # type: ignore[index]

    def test_with_data_returns_copy(self) -> None:
        stem = module("Stem", length=5)
        grown = stem.with_data(length=6)
        assert grown["length"] == 6
        assert stem["length"] == 5
        assert grown.kind == stem.kind

    def test_properties_sorted(self) -> None:
        seg = module("Seg", width=2, length=5)
        assert seg.properties() == [("length", 5), ("width", 2)]

    def test_equality(self) -> None:
        assert m.draw(10) == m.draw(10)
        assert m.draw(10) != m.draw(5)
        assert hash(m.draw(10)) == hash(m.draw(10))

    def test_builtin_draw(self) -> None:
        d = m.draw(10)
        assert d.kind == m.DRAW
        assert d.label == "F"
        assert d.render_2d == (render.Draw(10.0),)
        assert d.render_3d == render.Draw(10.0)

    def test_builtin_turns_take_degrees(self) -> None:
        t = m.turn_left(45)
        assert t["angle"].degrees == pytest.approx(45)
        assert t.render_2d == (render.TurnLeft(render.Angle.from_degrees(45)),)
        assert m.turn_right().render_3d == render.TurnRight(
            render.Angle.from_degrees(90)
        )

    def test_3d_only_builtins_have_no_2d(self) -> None:
        for mod in (
            m.pitch_up(),
            m.pitch_down(),
            m.roll_left(),
            m.roll_right(),
            m.roll_up_to_vertical(),
            m.cylinder(),
            m.cone(),
            m.sphere(),
        ):
            assert mod.render_2d == ()
            assert mod.render_3d.is_3d
        assert m.pitch_up().render_3d == render.PitchUp(render.Angle.from_degrees(30))

    def test_2d_only_builtins_ignore_3d(self) -> None:
        assert m.set_line_width(3).render_3d == render.IGNORE
        assert m.set_color(render.Color.BLACK).render_2d == (
            render.SetColor(render.Color.BLACK),
        )

    def test_with_data_rebuilds_builtin_render(self) -> None:
        d = m.draw(10).with_data(length=5.0)
        assert d.render_2d == (render.Draw(5.0),)
        assert d.render_3d == render.Draw(5.0)

    def test_with_data_validates_builtins(self) -> None:
        turned = m.turn_left(90).with_data(angle=45)
        assert isinstance(turned["angle"], render.Angle)
        assert turned.render_2d == (
            render.TurnLeft(render.Angle.from_degrees(45)),
        )
        assert turned.label == "+"
        assert m.draw(1).with_data(length=3)["length"] == 3.0
        with pytest.raises(ConfigError):
            m.set_line_width(1).with_data(width=-5)
        with pytest.raises(ConfigError):
            m.draw(1).with_data(colour="red")

    def test_iter_render_2d(self) -> None:
        cmds = list(m.iter_render_2d([m.draw(1), m.pitch_up(), m.turn_left(90)]))
        assert [c.code for c in cmds] == [
            render.TurtleCode.DRAW,
            render.TurtleCode.TURN_LEFT,
        ]


class TestRenderValues:
    def test_angle(self) -> None:
        a = render.Angle.from_degrees(180)
        assert a.radians == pytest.approx(math.pi)
        assert (a + render.Angle.from_degrees(90)).degrees == pytest.approx(270)
        assert (-a).degrees == pytest.approx(-180)

    def test_color_range(self) -> None:
        render.Color(0.1, 0.2, 0.3, 1.0)
        with pytest.raises(ConfigError):
            render.Color(1.5, 0, 0)

    def test_command_names(self) -> None:
        assert render.Branch().name == "["
        assert render.Cylinder().name == "||"
        assert not render.SetLineWidth().is_3d


class TestContextWindow:
    def setup_method(self) -> None:
        self.state = [A, B, C]

    def test_boundaries(self) -> None:
        first = context_at(self.state, 0)
        assert first.left is None
        assert first.current == A
        assert first.right == B

        last = context_at(self.state, 2)
        assert last.left == B
        assert last.right is None

    def test_second_module_has_left_neighbour(self) -> None:
        assert context_at(self.state, 1).left == A

    def test_legacy_left_boundary(self) -> None:
        assert context_at(self.state, 1, legacy_left_boundary=True).left is None
        assert context_at(self.state, 2, legacy_left_boundary=True).left == B

    def test_single_module(self) -> None:
        window = context_at([A], 0)
        assert window.left is None
        assert window.right is None
        assert window.kinds == (None, "A", None)

    def test_out_of_range(self) -> None:
        with pytest.raises(IndexError):
            context_at(self.state, 3)
        with pytest.raises(IndexError):
            context_at(self.state, -1)


class TestRule:
    def test_shapes(self) -> None:
        produce = lambda *_: []  # noqa: E731
        assert Rule.create("A", produce).shape is RuleShape.DIRECT
        assert Rule.create("A", produce, left="B").shape is RuleShape.LEFT_DIRECT
        assert Rule.create("A", produce, right="B").shape is RuleShape.DIRECT_RIGHT
        assert (
            Rule.create("A", produce, left="B", right="C").shape
            is RuleShape.LEFT_DIRECT_RIGHT
        )

    def test_prototype_module_as_kind(self) -> None:
        rule = Rule.create(A, lambda _: [], left=B)
        assert (rule.left, rule.direct) == ("B", "A")

    def test_invalid_kind(self) -> None:
        with pytest.raises(ConfigError):
            Rule.create("", lambda _: [])
        with pytest.raises(ConfigError):
            Rule.create(3, lambda _: [])  # type: ignore[arg-type]

    def test_required_neighbour_must_be_present(self) -> None:
        rule = Rule.create("A", lambda _l, _a: [], left="B")
        assert not rule.matches(context_at([A, B], 0))
        assert rule.matches(context_at([B, A], 1))
        assert not rule.matches(context_at([C, A], 1))

    def test_unnamed_neighbour_is_dont_care(self) -> None:
        rule = Rule.create("A", lambda _: [])
        assert rule.matches(context_at([A], 0))
        assert rule.matches(context_at([B, A, C], 1))

    def test_guard_runs_only_after_kind_match(self) -> None:
        calls: list[Module] = []

        def guard(mod: Module) -> bool:
            calls.append(mod)
            return True

        rule = Rule.create("A", lambda _: [], where=guard)
        assert not rule.matches(context_at([B], 0))
        assert calls == []
        assert rule.matches(context_at([A], 0))
        assert calls == [A]

    def test_guard_false_blocks_match(self) -> None:
        rule = Rule.create("A", lambda _: [], where=lambda _: False)
        assert rule.matches_kinds(context_at([A], 0))
        assert not rule.matches(context_at([A], 0))

    def test_argument_order(self) -> None:
        seen: list[Any] = []

        def produce(*args: Any) -> list[Module]:
            seen.extend(args)
            return [C]

        rng = create_random_source(1)
        params = {"angle": 30}
        rule = Rule.create(
            "A",
            produce,
            left="B",
            right="C",
            with_parameters=True,
            with_random=True,
        )
        out = rule.produce(context_at([B, A, C], 1), params, rng)
        assert out == [C]
        assert seen == [B, A, C, params, rng]

    def test_produce_on_mismatch_fails_loudly(self) -> None:
        rule = Rule.create("A", lambda _: [B])
        with pytest.raises(RuleMismatchError):
            rule.produce(context_at([B], 0))

    def test_produce_must_return_modules(self) -> None:
        window = context_at([A], 0)
        with pytest.raises(RuleError):
            Rule.create("A", lambda _: ["B"]).produce(window)
        with pytest.raises(RuleError):
            Rule.create("A", lambda _: B).produce(window)  # type: ignore[arg-type]
        with pytest.raises(RuleError):
            Rule.create("A", lambda _: None).produce(window)  # type: ignore

    def test_generator_production(self) -> None:
        rule = Rule.create("A", lambda a: (x for x in (a, B)))
        assert rule.produce(context_at([A], 0)) == [A, B]

    def test_random_rule_without_source(self) -> None:
        rule = Rule.create("A", lambda _a, _r: [], with_random=True)
        with pytest.raises(RuleError):
            rule.produce(context_at([A], 0))

    def test_str(self) -> None:
        rule = Rule.create("A", lambda *_: [], left="B", right="C", where=bool)
        assert str(rule) == "Rule(B < A > C) [guarded]"


class TestGrammarScenarios:
    def test_algae(self) -> None:
        algae = Grammar.create(A).rewrite("A", lambda _: [A, B]).rewrite(
            "B", lambda _: [A]
        )
        assert algae.evolved(1).summary() == "AB"
        assert algae.evolved(2).summary() == "ABA"
        assert algae.evolved(3).summary() == "ABAAB"
        assert [len(algae.evolved(n)) for n in range(5)] == [1, 2, 3, 5, 8]

    def test_koch_single_rule(self) -> None:
        koch = Grammar.create(m.draw(10)).rewrite(
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
        evolved = koch.evolve()
        assert _kinds(evolved) == [
            m.DRAW,
            m.TURN_LEFT,
            m.DRAW,
            m.TURN_RIGHT,
            m.DRAW,
            m.TURN_RIGHT,
            m.DRAW,
            m.TURN_LEFT,
            m.DRAW,
        ]

    def test_stochastic_rule_seed_42(self) -> None:
        first = _coin_grammar(42).evolve().labels()
        for _ in range(3):
            assert _coin_grammar(42).evolve().labels() == first
        others = {tuple(_coin_grammar(seed).evolve().labels()) for seed in range(40)}
        assert others == {("Left",), ("Right",)}


class TestGrammarEvolution:
    def test_identity_rewrite_keeps_order(self) -> None:
        x, y = module("X"), module("Y")
        g = Grammar.create([x, A, y]).rewrite("A", lambda _: [A, B])
        evolved = g.evolve()
        assert evolved.state == (x, A, B, y)
        assert evolved.new_indicators == (False, True, True, False)

    def test_first_match_wins(self) -> None:
        g = (
            Grammar.create(A)
            .rewrite("A", lambda _: [B])
            .rewrite("A", lambda _: [C])
        )
        assert g.evolve().state == (B,)

    def test_guard_falls_through_to_next_rule(self) -> None:
        g = (
            Grammar.create(A)
            .rewrite("A", lambda _: [B], where=lambda _: False)
            .rewrite("A", lambda _: [C])
        )
        assert g.evolve().state == (C,)

    def test_rules_see_one_snapshot(self) -> None:
        # B < A -> C must read the old state even though B is rewritten first.
        g = (
            Grammar.create([B, A])
            .rewrite("B", lambda _: [C])
            .rewrite("A", lambda _b, _a: [C], left="B")
        )
        assert g.evolve().state == (C, C)

    def test_right_context(self) -> None:
        g = Grammar.create([A, B, A]).rewrite("A", lambda _a, _b: [C], right="B")
        assert g.evolve().state == (C, B, A)

    def test_full_context(self) -> None:
        g = Grammar.create([B, A, C, A, C]).rewrite(
            "A", lambda _l, _a, _r: [module("D")], left="B", right="C"
        )
        assert _kinds(g.evolve()) == ["B", "D", "C", "A", "C"]

    def test_empty_production_deletes(self) -> None:
        g = Grammar.create([A, B]).rewrite("B", lambda _: [])
        assert g.evolve().state == (A,)

    def test_deleting_everything_fails(self) -> None:
        g = Grammar.create([A]).rewrite("A", lambda _: [])
        with pytest.raises(EvolutionError):
            g.evolve()

    def test_evolve_returns_new_value(self) -> None:
        g = Grammar.create(A).rewrite("A", lambda _: [A, B])
        evolved = g.evolve()
        assert g.state == (A,)
        assert g.generation == 0
        assert evolved.generation == 1
        assert evolved.rules == g.rules

    def test_rewrite_returns_new_value(self) -> None:
        g = Grammar.create(A)
        g2 = g.rewrite("A", lambda _: [B])
        assert len(g.rules) == 0
        assert len(g2.rules) == 1
        assert g2.state == g.state

    def test_evolved_zero_and_negative(self) -> None:
        g = Grammar.create(A).rewrite("A", lambda _: [A, B])
        assert g.evolved(0) is g
        with pytest.raises(ConfigError):
            g.evolved(-1)

    def test_reset_restores_axiom(self) -> None:
        g = Grammar.create(A).rewrite("A", lambda _: [A, B]).rewrite(
            "B", lambda _: [A]
        )
        back = g.evolved(5).reset()
        assert back.state == g.state
        assert back.generation == 0
        assert len(back.rules) == 2
        assert all(back.new_indicators)

    def test_empty_axiom_rejected(self) -> None:
        with pytest.raises(ConfigError):
            Grammar.create([])

    def test_inspect(self) -> None:
        seg = module("Seg", length=3)
        g = Grammar.create([A, seg]).rewrite("A", lambda _: [A])
        evolved = g.evolve()
        info = evolved.inspect(1)
        assert info.module == seg
        assert not info.is_new
        assert info.properties == (("length", 3),)
        assert evolved.inspect(0).is_new
        with pytest.raises(IndexError):
            evolved.inspect(2)

    def test_kind_counts(self) -> None:
        g = Grammar.create([A, B, A])
        assert g.kind_counts() == {"A": 2, "B": 1}


class TestGrammarCapabilities:
    def test_parameters_reach_rules(self) -> None:
        @dataclasses.dataclass(frozen=True)
        class Growth:
            factor: float = 2.0

        seg = module("Seg", length=1.0)
        g = Grammar.create(seg, parameters=Growth()).rewrite(
            "Seg", lambda s, p: [s.with_data(length=s["length"] * p.factor)]
        )
        assert g.evolved(3).state[0]["length"] == pytest.approx(8.0)
        g3 = g.with_parameters(Growth(factor=3.0))
        assert g3.evolved(2).state[0]["length"] == pytest.approx(9.0)

    def test_guard_sees_parameters(self) -> None:
        g = Grammar.create(A, parameters={"grow": False}).rewrite(
            "A", lambda _a, _p: [A, A], where=lambda _a, p: p["grow"]
        )
        assert len(g.evolve()) == 1
        assert len(g.with_parameters({"grow": True}).evolve()) == 2

    def test_random_position_carries_across_generations(self) -> None:
        g = Grammar.create(A, random=3).rewrite(
            "A", lambda a, rng: [a] if rng.p() < 2 else []
        )
        assert g.random is not None
        g.evolve()
        assert g.random.position == 1
        g.evolved(2)
        assert g.random.position == 3

    def test_reset_rewinds_random(self) -> None:
        g = _coin_grammar(9)
        first = g.evolve().labels()
        assert g.random is not None and g.random.position == 1
        rewound = g.evolve().reset()
        assert g.random.position == 0
        assert rewound.evolve().labels() == first

    def test_set_seed(self) -> None:
        g = _coin_grammar(1)
        g.evolve()
        assert g.set_seed(2) is g
        assert g.random is not None
        assert (g.random.seed, g.random.position) == (2, 0)

    def test_set_seed_attaches_source(self) -> None:
        g = Grammar.create(A)
        seeded = g.set_seed(5)
        assert g.random is None
        assert seeded.random is not None and seeded.random.seed == 5

    def test_random_rule_needs_source(self) -> None:
        with pytest.raises(ConfigError):
            Grammar.create(A).rewrite("A", lambda _a, _r: [], with_random=True)

    def test_determinism_from_fresh_grammars(self) -> None:
        def build(seed: int) -> Grammar:
            return Grammar.create(A, random=seed).rewrite(
                "A",
                lambda a, rng: [a, rng.choose([A, B, C])] if rng.coin() else [a],
            )

        assert build(42).evolved(6).state == build(42).evolved(6).state

    def test_legacy_left_boundary(self) -> None:
        g = Grammar.create([B, A]).rewrite("A", lambda _b, _a: [C], left="B")
        assert g.evolve().state == (B, C)
        legacy = Grammar.create([B, A], legacy_left_boundary=True).rewrite(
            "A", lambda _b, _a: [C], left="B"
        )
        assert legacy.evolve().state == (B, A)

    def test_guard_draws_before_production(self) -> None:
        seen: list[tuple[str, int]] = []

        def guard(_a: Module, rng: RandomSource) -> bool:
            seen.append(("guard", rng.position))
            rng.p()
            return True

        def grow(a: Module, rng: RandomSource) -> list[Module]:
            seen.append(("produce", rng.position))
            rng.p()
            return [a]

        g = Grammar.create([A, A], random=5).rewrite("A", grow, where=guard)
        g.evolve()
        assert seen == [("guard", 0), ("produce", 1), ("guard", 2), ("produce", 3)]
        assert g.random is not None and g.random.position == 4

    def test_rejecting_guard_still_draws(self) -> None:
        g = (
            Grammar.create(A, random=5)
            .rewrite("A", lambda _a, _r: [B], where=lambda _a, rng: rng.p() > 1)
            .rewrite("A", lambda _a, rng: [C] if rng.p() < 1 else [])
        )
        assert g.evolve().state == (C,)
        assert g.random is not None and g.random.position == 2


class TestEvolutionFailures:
    def test_production_failure_is_wrapped(self) -> None:
        def boom(_b: Module, _r: RandomSource) -> list[Module]:
            raise RuntimeError("boom")

        g = (
            Grammar.create([A, B], random=3)
            .rewrite("A", lambda a, rng: [a] if rng.p() >= 0 else [])
            .rewrite("B", boom)
        )
        with pytest.raises(EvolutionError) as excinfo:
            g.evolve()
        err = excinfo.value
        assert err.index == 1
        assert err.kind == "B"
        assert err.generation == 1
        assert isinstance(err.__cause__, RuntimeError)
        # The draw made for A was rolled back with the failed generation.
        assert g.random is not None and g.random.position == 0
        assert g.state == (A, B)

    def test_guard_failure_is_wrapped(self) -> None:
        g = Grammar.create(A).rewrite("A", lambda _: [B], where=lambda a: a["nope"])
        with pytest.raises(EvolutionError) as excinfo:
            g.evolve()
        assert isinstance(excinfo.value.__cause__, KeyError)

    def test_bad_production_output_is_wrapped(self) -> None:
        g = Grammar.create(A).rewrite("A", lambda _: ["B"])
        with pytest.raises(EvolutionError) as excinfo:
            g.evolve()
        assert isinstance(excinfo.value.__cause__, RuleError)

    def test_failure_in_later_generation_rewinds_whole_call(self) -> None:
        def build(fail_on: int | None) -> Grammar:
            calls: list[int] = []

            def grow(a: Module, rng: RandomSource) -> list[Module]:
                value = rng.p()
                calls.append(1)
                if len(calls) == fail_on:
                    raise RuntimeError("third generation")
                return [a.with_data(value=value)]

            return Grammar.create(A, random=7).rewrite("A", grow)

        g = build(fail_on=3)
        with pytest.raises(EvolutionError) as excinfo:
            g.evolved(3)
        assert excinfo.value.generation == 3
        assert g.random is not None and g.random.position == 0
        assert g.evolved(2).state == build(fail_on=None).evolved(2).state

    def test_symbol_limit(self) -> None:
        g = (
            Grammar.create(A, limits=EvolutionLimits(max_symbols=10))
            .rewrite("A", lambda _: [A, B])
            .rewrite("B", lambda _: [A])
        )
        assert len(g.evolved(4)) == 8
        with pytest.raises(GrowthLimitError):
            g.evolved(5)

    def test_generation_limit(self) -> None:
        g = Grammar.create(A, limits=EvolutionLimits(max_generations=2)).rewrite(
            "A", lambda _: [A]
        )
        two = g.evolved(2)
        with pytest.raises(GrowthLimitError):
            two.evolve()

    def test_invalid_limits(self) -> None:
        with pytest.raises(ConfigError):
            EvolutionLimits(max_symbols=0)
        with pytest.raises(ConfigError):
            EvolutionLimits(max_generations=-1)
        unbounded = EvolutionLimits.unbounded()
        assert unbounded.max_symbols is None
        assert unbounded.max_generations is None


class TestFunctionalApi:
    def test_create_evolve_reset_state(self) -> None:
        rules = [Rule.create("A", lambda _: [A, B]), Rule.create("B", lambda _: [A])]
        g = ls.create(A, rules)
        evolved = ls.evolve(g, 3)
        assert [mod.label for mod in ls.state(evolved)] == list("ABAAB")
        assert ls.state(ls.reset(evolved)) == (A,)

    def test_evolve_defaults_to_one_generation(self) -> None:
        g = ls.create(A, [Rule.create("A", lambda _: [A, B])])
        assert len(ls.evolve(g)) == 2

    def test_seeding(self) -> None:
        rng = ls.create_random_source(42)
        g = ls.create(A, random=rng)
        assert g.random is rng
        ls.set_seed(g, 7)
        assert rng.seed == 7
