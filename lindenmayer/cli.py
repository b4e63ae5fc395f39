"""Command-line front end over the example catalog.

Run:
  lindenmayer list
  lindenmayer show algae -n 5
  lindenmayer stats random_bush -n 6 --seed 7
  python -m lindenmayer --help
"""

from __future__ import annotations

import argparse
import logging
import sys

from lindenmayer.config import EvolutionLimits
from lindenmayer.errors import LSystemError, _require
from lindenmayer.examples import CATALOG, get_example
from lindenmayer.grammar import Grammar

logger = logging.getLogger(__name__)

HELP_EPILOG = r"""
EXAMPLES

  lindenmayer list
      Print the names of the built-in grammars.

  lindenmayer show koch_curve -n 2
      Evolve a grammar and print the labels of its modules, one generation
      per line when --all is given.

  lindenmayer stats barnsley_fern -n 4
      Print module counts for each generation and per kind for the last one.

Stochastic grammars (random_bush) take --seed; the same seed always produces
the same output. Growth is capped by --max-symbols (default 1000000) because
L-systems grow exponentially.
"""


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lindenmayer",
        description="Evolve built-in L-system grammars and inspect the result.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=HELP_EPILOG,
    )
    p.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list", help="List the built-in example grammars.")

    for name, help_text in (
        ("show", "Evolve a grammar and print its state."),
        ("stats", "Evolve a grammar and print module counts."),
    ):
        sp = sub.add_parser(
            name,
            help=help_text,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        sp.add_argument("name", help="Example name (see `lindenmayer list`).")
        sp.add_argument(
            "-n",
            "--generations",
            type=int,
            default=3,
            help="Number of generations to evolve (default: 3).",
        )
        sp.add_argument(
            "--seed", type=int, default=None, help="Seed for stochastic grammars."
        )
        sp.add_argument(
            "--max-symbols",
            type=int,
            default=1_000_000,
            help="Abort if a generation grows beyond this many modules.",
        )
        if name == "show":
            sp.add_argument(
                "--all",
                action="store_true",
                help="Print every generation, not just the last.",
            )
            sp.add_argument(
                "--sep", default="", help="Separator between labels (default: none)."
            )

    return p


# -------------------------
# Commands
# -------------------------


def _load(name: str, generations: int, seed: int | None, max_symbols: int) -> Grammar:
    _require(generations >= 0, "generations must be >= 0")
    grammar = get_example(name, seed)
    return grammar.with_limits(EvolutionLimits(max_symbols=max_symbols))


def cmd_list() -> None:
    width = max(len(name) for name in CATALOG)
    for name, example in CATALOG.items():
        print(f"{name:<{width}}  {example.description}")


def cmd_show(
    name: str,
    generations: int,
    seed: int | None,
    max_symbols: int,
    show_all: bool,
    sep: str,
) -> None:
    grammar = _load(name, generations, seed, max_symbols)
    if show_all:
        print(f"0: {grammar.summary(sep)}")
    for _ in range(generations):
        grammar = grammar.evolve()
        if show_all:
            print(f"{grammar.generation}: {grammar.summary(sep)}")
    if not show_all:
        print(grammar.summary(sep))


def cmd_stats(name: str, generations: int, seed: int | None, max_symbols: int) -> None:
    grammar = _load(name, generations, seed, max_symbols)
    print(f"generation 0: {len(grammar)} modules")
    for _ in range(generations):
        grammar = grammar.evolve()
        new = sum(grammar.new_indicators)
        print(f"generation {grammar.generation}: {len(grammar)} modules ({new} new)")
    print("kinds:")
    for kind, count in grammar.kind_counts().most_common():
        print(f"  {kind}: {count}")


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        if args.cmd == "list":
            cmd_list()
        elif args.cmd == "show":
            cmd_show(
                args.name,
                args.generations,
                args.seed,
                args.max_symbols,
                args.all,
                args.sep,
            )
        elif args.cmd == "stats":
            cmd_stats(args.name, args.generations, args.seed, args.max_symbols)
        else:
            raise AssertionError("unreachable")
    except LSystemError as e:
        logger.debug("command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 0
