"""Command-line interface: check expression trees stored as JSON."""

from __future__ import annotations

import argparse
import sys
import typing

from agentzero import __version__
from agentzero.analyzer import SatisfiabilityProblemAnalyzer, is_candidate
from agentzero.core.config import AnalyzerConfiguration
from agentzero.core.logging import LoggerConfigurator, configure_loggers, getLogger
from agentzero.errors import ExpressionFormatError
from agentzero.expr.serialization import load_expression
from agentzero.smt.solver import VerdictKind

logger = getLogger("AgentZero")

EXIT_SATISFIABLE = 0
EXIT_UNSATISFIABLE = 1
EXIT_INCONCLUSIVE = 2
EXIT_INPUT_ERROR = 3

_EXIT_CODES = {
    VerdictKind.SATISFIABLE: EXIT_SATISFIABLE,
    VerdictKind.UNSATISFIABLE: EXIT_UNSATISFIABLE,
    VerdictKind.INCONCLUSIVE: EXIT_INCONCLUSIVE,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="agentzero",
        description="Decide whether boolean C# expressions can ever be true.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Check one expression tree
  agentzero check condition.json

  # Give up after two seconds and keep logs next to the input
  agentzero check condition.json --timeout-ms 2000 --log-dir ./logs

Exit status: 0 satisfiable, 1 unsatisfiable, 2 inconclusive or not
analyzable, 3 invalid input.
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Check a JSON expression tree")
    check.add_argument("tree", help="Path to the JSON expression tree")
    check.add_argument(
        "--timeout-ms",
        type=int,
        default=None,
        help="Solver timeout in milliseconds, 0 for none (default: from options.json)",
    )
    check.add_argument(
        "--config",
        default=None,
        help="Path to an options.json file (default: ~/.agentzero/options.json)",
    )
    check.add_argument(
        "--log-dir",
        default=None,
        help="Directory for agentzero.log and smt2_problems.smt2",
    )
    check.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Level of the AgentZero loggers",
    )
    check.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Print only the verdict, not the model",
    )
    return parser


def _check(args: argparse.Namespace, out: typing.TextIO, err: typing.TextIO) -> int:
    config = AnalyzerConfiguration(args.config)
    if args.timeout_ms is not None:
        if args.timeout_ms < 0:
            print(f"Error: timeout must be >= 0, got {args.timeout_ms}", file=err)
            return EXIT_INPUT_ERROR
        config["timeout_ms"] = args.timeout_ms

    configure_loggers(args.log_dir if args.log_dir else config.log_dir)
    if args.log_level:
        for name in LoggerConfigurator.available_loggers("AgentZero"):
            LoggerConfigurator.set_level(name, args.log_level)

    try:
        tree = load_expression(args.tree)
    except OSError as e:
        print(f"Error: cannot read '{args.tree}': {e.strerror or e}", file=err)
        return EXIT_INPUT_ERROR
    except ExpressionFormatError as e:
        print(f"Error: invalid expression tree '{args.tree}': {e}", file=err)
        return EXIT_INPUT_ERROR

    if not is_candidate(tree):
        print(f"Not analyzable: '{tree.text}' is not a boolean operator expression", file=out)
        return EXIT_INCONCLUSIVE

    analyzer = SatisfiabilityProblemAnalyzer(config)
    verdict = analyzer.analyze(tree)
    if verdict is None:
        print(f"Not analyzable: '{tree.text}' could not be translated", file=out)
        return EXIT_INCONCLUSIVE

    if args.quiet:
        print(verdict.kind.value, file=out)
    else:
        print(f"'{tree.text}'", file=out)
        print(verdict, file=out)
    return _EXIT_CODES[verdict.kind]


def main(argv: typing.Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    match args.command:
        case "check":
            return _check(args, sys.stdout, sys.stderr)
        case _:
            parser.error(f"unknown command {args.command!r}")


if __name__ == "__main__":
    sys.exit(main())
