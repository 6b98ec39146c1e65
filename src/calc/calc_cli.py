"""
calc CLI Entrypoint.

This module provides the command-line interface of the calc expression
calculator. It evaluates files, inline strings or standard input, and can dump
the token stream instead of evaluating.

Features:
    - Evaluate every line of a file, or an inline string with ``-s``.
    - Launch the interactive REPL when no source is given.
    - Select the integer-only simple dialect with ``--simple``.
    - Restrict digits and blanks to ASCII with ``--ascii``.
    - Print the tokens of the input with ``--tokens``.
    - Load settings from ``--config`` or the ``CALC_CONFIG`` environment variable.

Example usage:
    calc numbers.txt
    calc -s "1 + 2 * 3"
    calc --simple --tokens numbers.txt
    calc --verbose

Exit status:
    0 when the input was processed (expression errors are reported but do not
    change the status), 1 when the input or configuration could not be read,
    2 for an invalid command line.

Functions:
    program_name(argv0: str) -> str:
        Name used as the prefix of diagnostics.

    run_calc(source: str, is_string: bool = False, config: CalcConfig | None = None,
             tokens: bool = False, prog: str = "calc") -> int:
        Evaluates (or tokenizes) a file or string.

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments and dispatches to the appropriate mode.
"""

import argparse
import os
import sys
from typing import TextIO

from calc.calc_config import CalcConfig
from calc.calc_constants import Dialect, TokenKind
from calc.calc_errors import ConfigError, InputError
from calc.calc_repl import report_error, run_session, start_repl
from calc.calc_session import Session


def program_name(argv0: str) -> str:
    """Returns the basename of ``argv0`` without its extension."""
    name = os.path.splitext(os.path.basename(argv0))[0]
    return name or "calc"


def dump_tokens(session: Session, out: TextIO | None = None) -> None:
    """
    Prints every token of the session's input, one block per token.

    Args:
        session (Session): The session whose input is tokenized.
        out (TextIO, optional): Destination stream. Defaults to stdout.

    Raises:
        InputError: If reading the input fails.
    """
    out = out or sys.stdout
    for index, tok in enumerate(session.tokens(), start=1):
        extent = tok.extent
        print(f"Token {index}:", file=out)
        print(
            f"\textent: {tok.line}:{tok.col} [{extent.start}, {extent.end})",
            file=out,
        )
        print(f"\tkind: {tok.kind.value.lower()}", file=out)
        marker = " (ERROR)" if tok.kind == TokenKind.UNKNOWN else ""
        print(f"\tflags: {int(tok.flags)}{marker}", file=out)
        print(f"\ttext: {tok.value!r}", file=out)


def run_calc(
    source: str,
    is_string: bool = False,
    config: CalcConfig | None = None,
    tokens: bool = False,
    prog: str = "calc",
) -> int:
    """
    Run the calculator over a file or an inline string.

    Args:
        source (str): A path, or the expressions themselves when ``is_string`` is set.
        is_string (bool): If True, treats ``source`` as input text. Defaults to False.
        config (CalcConfig | None): Settings; the defaults when omitted.
        tokens (bool): If True, prints the token stream instead of evaluating.
        prog (str): Prefix for diagnostics.

    Returns:
        int: The process exit status.

    Side Effects:
        Prints values (or tokens) to stdout and diagnostics to stderr.
    """
    config = config or CalcConfig()
    if is_string:
        return _run(Session(source, config.dialect, config.ascii_only), config, tokens, prog)
    try:
        f = open(source, encoding="utf-8", newline="")
    except OSError:
        report_error(prog, f"Could not open {source}.")
        return 1
    with f:
        return _run(Session(f, config.dialect, config.ascii_only), config, tokens, prog)


def _run(session: Session, config: CalcConfig, tokens: bool, prog: str) -> int:
    if not tokens:
        return run_session(session, config.verbose, prog)
    try:
        dump_tokens(session)
    except InputError as e:
        report_error(prog, f"An unexpected I/O error occurred.\n\twhat: {e}")
        return 1
    return 0


def build_parser(prog: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog, description="Evaluate integer and boolean expressions."
    )
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--simple",
        action="store_true",
        default=None,
        help="Integers and + - * / % only",
    )
    parser.add_argument(
        "--ascii",
        dest="ascii_only",
        action="store_true",
        default=None,
        help="Only ASCII digits and blanks",
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Print the tokens instead of evaluating"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Print each parsed tree before its value",
    )
    parser.add_argument(
        "--config", metavar="PATH", help="JSON settings file (default: $CALC_CONFIG)"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the calc CLI.

    Dispatches to one of three modes:
    - ``source`` given: evaluate the file (or the string, with ``-s``).
    - no source and ``--tokens``: print the tokens of standard input.
    - no source: start the REPL on standard input.

    Settings from the configuration file are overridden by explicit flags.
    """
    prog = program_name(sys.argv[0] if sys.argv and sys.argv[0] else "calc")
    args = build_parser(prog).parse_args(argv)

    try:
        if args.config:
            config = CalcConfig.load_from_json(args.config)
        else:
            config = CalcConfig.from_env()
    except ConfigError as e:
        report_error(prog, str(e))
        for problem in e.problems:
            print(f" - {problem}", file=sys.stderr)
        return 1

    config = config.merged(
        dialect=Dialect.SIMPLE if args.simple else None,
        ascii_only=args.ascii_only,
        verbose=args.verbose,
    )

    if args.source is not None:
        return run_calc(args.source, args.string, config, args.tokens, prog)
    if args.tokens:
        return _run(Session(sys.stdin, config.dialect, config.ascii_only), config, True, prog)
    return start_repl(config, prog)


if __name__ == "__main__":
    sys.exit(main())
