"""
Command-line front end: inline evaluation, script files and the REPL.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

try:
    import readline
except ImportError:
    readline = None  # Not available on every platform; the REPL still works without it.

from cork import __version__
from cork.cork_config import Config, read_config
from cork.cork_datatypes import CorkError, Configure, NoOp, DirectiveNotAllowed
from cork.cork_printer import Printer
from cork.cork_runtime import CommandRunner, Session, resolve_output_radix

HISTORY_FILE = ".cork_history"


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cork",
        description="A calculator for hex-lovers: integer arithmetic in hex, decimal, octal and binary.",
    )
    parser.add_argument("-e", "--expr", nargs="+", metavar="EXPR", help="evaluate <EXPR> and print it")
    parser.add_argument("-i", "--interactive", action="store_true", help="start interactive mode")
    parser.add_argument("-p", "--punctuate-output", action="store_true", help="punctuate the output number")
    parser.add_argument("-c", "--config", metavar="PATH", help="load config file from <PATH>")
    parser.add_argument("-f", "--file", metavar="PATH", help="load script file from <PATH> to run line by line")
    base = parser.add_mutually_exclusive_group()
    base.add_argument("-a", "--all", action="store_true", help="print in all bases (only in expr eval mode)")
    base.add_argument("-x", "--hex", action="store_true", help="print in hex (only in expr eval mode)")
    base.add_argument("-o", "--oct", action="store_true", help="print in oct (only in expr eval mode)")
    base.add_argument("-d", "--dec", action="store_true", help="print in dec (only in expr eval mode)")
    base.add_argument("-b", "--bin", action="store_true", help="print in bin (only in expr eval mode)")
    parser.add_argument("-s", "--history", action="store_true", help="generate history file")
    parser.add_argument(
        "-m", "--mode", choices=["dec", "hex"], default=None,
        help="mode for numbers without prefix, either 'dec' or 'hex' (default: from config, else hex)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def inline_evaluate(expr_str: str, config: Config, all_radices: bool = False) -> int:
    """Evaluates a single expression with ans = 0 and prints the result."""
    runner = CommandRunner(Session.from_config(config), allow_directives=False)
    printer = Printer(config.output_radix, config.punctuate_output)
    try:
        command = runner.parser.parse(expr_str, config.mode)
    except CorkError as e:
        print(f'Failed to parse "{expr_str}": {e}', file=sys.stderr)
        return 1

    if command is NoOp:
        print("Empty expression!")
        return 0
    if isinstance(command, Configure):
        print(DirectiveNotAllowed(), file=sys.stderr)
        return 1

    try:
        result = runner.run_command(command, expr_str)
    except CorkError as e:
        print(f'Failed to evaluate "{expr_str}": {e}', file=sys.stderr)
        return 1

    if all_radices:
        for line in printer.pformat_all(result.value):
            print(line)
    else:
        print(printer.pformat(result.value, resolve_output_radix(command, config.output_radix)))
    return 0


def script_evaluate(file_path: str, config: Config) -> int:
    """Runs a script line by line; stops at the first failing line."""
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error: cannot read {file_path}: {e}", file=sys.stderr)
        return 1

    runner = CommandRunner(Session.from_config(config))
    for line in source.splitlines():
        result = runner.handle_line(line)
        if result.status == 'error':
            print(result.format_error(), file=sys.stderr)
            return 1
        if result.output is not None:
            print(result.output)
    return 0


def welcome(session: Session):
    print(f"Cork, version {__version__}")
    print(f"Current mode: {session.mode.value}")
    print("Press Ctrl + D or Ctrl + C to exit.")


def interactive(config: Config) -> int:
    session = Session.from_config(config)
    runner = CommandRunner(session)
    if config.header:
        welcome(session)

    history_path = Path.home() / HISTORY_FILE
    if readline is not None:
        try:
            readline.read_history_file(str(history_path))
            print()
        except OSError:
            print("No existing history!\n")

    # REPL Loop
    while True:
        try:
            line = input(config.prompt)
        except (EOFError, KeyboardInterrupt):
            print("\nExiting ... ")
            break

        result = runner.handle_line(line)
        if result.status == 'error':
            print(result.format_error(), file=sys.stderr)
            continue
        if result.output is not None:
            print(result.output)

    if config.history and readline is not None:
        try:
            readline.write_history_file(str(history_path))
        except OSError as e:
            print(f"Failed to save history: {e}", file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run an expression or script when given, otherwise start the interactive REPL."""
    options = build_arg_parser().parse_args(argv)
    try:
        config = read_config(options.config).override_from_options(options)
    except CorkError as e:
        print(f"Failed to parse config: {e}", file=sys.stderr)
        return 1

    if options.expr:
        return inline_evaluate(" ".join(options.expr), config, all_radices=options.all)
    if options.file:
        return script_evaluate(options.file, config)
    return interactive(config)
