"""
Session state and the line runner.

A Session is owned by the caller and threaded explicitly through every
line; nothing in the core keeps state between calls. CommandRunner parses a
line, evaluates or applies it against the session, and reports a structured
ExecutionResult. The session only changes after a line succeeds.
"""

from __future__ import annotations

import os
import sys

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Literal, Optional

from cork.cork_datatypes import (
    Mode, OutputRadix,
    Command, Evaluate, Configure, Convert, NoOp,
    CorkError, ParseError,
    InvalidDirectiveKey, InvalidDirectiveValue, DirectiveNotAllowed,
)
from cork.cork_parser import LineParser
from cork.cork_interpreter import Evaluator
from cork.cork_printer import Printer


class ConfigKey(Enum):
    """Keys accepted by the `set` directive."""
    OUTPUT_FORMAT = "of"
    MODE = "mode"


_OUTPUT_FORMAT_VALUES = {
    "hex": OutputRadix.HEX,
    "dec": OutputRadix.DECIMAL,
    "oct": OutputRadix.OCTAL,
    "bin": OutputRadix.BINARY,
}
_MODE_VALUES = {
    "hex": Mode.HEX,
    "dec": Mode.DEC,
}


@dataclass
class Session:
    """Per-session state: input mode, running answer, output radix, punctuation."""
    mode: Mode = Mode.HEX
    ans: int = 0
    output_radix: OutputRadix = OutputRadix.HEX
    punctuate: bool = False

    @classmethod
    def from_config(cls, config: Any) -> Session:
        return cls(
            mode=config.mode,
            output_radix=config.output_radix,
            punctuate=config.punctuate_output,
        )


def resolve_output_radix(command: Command, default: OutputRadix) -> OutputRadix:
    """The radix a command's result is displayed in."""
    if isinstance(command, Convert):
        return command.radix
    return default


def apply_directive(session: Session, args: List[str]) -> None:
    """Applies a `set` directive to the session, or raises without touching it."""
    if not args:
        raise InvalidDirectiveKey("")
    raw_key, values = args[0], args[1:]
    try:
        key = ConfigKey(raw_key)
    except ValueError:
        raise InvalidDirectiveKey(raw_key) from None
    if not values:
        raise InvalidDirectiveValue(raw_key, None)
    if len(values) > 1:
        raise InvalidDirectiveValue(raw_key, " ".join(values))
    value = values[0]

    match key:
        case ConfigKey.OUTPUT_FORMAT:
            radix = _OUTPUT_FORMAT_VALUES.get(value)
            if radix is None:
                raise InvalidDirectiveValue(raw_key, value)
            session.output_radix = radix
        case ConfigKey.MODE:
            mode = _MODE_VALUES.get(value)
            if mode is None:
                raise InvalidDirectiveValue(raw_key, value)
            session.mode = mode


@dataclass
class ExecutionResult:
    """The structured result of running one line."""
    status: Literal['success', 'error']
    command: Optional[Command] = None
    value: Optional[int] = None
    radix: Optional[OutputRadix] = None
    output: Optional[str] = None
    error: Optional[CorkError] = None
    error_message: Optional[str] = None
    source: str = ""

    def format_error(self) -> str:
        """Formats an error message, pointing at the column for parse errors."""
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")
        if isinstance(self.error, ParseError):
            caret = " " * self.error.position + "^"
            return f"{msg}\n  {self.error.text}\n  {caret}"
        return msg


class CommandRunner:
    """Parses, evaluates and applies cork lines against a Session."""

    def __init__(self, session: Optional[Session] = None, allow_directives: bool = True):
        self.session = session if session is not None else Session()
        self.allow_directives = allow_directives
        self.parser = LineParser()
        self.evaluator = Evaluator()

    def _dbg(self, *parts):
        if os.environ.get("CORK_DEBUG"):
            try:
                print("[DBG]", *parts, file=sys.stderr)
            except Exception:
                pass

    def run_command(self, command: Command, source: str = "") -> ExecutionResult:
        """Executes an already parsed command. Raises CorkError on failure."""
        session = self.session
        printer = Printer(session.output_radix, session.punctuate)

        if command is NoOp:
            return ExecutionResult('success', command=command, output="", source=source)

        if isinstance(command, Configure):
            if not self.allow_directives:
                raise DirectiveNotAllowed()
            apply_directive(session, command.args)
            self._dbg(f"{command} -> mode={session.mode.value} of={session.output_radix.keyword}")
            return ExecutionResult('success', command=command, source=source)

        if isinstance(command, (Evaluate, Convert)):
            value = self.evaluator.eval(command, session.ans)
            radix = resolve_output_radix(command, session.output_radix)
            session.ans = value
            return ExecutionResult(
                'success', command=command, value=value, radix=radix,
                output=printer.pformat(value, radix), source=source,
            )

        raise TypeError(f"Unknown command: {command!r}")

    def handle_line(self, line: str) -> ExecutionResult:
        """Runs one line and reports the outcome; never raises CorkError."""
        try:
            command = self.parser.parse(line, self.session.mode)
            return self.run_command(command, line)
        except CorkError as e:
            self._dbg(f"{type(e).__name__} for {line!r}: {e}")
            return ExecutionResult(
                'error', error=e, error_message=f"{type(e).__name__}: {e}", source=line,
            )
