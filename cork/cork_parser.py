"""
Line parsing: loads the cork grammar once, selects the entry point for the
current mode and turns lark's exceptions into cork ParseErrors.
"""

import os
import sys
from pathlib import Path
from typing import Optional, Union

from lark import Lark
from lark.exceptions import UnexpectedInput, UnexpectedToken, UnexpectedCharacters

from cork.cork_datatypes import Mode, Command, NoOp, ParseError
from cork.cork_transformer import CorkTransformer

GRAMMAR_PATH = Path(__file__).parent / "grammar" / "cork_grammar.lark"

_START_RULES = {
    Mode.HEX: 'line_hex',
    Mode.DEC: 'line_dec',
}

# Grammar terminal -> production name reported in ParseError.expected
_PRODUCTION_NAMES = {
    'HEX_NUM': 'hex',
    'DEC_NUM': 'dec',
    'HEX_PREFIXED_NUM': 'hex_with_prefix',
    'DEC_PREFIXED_NUM': 'dec_with_prefix',
    'OCT_NUM': 'oct',
    'BIN_NUM': 'bin',
    'ANS': 'ans',
    'RADIX': 'radix',
    'ARG': 'arg',
    '_SET': 'set',
    '_TO': 'to',
    'LPAR': '(',
    'RPAR': ')',
    'OR': '|',
    'XOR': '^',
    'AND': '&',
    'LSHIFT': '<<',
    'RSHIFT': '>>',
    'ADD': '+',
    'SUB': '-',
    'MUL': '*',
    'DIV': '/',
    'REM': '%',
    '$END': 'EOI',
    '<END-OF-FILE>': 'EOI',
}


def _dbg(*parts):
    if os.environ.get("CORK_DEBUG"):
        try:
            print("[DBG]", *parts, file=sys.stderr)
        except Exception:
            pass


def coerce_mode(mode: Union[Mode, str]) -> Mode:
    if isinstance(mode, Mode):
        return mode
    try:
        return Mode(mode)
    except ValueError:
        raise ValueError(f"mode {mode!r} is not supported, expected 'hex' or 'dec'") from None


class LineParser:
    """Parses single input lines into Commands."""

    _lark: Optional[Lark] = None
    _transformer: Optional[CorkTransformer] = None

    def __init__(self):
        if LineParser._lark is None:
            LineParser._lark = Lark.open(
                str(GRAMMAR_PATH),
                start=list(_START_RULES.values()),
                parser='lalr',
            )
        if LineParser._transformer is None:
            LineParser._transformer = CorkTransformer()

        self.lark = LineParser._lark
        self.transformer = LineParser._transformer

    def parse_tree(self, line: str, mode: Union[Mode, str] = Mode.HEX):
        """Returns the raw lark tree for a non-blank line, or raises ParseError."""
        start = _START_RULES[coerce_mode(mode)]
        try:
            return self.lark.parse(line, start=start)
        except UnexpectedInput as e:
            raise self._to_parse_error(e, line) from None

    def parse(self, line: str, mode: Union[Mode, str] = Mode.HEX) -> Command:
        """Classifies one line under the given mode.

        Blank lines become NoOp. Raises ParseError for lines that do not match
        the grammar and LiteralRangeError for literals that do but cannot be
        converted.
        """
        text = line.strip()
        if not text:
            return NoOp
        tree = self.parse_tree(text, mode)
        command = self.transformer.transform(tree)
        _dbg(f"parse {text!r} ({coerce_mode(mode).value}) -> {command!r}")
        return command

    def _to_parse_error(self, e: UnexpectedInput, text: str) -> ParseError:
        found = None
        match e:
            case UnexpectedToken(token=token):
                expected = e.expected
                if token.type == '$END':
                    position = len(text)
                else:
                    position = token.start_pos
                    found = str(token)
            case UnexpectedCharacters():
                expected = e.allowed
                position = e.pos_in_stream
                found = text[position:position + 1]
            case _:
                # UnexpectedEOF and anything newer
                expected = getattr(e, 'expected', None) or ()
                position = len(text)
        # The lexer's view over-reports in merged LALR states and never
        # includes $END; ask the parser what it accepts at the failure point.
        interactive = getattr(e, 'interactive_parser', None)
        if interactive is not None:
            expected = interactive.accepts()
        names =frozenset(_PRODUCTION_NAMES.get(name, name) for name in (expected or ()))
        _dbg(f"parse error at {position}: expected {sorted(names)}")
        return ParseError(text, position, names, found)


_default_parser: Optional[LineParser] = None


def parse_line(line: str, mode: Union[Mode, str] = Mode.HEX) -> Command:
    """Module-level shortcut using a shared LineParser."""
    global _default_parser
    if _default_parser is None:
        _default_parser = LineParser()
    return _default_parser.parse(line, mode)
