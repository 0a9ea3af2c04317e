"""
Defines the core data types for the cork expression language.

This module provides the radix and operator enumerations, the immutable
expression tree built by the transformer, the per-line Command values and
the error taxonomy shared by the parser, evaluator and runtime.
"""

from enum import Enum
from typing import List, Optional, FrozenSet

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


# =================================================================
# Errors
# =================================================================

class CorkError(Exception):
    """Base class for every error the cork core reports."""
    pass


class ParseError(CorkError):
    """A line did not match the grammar.

    Carries the 0-based offset of the offending input, its 1-based column and
    the set of productions that would have been accepted there.
    """
    def __init__(self, text: str, position: int, expected: FrozenSet[str], found: Optional[str] = None):
        self.text = text
        self.position = position
        self.column = position + 1
        self.expected = frozenset(expected)
        self.found = found
        super().__init__(self._describe())

    def _describe(self) -> str:
        wanted = ", ".join(sorted(self.expected)) or "nothing"
        if self.found:
            return f"unexpected {self.found!r} at col {self.column}, expected {wanted}"
        return f"unexpected input at col {self.column}, expected {wanted}"


class LiteralRangeError(CorkError):
    """A literal has digits invalid for its base, or does not fit in 64 bits."""
    def __init__(self, literal: str, base: int, reason: str = "invalid digits"):
        super().__init__(f"failed to parse base-{base} literal {literal!r}: {reason}")
        self.literal = literal
        self.base = base
        self.reason = reason


class EvalError(CorkError):
    """Raised when an expression cannot be evaluated."""
    pass


class DivideByZeroError(EvalError):
    def __init__(self):
        super().__init__("Cannot divide by 0")


class ShiftCountError(EvalError):
    def __init__(self, count: int):
        super().__init__(f"Cannot shift by a negative amount ({count})")
        self.count = count


class DirectiveError(CorkError):
    """Base class for errors raised while applying a `set` directive."""
    pass


class InvalidDirectiveKey(DirectiveError):
    def __init__(self, key: str):
        super().__init__(f"Invalid key: {key}")
        self.key = key


class InvalidDirectiveValue(DirectiveError):
    def __init__(self, key: str, value: Optional[str]):
        if value is None:
            super().__init__(f"Missing value for key {key}")
        else:
            super().__init__(f"Invalid value {value} for key {key}")
        self.key = key
        self.value = value


class DirectiveNotAllowed(DirectiveError):
    def __init__(self):
        super().__init__("Set directive not allowed in inline-expression")


class ConfigError(CorkError):
    """The configuration file could not be read or holds invalid values."""
    pass


# =================================================================
# Enumerations
# =================================================================

class Mode(Enum):
    """Selects how an unprefixed literal is read."""
    HEX = "hex"
    DEC = "dec"


class LiteralRadix(Enum):
    """How a literal was written in the input. Value is the numeric base."""
    BINARY = "bin"
    OCTAL = "oct"
    DECIMAL = "dec"
    DECIMAL_PREFIXED = "dec_with_prefix"
    HEX = "hex"
    HEX_PREFIXED = "hex_with_prefix"

    @property
    def base(self) -> int:
        return _LITERAL_BASES[self]

    @property
    def prefix(self) -> str:
        return _LITERAL_PREFIXES[self]


_LITERAL_BASES = {
    LiteralRadix.BINARY: 2,
    LiteralRadix.OCTAL: 8,
    LiteralRadix.DECIMAL: 10,
    LiteralRadix.DECIMAL_PREFIXED: 10,
    LiteralRadix.HEX: 16,
    LiteralRadix.HEX_PREFIXED: 16,
}

_LITERAL_PREFIXES = {
    LiteralRadix.BINARY: "0b",
    LiteralRadix.OCTAL: "0o",
    LiteralRadix.DECIMAL: "",
    LiteralRadix.DECIMAL_PREFIXED: "0d",
    LiteralRadix.HEX: "",
    LiteralRadix.HEX_PREFIXED: "0x",
}


class OutputRadix(Enum):
    """The base a result is displayed in. Value is the display name."""
    HEX = "Hex"
    DECIMAL = "Decimal"
    OCTAL = "Octal"
    BINARY = "Binary"

    @classmethod
    def from_keyword(cls, keyword: str) -> 'OutputRadix':
        """Maps the short keywords used by `to` and `set of` (hex, dec, oct, bin)."""
        return _RADIX_KEYWORDS[keyword]

    @property
    def keyword(self) -> str:
        return _RADIX_NAMES[self]


_RADIX_KEYWORDS = {
    "hex": OutputRadix.HEX,
    "dec": OutputRadix.DECIMAL,
    "oct": OutputRadix.OCTAL,
    "bin": OutputRadix.BINARY,
}
_RADIX_NAMES = {v: k for k, v in _RADIX_KEYWORDS.items()}


class Operator(Enum):
    """A binary operator. Value is its source symbol."""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    REM = "%"
    BIT_AND = "&"
    BIT_OR = "|"
    BIT_XOR = "^"
    SHIFT_LEFT = "<<"
    SHIFT_RIGHT = ">>"


# =================================================================
# Expression tree
# =================================================================

class Expression:
    """Base class for expression tree nodes. Nodes are never mutated after construction."""
    __slots__ = ()


class Number(Expression):
    """A literal, tagged with the radix flavor it was written in."""
    __slots__ = ("value", "radix")

    def __init__(self, value: int, radix: LiteralRadix = LiteralRadix.DECIMAL):
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "radix", radix)

    def __setattr__(self, name, value):
        raise AttributeError("Number is immutable")

    def __repr__(self) -> str:
        return f"Number({self.value}, {self.radix.name})"

    def __eq__(self, other):
        return isinstance(other, Number) and self.value == other.value and self.radix == other.radix

    def __hash__(self):
        return hash((self.value, self.radix))


class BinaryOp(Expression):
    """`left op right`. Children are owned exclusively by this node."""
    __slots__ = ("left", "right", "op")

    def __init__(self, left: Expression, right: Expression, op: Operator):
        object.__setattr__(self, "left", left)
        object.__setattr__(self, "right", right)
        object.__setattr__(self, "op", op)

    def __setattr__(self, name, value):
        raise AttributeError("BinaryOp is immutable")

    def __repr__(self) -> str:
        return f"BinaryOp({self.left!r} {self.op.value} {self.right!r})"

    def __eq__(self, other):
        return (
            isinstance(other, BinaryOp) and
            self.op == other.op and
            self.left == other.left and
            self.right == other.right
        )

    def __hash__(self):
        return hash((self.left, self.right, self.op))


class _PreviousAnswer(Expression):
    """Internal helper class for the stateless `ans` node."""
    __slots__ = ()

    def __repr__(self):
        return "PreviousAnswer<>"

# Singleton instance for the `ans` token
PreviousAnswer = _PreviousAnswer()


# =================================================================
# Commands
# =================================================================

class Command:
    """One line worth of input, classified."""
    __slots__ = ()


class Evaluate(Command):
    __slots__ = ("expr",)

    def __init__(self, expr: Expression):
        self.expr = expr

    def __repr__(self) -> str:
        return f"Evaluate({self.expr!r})"

    def __eq__(self, other):
        return isinstance(other, Evaluate) and self.expr == other.expr


class Configure(Command):
    """A `set` directive. Arguments are kept verbatim and in order."""
    __slots__ = ("args",)

    def __init__(self, args: List[str]):
        self.args = list(args)

    def __repr__(self) -> str:
        return f"Configure({self.args!r})"

    def __str__(self) -> str:
        return "set " + " ".join(self.args)

    def __eq__(self, other):
        return isinstance(other, Configure) and self.args == other.args


class Convert(Command):
    """An explicit (`... to hex`) or implicit (bare literal) conversion."""
    __slots__ = ("expr", "radix")

    def __init__(self, expr: Expression, radix: OutputRadix):
        self.expr = expr
        self.radix = radix

    def __repr__(self) -> str:
        return f"Convert({self.expr!r}, {self.radix.name})"

    def __str__(self) -> str:
        return f"convert to {self.radix.value}"

    def __eq__(self, other):
        return isinstance(other, Convert) and self.expr == other.expr and self.radix == other.radix


class _NoOp(Command):
    __slots__ = ()

    def __repr__(self):
        return "NoOp<>"

# Singleton for blank lines
NoOp = _NoOp()
