"""cork: an integer calculator for mixed-radix (hex, decimal, octal, binary) work."""

__version__ = "0.1.0"

from cork.cork_datatypes import (
    Mode, LiteralRadix, OutputRadix, Operator,
    Number, BinaryOp, PreviousAnswer,
    Evaluate, Configure, Convert, NoOp,
    CorkError, ParseError, LiteralRangeError, EvalError, DivideByZeroError,
    ShiftCountError, DirectiveError, InvalidDirectiveKey, InvalidDirectiveValue,
    DirectiveNotAllowed, ConfigError,
)
from cork.cork_parser import LineParser, parse_line
from cork.cork_interpreter import Evaluator, evaluate
from cork.cork_printer import Printer
from cork.cork_runtime import Session, CommandRunner, ExecutionResult, resolve_output_radix
