"""
The cork evaluator: reduces an expression tree to a signed 64-bit integer.

Arithmetic is two's-complement with wraparound. Shifting left by 64 or more
gives 0; shifting right by 64 or more gives 0 or -1 depending on the sign.
"""

from typing import Any

from cork.cork_datatypes import (
    Operator, Expression, Number, BinaryOp, PreviousAnswer,
    Evaluate, Convert,
    EvalError, DivideByZeroError, ShiftCountError,
)

_WIDTH = 64
_MASK = (1 << _WIDTH) - 1
_SIGN_BIT = 1 << (_WIDTH - 1)


def wrap64(value: int) -> int:
    """Reduces an int to the signed 64-bit range by two's-complement wraparound."""
    value &= _MASK
    return value - (1 << _WIDTH) if value & _SIGN_BIT else value


def _trunc_div(left: int, right: int) -> int:
    # Python's // floors; the evaluator truncates toward zero
    q = abs(left) // abs(right)
    return q if (left < 0) == (right < 0) else -q


def _apply(op: Operator, left: int, right: int) -> int:
    match op:
        case Operator.ADD:
            return wrap64(left + right)
        case Operator.SUB:
            return wrap64(left - right)
        case Operator.MUL:
            return wrap64(left * right)
        case Operator.DIV:
            if right == 0:
                raise DivideByZeroError()
            return wrap64(_trunc_div(left, right))
        case Operator.REM:
            if right == 0:
                raise DivideByZeroError()
            return left - right * _trunc_div(left, right)
        case Operator.BIT_AND:
            return left & right
        case Operator.BIT_OR:
            return left | right
        case Operator.BIT_XOR:
            return left ^ right
        case Operator.SHIFT_LEFT:
            if right < 0:
                raise ShiftCountError(right)
            if right >= _WIDTH:
                return 0
            return wrap64(left << right)
        case Operator.SHIFT_RIGHT:
            if right < 0:
                raise ShiftCountError(right)
            # Python's >> on negative ints is already arithmetic
            return left >> min(right, _WIDTH)
    raise EvalError(f"Unknown operator: {op!r}")


class Evaluator:
    """The cork execution engine. Holds no state between calls."""

    def eval(self, node: Any, ans: int = 0) -> int:
        """Evaluates an Expression, or the expression inside an Evaluate/Convert command."""
        if isinstance(node, (Evaluate, Convert)):
            node = node.expr
        return self._eval(node, ans)

    def _eval(self, node: Expression, ans: int) -> int:
        if isinstance(node, Number):
            return node.value
        if node is PreviousAnswer:
            return ans
        if isinstance(node, BinaryOp):
            left = self._eval(node.left, ans)
            right = self._eval(node.right, ans)
            return _apply(node.op, left, right)
        raise TypeError(f"Cannot evaluate {node!r}")


def evaluate(expr: Any, ans: int = 0) -> int:
    """Pure shortcut for Evaluator().eval(expr, ans)."""
    return Evaluator().eval(expr, ans)
