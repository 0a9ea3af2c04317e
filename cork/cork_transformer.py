"""
Transforms the raw lark parse tree of one line into cork Commands and
Expressions from cork_datatypes.
"""

from lark import Tree, Token

from cork.cork_datatypes import (
    INT64_MIN, INT64_MAX,
    LiteralRadix, OutputRadix, Operator,
    Number, BinaryOp, PreviousAnswer,
    Evaluate, Configure, Convert,
    LiteralRangeError,
)

# Terminal name -> literal flavor
_LITERAL_TERMINALS = {
    'BIN_NUM': LiteralRadix.BINARY,
    'OCT_NUM': LiteralRadix.OCTAL,
    'DEC_NUM': LiteralRadix.DECIMAL,
    'DEC_PREFIXED_NUM': LiteralRadix.DECIMAL_PREFIXED,
    'HEX_NUM': LiteralRadix.HEX,
    'HEX_PREFIXED_NUM': LiteralRadix.HEX_PREFIXED,
}

_VALID_DIGITS = {
    2: frozenset('01'),
    8: frozenset('01234567'),
    10: frozenset('0123456789'),
    16: frozenset('0123456789abcdefABCDEF'),
}

# Direction of the implicit conversion for a bare literal. Octal and binary
# go to decimal, not to their "opposite".
IMPLICIT_TARGETS = {
    LiteralRadix.HEX: OutputRadix.DECIMAL,
    LiteralRadix.HEX_PREFIXED: OutputRadix.DECIMAL,
    LiteralRadix.DECIMAL: OutputRadix.HEX,
    LiteralRadix.DECIMAL_PREFIXED: OutputRadix.HEX,
    LiteralRadix.OCTAL: OutputRadix.DECIMAL,
    LiteralRadix.BINARY: OutputRadix.DECIMAL,
}


def parse_literal(text: str, radix: LiteralRadix) -> int:
    """Converts literal source text to an int in the signed 64-bit range.

    The sign and the two-character prefix are stripped, then every
    underscore. Raises LiteralRangeError for digits outside the base or a
    value that does not fit.
    """
    base = radix.base
    body = text
    negative = body.startswith('-')
    if negative:
        body = body[1:]
    if radix.prefix:
        body = body[len(radix.prefix):]
    digits = body.replace('_', '')
    if not digits:
        raise LiteralRangeError(text, base, "no digits")
    if not set(digits) <= _VALID_DIGITS[base]:
        raise LiteralRangeError(text, base, "invalid digits")
    value = int(digits, base)
    if negative:
        value = -value
    if not INT64_MIN <= value <= INT64_MAX:
        raise LiteralRangeError(text, base, "number too large to fit in a signed 64-bit integer")
    return value


class CorkTransformer:
    def transform(self, node: object) -> object:
        # Tokens reaching here are operator or argument leaves
        if isinstance(node, Token):
            return str(node)

        if not isinstance(node, Tree):
            raise TypeError(f"Unexpected parse node: {node!r}")

        children = node.children

        match node.data:
            # Entry points: one command each
            case 'line_hex' | 'line_dec':
                return self.transform(children[0])

            # Commands
            case 'configure':
                return Configure([str(tok) for tok in children])
            case 'convert':
                expr_node, radix_tok = children
                return Convert(self.transform(expr_node), OutputRadix.from_keyword(str(radix_tok)))
            case 'evaluate':
                inner = children[0]
                # A lone literal (not parenthesized) is an implicit conversion
                if isinstance(inner, Tree) and inner.data in ('number_hex', 'number_dec'):
                    number = self.transform(inner)
                    return Convert(number, IMPLICIT_TARGETS[number.radix])
                return Evaluate(self.transform(inner))

            # Expressions
            case 'binop':
                left, op_tok, right = children
                return BinaryOp(self.transform(left), self.transform(right), Operator(str(op_tok)))
            case 'group':
                return self.transform(children[0])
            case 'ans':
                return PreviousAnswer
            case 'number_hex' | 'number_dec':
                tok = children[0]
                radix = _LITERAL_TERMINALS[tok.type]
                return Number(parse_literal(str(tok), radix), radix)

            case _:
                raise NotImplementedError(f"No transformer for tag '{node.data}'")
