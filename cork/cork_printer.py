"""
Formats evaluated integers for display.

Every rendering is itself a valid cork literal: sign, prefix, then the
digits of the magnitude, optionally grouped with underscores.
"""

from typing import List, Optional

from cork.cork_datatypes import OutputRadix


class Printer:
    """Renders signed 64-bit results in a given output radix."""

    _PREFIXES = {
        OutputRadix.HEX: "0x",
        OutputRadix.DECIMAL: "0d",
        OutputRadix.OCTAL: "0o",
        OutputRadix.BINARY: "0b",
    }
    _FORMAT_SPECS = {
        OutputRadix.HEX: "x",
        OutputRadix.DECIMAL: "d",
        OutputRadix.OCTAL: "o",
        OutputRadix.BINARY: "b",
    }
    # Digits per underscore-separated group when punctuating
    _GROUP_SIZES = {
        OutputRadix.HEX: 4,
        OutputRadix.DECIMAL: 3,
        OutputRadix.OCTAL: 3,
        OutputRadix.BINARY: 4,
    }

    def __init__(self, radix: OutputRadix = OutputRadix.HEX, punctuate: bool = False):
        self.radix = radix
        self.punctuate = punctuate

    def pformat(self, value: int, radix: Optional[OutputRadix] = None) -> str:
        """Public entry point to format a value; radix defaults to the printer's own."""
        radix = radix or self.radix
        sign = "-" if value < 0 else ""
        digits = format(abs(value), self._FORMAT_SPECS[radix])
        if self.punctuate:
            digits = self._group(digits, self._GROUP_SIZES[radix])
        return f"{sign}{self._PREFIXES[radix]}{digits}"

    def pformat_all(self, value: int) -> List[str]:
        """One line per radix, labelled and right-aligned."""
        return [f"{radix.value:>21}: {self.pformat(value, radix)}" for radix in OutputRadix]

    def _group(self, digits: str, size: int) -> str:
        head = len(digits) % size or size
        groups = [digits[:head]]
        groups.extend(digits[i:i + size] for i in range(head, len(digits), size))
        return "_".join(groups)
