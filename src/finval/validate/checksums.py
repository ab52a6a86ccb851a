"""
Checksum primitives used by the card and routing number validators.

Design principles
-----------------
- **Pure functions**: no I/O, no state; identical input gives identical output.
- **Digits in, bool out**: callers decide what counts as well-formed input.
  These functions only do the arithmetic and return False for anything that is
  not a plain ASCII digit string.
"""

from __future__ import annotations

from typing import Sequence

# ABA positional weights, repeated across the three groups of the routing number.
ABA_WEIGHTS: Sequence[int] = (3, 7, 1, 3, 7, 1, 3, 7, 1)


def is_ascii_digits(s: str) -> bool:
    """
    True if `s` is non-empty and made only of the characters 0-9.

    `str.isdigit` alone is not enough: it accepts full-width and other Unicode
    digits that `int()` would happily convert.
    """
    return bool(s) and s.isascii() and s.isdigit()


def luhn_ok(digits: str) -> bool:
    """
    Validate a digit string using the Luhn checksum (a.k.a. "mod 10").

    Starting from the rightmost digit, every second digit is doubled; doubled
    values above 9 have 9 subtracted. The number passes if the total of all
    digits is a multiple of 10.

    Args:
        digits: ASCII digit string, no separators.

    Returns:
        True if the digits pass Luhn; False otherwise.
    """
    if not is_ascii_digits(digits):
        return False

    total = 0
    # Process digits from right to left; double every second digit.
    for i, ch in enumerate(reversed(digits)):
        d = ord(ch) - 48  # '0' -> 48
        if i % 2 == 1:
            d *= 2
            if d > 9:
                d -= 9  # sum of digits for doubled value (e.g., 8*2 -> 16 -> 1+6 -> 7)
        total += d

    return (total % 10) == 0


def aba_ok(digits: str) -> bool:
    """
    Validate a 9-digit ABA routing number checksum.

        3(d1 + d4 + d7) + 7(d2 + d5 + d8) + (d3 + d6 + d9) ≡ 0 (mod 10)

    Only the arithmetic is checked here; the degenerate all-zero and all-nine
    values are the validator's concern.
    """
    if len(digits) != len(ABA_WEIGHTS) or not is_ascii_digits(digits):
        return False

    total = sum(w * (ord(ch) - 48) for w, ch in zip(ABA_WEIGHTS, digits))
    return total % 10 == 0
