"""
Monetary amount parsing and canonicalization.

Amounts arrive as user-typed strings (or numeric tokens from JSON) and leave as
a `Decimal` quantized to cents. The grammar is deliberately narrow: ASCII
digits and at most one decimal point. No currency symbols, no thousands
separators, no exponents, and no leading zeros beyond a single `0` whole part,
so that what the user typed and what gets recorded read the same way.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Union

from .verdict import ErrorCode, Verdict

MIN_AMOUNT = Decimal("0.01")
MAX_AMOUNT = Decimal("10000.00")
CENTS = Decimal("0.01")

_ALLOWED = re.compile(r"[0-9.]+")
_SHAPE = re.compile(r"(?P<whole>[0-9]+)(?:\.(?P<frac>[0-9]+))?")

AmountInput = Union[str, int, float, Decimal, None]


def _as_text(raw: Any) -> str:
    # bool is an int subclass, but True is not an amount.
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float, Decimal)):
        raise TypeError(f"amount must be a string or number, got {type(raw).__name__}")
    if isinstance(raw, str):
        return raw.strip()
    if isinstance(raw, int):
        return str(raw)
    # Positional notation, so 1e16 reads as 10000000000000000 rather than "1E+16".
    return format(Decimal(str(raw)), "f")


def format_bound(value: Decimal) -> str:
    """Render a bound for messages, e.g. Decimal('10000') -> '$10,000.00'."""
    return f"${value:,.2f}"


def validate_amount(
    raw: AmountInput,
    *,
    minimum: Decimal = MIN_AMOUNT,
    maximum: Decimal = MAX_AMOUNT,
) -> Verdict:
    """
    Validate and normalize a monetary amount.

    Args:
        raw:     String or numeric token. Surrounding whitespace is ignored.
        minimum: Smallest accepted value (inclusive).
        maximum: Largest accepted value (inclusive).

    Returns:
        A Verdict whose `normalized` value is a two-place `Decimal`
        (`str(v.normalized)` is the zero-padded display form, e.g. "0.50").

    Raises:
        TypeError: if `raw` is neither None, a string, nor a number.
    """
    if raw is None:
        return Verdict.fail(ErrorCode.REQUIRED, "Amount is required")
    text = _as_text(raw)
    if not text:
        return Verdict.fail(ErrorCode.REQUIRED, "Amount is required")

    negative = text.startswith("-")
    body = text[1:] if negative else text

    if not _ALLOWED.fullmatch(body):
        return Verdict.fail(
            ErrorCode.FORMAT,
            "Amount must be a numeric value using digits and an optional decimal point "
            "(no currency symbols or separators)",
        )

    m = _SHAPE.fullmatch(body)
    if not m:
        return Verdict.fail(ErrorCode.FORMAT, "Amount must be a number like 10 or 10.50")

    if negative:
        return Verdict.fail(ErrorCode.RANGE, "Amount must be a positive value")

    whole, frac = m.group("whole"), m.group("frac") or ""

    if len(whole) > 1 and whole.startswith("0"):
        return Verdict.fail(
            ErrorCode.LEADING_ZERO,
            "Amount cannot have unnecessary leading zeros (use 0.50, not 00.50)",
        )

    if len(frac) > 2:
        return Verdict.fail(ErrorCode.FORMAT, "Amount cannot have more than 2 decimal places")

    # Quantized only once inside the bounds; far larger values exceed the context precision.
    value = Decimal(f"{whole}.{frac or '0'}")

    if value < minimum:
        return Verdict.fail(ErrorCode.RANGE, f"Amount must be at least the minimum of {format_bound(minimum)}")
    if value > maximum:
        return Verdict.fail(ErrorCode.RANGE, f"Amount cannot exceed the maximum of {format_bound(maximum)}")

    return Verdict.ok(value.quantize(CENTS))
