"""
ABA routing number validation.

Routing numbers identify US financial institutions for ACH transfers. The
checksum catches single-digit typos and most transpositions; the two
degenerate values that happen to be arithmetically uninteresting
(all zeros, all nines) belong to no institution and are rejected outright.
"""

from __future__ import annotations

from typing import Optional

from .checksums import aba_ok, is_ascii_digits
from .verdict import ErrorCode, Verdict

ROUTING_LENGTH = 9
_DEGENERATE = frozenset({"000000000", "999999999"})


def validate_routing_number(raw: Optional[str]) -> Verdict:
    """
    Validate a 9-digit ABA routing number.

    Surrounding whitespace is trimmed; nothing else is reshaped.

    Raises:
        TypeError: if `raw` is neither None nor a string.
    """
    if raw is not None and not isinstance(raw, str):
        raise TypeError(f"routing number must be a string, got {type(raw).__name__}")

    text = (raw or "").strip()
    if not text:
        return Verdict.fail(ErrorCode.REQUIRED, "Routing number is required for bank transfers")

    if len(text) != ROUTING_LENGTH or not is_ascii_digits(text):
        return Verdict.fail(ErrorCode.FORMAT, "Routing number must be exactly 9 digits")

    if text in _DEGENERATE:
        return Verdict.fail(ErrorCode.RANGE, "Routing number does not belong to any financial institution")

    if not aba_ok(text):
        return Verdict.fail(
            ErrorCode.CHECKSUM,
            "Invalid routing number checksum. Please check the number and try again",
        )

    return Verdict.ok(text)
