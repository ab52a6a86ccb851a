"""
North American Numbering Plan (NANP) phone number validation.

Accepts the usual presentations people type:

    2025551234   202-555-1234   (202) 555-1234   202.555.1234
    1 202 555 1234   +1 (202) 555-1234

and normalizes all of them to the single canonical form `+12025551234`, so
every downstream contact mechanism sees one shape.

NANP structure, for a 10-digit national number NXX-NXX-XXXX:
  - area code (digits 1-3) and exchange code (digits 4-6) start with 2-9;
  - N11 codes (211, 311, ... 911) are reserved for services;
  - toll-free (8XX) and premium (900) area codes are not personal lines;
  - exchange 555 is reserved for fictional use and is explicitly allowed.
"""

from __future__ import annotations

import re
from typing import Optional

from .verdict import ErrorCode, Verdict

NANP_COUNTRY_CODE = "1"
NATIONAL_LENGTH = 10
MAX_INPUT_LENGTH = 50

TOLL_FREE_AREA_CODES = frozenset({"800", "833", "844", "855", "866", "877", "888"})
PREMIUM_AREA_CODES = frozenset({"900"})
FICTIONAL_EXCHANGE = "555"
_DEGENERATE = frozenset({"0000000000", "1111111111"})

# Digits, whitespace, dashes, dots, parentheses; '+' only in front.
_ALLOWED = re.compile(r"\+?[0-9\s\-().]+")
_NON_DIGITS = re.compile(r"[^0-9]")

NORTH_AMERICA_ONLY = "Only North American (US/Canada) phone numbers are accepted"


def _is_n11(code: str) -> bool:
    return code[1:] == "11"


def _check_area_code(area: str) -> Optional[str]:
    if area[0] in "01":
        return "Invalid area code. Area codes cannot start with 0 or 1."
    if _is_n11(area):
        return "Invalid area code. N11 codes are reserved for special services."
    if area in TOLL_FREE_AREA_CODES:
        return "Invalid area code. Toll-free numbers are not valid for registration."
    if area in PREMIUM_AREA_CODES:
        return "Invalid area code. Premium-rate numbers are not valid for registration."
    return None


def _check_exchange_code(exchange: str) -> Optional[str]:
    if exchange[0] in "01":
        return "Invalid exchange code. Exchange codes cannot start with 0 or 1."
    # 555 is not an N11 code, so the fictional exchange passes this rule as it is;
    # the comparison only names it.
    if _is_n11(exchange) and exchange != FICTIONAL_EXCHANGE:
        return "Invalid exchange code. N11 codes are reserved for special services."
    return None


def validate_phone_number(raw: Optional[str]) -> Verdict:
    """
    Validate a NANP phone number and normalize it to `+1XXXXXXXXXX`.

    Raises:
        TypeError: if `raw` is neither None nor a string.
    """
    if raw is not None and not isinstance(raw, str):
        raise TypeError(f"phone number must be a string, got {type(raw).__name__}")

    text = (raw or "").strip()
    if not text:
        return Verdict.fail(ErrorCode.REQUIRED, "Phone number is required")

    if len(text) > MAX_INPUT_LENGTH or not _ALLOWED.fullmatch(text):
        return Verdict.fail(
            ErrorCode.FORMAT,
            "Invalid phone number format. Only digits, spaces, and common separators are allowed.",
        )

    digits = _NON_DIGITS.sub("", text)
    if not digits:
        return Verdict.fail(ErrorCode.FORMAT, "Phone number must contain digits")

    # An explicit international prefix names the country; anything but +1 is foreign.
    if text.startswith("+") and not digits.startswith(NANP_COUNTRY_CODE):
        return Verdict.fail(ErrorCode.UNSUPPORTED, NORTH_AMERICA_ONLY)

    national = digits
    if len(digits) == NATIONAL_LENGTH + 1 and digits.startswith(NANP_COUNTRY_CODE):
        national = digits[1:]

    if len(national) < NATIONAL_LENGTH:
        return Verdict.fail(
            ErrorCode.FORMAT,
            "Phone number is too short: it must be 10 digits (US/Canada numbers only)",
        )
    if len(national) > NATIONAL_LENGTH:
        return Verdict.fail(
            ErrorCode.FORMAT,
            "Phone number is too long: it must be 10 digits (US/Canada numbers only)",
        )

    if national in _DEGENERATE:
        return Verdict.fail(ErrorCode.FORMAT, "Invalid phone number")

    problem = _check_area_code(national[:3]) or _check_exchange_code(national[3:6])
    if problem:
        return Verdict.fail(ErrorCode.UNSUPPORTED, problem)

    return Verdict.ok(f"+{NANP_COUNTRY_CODE}{national}")
