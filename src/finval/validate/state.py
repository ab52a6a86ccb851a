"""
US postal state code validation.

A whitelist, not a pattern: `[A-Z]{2}` cannot tell `CA` from `XX`.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional

from .verdict import ErrorCode, Verdict

STATES = frozenset({
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
})
FEDERAL_DISTRICT = frozenset({"DC"})
TERRITORIES = frozenset({
    "AS",  # American Samoa
    "GU",  # Guam
    "MP",  # Northern Mariana Islands
    "PR",  # Puerto Rico
    "VI",  # U.S. Virgin Islands
})
VALID_STATE_CODES = STATES | FEDERAL_DISTRICT | TERRITORIES

_TWO_LETTERS = re.compile(r"[A-Z]{2}")
_EXAMPLES = "(e.g., CA, NY, TX, FL)"


def validate_state_code(raw: Optional[str]) -> Verdict:
    """
    Validate a two-letter state code; normalized form is the uppercase code.

    Raises:
        TypeError: if `raw` is neither None nor a string.
    """
    if raw is not None and not isinstance(raw, str):
        raise TypeError(f"state code must be a string, got {type(raw).__name__}")

    code = (raw or "").strip().upper()
    if not code:
        return Verdict.fail(ErrorCode.REQUIRED, f"State is required. Please enter a 2-letter state code {_EXAMPLES}")

    if not _TWO_LETTERS.fullmatch(code):
        return Verdict.fail(ErrorCode.FORMAT, f"Please enter a valid 2-letter US state code {_EXAMPLES}")

    if code not in VALID_STATE_CODES:
        return Verdict.fail(
            ErrorCode.UNSUPPORTED,
            f"'{code}' is not a valid US state code. Please enter a valid 2-letter state code {_EXAMPLES}",
        )

    return Verdict.ok(code)


def all_state_codes() -> List[str]:
    """Every accepted code, sorted (useful for dropdowns)."""
    return sorted(VALID_STATE_CODES)


def state_codes_by_type() -> Dict[str, List[str]]:
    return {
        "states": sorted(STATES),
        "federal_district": sorted(FEDERAL_DISTRICT),
        "territories": sorted(TERRITORIES),
    }
