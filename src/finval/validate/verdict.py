"""
The result shape shared by every validator.

A `Verdict` is created fresh for each call and never mutated. Validators return
one in every case, including malformed input; exceptions are reserved for
callers that break the contract (e.g., passing a list where a string belongs).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple


class ErrorCode(str, Enum):
    """Failure taxonomy reported by validators."""
    FORMAT = "FORMAT"              # wrong character set or length
    RANGE = "RANGE"                # numeric value outside allowed bounds
    CHECKSUM = "CHECKSUM"          # Luhn / ABA arithmetic failure
    POLICY = "POLICY"              # password complexity or pattern violation
    UNSUPPORTED = "UNSUPPORTED"    # recognized but disallowed category
    REQUIRED = "REQUIRED"          # mandatory value missing
    LEADING_ZERO = "LEADING_ZERO"  # amount written with superfluous leading zeros


@dataclass(frozen=True)
class Verdict:
    """
    Outcome of a single validation call.

    Attributes:
        valid:         True if the input passed every rule.
        normalized:    Canonical form of the input (only on success, and only for
                       validators that produce one).
        error_code:    Category of the first failing rule.
        error_message: User-facing message for the first failing rule.
        issues:        Messages for every failing rule, when a validator reports
                       more than one (the password policy does).
    """
    valid: bool
    normalized: Any = None
    error_code: Optional[ErrorCode] = None
    error_message: Optional[str] = None
    issues: Tuple[str, ...] = ()

    @classmethod
    def ok(cls, normalized: Any = None) -> "Verdict":
        return cls(valid=True, normalized=normalized)

    @classmethod
    def fail(cls, code: ErrorCode, message: str, issues: Tuple[str, ...] = ()) -> "Verdict":
        return cls(valid=False, error_code=code, error_message=message, issues=issues or (message,))

    def to_dict(self) -> dict:
        """JSON-friendly view used by the API and the CLI."""
        normalized = self.normalized
        if normalized is not None and not isinstance(normalized, (str, int, bool)):
            normalized = str(normalized)
        return {
            "valid": self.valid,
            "normalized": normalized,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": self.error_message,
            "issues": list(self.issues),
        }
