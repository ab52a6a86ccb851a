"""
Flow-level errors.

Validators never raise for bad user input; they return a `Verdict`. The flows
that act on verdicts (signup, account funding) do raise, using the classes
below, so a caller cannot mistake a rejected or unconfirmed operation for a
successful one. Each error carries a stable `code` and the HTTP status the API
maps it to.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from .validate.verdict import Verdict


class FlowError(Exception):
    """Base class for every error a calling flow can raise."""

    code = "FLOW_ERROR"
    http_status = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_response(self) -> Dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message, **self.details}}


class ValidationFailed(FlowError):
    """
    One or more required verdicts were invalid.

    The message is the first failing validator's message, verbatim; `verdicts`
    holds every failing verdict keyed by field name.
    """

    code = "VALIDATION_FAILED"
    http_status = 400

    def __init__(self, verdicts: Mapping[str, Verdict]) -> None:
        self.verdicts = dict(verdicts)
        first = next(iter(self.verdicts.values()))
        fields = {
            name: {"code": v.error_code.value if v.error_code else None, "message": v.error_message}
            for name, v in self.verdicts.items()
        }
        super().__init__(first.error_message or "Invalid input", {"fields": fields})


class NotFound(FlowError):
    code = "NOT_FOUND"
    http_status = 404


class Conflict(FlowError):
    code = "CONFLICT"
    http_status = 409


class AccountInactive(FlowError):
    code = "ACCOUNT_INACTIVE"
    http_status = 400


class ConfirmationFailed(FlowError):
    """A write went through but reading it back did not; the caller must retry."""

    code = "CONFIRMATION_FAILED"
    http_status = 500
