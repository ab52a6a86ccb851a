"""
Runs validators over a set of fields and decides all-or-nothing.

Every call site (CLI prompts, HTTP handlers, batch scans) goes through a
`Gate` built from the same `FinvalConfig`, so a value accepted in one place is
accepted everywhere, with the same canonical form.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..config import FinvalConfig
from ..errors import ValidationFailed
from ..validate.amount import validate_amount
from ..validate.card import validate_card_number
from ..validate.password import validate_password
from ..validate.phone import validate_phone_number
from ..validate.routing import validate_routing_number
from ..validate.state import validate_state_code
from ..validate.verdict import ErrorCode, Verdict


Validator = Callable[[Any], Verdict]


@dataclass
class GateResult:
    """Verdicts for one evaluation, in the order fields were requested."""
    verdicts: Dict[str, Verdict]

    @property
    def ok(self) -> bool:
        return all(v.valid for v in self.verdicts.values())

    @property
    def failures(self) -> Dict[str, Verdict]:
        return {name: v for name, v in self.verdicts.items() if not v.valid}

    @property
    def first_error(self) -> Optional[str]:
        for v in self.verdicts.values():
            if not v.valid:
                return v.error_message
        return None

    def normalized(self, name: str) -> Any:
        """Canonical value for a field that passed; KeyError if it was not evaluated."""
        verdict = self.verdicts[name]
        if not verdict.valid:
            raise ValueError(f"field '{name}' did not pass validation")
        return verdict.normalized

    def raise_for_failures(self) -> None:
        if not self.ok:
            raise ValidationFailed(self.failures)


@dataclass
class RecordFinding:
    line: int
    verdicts: Dict[str, Verdict]

    @property
    def ok(self) -> bool:
        return all(v.valid for v in self.verdicts.values())


@dataclass
class ScanResult:
    records: int
    invalid: int
    findings: List[RecordFinding] = field(default_factory=list)


def build_validators(cfg: FinvalConfig) -> Dict[str, Validator]:
    """Map field names to validators bound to the configured rules."""
    amount = cfg.rules.amount
    password = cfg.rules.password
    return {
        "amount": partial(validate_amount, minimum=amount.minimum, maximum=amount.maximum),
        "card_number": validate_card_number,
        "routing_number": validate_routing_number,
        "phone_number": validate_phone_number,
        "password": partial(
            validate_password,
            min_length=password.min_length,
            special_characters=password.special_characters,
            keyboard_fragments=tuple(password.keyboard_fragments),
        ),
        "state": validate_state_code,
    }


class Gate:
    """
    The single entry point callers use to validate user-supplied fields.
    """

    def __init__(self, cfg: Optional[FinvalConfig] = None) -> None:
        self.cfg = cfg or FinvalConfig()
        self._validators = build_validators(self.cfg)

    @property
    def fields(self) -> List[str]:
        return list(self._validators)

    # ---------------- Public API ----------------

    def check(self, name: str, raw: Any) -> Verdict:
        """Validate one value. Unknown field names raise KeyError."""
        try:
            validator = self._validators[name]
        except KeyError:
            raise KeyError(f"unknown field '{name}'; expected one of {', '.join(self._validators)}") from None
        return validator(raw)

    def evaluate(self, values: Mapping[str, Any], required: Sequence[str]) -> GateResult:
        """
        Validate every required field. A field missing from `values` is checked
        as None, which every validator reports as REQUIRED.
        """
        return GateResult(verdicts={name: self.check(name, values.get(name)) for name in required})

    def scan_records(self, records: Iterable[Mapping[str, Any]]) -> ScanResult:
        """Validate the known fields of each record; unknown keys are ignored."""
        findings: List[RecordFinding] = []
        count = 0
        invalid = 0
        for line, record in enumerate(records, start=1):
            count += 1
            names = [n for n in record if n in self._validators]
            verdicts = {}
            for n in names:
                try:
                    verdicts[n] = self.check(n, record[n])
                except TypeError as e:
                    # e.g. a JSON number where a string belongs
                    verdicts[n] = Verdict.fail(ErrorCode.FORMAT, str(e))
            finding = RecordFinding(line=line, verdicts=verdicts)
            if not finding.ok:
                invalid += 1
            findings.append(finding)
        return ScanResult(records=count, invalid=invalid, findings=findings)
