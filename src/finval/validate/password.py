"""
Password policy: complexity requirements plus weak-pattern rejection.

Passwords are only ever accepted or rejected. They are never trimmed, case
folded or otherwise transformed; the caller hashes exactly what was typed.

The weak-pattern lists (digit runs, keyboard rows, alphabet runs) target a
QWERTY, English-alphabet user base. The keyboard fragments are configurable
through `rules.password.keyboard_fragments` in `.finval.yaml`.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .verdict import ErrorCode, Verdict

MIN_LENGTH = 8
RUN_LENGTH = 4
SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"
KEYBOARD_FRAGMENTS: Tuple[str, ...] = ("qwert", "werty", "asdfg", "sdfgh", "zxcvb", "xcvbn")

SEQUENTIAL_MESSAGE = "Password cannot contain sequential patterns"
REPEATED_MESSAGE = "Password cannot contain repeated characters"

# "0123" ... "7890" ascending; their reverses "3210" ... "0987" descending.
_DIGIT_CYCLE = "01234567890"
_ASCENDING_DIGIT_RUNS = tuple(_DIGIT_CYCLE[i:i + RUN_LENGTH] for i in range(len(_DIGIT_CYCLE) - RUN_LENGTH + 1))
DIGIT_RUNS = _ASCENDING_DIGIT_RUNS + tuple(run[::-1] for run in _ASCENDING_DIGIT_RUNS)

_REPEATED = re.compile(r"(.)\1{%d,}" % (RUN_LENGTH - 1), re.DOTALL)


def _has_digit_run(password: str) -> bool:
    return any(run in password for run in DIGIT_RUNS)


def _has_keyboard_fragment(password: str, fragments: Iterable[str]) -> bool:
    folded = password.lower()
    return any(f.lower() in folded for f in fragments)


def _has_alphabet_run(password: str) -> bool:
    folded = password.lower()
    for i in range(len(folded) - RUN_LENGTH + 1):
        window = folded[i:i + RUN_LENGTH]
        if not all("a" <= ch <= "z" for ch in window):
            continue
        if all(ord(window[k + 1]) - ord(window[k]) == 1 for k in range(RUN_LENGTH - 1)):
            return True
    return False


def _rules(
    min_length: int,
    special_characters: str,
    keyboard_fragments: Sequence[str],
) -> List[Tuple[Callable[[str], bool], str]]:
    """Ordered (predicate, message) pairs; a predicate returns True when satisfied."""
    return [
        (lambda p: len(p) >= min_length, f"Password must be at least {min_length} characters"),
        (lambda p: any("A" <= ch <= "Z" for ch in p), "Password must contain at least one uppercase letter"),
        (lambda p: any("a" <= ch <= "z" for ch in p), "Password must contain at least one lowercase letter"),
        (lambda p: any("0" <= ch <= "9" for ch in p), "Password must contain at least one number"),
        (lambda p: any(ch in special_characters for ch in p), "Password must contain at least one special character"),
        (lambda p: not _has_digit_run(p), SEQUENTIAL_MESSAGE),
        (lambda p: not _has_keyboard_fragment(p, keyboard_fragments), SEQUENTIAL_MESSAGE),
        (lambda p: not _has_alphabet_run(p), SEQUENTIAL_MESSAGE),
        (lambda p: not _REPEATED.search(p), REPEATED_MESSAGE),
    ]


def password_issues(
    password: str,
    *,
    min_length: int = MIN_LENGTH,
    special_characters: str = SPECIAL_CHARACTERS,
    keyboard_fragments: Sequence[str] = KEYBOARD_FRAGMENTS,
) -> List[str]:
    """Every failing rule's message, in policy order, without duplicates."""
    issues: List[str] = []
    for check, message in _rules(min_length, special_characters, keyboard_fragments):
        if not check(password) and message not in issues:
            issues.append(message)
    return issues


def validate_password(
    raw: Optional[str],
    *,
    min_length: int = MIN_LENGTH,
    special_characters: str = SPECIAL_CHARACTERS,
    keyboard_fragments: Sequence[str] = KEYBOARD_FRAGMENTS,
) -> Verdict:
    """
    Check a password against the policy. No normalized form is produced.

    Raises:
        TypeError: if `raw` is neither None nor a string.
    """
    if raw is None or raw == "":
        return Verdict.fail(ErrorCode.REQUIRED, "Password is required")
    if not isinstance(raw, str):
        raise TypeError(f"password must be a string, got {type(raw).__name__}")

    issues = password_issues(
        raw,
        min_length=min_length,
        special_characters=special_characters,
        keyboard_fragments=keyboard_fragments,
    )
    if issues:
        return Verdict.fail(ErrorCode.POLICY, issues[0], tuple(issues))
    return Verdict.ok()
