"""
Payment card number validation: network detection plus Luhn.

The input must already be digits only. Separators are not stripped here so
that the number the user submitted and the number that was validated are the
same string.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from .checksums import is_ascii_digits, luhn_ok
from .verdict import ErrorCode, Verdict


class CardNetwork(str, Enum):
    VISA = "Visa"
    MASTERCARD = "Mastercard"
    AMEX = "American Express"
    DISCOVER = "Discover"
    UNSUPPORTED = "Unsupported"


@dataclass(frozen=True)
class CardNumber:
    """Canonical output of a valid card number: which network, which length."""
    network: CardNetwork
    length_class: int

    def __str__(self) -> str:
        return self.network.value


# Prefix ranges are inclusive and compared numerically on the leading digits.
# Each entry: (network, required length, ((prefix digits, low, high), ...)).
_NETWORK_RULES: Sequence[Tuple[CardNetwork, int, Tuple[Tuple[int, int, int], ...]]] = (
    (CardNetwork.VISA, 16, ((1, 4, 4),)),
    (CardNetwork.MASTERCARD, 16, ((2, 51, 55), (4, 2221, 2720))),
    (CardNetwork.AMEX, 15, ((2, 34, 34), (2, 37, 37))),
    (
        CardNetwork.DISCOVER,
        16,
        (
            (4, 6011, 6011),
            (3, 644, 649),
            (2, 65, 65),
            (6, 622126, 622925),  # UnionPay co-branded
            (4, 6282, 6288),
        ),
    ),
)

CARD_LENGTHS = (15, 16)


def detect_card_network(digits: str) -> CardNetwork:
    """
    Map a digit string to its card network by prefix and length.

    Returns CardNetwork.UNSUPPORTED when no network's pattern matches.
    """
    if not is_ascii_digits(digits):
        return CardNetwork.UNSUPPORTED
    for network, length, ranges in _NETWORK_RULES:
        if len(digits) != length:
            continue
        for width, low, high in ranges:
            if low <= int(digits[:width]) <= high:
                return network
    return CardNetwork.UNSUPPORTED


def validate_card_number(raw: Optional[str]) -> Verdict:
    """
    Validate a card number submitted as a plain digit string.

    Returns:
        A Verdict whose `normalized` value is a `CardNumber` (network and length).
        The digits themselves are never transformed or echoed.

    Raises:
        TypeError: if `raw` is neither None nor a string.
    """
    if raw is None or raw == "":
        return Verdict.fail(ErrorCode.REQUIRED, "Card number is required")
    if not isinstance(raw, str):
        raise TypeError(f"card number must be a string, got {type(raw).__name__}")

    if not is_ascii_digits(raw):
        return Verdict.fail(ErrorCode.FORMAT, "Card number must contain only digits")

    if len(raw) not in CARD_LENGTHS:
        return Verdict.fail(ErrorCode.FORMAT, "Card number must be 15 or 16 digits")

    network = detect_card_network(raw)
    if network is CardNetwork.UNSUPPORTED:
        return Verdict.fail(
            ErrorCode.UNSUPPORTED,
            "We accept Visa, Mastercard, American Express, and Discover cards",
        )

    if not luhn_ok(raw):
        return Verdict.fail(ErrorCode.CHECKSUM, "Invalid card number. Please check and try again")

    return Verdict.ok(CardNumber(network=network, length_class=len(raw)))
