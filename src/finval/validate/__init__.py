"""Pure validators for amounts, cards, routing numbers, phones, passwords and states."""

from .amount import validate_amount
from .card import CardNetwork, CardNumber, detect_card_network, validate_card_number
from .password import password_issues, validate_password
from .phone import validate_phone_number
from .routing import validate_routing_number
from .state import all_state_codes, state_codes_by_type, validate_state_code
from .verdict import ErrorCode, Verdict

__all__ = [
    "ErrorCode",
    "Verdict",
    "CardNetwork",
    "CardNumber",
    "validate_amount",
    "validate_card_number",
    "detect_card_network",
    "validate_routing_number",
    "validate_phone_number",
    "validate_password",
    "password_issues",
    "validate_state_code",
    "all_state_codes",
    "state_codes_by_type",
]
