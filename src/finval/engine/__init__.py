"""Validation gate and password hashing shared by every call site."""

from .gate import Gate, GateResult, ScanResult, build_validators
from .hashing import PasswordHasher, hasher_from_env

__all__ = [
    "Gate",
    "GateResult",
    "ScanResult",
    "build_validators",
    "PasswordHasher",
    "hasher_from_env",
]
