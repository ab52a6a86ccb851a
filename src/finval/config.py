from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import List, Literal, Optional
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .validate.amount import MAX_AMOUNT, MIN_AMOUNT
from .validate.password import KEYBOARD_FRAGMENTS, MIN_LENGTH, SPECIAL_CHARACTERS

# ---- Field names understood by the validation gate ----
FieldName = Literal[
    "amount", "card_number", "routing_number", "phone_number", "password", "state"
]

# ---- Validation rules (shared by the CLI and the API) ----
class AmountRules(BaseModel):
    minimum: Decimal = MIN_AMOUNT
    maximum: Decimal = MAX_AMOUNT

    @model_validator(mode="after")
    def _bounds_ordered(self) -> "AmountRules":
        if self.minimum <= 0:
            raise ValueError("amount minimum must be positive")
        if self.minimum > self.maximum:
            raise ValueError("amount minimum cannot exceed maximum")
        return self

class PasswordRules(BaseModel):
    min_length: int = Field(default=MIN_LENGTH, ge=MIN_LENGTH)
    special_characters: str = SPECIAL_CHARACTERS
    # QWERTY rows by default; swap in other layouts' rows here.
    keyboard_fragments: List[str] = Field(default_factory=lambda: list(KEYBOARD_FRAGMENTS))

    @field_validator("special_characters")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("special_characters cannot be empty")
        return v

class Rules(BaseModel):
    amount: AmountRules = Field(default_factory=AmountRules)
    password: PasswordRules = Field(default_factory=PasswordRules)


# ---- Persistence collaborator ----
class DatabaseConfig(BaseModel):
    url: str = "sqlite:///./finval.db"
    echo: bool = False

# ---- Root config ----
class FinvalConfig(BaseModel):
    rules: Rules = Field(default_factory=Rules)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

# ---- Loader ----
def load_config(path: Optional[Path]) -> FinvalConfig:
    if not path:
        return FinvalConfig()
    data = yaml.safe_load(Path(path).read_text()) or {}
    return FinvalConfig(**data)
