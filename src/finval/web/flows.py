"""
Signup and funding flows shared by the CLI and the HTTP API.

Every flow follows the same order:
  1) run every required validator through the Gate;
  2) if any verdict is invalid, raise ValidationFailed before touching storage;
  3) perform one write using the validators' normalized outputs;
  4) read the write back, and raise ConfirmationFailed if it is not there.

Nothing here re-derives a value the validators already normalized, and nothing
returns placeholder data when a confirming read comes back empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Union
import re
import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..engine.gate import Gate
from ..engine.hashing import PasswordHasher, hasher_from_env
from ..errors import AccountInactive, ConfirmationFailed, Conflict, NotFound, ValidationFailed
from ..validate.amount import CENTS
from ..validate.checksums import is_ascii_digits
from ..validate.verdict import ErrorCode, Verdict
from .database import (
    Account,
    AccountStatus,
    AccountType,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
)

log = structlog.get_logger()

SIGNUP_FIELDS = ("password", "phone_number", "state")
_ZIP = re.compile(r"[0-9]{5}")


class FundingSourceType(str, Enum):
    CARD = "card"
    BANK = "bank"


@dataclass
class SignupForm:
    email: str
    password: str
    first_name: str
    last_name: str
    phone_number: str
    address: str
    city: str
    state: str
    zip_code: str


@dataclass
class FundingSource:
    type: Union[FundingSourceType, str]
    account_number: Optional[str] = None
    routing_number: Optional[str] = None


@dataclass
class FundingResult:
    transaction: Transaction
    amount: Decimal
    new_balance: Decimal


@dataclass
class TransactionHistory:
    account: Account
    transactions: List[Transaction]


def format_account_number(account_id: int, account_type: AccountType) -> str:
    prefix = "10" if account_type is AccountType.CHECKING else "20"
    return f"{prefix}{account_id:08d}"


def _profile_failures(form: SignupForm) -> Dict[str, Verdict]:
    """Checks on plain profile fields that have no dedicated validator."""
    failures: Dict[str, Verdict] = {}
    email = (form.email or "").strip()
    if not email:
        failures["email"] = Verdict.fail(ErrorCode.REQUIRED, "Email is required")
    elif "@" not in email.strip("@"):
        failures["email"] = Verdict.fail(ErrorCode.FORMAT, "Please enter a valid email address")
    for name in ("first_name", "last_name", "address", "city"):
        if not (getattr(form, name) or "").strip():
            label = name.replace("_", " ").capitalize()
            failures[name] = Verdict.fail(ErrorCode.REQUIRED, f"{label} is required")
    if not _ZIP.fullmatch((form.zip_code or "").strip()):
        failures["zip_code"] = Verdict.fail(ErrorCode.FORMAT, "ZIP code must be exactly 5 digits")
    return failures


# ---------------- Users ----------------

def signup(
    session: Session,
    gate: Gate,
    form: SignupForm,
    hasher: Optional[PasswordHasher] = None,
) -> User:
    """Create a user from a signup form. Only canonical values and the password hash are stored."""
    result = gate.evaluate(
        {"password": form.password, "phone_number": form.phone_number, "state": form.state},
        required=SIGNUP_FIELDS,
    )
    failures = {**result.failures, **_profile_failures(form)}
    if failures:
        log.info("signup_rejected", fields=sorted(failures))
        raise ValidationFailed(failures)

    email = form.email.strip().lower()
    if session.scalar(select(User).where(User.email == email)) is not None:
        raise Conflict("An account with this email already exists")

    user = User(
        email=email,
        password_hash=(hasher or hasher_from_env()).hash(form.password),
        first_name=form.first_name.strip(),
        last_name=form.last_name.strip(),
        phone_number=result.normalized("phone_number"),
        address=form.address.strip(),
        city=form.city.strip(),
        state=result.normalized("state"),
        zip_code=form.zip_code.strip(),
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("An account with this email already exists") from None

    confirmed = session.get(User, user.id, populate_existing=True)
    if confirmed is None:
        raise ConfirmationFailed("Your account was created but could not be loaded. Please sign in to continue.")
    log.info("user_created", user_id=confirmed.id)
    return confirmed


def get_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def find_user_by_email(session: Session, email: str) -> User:
    user = session.scalar(select(User).where(User.email == (email or "").strip().lower()))
    if user is None:
        raise NotFound("User not found")
    return user


# ---------------- Accounts ----------------

def open_account(session: Session, user_id: int, account_type: Union[AccountType, str]) -> Account:
    """Open a checking or savings account; a user holds at most one of each."""
    account_type = AccountType(account_type)
    get_user(session, user_id)

    existing = session.scalar(
        select(Account).where(Account.user_id == user_id, Account.account_type == account_type)
    )
    if existing is not None:
        raise Conflict(f"You already have a {account_type.value} account")

    # The number is derived from the id, which only exists after the insert.
    account = Account(
        user_id=user_id,
        account_number=f"PENDING-{uuid.uuid4().hex[:12]}",
        account_type=account_type,
        balance=Decimal("0.00"),
        status=AccountStatus.ACTIVE,
    )
    session.add(account)
    session.flush()
    account.account_number = format_account_number(account.id, account_type)
    session.commit()

    confirmed = session.get(Account, account.id, populate_existing=True)
    if confirmed is None:
        raise ConfirmationFailed("Account was created but could not be retrieved. Please refresh and try again.")
    log.info("account_opened", user_id=user_id, account_id=confirmed.id, account_type=account_type.value)
    return confirmed


def list_accounts(session: Session, user_id: int) -> List[Account]:
    return list(session.scalars(select(Account).where(Account.user_id == user_id).order_by(Account.id)))


def _owned_account(session: Session, user_id: int, account_id: int) -> Account:
    account = session.scalar(select(Account).where(Account.id == account_id, Account.user_id == user_id))
    if account is None:
        raise NotFound("Account not found")
    return account


# ---------------- Funding ----------------

def fund_account(
    session: Session,
    gate: Gate,
    user_id: int,
    account_id: int,
    amount: object,
    source: FundingSource,
) -> FundingResult:
    """
    Deposit into an account from a card or a bank account.

    The normalized amount from the one AmountNormalizer call is what gets
    recorded, added to the balance, and returned.
    """
    source_type = FundingSourceType(source.type)

    values: Dict[str, object] = {"amount": amount}
    if source_type is FundingSourceType.CARD:
        values["card_number"] = source.account_number
    else:
        values["routing_number"] = source.routing_number

    result = gate.evaluate(values, required=list(values))
    failures = dict(result.failures)
    if source_type is FundingSourceType.BANK and not is_ascii_digits(source.account_number or ""):
        failures["account_number"] = Verdict.fail(ErrorCode.FORMAT, "Bank account number must contain only digits")
    if failures:
        log.info("funding_rejected", account_id=account_id, source=source_type.value, fields=sorted(failures))
        raise ValidationFailed(failures)

    value: Decimal = result.normalized("amount")
    account = _owned_account(session, user_id, account_id)
    if account.status is not AccountStatus.ACTIVE:
        raise AccountInactive("Account is not active")

    if source_type is FundingSourceType.CARD:
        description = f"Funding from {result.normalized('card_number').network.value} card"
    else:
        description = "Funding from bank account"

    new_balance = (account.balance + value).quantize(CENTS)
    transaction = Transaction(
        account_id=account.id,
        type=TransactionType.DEPOSIT,
        amount=value,
        description=description,
        status=TransactionStatus.COMPLETED,
        processed_at=datetime.now(timezone.utc),
    )
    account.balance = new_balance
    session.add(transaction)
    session.commit()

    confirmed = session.get(Transaction, transaction.id, populate_existing=True)
    if confirmed is None:
        raise ConfirmationFailed("Funding was recorded but could not be confirmed. Please refresh and try again.")
    log.info("account_funded", account_id=account.id, transaction_id=confirmed.id, amount=str(value))
    return FundingResult(transaction=confirmed, amount=value, new_balance=new_balance)


def list_transactions(session: Session, user_id: int, account_id: int) -> TransactionHistory:
    """Transactions for one of the user's accounts, newest first."""
    account = _owned_account(session, user_id, account_id)
    transactions = session.scalars(
        select(Transaction)
        .where(Transaction.account_id == account.id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
    )
    return TransactionHistory(account=account, transactions=list(transactions))
