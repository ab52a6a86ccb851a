"""
Tests for the signup and funding flows against an in-memory database.

The common thread: a rejected verdict means no row is written and no balance
moves, and a write that cannot be read back is reported as a failure rather
than papered over.
"""

import dataclasses
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from finval.errors import AccountInactive, ConfirmationFailed, Conflict, NotFound, ValidationFailed
from finval.web import flows
from finval.web.database import Account, AccountStatus, AccountType, Transaction, User


def count(session, model):
    return session.scalar(select(func.count()).select_from(model))


def without(session, model, monkeypatch):
    """Make `session.get` come back empty for one model, as if the write vanished."""
    original = session.get

    def fake_get(entity, ident, **kwargs):
        if entity is model:
            return None
        return original(entity, ident, **kwargs)

    monkeypatch.setattr(session, "get", fake_get)


CARD = flows.FundingSource(type="card", account_number="4111111111111111")
BANK = flows.FundingSource(type="bank", account_number="000123456789", routing_number="021000021")


@pytest.fixture
def checking(session, user):
    return flows.open_account(session, user.id, "checking")


class TestSignup:
    def test_stores_canonical_values(self, user, hasher):
        assert user.id is not None
        assert user.email == "ada@example.com"
        assert user.phone_number == "+12025551234"
        assert user.state == "DC"
        assert user.password_hash != "Password1!"
        assert hasher.verify("Password1!", user.password_hash)

    def test_rejected_password_writes_nothing(self, session, gate, signup_form, hasher):
        form = dataclasses.replace(signup_form, password="Pass1234!")
        with pytest.raises(ValidationFailed) as excinfo:
            flows.signup(session, gate, form, hasher=hasher)
        assert excinfo.value.message == "Password cannot contain sequential patterns"
        assert count(session, User) == 0

    def test_reports_every_failing_field(self, session, gate, signup_form, hasher):
        form = dataclasses.replace(
            signup_form, phone_number="800-555-1234", state="XX", zip_code="2000", email="nobody"
        )
        with pytest.raises(ValidationFailed) as excinfo:
            flows.signup(session, gate, form, hasher=hasher)
        fields = excinfo.value.details["fields"]
        assert set(fields) == {"phone_number", "state", "zip_code", "email"}
        assert "Toll-free" in excinfo.value.message
        assert fields["zip_code"]["message"] == "ZIP code must be exactly 5 digits"
        assert count(session, User) == 0

    def test_blank_profile_fields(self, session, gate, signup_form, hasher):
        form = dataclasses.replace(signup_form, first_name=" ", city="")
        with pytest.raises(ValidationFailed) as excinfo:
            flows.signup(session, gate, form, hasher=hasher)
        assert excinfo.value.details["fields"]["first_name"]["message"] == "First name is required"
        assert excinfo.value.details["fields"]["city"]["code"] == "REQUIRED"

    def test_duplicate_email_ignores_case(self, session, gate, signup_form, user, hasher):
        form = dataclasses.replace(signup_form, email="ADA@example.COM")
        with pytest.raises(Conflict, match="already exists"):
            flows.signup(session, gate, form, hasher=hasher)
        assert count(session, User) == 1

    def test_unconfirmed_write_is_an_error(self, session, gate, signup_form, hasher, monkeypatch):
        without(session, User, monkeypatch)
        with pytest.raises(ConfirmationFailed):
            flows.signup(session, gate, signup_form, hasher=hasher)

    def test_lookups(self, session, user):
        assert flows.get_user(session, user.id).email == "ada@example.com"
        assert flows.find_user_by_email(session, " Ada@Example.com ").id == user.id
        with pytest.raises(NotFound, match="User not found"):
            flows.get_user(session, user.id + 100)
        with pytest.raises(NotFound):
            flows.find_user_by_email(session, "grace@example.com")


class TestAccounts:
    def test_account_numbers(self, session, user, checking):
        savings = flows.open_account(session, user.id, AccountType.SAVINGS)
        assert checking.account_number == f"10{checking.id:08d}"
        assert savings.account_number == f"20{savings.id:08d}"
        assert checking.balance == Decimal("0.00")
        assert checking.status is AccountStatus.ACTIVE
        assert [a.id for a in flows.list_accounts(session, user.id)] == [checking.id, savings.id]

    def test_one_account_per_type(self, session, user, checking):
        with pytest.raises(Conflict, match="You already have a checking account"):
            flows.open_account(session, user.id, "checking")
        assert count(session, Account) == 1

    def test_unknown_user(self, session):
        with pytest.raises(NotFound):
            flows.open_account(session, 42, "savings")

    def test_unconfirmed_write_is_an_error(self, session, user, monkeypatch):
        without(session, Account, monkeypatch)
        with pytest.raises(ConfirmationFailed) as excinfo:
            flows.open_account(session, user.id, "savings")
        assert excinfo.value.message == (
            "Account was created but could not be retrieved. Please refresh and try again."
        )

    def test_format_account_number(self):
        assert flows.format_account_number(7, AccountType.CHECKING) == "1000000007"
        assert flows.format_account_number(12345, AccountType.SAVINGS) == "2000012345"


class TestFunding:
    def test_card_funding_records_normalized_amount(self, session, gate, user, checking):
        result = flows.fund_account(session, gate, user.id, checking.id, "25.5", CARD)
        assert result.amount == Decimal("25.50")
        assert result.new_balance == Decimal("25.50")
        assert result.transaction.amount == Decimal("25.50")
        assert result.transaction.description == "Funding from Visa card"
        session.refresh(checking)
        assert checking.balance == Decimal("25.50")

    def test_bank_funding(self, session, gate, user, checking):
        flows.fund_account(session, gate, user.id, checking.id, "100", BANK)
        result = flows.fund_account(session, gate, user.id, checking.id, "0.01", BANK)
        assert result.transaction.description == "Funding from bank account"
        assert result.new_balance == Decimal("100.01")

    @pytest.mark.parametrize("amount, source, field", [
        ("00.50", CARD, "amount"),
        ("10000.01", CARD, "amount"),
        ("1,000", BANK, "amount"),
        (None, CARD, "amount"),
        ("25", flows.FundingSource(type="card", account_number="4111111111111112"), "card_number"),
        ("25", flows.FundingSource(type="card", account_number="3530111333300000"), "card_number"),
        ("25", flows.FundingSource(type="card"), "card_number"),
        ("25", flows.FundingSource(type="bank", account_number="123456", routing_number="021000022"), "routing_number"),
        ("25", flows.FundingSource(type="bank", account_number="12-3456", routing_number="021000021"), "account_number"),
    ])
    def test_rejected_input_moves_nothing(self, session, gate, user, checking, amount, source, field):
        with pytest.raises(ValidationFailed) as excinfo:
            flows.fund_account(session, gate, user.id, checking.id, amount, source)
        assert field in excinfo.value.details["fields"]
        assert count(session, Transaction) == 0
        session.refresh(checking)
        assert checking.balance == Decimal("0.00")

    def test_message_is_the_validators_own(self, session, gate, user, checking):
        with pytest.raises(ValidationFailed) as excinfo:
            flows.fund_account(session, gate, user.id, checking.id, "00.50", CARD)
        assert excinfo.value.message == gate.check("amount", "00.50").error_message

    def test_validation_happens_before_lookup(self, session, gate, user):
        with pytest.raises(ValidationFailed):
            flows.fund_account(session, gate, user.id, 999, "abc", CARD)
        with pytest.raises(NotFound, match="Account not found"):
            flows.fund_account(session, gate, user.id, 999, "10", CARD)

    def test_cannot_fund_someone_elses_account(self, session, gate, signup_form, hasher, checking):
        other = flows.signup(
            session, gate, dataclasses.replace(signup_form, email="grace@example.com"), hasher=hasher
        )
        with pytest.raises(NotFound):
            flows.fund_account(session, gate, other.id, checking.id, "10", CARD)

    def test_inactive_account(self, session, gate, user, checking):
        checking.status = AccountStatus.CLOSED
        session.commit()
        with pytest.raises(AccountInactive, match="Account is not active"):
            flows.fund_account(session, gate, user.id, checking.id, "10", CARD)
        assert count(session, Transaction) == 0

    def test_unconfirmed_write_is_an_error(self, session, gate, user, checking, monkeypatch):
        without(session, Transaction, monkeypatch)
        with pytest.raises(ConfirmationFailed):
            flows.fund_account(session, gate, user.id, checking.id, "10", CARD)

    def test_transactions_newest_first(self, session, gate, user, checking):
        first = flows.fund_account(session, gate, user.id, checking.id, "1", CARD).transaction
        second = flows.fund_account(session, gate, user.id, checking.id, "2", BANK).transaction
        history = flows.list_transactions(session, user.id, checking.id)
        assert history.account.id == checking.id
        assert [t.id for t in history.transactions] == [second.id, first.id]
        assert history.account.balance == Decimal("3.00")

    def test_transactions_for_unknown_account(self, session, user):
        with pytest.raises(NotFound):
            flows.list_transactions(session, user.id, 12345)
