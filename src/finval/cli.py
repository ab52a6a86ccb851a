from __future__ import annotations

import json
import pathlib
from typing import Iterator, Optional
from enum import Enum

import typer
import structlog
from rich.console import Console

from .config import load_config, FinvalConfig
from .engine.gate import Gate, ScanResult
from .errors import FlowError
from .validate.verdict import Verdict
from .web import flows
from .web.database import Database

console = Console()
log = structlog.get_logger()
app = typer.Typer(add_completion=False, no_args_is_help=True, help="finval: validation for financial onboarding and funding")

class Field(str, Enum):
    amount = "amount"
    card_number = "card_number"
    routing_number = "routing_number"
    phone_number = "phone_number"
    password = "password"
    state = "state"

class AccountKind(str, Enum):
    checking = "checking"
    savings = "savings"

class SourceKind(str, Enum):
    card = "card"
    bank = "bank"


def version_callback(value: bool):
    if value:
        from . import __version__
        console.print(f"finval {__version__}")
        raise typer.Exit()


@app.callback()
def common(
    ctx: typer.Context,
    config: Optional[pathlib.Path] = typer.Option(None, "--config", help="Path to .finval.yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logs"),
    version: Optional[bool] = typer.Option(None, "--version", callback=version_callback, is_eager=True),
):
    """Global options (config, verbosity)."""
    structlog.configure(processors=[structlog.processors.JSONRenderer()])
    cfg = load_config(config) if config else FinvalConfig()
    ctx.obj = {"config": cfg, "gate": Gate(cfg)}
    if verbose:
        log.info("verbose_enabled")


def _gate(ctx: typer.Context) -> Gate:
    return ctx.obj["gate"]


def _database(ctx: typer.Context) -> Database:
    cfg: FinvalConfig = ctx.obj["config"]
    return Database(cfg.database.url, echo=cfg.database.echo)


def _print_verdict(name: str, verdict: Verdict) -> None:
    if verdict.valid:
        shown = f" → {verdict.normalized}" if verdict.normalized is not None else ""
        console.print(f"[green]{name}: valid[/green]{shown}")
        return
    console.print(f"[red]{name}: {verdict.error_code.value}[/red] {verdict.error_message}")
    for issue in verdict.issues[1:]:
        console.print(f"  - {issue}")


def _fail(exc: FlowError) -> None:
    console.print(f"[red]{exc.message}[/red]")
    for name, detail in exc.details.get("fields", {}).items():
        console.print(f"  {name}: {detail['message']}")
    raise typer.Exit(code=1)


@app.command()
def check(
    ctx: typer.Context,
    field: Field = typer.Argument(..., help="Which validator to run"),
    value: str = typer.Argument(..., help="Raw value, exactly as a user would enter it"),
):
    """Validate a single value and print its canonical form."""
    verdict = _gate(ctx).check(field.value, value)
    _print_verdict(field.value, verdict)
    if not verdict.valid:
        raise typer.Exit(code=1)


def _read_records(src: pathlib.Path) -> Iterator[dict]:
    with src.open() as fh:
        for lineno, line in enumerate(fh, start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                raise typer.BadParameter(f"line {lineno} is not valid JSON: {e}")
            if not isinstance(record, dict):
                raise typer.BadParameter(f"line {lineno} must be a JSON object")
            yield record


@app.command()
def scan(
    ctx: typer.Context,
    src: pathlib.Path = typer.Argument(..., exists=True, dir_okay=False, help="JSONL file, one record per line"),
    report: Optional[pathlib.Path] = typer.Option(None, "--report", help="Write HTML report to this path"),
):
    """Validate every known field of every record in a JSONL file."""
    result: ScanResult = _gate(ctx).scan_records(_read_records(src))
    console.print(f"Scanned {result.records} records, {result.invalid} invalid")
    for finding in result.findings:
        for name, verdict in finding.verdicts.items():
            if not verdict.valid:
                console.print(f"  line {finding.line} {name}: [red]{verdict.error_code.value}[/red] {verdict.error_message}")
    if report:
        from .reporting.html import write_report
        write_report(result, report)
        console.print(f"[green]Report written:[/green] {report}")
    if result.invalid:
        raise typer.Exit(code=1)


@app.command()
def signup(
    ctx: typer.Context,
    email: str = typer.Option(..., prompt=True),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
    first_name: str = typer.Option(..., prompt="First name"),
    last_name: str = typer.Option(..., prompt="Last name"),
    phone_number: str = typer.Option(..., prompt="Phone number"),
    address: str = typer.Option(..., prompt=True),
    city: str = typer.Option(..., prompt=True),
    state: str = typer.Option(..., prompt="State (2 letters)"),
    zip_code: str = typer.Option(..., prompt="ZIP code"),
):
    """Create a user interactively."""
    form = flows.SignupForm(
        email=email, password=password, first_name=first_name, last_name=last_name,
        phone_number=phone_number, address=address, city=city, state=state, zip_code=zip_code,
    )
    with _database(ctx) as db, db.session() as session:
        try:
            user = flows.signup(session, _gate(ctx), form)
        except FlowError as e:
            _fail(e)
        console.print(f"[green]Welcome, {user.first_name}![/green] user id {user.id}, phone {user.phone_number}, state {user.state}")


@app.command("open-account")
def open_account(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", help="Account holder's email"),
    kind: AccountKind = typer.Option(AccountKind.checking, "--type", case_sensitive=False),
):
    """Open a checking or savings account."""
    with _database(ctx) as db, db.session() as session:
        try:
            user = flows.find_user_by_email(session, email)
            account = flows.open_account(session, user.id, kind.value)
        except FlowError as e:
            _fail(e)
        console.print(f"[green]Opened {account.account_type.value} account[/green] {account.account_number} (id {account.id})")


@app.command()
def fund(
    ctx: typer.Context,
    account_id: int = typer.Argument(..., help="Account id to fund"),
    email: str = typer.Option(..., "--email", help="Account holder's email"),
    amount: str = typer.Option(..., "--amount", prompt=True),
    source: SourceKind = typer.Option(..., "--source", case_sensitive=False),
    number: str = typer.Option(..., "--number", prompt="Card or bank account number", hide_input=True),
    routing: Optional[str] = typer.Option(None, "--routing", help="Routing number (bank transfers)"),
):
    """Deposit into an account from a card or a bank account."""
    funding_source = flows.FundingSource(type=source.value, account_number=number, routing_number=routing)
    with _database(ctx) as db, db.session() as session:
        try:
            user = flows.find_user_by_email(session, email)
            result = flows.fund_account(session, _gate(ctx), user.id, account_id, amount, funding_source)
        except FlowError as e:
            _fail(e)
        console.print(
            f"[green]Deposited ${result.amount}[/green] ({result.transaction.description}); "
            f"new balance ${result.new_balance}"
        )


@app.command()
def transactions(
    ctx: typer.Context,
    account_id: int = typer.Argument(..., help="Account id"),
    email: str = typer.Option(..., "--email", help="Account holder's email"),
):
    """List an account's transactions, newest first."""
    with _database(ctx) as db, db.session() as session:
        try:
            user = flows.find_user_by_email(session, email)
            history = flows.list_transactions(session, user.id, account_id)
        except FlowError as e:
            _fail(e)
        console.print(f"{history.account.account_type.value} {history.account.account_number}: balance ${history.account.balance}")
        for t in history.transactions:
            console.print(f"  #{t.id} {t.type.value} ${t.amount} {t.description} ({t.status.value})")
