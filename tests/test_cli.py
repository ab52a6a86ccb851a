import json

import pytest
from typer.testing import CliRunner
from finval.__main__ import main
from finval.cli import app

runner = CliRunner()


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.setenv("FINVAL_HASH_ITERATIONS", "1000")
    path = tmp_path / ".finval.yaml"
    path.write_text(f"database:\n  url: sqlite:///{tmp_path / 'finval.db'}\n")
    return str(path)


SIGNUP_ARGS = [
    "signup",
    "--email", "ada@example.com",
    "--password", "Password1!",
    "--first-name", "Ada",
    "--last-name", "Lovelace",
    "--phone-number", "(202) 555-1234",
    "--address", "1 Analytical Way",
    "--city", "Washington",
    "--state", "dc",
    "--zip-code", "20001",
]


def test_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "validation" in result.stdout


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "finval 0.1.0" in result.stdout


def test_main_is_callable():
    assert callable(main)


def test_check_valid_phone():
    result = runner.invoke(app, ["check", "phone_number", "(202) 555-1234"])
    assert result.exit_code == 0
    assert "+12025551234" in result.stdout


def test_check_leading_zero():
    result = runner.invoke(app, ["check", "amount", "00.50"])
    assert result.exit_code == 1
    assert "LEADING_ZERO" in result.stdout


def test_check_password_lists_issues():
    result = runner.invoke(app, ["check", "password", "short"])
    assert result.exit_code == 1
    assert "POLICY" in result.stdout
    assert "special character" in result.stdout


def test_check_unknown_field():
    result = runner.invoke(app, ["check", "ssn", "123-45-6789"])
    assert result.exit_code != 0


def test_scan(tmp_path):
    src = tmp_path / "records.jsonl"
    src.write_text(
        json.dumps({"amount": "10.5", "state": "ca"}) + "\n"
        + "\n"
        + json.dumps({"card_number": "4111111111111112"}) + "\n"
    )
    report = tmp_path / "out" / "report.html"
    result = runner.invoke(app, ["scan", str(src), "--report", str(report)])
    assert result.exit_code == 1
    assert "Scanned 2 records, 1 invalid" in result.stdout
    html = report.read_text()
    assert "CHECKSUM" in html
    assert "4111111111111112" not in html


def test_scan_all_valid(tmp_path):
    src = tmp_path / "records.jsonl"
    src.write_text(json.dumps({"phone_number": "2025551234", "routing_number": "021000021"}) + "\n")
    result = runner.invoke(app, ["scan", str(src)])
    assert result.exit_code == 0
    assert "Scanned 1 records, 0 invalid" in result.stdout


def test_scan_rejects_bad_json(tmp_path):
    src = tmp_path / "records.jsonl"
    src.write_text("{not json}\n")
    result = runner.invoke(app, ["scan", str(src)])
    assert result.exit_code != 0


def test_signup_and_funding_workflow(config):
    result = runner.invoke(app, ["--config", config, *SIGNUP_ARGS])
    assert result.exit_code == 0, result.stdout
    assert "Welcome, Ada!" in result.stdout
    assert "+12025551234" in result.stdout

    result = runner.invoke(app, ["--config", config, "open-account", "--email", "ada@example.com", "--type", "checking"])
    assert result.exit_code == 0, result.stdout
    assert "1000000001" in result.stdout

    result = runner.invoke(app, [
        "--config", config, "fund", "1", "--email", "ada@example.com",
        "--amount", "25.5", "--source", "card", "--number", "4111111111111111",
    ])
    assert result.exit_code == 0, result.stdout
    assert "Deposited $25.50" in result.stdout

    result = runner.invoke(app, ["--config", config, "transactions", "1", "--email", "ada@example.com"])
    assert result.exit_code == 0, result.stdout
    assert "Funding from Visa card" in result.stdout
    assert "25.50" in result.stdout


def test_signup_rejected(config):
    args = [a if a != "(202) 555-1234" else "800-555-1234" for a in SIGNUP_ARGS]
    result = runner.invoke(app, ["--config", config, *args])
    assert result.exit_code == 1
    assert "Toll-free" in result.stdout


def test_fund_rejected_amount(config):
    runner.invoke(app, ["--config", config, *SIGNUP_ARGS])
    runner.invoke(app, ["--config", config, "open-account", "--email", "ada@example.com"])
    result = runner.invoke(app, [
        "--config", config, "fund", "1", "--email", "ada@example.com",
        "--amount", "00.50", "--source", "bank", "--number", "123456", "--routing", "021000021",
    ])
    assert result.exit_code == 1
    assert "leading zero" in result.stdout


def test_commands_use_the_configured_gate(tmp_path):
    path = tmp_path / ".finval.yaml"
    path.write_text("rules:\n  amount:\n    maximum: '50.00'\n")
    result = runner.invoke(app, ["--config", str(path), "check", "amount", "60"])
    assert result.exit_code == 1
    assert "$50.00" in result.stdout
    assert runner.invoke(app, ["check", "amount", "60"]).exit_code == 0
