import json

import click
import pytest
from click.testing import CliRunner

from smallbank_bench.cli import cli, parse_weighted_mix_spec
from smallbank_bench.constants import TransactionType
from smallbank_bench.transport import Response

from conftest import FakeBankTransport


@pytest.fixture
def bank(monkeypatch):
    fake = FakeBankTransport()
    monkeypatch.setattr("smallbank_bench.runner.HttpTransport", lambda *args, **kwargs: fake)
    return fake


def invoke(*args):
    return CliRunner().invoke(cli, ["--host", "http://bank.test", "--log-level", "WARNING", *args])


def test_parse_weighted_mix_spec():
    assert parse_weighted_mix_spec(None, None, ("Amalgamate@2.5", "GetBalance")) == [
        (TransactionType.AMALGAMATE, 2.5),
        (TransactionType.GET_BALANCE, 1.0),
    ]


@pytest.mark.parametrize("value", ["Amalgamate@x", "Amalgamate@0", "Withdraw@1"])
def test_parse_weighted_mix_spec_rejects(value):
    with pytest.raises(click.BadParameter):
        parse_weighted_mix_spec(None, None, (value,))


def test_init_creates_accounts(bank):
    result = invoke("init", "--accounts", "5", "--pc", "--client-id", "1")

    assert result.exit_code == 0, result.output
    assert sorted(bank.accounts) == [5, 6, 7, 8, 9]
    assert "Initialization completed" in result.output


def test_init_single_account(bank):
    result = invoke("init", "--accounts", "1")

    assert result.exit_code == 0, result.output
    assert sorted(bank.accounts) == [0]


def test_run_prints_summary(bank):
    result = invoke("run", "--accounts", "10", "-t", "50", "--seed", "1", "--mix", "DepositChecking@3", "--mix", "GetBalance")

    assert result.exit_code == 0, result.output
    assert len(bank.calls) == 51
    assert "PERFORMANCE METRICS: SUMMARY" in result.output
    assert "Workload completed" in result.output


def test_run_with_fixed_sequence(bank):
    result = invoke("run", "-t", "4", "--sequence", "GetBalance")

    assert result.exit_code == 0, result.output
    assert [method for method, _ in bank.calls[1:]] == ["SmallBank_balance"] * 4


def test_mix_and_sequence_are_exclusive(bank):
    result = invoke("run", "--mix", "GetBalance", "--sequence", "GetBalance")

    assert result.exit_code == 2
    assert bank.calls == []


def test_verification_file_account_mismatch_aborts(bank, tmp_path):
    path = tmp_path / "expected.json"
    path.write_text(json.dumps({"accounts": 20}))

    result = invoke("run", "--accounts", "10", "--verify", str(path))

    assert result.exit_code == 1
    assert "only applicable for 20 accounts" in result.output
    assert bank.calls == []


def test_final_mismatch_fails_run(bank, tmp_path):
    path = tmp_path / "expected.json"
    path.write_text(json.dumps({"accounts": 2, "Final": [{"account": 0, "balance": 1}]}))

    result = invoke("run", "--accounts", "2", "-t", "1", "--sequence", "GetBalance", "--verify", str(path))

    assert result.exit_code == 1
    assert "expected account 0 to have balance 1, actual balance is 2000" in result.output


def test_amalgamate_on_single_account_fails_run(bank):
    bank.accounts[0] = [1, 1]
    result = invoke("run", "--accounts", "1", "-t", "3", "--no-create", "--sequence", "Amalgamate")

    assert result.exit_code == 1
    assert "Amalgamate needs at least two accounts" in result.output
    assert bank.calls == []


def test_balances_writes_fixture(bank, tmp_path):
    bank.accounts.update({0: [5, 5], 1: [7, 0]})
    path = tmp_path / "snapshot.json"

    result = invoke("balances", "--accounts", "2", "--label", "Initial", "-o", str(path))

    assert result.exit_code == 0, result.output
    assert json.loads(path.read_text()) == {
        "accounts": 2,
        "Initial": [{"account": 0, "balance": 10}, {"account": 1, "balance": 7}],
    }


def test_unrecognized_failure_fails_run(bank):
    bank.fail_with = Response(500, b"Table is locked")
    result = invoke("run", "-t", "3", "--no-create")

    assert result.exit_code == 1
    assert "Table is locked" in result.output
    assert len(bank.calls) == 1
