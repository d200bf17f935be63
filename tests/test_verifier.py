import pytest

from smallbank_bench.account_space import AccountRange
from smallbank_bench.errors import BalanceMismatchError, FatalResponseError, FixtureSchemaError, ResponseSchemaError
from smallbank_bench.transport import Response
from smallbank_bench.verifier import StateVerifier, collect_balances, query_balance

from conftest import FakeBankTransport


@pytest.mark.parametrize("expected", [None, []])
def test_empty_checkpoint_is_noop(bank, expected):
    StateVerifier(bank).verify("Initial", expected)
    assert bank.calls == []


def test_matching_balances_pass():
    bank = FakeBankTransport({1: (60, 40), 2: (50, 0)})
    StateVerifier(bank).verify("Final", [{"account": 1, "balance": 100}, {"account": 2, "balance": 50}])
    assert bank.balance_queries() == [1, 2]


def test_first_mismatch_stops_verification():
    bank = FakeBankTransport({1: (90, 0), 2: (50, 0)})

    with pytest.raises(BalanceMismatchError) as excinfo:
        StateVerifier(bank).verify("Initial", [{"account": 1, "balance": 100}, {"account": 2, "balance": 50}])

    assert excinfo.value.account == 1
    assert excinfo.value.expected == 100
    assert excinfo.value.actual == 90
    assert "Initial" in str(excinfo.value)
    assert bank.balance_queries() == [1]


@pytest.mark.parametrize(
    "entry",
    [
        {"account": 1},
        {"balance": 10},
        7,
        {"account": 1, "balance": 10.0},
        {"account": 1, "balance": None},
        {"account": 1, "balance": True},
        {"account": "1", "balance": 10},
        {"account": True, "balance": 10},
        {"account": -1, "balance": 10},
    ],
)
def test_malformed_entry_is_schema_error(entry):
    bank = FakeBankTransport({1: (10, 0)})

    with pytest.raises(FixtureSchemaError) as excinfo:
        StateVerifier(bank).verify("Final", [entry])

    assert "Final state should be a list of (account, balance) objects" in str(excinfo.value)
    assert bank.calls == []


@pytest.mark.parametrize("expected", [{"account": 1, "balance": 10}, {}, ({"account": 1, "balance": 10},)])
def test_non_list_checkpoint_is_schema_error(bank, expected):
    with pytest.raises(FixtureSchemaError):
        StateVerifier(bank).verify("Final", expected)
    assert bank.calls == []


def test_failed_balance_query_is_fatal(bank):
    with pytest.raises(FatalResponseError, match="Error in verification response"):
        StateVerifier(bank).verify("Final", [{"account": 5, "balance": 10}])


def test_balance_must_be_integer(bank):
    bank.fail_with = Response(200, b'{"balance": "ten"}')
    with pytest.raises(ResponseSchemaError):
        query_balance(bank, 1)


def test_collect_balances():
    bank = FakeBankTransport({10: (1, 2), 11: (3, 4)})
    assert collect_balances(bank, AccountRange(10, 12)) == [
        {"account": 10, "balance": 3},
        {"account": 11, "balance": 7},
    ]
