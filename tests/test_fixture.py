import json

import pytest

from smallbank_bench.errors import ConfigurationError
from smallbank_bench.fixture import VerificationFixture, check_fixture_params, load_verification_file


def test_load_verification_file(tmp_path):
    path = tmp_path / "expected.json"
    path.write_text(
        json.dumps(
            {
                "accounts": 10,
                "Initial": [{"account": 0, "balance": 2000}],
                "Final": [{"account": 0, "balance": 1990}],
            }
        )
    )

    fixture = load_verification_file(path)

    assert fixture.accounts == 10
    assert fixture.initial == [{"account": 0, "balance": 2000}]
    assert fixture.final == [{"account": 0, "balance": 1990}]


def test_checkpoints_are_optional(tmp_path):
    path = tmp_path / "expected.json"
    path.write_text("{}")
    assert load_verification_file(path) == VerificationFixture()


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_verification_file(tmp_path / "missing.json")


@pytest.mark.parametrize("content", ["not json", "[1, 2]", '{"accounts": "ten"}'])
def test_invalid_file(tmp_path, content):
    path = tmp_path / "expected.json"
    path.write_text(content)
    with pytest.raises(ConfigurationError):
        load_verification_file(path)


def test_account_count_mismatch_is_fatal_when_shared():
    with pytest.raises(ConfigurationError, match="only applicable for 20 accounts, but currently have 10"):
        check_fixture_params(VerificationFixture(accounts=20), 10, False)


def test_account_count_mismatch_allowed_when_partitioned():
    check_fixture_params(VerificationFixture(accounts=20), 10, True)


def test_matching_or_absent_count_passes():
    check_fixture_params(VerificationFixture(accounts=10), 10, False)
    check_fixture_params(VerificationFixture(), 10, False)
