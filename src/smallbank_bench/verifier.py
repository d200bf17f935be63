import json
import logging
from typing import Any, Dict, List, Optional

from .account_space import AccountRange
from .constants import BALANCE_METHOD
from .errors import BalanceMismatchError, FatalResponseError, FixtureSchemaError
from .payloads import BalancePayload, decode_balance
from .transport import Transport

logger = logging.getLogger(__name__)


def query_balance(transport: Transport, account: Any) -> int:
    """
    Read the current balance of an account from the service.

    Raises:
        FatalResponseError: If the balance query fails
        ResponseSchemaError: If the response carries no integer balance
    """
    response = transport.submit(BALANCE_METHOD, BalancePayload(str(account)).encode())
    if not response.ok:
        raise FatalResponseError(f"Error in verification response: {response.text}", BALANCE_METHOD)
    return decode_balance(response.body)


def collect_balances(transport: Transport, account_range: AccountRange) -> List[Dict[str, int]]:
    """Query every account in the range, returning checkpoint-shaped entries."""
    return [{"account": account, "balance": query_balance(transport, account)} for account in account_range]


class StateVerifier:
    """
    Compares service balances with an expected checkpoint.

    Every call re-queries the service; nothing is cached between checkpoints.
    """

    def __init__(self, transport: Transport):
        self._transport = transport

    def verify(self, label: str, expected: Optional[List[Any]]) -> None:
        """
        Verify a checkpoint, stopping at the first mismatching account.

        Args:
            label: Checkpoint name ("Initial" or "Final"), used in messages only
            expected: List of {"account": ..., "balance": ...} objects; None or
                empty means there is nothing to verify

        Raises:
            FixtureSchemaError: If the checkpoint or one of its entries is malformed
            BalanceMismatchError: On the first balance that differs
        """
        if expected is None or expected == []:
            return

        if not isinstance(expected, list):
            raise FixtureSchemaError(self._schema_message(label, expected))

        for entry in expected:
            if not self._is_valid_entry(entry):
                raise FixtureSchemaError(self._schema_message(label, entry))

            account = entry["account"]
            expected_balance = entry["balance"]
            actual_balance = query_balance(self._transport, account)
            if expected_balance != actual_balance:
                raise BalanceMismatchError(label, account, expected_balance, actual_balance)

        logger.info(f"{label} state verified for {len(expected)} accounts")

    @staticmethod
    def _is_valid_entry(entry: Any) -> bool:
        if not isinstance(entry, dict) or "account" not in entry or "balance" not in entry:
            return False
        account = entry["account"]
        balance = entry["balance"]
        # bool is an int subclass but never a valid account or balance
        if isinstance(account, bool) or not isinstance(account, int) or account < 0:
            return False
        return not isinstance(balance, bool) and isinstance(balance, int)

    @staticmethod
    def _schema_message(label: str, problematic: Any) -> str:
        return f"{label} state should be a list of (account, balance) objects, not: {json.dumps(problematic)}"
