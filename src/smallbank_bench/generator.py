import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Union

from .account_space import AccountRange
from .constants import (
    DEPOSIT_CHECKING_RANGE,
    OPERATION_METHODS,
    SAVINGS_DELTA_RANGE,
    WRITE_CHECK_RANGE,
    TransactionType,
)
from .errors import UnknownTransactionTypeError
from .payloads import AmalgamatePayload, BalancePayload, Payload, TransactionPayload
from .selector import TypeSelector, UniformTypeSelector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactSavings:
    account: int
    amount: int

    def to_payload(self) -> Payload:
        return TransactionPayload(str(self.account), self.amount)


@dataclass(frozen=True)
class Amalgamate:
    src_account: int
    dst_account: int

    def to_payload(self) -> Payload:
        return AmalgamatePayload(str(self.src_account), str(self.dst_account))


@dataclass(frozen=True)
class WriteCheck:
    account: int
    amount: int

    def to_payload(self) -> Payload:
        return TransactionPayload(str(self.account), self.amount)


@dataclass(frozen=True)
class DepositChecking:
    account: int
    amount: int

    def to_payload(self) -> Payload:
        return TransactionPayload(str(self.account), self.amount)


@dataclass(frozen=True)
class GetBalance:
    account: int

    def to_payload(self) -> Payload:
        return BalancePayload(str(self.account))


TransactionParams = Union[TransactSavings, Amalgamate, WriteCheck, DepositChecking, GetBalance]


@dataclass(frozen=True)
class TransactionRequest:
    """A generated transaction, ready to be submitted once."""

    type: TransactionType
    params: TransactionParams
    payload_bytes: bytes
    is_write: bool
    index: int

    @property
    def method(self) -> str:
        return OPERATION_METHODS[self.type]


def _random_account(account_range: AccountRange, rng: random.Random) -> int:
    return account_range.start + rng.randrange(account_range.size)


def _build_transact_savings(account_range: AccountRange, rng: random.Random) -> TransactionParams:
    return TransactSavings(_random_account(account_range, rng), rng.randint(*SAVINGS_DELTA_RANGE))


def _build_amalgamate(account_range: AccountRange, rng: random.Random) -> TransactionParams:
    if account_range.size < 2:
        raise ValueError(f"Amalgamate needs at least two accounts, range {account_range} has {account_range.size}")

    src_account = _random_account(account_range, rng)
    # Draw from the remaining size-1 accounts and skip over the source
    dst_account = account_range.start + rng.randrange(account_range.size - 1)
    if dst_account >= src_account:
        dst_account += 1
    return Amalgamate(src_account, dst_account)


def _build_write_check(account_range: AccountRange, rng: random.Random) -> TransactionParams:
    return WriteCheck(_random_account(account_range, rng), rng.randint(*WRITE_CHECK_RANGE))


def _build_deposit_checking(account_range: AccountRange, rng: random.Random) -> TransactionParams:
    return DepositChecking(_random_account(account_range, rng), rng.randint(*DEPOSIT_CHECKING_RANGE))


def _build_get_balance(account_range: AccountRange, rng: random.Random) -> TransactionParams:
    return GetBalance(_random_account(account_range, rng))


BUILDERS: Dict[TransactionType, Callable[[AccountRange, random.Random], TransactionParams]] = {
    TransactionType.TRANSACT_SAVINGS: _build_transact_savings,
    TransactionType.AMALGAMATE: _build_amalgamate,
    TransactionType.WRITE_CHECK: _build_write_check,
    TransactionType.DEPOSIT_CHECKING: _build_deposit_checking,
    TransactionType.GET_BALANCE: _build_get_balance,
}


class TransactionGenerator:
    """
    Generates a batch of randomized SmallBank transactions.

    The transaction type of each entry comes from the selection policy, the
    parameters are drawn from the given account range.
    """

    def __init__(self, selector: Optional[TypeSelector] = None):
        """
        Args:
            selector: Type selection policy (default: uniform over all types)
        """
        self._selector = selector if selector is not None else UniformTypeSelector()

    @property
    def possible_types(self) -> FrozenSet[TransactionType]:
        return self._selector.possible_types

    def build(self, index: int, account_range: AccountRange, rng: random.Random) -> TransactionRequest:
        """
        Build a single transaction at position index.

        Raises:
            UnknownTransactionTypeError: If the selector returns an unknown type
        """
        txn_type = self._selector.select(rng)
        builder = BUILDERS.get(txn_type) if isinstance(txn_type, TransactionType) else None
        if builder is None:
            raise UnknownTransactionTypeError(f"Unknown operation: {txn_type!r}")

        params = builder(account_range, rng)
        return TransactionRequest(
            type=txn_type,
            params=params,
            payload_bytes=params.to_payload().encode(),
            is_write=txn_type is not TransactionType.GET_BALANCE,
            index=index,
        )

    def generate(self, account_range: AccountRange, count: int, rng: random.Random) -> List[TransactionRequest]:
        """
        Generate exactly count transactions against accounts in account_range.

        Args:
            account_range: Accounts the transactions may touch
            count: Number of transactions to generate
            rng: Random source; a fresh source yields a different sequence

        Returns:
            List of TransactionRequest in submission order
        """
        if account_range.size < 1:
            raise ValueError(f"Cannot generate transactions for empty range {account_range}")

        transactions = [self.build(i, account_range, rng) for i in range(count)]
        logger.debug(f"Generated {len(transactions)} transactions for accounts {account_range}")
        return transactions
