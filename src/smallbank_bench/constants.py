"""
Constants for the SmallBank workload driver.

Operation names and amount bounds must stay consistent with the service
under test, which dispatches on the method name.
"""

from enum import IntEnum
from typing import Dict, Tuple


class TransactionType(IntEnum):
    TRANSACT_SAVINGS = 0
    AMALGAMATE = 1
    WRITE_CHECK = 2
    DEPOSIT_CHECKING = 3
    GET_BALANCE = 4


# Names accepted on the command line (--mix, --sequence)
TRANSACTION_TYPE_NAMES: Dict[str, TransactionType] = {
    "TransactSavings": TransactionType.TRANSACT_SAVINGS,
    "Amalgamate": TransactionType.AMALGAMATE,
    "WriteCheck": TransactionType.WRITE_CHECK,
    "DepositChecking": TransactionType.DEPOSIT_CHECKING,
    "GetBalance": TransactionType.GET_BALANCE,
}

CREATE_BATCH_METHOD = "SmallBank_create_batch"
BALANCE_METHOD = "SmallBank_balance"

OPERATION_METHODS: Dict[TransactionType, str] = {
    TransactionType.TRANSACT_SAVINGS: "SmallBank_transact_savings",
    TransactionType.AMALGAMATE: "SmallBank_amalgamate",
    TransactionType.WRITE_CHECK: "SmallBank_write_check",
    TransactionType.DEPOSIT_CHECKING: "SmallBank_deposit_checking",
    TransactionType.GET_BALANCE: BALANCE_METHOD,
}

# Inclusive bounds of generated amounts
SAVINGS_DELTA_RANGE: Tuple[int, int] = (-50, 50)
WRITE_CHECK_RANGE: Tuple[int, int] = (0, 50)
DEPOSIT_CHECKING_RANGE: Tuple[int, int] = (1, 51)

DEFAULT_TOTAL_ACCOUNTS = 10
DEFAULT_CHECKING_BALANCE = 1000
DEFAULT_SAVINGS_BALANCE = 1000

# Failure bodies that are expected outcomes of randomized or concurrent load
RECOGNIZED_ERROR_MESSAGES: Tuple[str, ...] = (
    "Not enough money in savings account",
    "Account already exists in accounts table",
)

INITIAL_CHECKPOINT = "Initial"
FINAL_CHECKPOINT = "Final"
