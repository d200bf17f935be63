"""
Logical request and response schemas of the SmallBank service.

Requests are encoded as JSON objects. Account ids travel as decimal strings,
except in the batch creation request which carries a numeric range.
"""

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict

from .errors import ResponseSchemaError


@dataclass(frozen=True)
class Payload:
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def encode(self) -> bytes:
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")


@dataclass(frozen=True)
class CreateAccountsPayload(Payload):
    from_account: int
    to_account: int
    checking_balance: int
    savings_balance: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_account,
            "to": self.to_account,
            "checking_balance": self.checking_balance,
            "savings_balance": self.savings_balance,
        }


@dataclass(frozen=True)
class BalancePayload(Payload):
    account: str


@dataclass(frozen=True)
class TransactionPayload(Payload):
    """Shared by transact-savings, write-check and deposit-checking."""

    account: str
    amount: int


@dataclass(frozen=True)
class AmalgamatePayload(Payload):
    src_account: str
    dst_account: str


def decode_balance(body: bytes) -> int:
    """
    Extract the balance from a balance query response body.

    Raises:
        ResponseSchemaError: If the body is not a JSON object with an integer balance
    """
    try:
        document = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ResponseSchemaError(f"Balance response is not valid JSON: {body!r}") from e

    if not isinstance(document, dict) or "balance" not in document:
        raise ResponseSchemaError(f"Balance response has no balance field: {body!r}")

    balance = document["balance"]
    # bool is an int subclass but never a valid balance
    if isinstance(balance, bool) or not isinstance(balance, int):
        raise ResponseSchemaError(f"Balance is not an integer: {balance!r}")
    return balance
