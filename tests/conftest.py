import json
from typing import Any, Dict, List, Optional, Tuple

import pytest

from smallbank_bench.transport import Response

NOT_ENOUGH_MONEY = "Not enough money in savings account"
ACCOUNT_EXISTS = "Account already exists in accounts table"


class FakeBankTransport:
    """In-memory SmallBank service implementing the Transport protocol."""

    def __init__(self, accounts: Optional[Dict[int, Tuple[int, int]]] = None):
        # account -> [checking, savings]
        self.accounts: Dict[int, List[int]] = {a: list(b) for a, b in (accounts or {}).items()}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.fail_with: Optional[Response] = None

    def submit(self, method: str, payload: bytes) -> Response:
        body = json.loads(payload.decode("utf-8"))
        self.calls.append((method, body))
        if self.fail_with is not None:
            return self.fail_with

        handler = getattr(self, "_" + method.replace("SmallBank_", ""), None)
        if handler is None:
            return Response(404, f"Unknown method {method}".encode())
        return handler(body)

    def balance_queries(self) -> List[int]:
        return [int(body["account"]) for method, body in self.calls if method == "SmallBank_balance"]

    def _account(self, account: str) -> Optional[List[int]]:
        return self.accounts.get(int(account))

    @staticmethod
    def _error(message: str) -> Response:
        return Response(500, message.encode())

    def _create_batch(self, body: Dict[str, Any]) -> Response:
        for account in range(body["from"], body["to"]):
            if account in self.accounts:
                return self._error(ACCOUNT_EXISTS)
        for account in range(body["from"], body["to"]):
            self.accounts[account] = [body["checking_balance"], body["savings_balance"]]
        return Response(200)

    def _balance(self, body: Dict[str, Any]) -> Response:
        acc = self._account(body["account"])
        if acc is None:
            return Response(404, b"Account does not exist")
        return Response(200, json.dumps({"balance": acc[0] + acc[1]}).encode())

    def _transact_savings(self, body: Dict[str, Any]) -> Response:
        acc = self._account(body["account"])
        if acc is None:
            return Response(404, b"Account does not exist")
        if acc[1] + body["amount"] < 0:
            return self._error(NOT_ENOUGH_MONEY)
        acc[1] += body["amount"]
        return Response(200)

    def _amalgamate(self, body: Dict[str, Any]) -> Response:
        src = self._account(body["src_account"])
        dst = self._account(body["dst_account"])
        if src is None or dst is None:
            return Response(404, b"Account does not exist")
        dst[0] += src[0] + src[1]
        src[0] = src[1] = 0
        return Response(200)

    def _write_check(self, body: Dict[str, Any]) -> Response:
        acc = self._account(body["account"])
        if acc is None:
            return Response(404, b"Account does not exist")
        amount = body["amount"]
        # overdraft penalty of one unit
        acc[0] -= amount + 1 if acc[0] + acc[1] < amount else amount
        return Response(200)

    def _deposit_checking(self, body: Dict[str, Any]) -> Response:
        acc = self._account(body["account"])
        if acc is None:
            return Response(404, b"Account does not exist")
        acc[0] += body["amount"]
        return Response(200)

    def __enter__(self) -> "FakeBankTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        pass


@pytest.fixture
def bank() -> FakeBankTransport:
    return FakeBankTransport()
