"""Exceptions raised by the workload driver. All of them abort the run."""

from typing import Any


class SmallBankBenchError(Exception):
    """Base class for every error the driver raises."""


class ConfigurationError(SmallBankBenchError):
    """Invalid settings or verification file, detected before any traffic is sent."""


class TransportError(SmallBankBenchError):
    """The transport could not deliver a request or read its response."""


class FatalResponseError(SmallBankBenchError):
    """The service returned a failure that is not a recognized business rejection."""

    def __init__(self, body: str, method: str = ""):
        self.body = body
        self.method = method
        super().__init__(body)

    def __reduce__(self):
        return (self.__class__, (self.body, self.method))


class ResponseSchemaError(SmallBankBenchError):
    """A successful response did not match the expected schema."""


class FixtureSchemaError(SmallBankBenchError):
    """A checkpoint in the verification file is malformed."""


class BalanceMismatchError(SmallBankBenchError):
    """An account balance differs from the expected checkpoint value."""

    def __init__(self, label: str, account: Any, expected: int, actual: int):
        self.label = label
        self.account = account
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{label} state: expected account {account} to have balance {expected}, actual balance is {actual}"
        )

    def __reduce__(self):
        return (self.__class__, (self.label, self.account, self.expected, self.actual))


class UnknownTransactionTypeError(SmallBankBenchError, ValueError):
    """A selection policy produced a value that is not a TransactionType."""
