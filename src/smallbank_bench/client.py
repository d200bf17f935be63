import logging
import random
import time
from dataclasses import dataclass
from typing import List, Optional

from .account_space import AccountRange, compute_range
from .classifier import Classification, Outcome, check_response
from .constants import (
    DEFAULT_CHECKING_BALANCE,
    DEFAULT_SAVINGS_BALANCE,
    DEFAULT_TOTAL_ACCOUNTS,
    FINAL_CHECKPOINT,
    INITIAL_CHECKPOINT,
    TransactionType,
)
from .errors import ConfigurationError, FatalResponseError, TransportError
from .fixture import VerificationFixture, check_fixture_params
from .generator import TransactionGenerator, TransactionRequest
from .metrics import MetricsCollector
from .provisioner import AccountProvisioner
from .selector import TypeSelector
from .transport import Transport
from .verifier import StateVerifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkloadSettings:
    """Parameters of a workload run, shared by every client instance."""

    total_accounts: int = DEFAULT_TOTAL_ACCOUNTS
    partition_clients: bool = False
    transactions: int = 10
    initial_checking_balance: int = DEFAULT_CHECKING_BALANCE
    initial_savings_balance: int = DEFAULT_SAVINGS_BALANCE
    create_accounts: bool = True
    seed: Optional[int] = None
    selector: Optional[TypeSelector] = None
    fixture: Optional[VerificationFixture] = None


class SmallBankClient:
    """
    Runs the SmallBank workload of a single client instance.

    The account range is computed once at construction. A run creates the
    accounts, verifies the initial checkpoint, generates and submits every
    transaction, and verifies the final checkpoint. Any fatal response aborts
    the run; recognized rejections are counted and the run continues.
    """

    def __init__(
        self,
        transport: Transport,
        settings: WorkloadSettings,
        client_id: int = 0,
        metrics_collector: Optional[MetricsCollector] = None,
    ):
        """
        Initialize a client instance.

        Args:
            transport: Channel to the service under test
            settings: Workload parameters
            client_id: Index of this client instance
            metrics_collector: Optional metrics collector for tracking performance

        Raises:
            ConfigurationError: If the verification file doesn't match the settings, or
                Amalgamate can be drawn from a range of fewer than two accounts
        """
        if settings.fixture is not None:
            check_fixture_params(settings.fixture, settings.total_accounts, settings.partition_clients)

        self._transport = transport
        self._settings = settings
        self._client_id = client_id
        self._metrics = metrics_collector if metrics_collector is not None else MetricsCollector()
        self._generator = TransactionGenerator(settings.selector)
        self._verifier = StateVerifier(transport)

        seed = None if settings.seed is None else settings.seed + client_id
        self._rng = random.Random(seed)

        self.account_range: AccountRange = compute_range(
            settings.total_accounts, client_id, settings.partition_clients
        )

        if self.account_range.size < 2 and TransactionType.AMALGAMATE in self._generator.possible_types:
            raise ConfigurationError(
                f"Amalgamate needs at least two accounts, range {self.account_range} has {self.account_range.size}"
            )

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    def send_creation_transactions(self) -> Classification:
        logger.debug(f"Creating {self._settings.total_accounts} accounts")
        provisioner = AccountProvisioner(
            self.account_range,
            self._settings.initial_checking_balance,
            self._settings.initial_savings_balance,
        )
        return provisioner.create_accounts(self._transport)

    def prepare_transactions(self) -> List[TransactionRequest]:
        return self._generator.generate(self.account_range, self._settings.transactions, self._rng)

    def verify_initial_state(self) -> None:
        expected = self._settings.fixture.initial if self._settings.fixture else None
        self._verifier.verify(INITIAL_CHECKPOINT, expected)

    def verify_final_state(self) -> None:
        expected = self._settings.fixture.final if self._settings.fixture else None
        self._verifier.verify(FINAL_CHECKPOINT, expected)

    def send_transaction(self, transaction: TransactionRequest) -> Classification:
        """
        Submit one generated transaction and classify its response.

        Raises:
            FatalResponseError: If the service returned an unrecognized failure
            TransportError: If the transport failed to deliver the request
        """
        outcome = Outcome.FATAL
        error_message = ""
        start_time = time.time()
        try:
            response = self._transport.submit(transaction.method, transaction.payload_bytes)
            classification = check_response(response, transaction.method)
            outcome = classification.outcome
            error_message = classification.message
            return classification
        except (FatalResponseError, TransportError) as e:
            error_message = str(e)
            logger.error(f"Transaction {transaction.index} ({transaction.method}) failed: {e}")
            raise
        finally:
            self._metrics.record_transaction(transaction.method, start_time, time.time(), outcome, error_message)

    def send_transactions(self, transactions: List[TransactionRequest]) -> None:
        logger.info(f"Client {self._client_id} {self.account_range} workload started")
        for transaction in transactions:
            self.send_transaction(transaction)
        logger.info(f"Client {self._client_id} {self.account_range} workload completed")

    def run(self) -> MetricsCollector:
        if self._settings.create_accounts:
            self.send_creation_transactions()
        self.verify_initial_state()

        transactions = self.prepare_transactions()
        self.send_transactions(transactions)

        self.verify_final_state()
        return self._metrics
