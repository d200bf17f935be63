import logging

from .account_space import AccountRange
from .classifier import Classification, check_response
from .constants import CREATE_BATCH_METHOD, DEFAULT_CHECKING_BALANCE, DEFAULT_SAVINGS_BALANCE
from .payloads import CreateAccountsPayload
from .transport import Transport

logger = logging.getLogger(__name__)


def build_creation_payload(
    account_range: AccountRange,
    initial_checking_balance: int = DEFAULT_CHECKING_BALANCE,
    initial_savings_balance: int = DEFAULT_SAVINGS_BALANCE,
) -> CreateAccountsPayload:
    """Build the batch request creating every account in account_range."""
    return CreateAccountsPayload(
        from_account=account_range.start,
        to_account=account_range.end,
        checking_balance=initial_checking_balance,
        savings_balance=initial_savings_balance,
    )


class AccountProvisioner:
    def __init__(
        self,
        account_range: AccountRange,
        initial_checking_balance: int = DEFAULT_CHECKING_BALANCE,
        initial_savings_balance: int = DEFAULT_SAVINGS_BALANCE,
    ):
        """
        Initialize the provisioner for a range of accounts.

        Args:
            account_range: Accounts to create
            initial_checking_balance: Starting checking balance of every account (default: 1000)
            initial_savings_balance: Starting savings balance of every account (default: 1000)
        """
        self._range = account_range
        self._checking = initial_checking_balance
        self._savings = initial_savings_balance

    def creation_payload(self) -> CreateAccountsPayload:
        return build_creation_payload(self._range, self._checking, self._savings)

    def create_accounts(self, transport: Transport) -> Classification:
        """
        Submit the batch creation request once.

        Accounts that already exist are reported by the service as a recognized
        rejection, which is not an error.

        Raises:
            FatalResponseError: If the service fails for any other reason
        """
        logger.info(f"Creating accounts from {self._range.start} to {self._range.end}")
        response = transport.submit(CREATE_BATCH_METHOD, self.creation_payload().encode())
        return check_response(response, CREATE_BATCH_METHOD)
