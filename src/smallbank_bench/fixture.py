import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .constants import FINAL_CHECKPOINT, INITIAL_CHECKPOINT
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationFixture:
    """Expected balances loaded from a verification file."""

    accounts: Optional[int] = None
    initial: Optional[List[Any]] = None
    final: Optional[List[Any]] = None

    @classmethod
    def from_dict(cls, document: Dict[str, Any]) -> "VerificationFixture":
        accounts = document.get("accounts")
        if accounts is not None and (isinstance(accounts, bool) or not isinstance(accounts, int)):
            raise ConfigurationError(f"Verification file 'accounts' must be an integer, not: {accounts!r}")
        return cls(
            accounts=accounts,
            initial=document.get(INITIAL_CHECKPOINT),
            final=document.get(FINAL_CHECKPOINT),
        )


def load_verification_file(path: Union[str, Path]) -> VerificationFixture:
    """
    Load expected checkpoints from a JSON verification file.

    Raises:
        ConfigurationError: If the file is missing or not a JSON object
    """
    path = Path(path)
    try:
        document = json.loads(path.read_text())
    except OSError as e:
        raise ConfigurationError(f"Error reading verification file {path}: {e}") from e
    except ValueError as e:
        raise ConfigurationError(f"Verification file {path} is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise ConfigurationError(f"Verification file {path} must contain a JSON object")

    logger.debug(f"Loaded verification file {path}")
    return VerificationFixture.from_dict(document)


def check_fixture_params(fixture: VerificationFixture, total_accounts: int, partition_clients: bool) -> None:
    """
    Check that a verification file applies to the configured account count.

    Partitioned runs verify a per-instance subset, so a differing count is
    accepted there.

    Raises:
        ConfigurationError: If the counts differ in a shared (non-partitioned) run
    """
    if fixture.accounts is None or fixture.accounts == total_accounts:
        return
    if not partition_clients:
        raise ConfigurationError(
            f"Verification file is only applicable for {fixture.accounts} accounts, "
            f"but currently have {total_accounts}"
        )
