from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class AccountRange:
    """Half-open range [start, end) of account ids owned by one client instance."""

    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start

    def __contains__(self, account: object) -> bool:
        return isinstance(account, int) and self.start <= account < self.end

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end))

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"


def compute_range(total_accounts: int, client_id: int, partition_clients: bool) -> AccountRange:
    """
    Compute the account range a client instance creates and transacts against.

    Without partitioning every client shares [0, total_accounts) and contention
    between clients is expected. With partitioning client i owns
    [i * total_accounts, (i + 1) * total_accounts), so ranges never overlap.

    Args:
        total_accounts: Number of accounts per client instance
        client_id: Index of this client instance
        partition_clients: Whether clients get disjoint ranges

    Returns:
        AccountRange for this client
    """
    if not partition_clients:
        return AccountRange(0, total_accounts)

    start = client_id * total_accounts
    return AccountRange(start, start + total_accounts)
