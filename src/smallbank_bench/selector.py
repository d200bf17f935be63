"""Transaction type selection policies used by the generator."""

import random
from typing import Dict, FrozenSet, Iterable, List, Protocol, Sequence, Tuple

from .constants import TRANSACTION_TYPE_NAMES, TransactionType


class TypeSelector(Protocol):
    @property
    def possible_types(self) -> FrozenSet[TransactionType]:
        ...

    def select(self, rng: random.Random) -> TransactionType:
        ...


class UniformTypeSelector:
    """Draws every transaction type with equal probability."""

    def __init__(self) -> None:
        self._types: List[TransactionType] = list(TransactionType)

    @property
    def possible_types(self) -> FrozenSet[TransactionType]:
        return frozenset(self._types)

    def select(self, rng: random.Random) -> TransactionType:
        return rng.choice(self._types)


class FixedTypeSelector:
    """
    Cycles through a fixed sequence of types, ignoring the random source.

    Used for reproducible runs, e.g. a sequence of one type runs a
    single-operation workload.
    """

    def __init__(self, sequence: Sequence[TransactionType]):
        if not sequence:
            raise ValueError("Fixed type sequence must not be empty")
        self.sequence: Tuple[TransactionType, ...] = tuple(sequence)
        self._position = 0

    @property
    def possible_types(self) -> FrozenSet[TransactionType]:
        return frozenset(self.sequence)

    def select(self, rng: random.Random) -> TransactionType:
        txn_type = self.sequence[self._position % len(self.sequence)]
        self._position += 1
        return txn_type


class WeightedTypeSelector:
    """
    Selects transaction types with probability proportional to their weights.
    """

    def __init__(self, weights: Iterable[Tuple[TransactionType, float]]):
        """
        Initialize selector with weighted transaction types.

        Args:
            weights: Pairs of (transaction type, positive weight). A type listed
                more than once accumulates its weights.

        Raises:
            ValueError: If no weights given or any weight is not positive
        """
        merged: Dict[TransactionType, float] = {}
        for txn_type, weight in weights:
            if weight <= 0:
                raise ValueError(f"Weight must be positive for {txn_type.name}: {weight}")
            merged[txn_type] = merged.get(txn_type, 0.0) + weight

        if not merged:
            raise ValueError("At least one weighted transaction type is required")

        self._types = list(merged.keys())
        self._weights = list(merged.values())

    @property
    def possible_types(self) -> FrozenSet[TransactionType]:
        return frozenset(self._types)

    @property
    def total_weight(self) -> float:
        return sum(self._weights)

    @property
    def weights(self) -> Dict[TransactionType, float]:
        return dict(zip(self._types, self._weights))

    def select(self, rng: random.Random) -> TransactionType:
        return rng.choices(self._types, weights=self._weights, k=1)[0]


def parse_type_name(name: str) -> TransactionType:
    """
    Resolve a command-line transaction type name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return TRANSACTION_TYPE_NAMES[name]
    except KeyError:
        raise ValueError(
            f"Unknown transaction type: {name}. Valid options: {', '.join(TRANSACTION_TYPE_NAMES)}"
        ) from None
