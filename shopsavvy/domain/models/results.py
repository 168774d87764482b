"""Result containers for single operations and batches."""

from dataclasses import dataclass, field
from typing import Generic, Iterator, List, Optional, Sequence, TypeVar, overload

from shopsavvy.domain.errors import ShopSavvyApiError

T = TypeVar("T")


@dataclass
class Outcome(Generic[T]):
    """Success value or classified error of one operation."""
    value: Optional[T] = None
    error: Optional[ShopSavvyApiError] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Returns the value, or raises the captured error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


@dataclass
class BatchResult(Sequence[Outcome[T]]):
    """Positional result vector of a batch run.

    `outcomes[i]` always belongs to the i-th submitted operation, whatever
    order the operations completed in.
    """
    outcomes: List[Outcome[T]] = field(default_factory=list)

    @overload
    def __getitem__(self, index: int) -> Outcome[T]: ...

    @overload
    def __getitem__(self, index: slice) -> List[Outcome[T]]: ...

    def __getitem__(self, index):
        return self.outcomes[index]

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self) -> Iterator[Outcome[T]]:
        return iter(self.outcomes)

    @property
    def succeeded(self) -> List[int]:
        """Indices of successful operations."""
        return [i for i, outcome in enumerate(self.outcomes) if outcome.ok]

    @property
    def failed(self) -> List[int]:
        """Indices of failed operations."""
        return [i for i, outcome in enumerate(self.outcomes) if not outcome.ok]

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    def values(self) -> List[Optional[T]]:
        """Values in input order, None where the operation failed."""
        return [outcome.value if outcome.ok else None for outcome in self.outcomes]

    def errors(self) -> List[Optional[ShopSavvyApiError]]:
        """Errors in input order, None where the operation succeeded."""
        return [outcome.error for outcome in self.outcomes]
