"""Violation records and the per-call list that collects them."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List


class ViolationKind(Enum):
    """Kind of a recorded violation."""
    MISSING = 'missing'
    INVALID = 'invalid'


@dataclass(frozen=True)
class Violation:
    """One reported failure at an instance path."""
    path: str
    message: str
    kind: ViolationKind

    def __str__(self) -> str:
        return f"{self.path or '(root)'} - {self.message}"


class ErrorAggregator:
    """
    Collects violations in traversal order for one validation call.

    Records are kept exactly as appended: depth-first, in property declaration
    order and array index order. Nothing is deduplicated.
    """

    def __init__(self) -> None:
        self._violations: List[Violation] = []

    def reset(self) -> None:
        self._violations = []

    def record(self, violation: Violation) -> None:
        self._violations.append(violation)

    def extend(self, violations: Iterable[Violation]) -> None:
        for violation in violations:
            self.record(violation)

    def drain(self) -> List[Violation]:
        """Return the collected violations and start over with an empty list."""
        violations = self._violations
        self._violations = []
        return violations

    def __len__(self) -> int:
        return len(self._violations)

    def __iter__(self) -> Iterator[Violation]:
        return iter(list(self._violations))
