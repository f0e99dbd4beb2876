"""
Mutable run state for the placement engine.

Group membership is the only source of truth: grade bounds, spread and
violation flags are always derived from it, never stored alongside.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from ..constants import group_id_for
from ..violations import ConstraintViolation, ResolutionType


@dataclass
class GroupState:
    """One group (bin) while a run is in progress."""

    id: str
    group_number: int
    grades: dict[str, int] = field(default_factory=dict)  # camper_id -> grade, in placement order

    @property
    def camper_ids(self) -> list[str]:
        return list(self.grades)

    @property
    def size(self) -> int:
        return len(self.grades)

    @property
    def min_grade(self) -> int | None:
        return min(self.grades.values()) if self.grades else None

    @property
    def max_grade(self) -> int | None:
        return max(self.grades.values()) if self.grades else None

    @property
    def grade_spread(self) -> int:
        if not self.grades:
            return 0
        return max(self.grades.values()) - min(self.grades.values())

    def __contains__(self, camper_id: str) -> bool:
        return camper_id in self.grades

    def add(self, camper_id: str, grade: int) -> None:
        self.grades[camper_id] = grade

    def remove(self, camper_id: str) -> None:
        del self.grades[camper_id]


def initialize_groups(num_groups: int) -> list[GroupState]:
    """Empty groups numbered 1..num_groups."""
    return [GroupState(id=group_id_for(n), group_number=n) for n in range(1, num_groups + 1)]


class ViolationLedger:
    """Append-only, deduplicated violation record for one run.

    A violation is recorded at most once per dedup key (type plus affected
    group, friend group or camper). Accepted violations get sequential ids
    ``v-1``, ``v-2``... so identical inputs produce identical output.
    """

    def __init__(self) -> None:
        self._violations: list[ConstraintViolation] = []
        self._index: dict[tuple[str, str], int] = {}

    def __iter__(self) -> Iterator[ConstraintViolation]:
        return iter(self._violations)

    def __len__(self) -> int:
        return len(self._violations)

    def has(self, dedup_key: tuple[str, str]) -> bool:
        return dedup_key in self._index

    def add(self, violation: ConstraintViolation) -> ConstraintViolation | None:
        """Record a violation unless the same fact is already recorded.

        Returns:
            The recorded violation (with its assigned id), or None if it was a duplicate
        """
        key = violation.dedup_key
        if key in self._index:
            return None

        recorded = violation.model_copy(update={"id": f"v-{len(self._violations) + 1}"})
        self._index[key] = len(self._violations)
        self._violations.append(recorded)
        return recorded

    def resolve(self, dedup_key: tuple[str, str], resolution_type: ResolutionType, note: str) -> None:
        """Mark a recorded violation resolved by the system."""
        idx = self._index[dedup_key]
        self._violations[idx] = self._violations[idx].resolve("system", resolution_type, note)

    def extend(self, violations: Iterable[ConstraintViolation]) -> None:
        for violation in violations:
            self.add(violation)

    @property
    def violations(self) -> list[ConstraintViolation]:
        return list(self._violations)
