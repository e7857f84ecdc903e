"""Ability score assignment and species increases.

Creation assigns the standard array one value per ability. Species and
subspecies increases are applied to the base scores exactly once to get
the final scores; re-deriving always starts again from the base scores.
"""

from __future__ import annotations

from collections import Counter

from aether_sheet.core.constants import STANDARD_ARRAY
from aether_sheet.core.exceptions import ValidationError
from aether_sheet.models.character import AbilityScores, calculate_modifier
from aether_sheet.models.enums import Ability
from aether_sheet.models.reference import Species, Subspecies


def ability_modifier(score: int) -> int:
    """Return ``floor((score - 10) / 2)``."""
    return calculate_modifier(score)


class StandardArrayAssignment:
    """Tracks which standard-array value is assigned to which ability.

    Assigning a value already held by another ability moves it: the other
    ability is cleared, so no value is ever used twice.

    Example:
        >>> assignment = StandardArrayAssignment()
        >>> assignment.assign(Ability.STR, 15)
        >>> assignment.available_scores()
        [14, 13, 12, 10, 8]
    """

    def __init__(self, assignments: dict[Ability, int] | None = None) -> None:
        self._assignments: dict[Ability, int] = {}
        for ability, score in (assignments or {}).items():
            self.assign(Ability(ability), score)

    @property
    def assignments(self) -> dict[Ability, int]:
        return dict(self._assignments)

    def assign(self, ability: Ability, score: int) -> None:
        """Assign ``score`` to ``ability``.

        Raises:
            ValidationError: If ``score`` is not a standard-array value.
        """
        if score not in STANDARD_ARRAY:
            raise ValidationError(
                "Score is not part of the standard array",
                field_name=ability.value,
                invalid_value=score,
            )
        for other, held in list(self._assignments.items()):
            if held == score and other != ability:
                del self._assignments[other]
        self._assignments[ability] = score

    def clear(self, ability: Ability) -> None:
        self._assignments.pop(ability, None)

    def available_scores(self) -> list[int]:
        """Standard-array values not yet assigned, in array order."""
        remaining = Counter(STANDARD_ARRAY)
        remaining.subtract(self._assignments.values())
        return [score for score in STANDARD_ARRAY if remaining[score] > 0]

    def is_complete(self) -> bool:
        """True only when all six abilities hold distinct array values."""
        return is_complete_standard_array(self._assignments)

    def to_scores(self) -> AbilityScores:
        """Return the assigned scores.

        Raises:
            ValidationError: If the assignment is incomplete.
        """
        if not self.is_complete():
            raise ValidationError(
                "Standard array assignment is incomplete",
                field_name="ability_scores",
                details={"unassigned": [a.value for a in Ability if a not in self._assignments]},
            )
        return AbilityScores(**{ability.value: score for ability, score in self._assignments.items()})


def is_complete_standard_array(assignments: dict[Ability, int]) -> bool:
    """Check that every ability holds a standard-array value, each used once."""
    if set(assignments) != set(Ability):
        return False
    return sorted(assignments.values()) == sorted(STANDARD_ARRAY)


def species_increases(
    species: Species | None,
    subspecies: Subspecies | None = None,
) -> dict[Ability, int]:
    """Combine species and subspecies increases into one map."""
    totals: Counter[Ability] = Counter()
    if species is not None:
        totals.update(species.ability_increases)
    if subspecies is not None:
        totals.update(subspecies.ability_increases)
    return {ability: totals[ability] for ability in Ability if totals[ability]}


def apply_species_increases(
    base: AbilityScores,
    species: Species | None,
    subspecies: Subspecies | None = None,
) -> AbilityScores:
    """Return final scores: ``base`` plus species and subspecies increases.

    Always computed from the base scores, so calling it again on the same
    base gives the same result rather than stacking increases.
    """
    return base.with_increases(species_increases(species, subspecies))


__all__ = [
    "ability_modifier",
    "StandardArrayAssignment",
    "is_complete_standard_array",
    "species_increases",
    "apply_species_increases",
]
