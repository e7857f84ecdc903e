"""Short and long rest transitions.

Both rests return a new character snapshot and leave the input untouched.
Hit dice are spent and recovered primary class entry first. Every spent
die heals with the primary class's die size.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from aether_sheet.core.exceptions import InvalidGameStateError, ValidationError
from aether_sheet.core.logging import get_logger
from aether_sheet.engine.dice import DiceRoller
from aether_sheet.engine.spellcasting import max_spell_slots
from aether_sheet.models.character import Character, ClassLevel
from aether_sheet.models.enums import Ability


logger = get_logger(__name__)


@dataclass
class ShortRestResult:
    """Outcome of an applied short rest."""

    character: Character
    hit_dice_spent: int
    rolls: list[int] = field(default_factory=list)
    healing: int = 0


@dataclass
class LongRestResult:
    """Outcome of a long rest."""

    character: Character
    hp_restored: int
    hit_dice_recovered: int
    spell_slots: dict[int, int] = field(default_factory=dict)


def _primary_first(character: Character) -> list[ClassLevel]:
    primary = character.primary_entry
    return [primary, *(entry for entry in character.classes if entry is not primary)]


class ShortRestSession:
    """A short rest in progress: choose how many hit dice to spend, then apply."""

    def __init__(self, character: Character, roller: DiceRoller | None = None) -> None:
        self._character = character
        self._roller = roller or DiceRoller()
        self._to_spend = 0
        self._closed = False

    @property
    def available_hit_dice(self) -> int:
        return self._character.hit_dice_remaining

    @property
    def hit_die(self) -> int:
        return self._character.primary_entry.hit_die

    @property
    def hit_dice_to_spend(self) -> int:
        return self._to_spend

    @property
    def is_open(self) -> bool:
        return not self._closed

    def select_hit_dice(self, count: int) -> None:
        """Choose how many hit dice to spend.

        Raises:
            ValidationError: If ``count`` is outside 0..available.
        """
        self._ensure_open()
        if not 0 <= count <= self.available_hit_dice:
            raise ValidationError(
                f"Hit dice to spend must be between 0 and {self.available_hit_dice}",
                field_name="hit_dice_to_spend",
                invalid_value=count,
            )
        self._to_spend = count

    def apply(self) -> ShortRestResult:
        """Roll the selected dice and apply the healing to a copy of the character.

        Each die heals ``max(1, roll + CON modifier)``; the total is capped
        at maximum HP.
        """
        self._ensure_open()
        con_mod = self._character.ability_scores.modifier(Ability.CON)
        rolls = self._roller.roll_dice(self._to_spend, self.hit_die)
        healing = sum(max(1, roll + con_mod) for roll in rolls)

        updated = self._character.model_copy(deep=True)
        restored = updated.heal(healing)

        remaining = self._to_spend
        spent_by_class: dict[str, int] = {}
        for entry in _primary_first(updated):
            spend = min(remaining, entry.hit_dice_remaining)
            remaining -= spend
            spent_by_class[entry.class_id] = entry.hit_dice_used + spend
        updated.classes = [
            entry.model_copy(update={"hit_dice_used": spent_by_class[entry.class_id]})
            for entry in updated.classes
        ]
        updated.touch()

        self._closed = True
        logger.info(
            "Short rest applied",
            character=updated,
            hit_dice_spent=self._to_spend,
            rolls=rolls,
            healing=restored,
        )
        return ShortRestResult(
            character=updated,
            hit_dice_spent=self._to_spend,
            rolls=rolls,
            healing=restored,
        )

    def cancel(self) -> Character:
        """Discard the selection. Returns the unchanged character."""
        self._ensure_open()
        self._to_spend = 0
        self._closed = True
        return self._character

    def _ensure_open(self) -> None:
        if self._closed:
            raise InvalidGameStateError(
                "Short rest already applied or cancelled",
                current_state="closed",
                expected_states=["open"],
            )


def long_rest(character: Character) -> LongRestResult:
    """Finish a long rest.

    HP returns to maximum, ``max(1, level // 2)`` hit dice are recovered
    (never more than were spent) and spell slots are restored. Temporary
    HP and conditions are left as they are.

    Args:
        character: Character resting. It is not modified.

    Returns:
        LongRestResult holding the rested character.
    """
    updated = character.model_copy(deep=True)
    hp_restored = updated.max_hit_points - updated.current_hit_points
    updated.current_hit_points = updated.max_hit_points

    to_recover = max(1, updated.level // 2)
    recovered_total = 0
    recovered: dict[str, int] = {}
    for entry in _primary_first(updated):
        regain = min(to_recover - recovered_total, entry.hit_dice_used)
        recovered[entry.class_id] = entry.hit_dice_used - regain
        recovered_total += regain
    updated.classes = [
        entry.model_copy(update={"hit_dice_used": recovered[entry.class_id]})
        for entry in updated.classes
    ]

    slots = max_spell_slots(updated)
    updated.spell_slots = dict(slots)
    updated.touch()

    logger.info(
        "Long rest applied",
        character=updated,
        hp_restored=hp_restored,
        hit_dice_recovered=recovered_total,
    )
    return LongRestResult(
        character=updated,
        hp_restored=hp_restored,
        hit_dice_recovered=recovered_total,
        spell_slots=slots,
    )


__all__ = [
    "ShortRestResult",
    "LongRestResult",
    "ShortRestSession",
    "long_rest",
]
