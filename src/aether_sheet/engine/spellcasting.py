"""Spellcasting capacity, caster classification and spell slots.

Capacity tables are stepwise: the value at the greatest class level not
above the current one applies. Caster type is read from a class's own slot
table, so homebrew classes classify themselves without a hard-coded list.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from aether_sheet.core.config import get_settings
from aether_sheet.core.constants import FULL_CASTER_SLOTS, MAX_LEVEL
from aether_sheet.core.logging import get_logger
from aether_sheet.models.character import Character, ClassLevel
from aether_sheet.models.enums import CasterType
from aether_sheet.models.reference import CharacterClass


logger = get_logger(__name__)


# =============================================================================
# Capacity
# =============================================================================


def _stepwise(table: dict[int, int], level: int) -> int:
    applicable = [key for key in table if key <= level]
    return table[max(applicable)] if applicable else 0


def has_spellcasting(character_class: CharacterClass | None) -> bool:
    """Whether the class casts spells at all."""
    return character_class is not None and character_class.spellcasting is not None


def cantrips_known(character_class: CharacterClass, level: int) -> int:
    """Cantrips known at class ``level`` (0 for non-casters)."""
    if character_class.spellcasting is None:
        return 0
    return _stepwise(character_class.spellcasting.cantrips_known, level)


def spells_known(
    character_class: CharacterClass,
    level: int,
    prepared_default: int | None = None,
) -> int:
    """Spells known (or prepared) at class ``level``.

    Prepared casters without a known-spells table get a fixed default,
    taken from settings unless ``prepared_default`` is given.
    """
    spellcasting = character_class.spellcasting
    if spellcasting is None:
        return 0
    if spellcasting.spells_known:
        return _stepwise(spellcasting.spells_known, level)
    if prepared_default is None:
        prepared_default = get_settings().rules.prepared_caster_spell_count
    return prepared_default


class SpellSelection:
    """Cantrip and spell picks capped at the class's capacity.

    Toggling a name that is selected removes it; toggling a new name adds
    it only while under capacity. Selecting fewer than capacity is allowed
    but reported by ``is_complete``.

    Example:
        >>> selection = SpellSelection(cantrip_capacity=1, spell_capacity=2)
        >>> selection.toggle_cantrip("Light")
        True
        >>> selection.toggle_cantrip("Mage Hand")
        False
    """

    def __init__(
        self,
        cantrip_capacity: int,
        spell_capacity: int,
        cantrips: Iterable[str] = (),
        spells: Iterable[str] = (),
    ) -> None:
        self.cantrip_capacity = cantrip_capacity
        self.spell_capacity = spell_capacity
        self._cantrips = list(dict.fromkeys(cantrips))[:cantrip_capacity]
        self._spells = list(dict.fromkeys(spells))[:spell_capacity]

    @classmethod
    def for_class(
        cls,
        character_class: CharacterClass | None,
        level: int = 1,
        cantrips: Iterable[str] = (),
        spells: Iterable[str] = (),
    ) -> SpellSelection:
        """Build a selection sized for ``character_class`` at ``level``."""
        if not has_spellcasting(character_class):
            return cls(0, 0)
        return cls(
            cantrips_known(character_class, level),
            spells_known(character_class, level),
            cantrips,
            spells,
        )

    @property
    def cantrips(self) -> list[str]:
        return list(self._cantrips)

    @property
    def spells(self) -> list[str]:
        return list(self._spells)

    @staticmethod
    def _toggle(selected: list[str], name: str, capacity: int) -> bool:
        if name in selected:
            selected.remove(name)
            return True
        if len(selected) >= capacity:
            return False
        selected.append(name)
        return True

    def toggle_cantrip(self, name: str) -> bool:
        """Add or remove a cantrip. Returns False if refused at capacity."""
        return self._toggle(self._cantrips, name, self.cantrip_capacity)

    def toggle_spell(self, name: str) -> bool:
        """Add or remove a spell. Returns False if refused at capacity."""
        return self._toggle(self._spells, name, self.spell_capacity)

    @property
    def is_skippable(self) -> bool:
        return self.cantrip_capacity == 0 and self.spell_capacity == 0

    def is_complete(self) -> bool:
        return (
            len(self._cantrips) == self.cantrip_capacity
            and len(self._spells) == self.spell_capacity
        )


# =============================================================================
# Caster Classification
# =============================================================================


def class_slot_table(character_class: CharacterClass, class_level: int) -> dict[int, int]:
    """Slots per spell level from the class's own table at ``class_level``."""
    spellcasting = character_class.spellcasting
    if spellcasting is None or class_level < 1:
        return {}
    table = spellcasting.spell_slots_by_level
    applicable = [key for key in table if key <= class_level]
    if not applicable:
        return {}
    return {
        spell_level: count
        for spell_level, count in sorted(table[max(applicable)].items())
        if count > 0
    }


def caster_type(character_class: CharacterClass) -> CasterType:
    """Classify how fast the class gains slots.

    Full casters have at least two first-level slots at class level 1,
    half casters first get first-level slots at class level 2, and any
    other class with slots is a third caster.
    """
    if character_class.spellcasting is None:
        return CasterType.NONE
    if class_slot_table(character_class, 1).get(1, 0) >= 2:
        return CasterType.FULL
    if class_slot_table(character_class, 2).get(1, 0) > 0:
        return CasterType.HALF
    if any(character_class.spellcasting.spell_slots_by_level.values()):
        return CasterType.THIRD
    return CasterType.NONE


def caster_level_contribution(character_class: CharacterClass, class_level: int) -> int:
    """Levels this class adds to a multiclass caster level."""
    divisor = caster_type(character_class).level_divisor
    return class_level // divisor if divisor else 0


def effective_caster_level(classes: Sequence[ClassLevel]) -> int:
    """Sum of caster-level contributions across class entries."""
    return sum(caster_level_contribution(e.character_class, e.level) for e in classes)


def spell_slot_table(classes: Sequence[ClassLevel]) -> dict[int, int]:
    """Maximum slots per spell level for a set of class entries.

    A single class uses its own table. A multiclass looks up the
    aggregate caster level in any full caster's table, falling back to
    the standard full-caster progression when none of the classes is a
    full caster.
    """
    if not classes:
        return {}
    if len(classes) == 1:
        return class_slot_table(classes[0].character_class, classes[0].level)

    caster_level = min(effective_caster_level(classes), MAX_LEVEL)
    if caster_level < 1:
        return {}

    for entry in classes:
        if caster_type(entry.character_class) == CasterType.FULL:
            return class_slot_table(entry.character_class, caster_level)
    return dict(FULL_CASTER_SLOTS[caster_level])


# =============================================================================
# Expendable Slots
# =============================================================================


def max_spell_slots(character: Character) -> dict[int, int]:
    """Maximum slots for the character's current class levels."""
    return spell_slot_table(character.classes)


def expend_spell_slot(character: Character, spell_level: int) -> bool:
    """Spend one slot of ``spell_level``.

    Returns:
        False if no slot of that level remains; the character is unchanged.
    """
    remaining = character.spell_slots.get(spell_level, 0)
    if remaining <= 0:
        return False
    character.spell_slots = {**character.spell_slots, spell_level: remaining - 1}
    character.touch()
    logger.debug(
        "Spell slot expended",
        character_id=character.id,
        spell_level=spell_level,
        remaining=remaining - 1,
    )
    return True


def restore_spell_slots(character: Character) -> dict[int, int]:
    """Restore every slot to its maximum. Returns the restored table."""
    maximum = max_spell_slots(character)
    character.spell_slots = dict(maximum)
    character.touch()
    return maximum


def clamp_spell_slots(current: dict[int, int], maximum: dict[int, int]) -> dict[int, int]:
    """Drop levels with no maximum and cap the rest at their maximum."""
    return {
        spell_level: min(count, maximum[spell_level])
        for spell_level, count in current.items()
        if spell_level in maximum
    }


__all__ = [
    "has_spellcasting",
    "cantrips_known",
    "spells_known",
    "SpellSelection",
    "class_slot_table",
    "caster_type",
    "caster_level_contribution",
    "effective_caster_level",
    "spell_slot_table",
    "max_spell_slots",
    "expend_spell_slot",
    "restore_spell_slots",
    "clamp_spell_slots",
]
