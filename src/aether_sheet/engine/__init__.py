"""Rules engine: derivation, creation, level-up and rests.

Everything here is deterministic given a DiceRoller; dice go through the
d20 library and nothing else draws random numbers.
"""

from __future__ import annotations

from aether_sheet.engine.catalog import ReferenceCatalog, get_reference_catalog
from aether_sheet.engine.creation import (
    CharacterDraft,
    build_character,
    is_ready,
    step_status,
)
from aether_sheet.engine.dice import DiceRoller, RollResult
from aether_sheet.engine.equipment import EquipmentResolution, resolve
from aether_sheet.engine.level_up import LevelUpResult, LevelUpSession
from aether_sheet.engine.rest import (
    LongRestResult,
    ShortRestResult,
    ShortRestSession,
    long_rest,
)
from aether_sheet.engine.spellcasting import (
    SpellSelection,
    expend_spell_slot,
    spell_slot_table,
)
from aether_sheet.engine.stats import DerivedStats, derive_stats


__all__ = [
    # Catalog
    "ReferenceCatalog",
    "get_reference_catalog",
    # Dice
    "DiceRoller",
    "RollResult",
    # Derivation
    "DerivedStats",
    "derive_stats",
    # Creation
    "CharacterDraft",
    "build_character",
    "is_ready",
    "step_status",
    "EquipmentResolution",
    "resolve",
    "SpellSelection",
    # Progression
    "LevelUpSession",
    "LevelUpResult",
    "spell_slot_table",
    "expend_spell_slot",
    # Rests
    "ShortRestSession",
    "ShortRestResult",
    "LongRestResult",
    "long_rest",
]
