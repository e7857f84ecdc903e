"""Pydantic V2 schemas for reference records and characters.

Reference records (species, classes, origins, gear, spells) are frozen and
load from camelCase or snake_case JSON. Characters are mutable snapshots
that embed the records they were built from.
"""

from __future__ import annotations

from aether_sheet.models.character import (
    AbilityScores,
    Character,
    ClassLevel,
    Personality,
    calculate_modifier,
)
from aether_sheet.models.enums import (
    SKILL_ABILITIES,
    Ability,
    Alignment,
    ArmorCategory,
    CasterType,
    CatalogKind,
    CreationStep,
    DexBonusRule,
    HpMethod,
    LevelUpPhase,
    Size,
    Skill,
    WeaponCategory,
    WeaponRange,
)
from aether_sheet.models.reference import (
    RECORD_TYPES,
    Armor,
    CatalogRecord,
    CharacterClass,
    ClassFeature,
    ConditionRecord,
    EquipmentChoice,
    EquipmentItem,
    Origin,
    Species,
    Spell,
    SpellcastingSpec,
    Subclass,
    Subspecies,
    Trait,
    Weapon,
)


__all__ = [
    # Enums
    "Ability",
    "Skill",
    "SKILL_ABILITIES",
    "Alignment",
    "Size",
    "ArmorCategory",
    "DexBonusRule",
    "WeaponCategory",
    "WeaponRange",
    "HpMethod",
    "CasterType",
    "LevelUpPhase",
    "CatalogKind",
    "CreationStep",
    # Reference records
    "CatalogRecord",
    "Trait",
    "Species",
    "Subspecies",
    "ClassFeature",
    "EquipmentChoice",
    "SpellcastingSpec",
    "CharacterClass",
    "Subclass",
    "Origin",
    "Weapon",
    "Armor",
    "EquipmentItem",
    "Spell",
    "ConditionRecord",
    "RECORD_TYPES",
    # Character
    "calculate_modifier",
    "AbilityScores",
    "ClassLevel",
    "Personality",
    "Character",
]
