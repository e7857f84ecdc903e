"""Pytest configuration and shared fixtures.

This module provides the reference catalog, character factories and dice
rollers shared by the Aether test suite.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from aether_sheet.core.constants import FULL_CASTER_SLOTS
from aether_sheet.engine.catalog import ReferenceCatalog
from aether_sheet.engine.dice import DiceRoller
from aether_sheet.engine.spellcasting import spell_slot_table
from aether_sheet.engine.stats import max_hit_points
from aether_sheet.models.character import AbilityScores, Character, ClassLevel
from aether_sheet.models.enums import Ability


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from aether_sheet.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Path to a throwaway SQLite character store."""
    return tmp_path / "characters.db"


# =============================================================================
# Dice Fixtures
# =============================================================================


class FixedDiceRoller(DiceRoller):
    """Dice roller returning scripted results, then the die's maximum."""

    def __init__(self, values: Iterable[int] = ()) -> None:
        super().__init__(seed=0)
        self._values = list(values)
        self.sizes: list[int] = []

    def roll_die(self, size: int) -> int:
        self.sizes.append(size)
        if self._values:
            return self._values.pop(0)
        return size


@pytest.fixture
def dice_roller() -> DiceRoller:
    """Provide a seeded dice roller."""
    return DiceRoller(seed=42)


@pytest.fixture
def fixed_roller() -> Callable[..., FixedDiceRoller]:
    """Factory for scripted dice rollers."""

    def _make(*values: int) -> FixedDiceRoller:
        return FixedDiceRoller(values)

    return _make


# =============================================================================
# Reference Data Fixtures
# =============================================================================


@pytest.fixture
def catalog_data() -> dict[str, Any]:
    """Reference data covering every record kind the engine reads.

    Returns:
        Mapping of catalog section to records.
    """
    return {
        "species": [
            {
                "id": "human",
                "name": "Human",
                "speed": 30,
                "size": "Medium",
                "ability_increases": {ability.value: 1 for ability in Ability},
                "languages": ["Common"],
            },
            {
                "id": "elf",
                "name": "Elf",
                "speed": 30,
                "size": "Medium",
                "abilityIncreases": {"dexterity": 2},
                "traits": [{"name": "Darkvision", "description": "See in dim light."}],
                "languages": ["Common", "Elvish"],
                "proficiencies": ["Perception"],
            },
        ],
        "subspecies": [
            {
                "id": "high_elf",
                "name": "High Elf",
                "parentSpeciesId": "elf",
                "abilityIncreases": {"INT": 1},
                "traits": [{"name": "Cantrip"}],
            },
        ],
        "classes": [
            {
                "id": "wizard",
                "name": "Wizard",
                "hitDie": 6,
                "primaryAbility": ["Intelligence"],
                "savingThrows": ["Intelligence", "Wisdom"],
                "weaponProficiencies": [
                    "Daggers",
                    "Darts",
                    "Slings",
                    "Quarterstaffs",
                    "Light crossbows",
                ],
                "skillChoices": {
                    "choose": 2,
                    "from": ["Arcana", "History", "Insight", "Investigation", "Medicine", "Religion"],
                },
                "startingEquipment": ["Spellbook"],
                "equipmentChoices": [
                    {
                        "description": "(a) a quarterstaff or (b) a dagger",
                        "options": [["Quarterstaff"], ["Dagger"]],
                    },
                ],
                "subclasses": ["evocation"],
                "spellcasting": {
                    "ability": "Intelligence",
                    "cantripsKnown": {1: 3, 4: 4, 10: 5},
                    "ritualCasting": True,
                    "spellSlotsByLevel": {
                        level: dict(slots)
                        for level, slots in FULL_CASTER_SLOTS.items()
                    },
                },
                "features": [
                    {"name": "Spellcasting", "level": 1},
                    {"name": "Arcane Recovery", "level": 1},
                    {"name": "Arcane Tradition", "level": 2},
                    {"name": "Ability Score Improvement", "level": 4},
                ],
            },
            {
                "id": "fighter",
                "name": "Fighter",
                "hitDie": 10,
                "proficiencies": {
                    "armor": ["Light armor", "Medium armor", "Heavy armor", "Shields"],
                    "weapons": ["Simple weapons", "Martial weapons"],
                    "savingThrows": ["STR", "CON"],
                },
                "skillChoices": {
                    "choose": 2,
                    "from": ["Acrobatics", "Athletics", "Intimidation", "Perception", "Survival"],
                },
                "equipmentChoices": [
                    {
                        "description": "(a) chain mail or (b) leather armor and a longbow",
                        "options": [["Chain Mail"], ["Leather Armor", "Longbow"]],
                    },
                    {
                        "description": "(a) a martial weapon and a shield or (b) two martial melee weapons",
                        "options": [
                            ["Martial weapon", "Shield"],
                            ["Martial melee weapon", "Martial melee weapon"],
                        ],
                    },
                ],
                "subclasses": ["champion"],
                "multiclassing": {
                    "prerequisites": [{"ability": "Strength", "minimumScore": 13}],
                    "proficienciesGained": [
                        "Light armor",
                        "Medium armor",
                        "Shields",
                        "Simple weapons",
                        "Martial weapons",
                    ],
                },
                "features": [
                    {"name": "Fighting Style", "level": 1},
                    {"name": "Second Wind", "level": 1},
                    {"name": "Action Surge", "level": 2},
                    {"name": "Martial Archetype", "level": 3},
                ],
            },
            {
                "id": "paladin",
                "name": "Paladin",
                "hitDie": 10,
                "savingThrows": ["Wisdom", "Charisma"],
                "weaponProficiencies": ["Simple weapons", "Martial weapons"],
                "skillChoices": {"choose": 2, "from": ["Athletics", "Insight", "Persuasion"]},
                "spellcasting": {
                    "ability": "Charisma",
                    "preparedSpells": "CHA + half paladin level",
                    "spellSlotsByLevel": {
                        2: {1: 2},
                        3: {1: 3},
                        5: {1: 4, 2: 2},
                    },
                },
                "features": [
                    {"name": "Divine Sense", "level": 1},
                    {"name": "Divine Smite", "level": 2},
                ],
            },
            {
                "id": "rogue",
                "name": "Rogue",
                "hitDie": 8,
                "savingThrows": ["Dexterity", "Intelligence"],
                "weaponProficiencies": ["Simple weapons", "Rapier", "Shortsword"],
                "skillChoices": {"choose": 4, "from": ["Acrobatics", "Deception", "Stealth", "Sleight of Hand"]},
                "features": [
                    {"name": "Sneak Attack", "level": 1},
                    {"name": "Cunning Action", "level": 2},
                ],
            },
            {
                "id": "barbarian",
                "name": "Barbarian",
                "hitDie": 12,
                "savingThrows": ["Strength", "Constitution"],
                "weaponProficiencies": ["Simple weapons", "Martial weapons"],
                "skillChoices": {"choose": 2, "from": ["Athletics", "Intimidation", "Survival"]},
                "features": [
                    {"name": "Rage", "level": 1},
                    {"name": "Reckless Attack", "level": 2},
                ],
            },
        ],
        "subclasses": [
            {
                "id": "evocation",
                "name": "School of Evocation",
                "parentClassId": "wizard",
                "subclassLevel": 2,
                "features": [
                    {"name": "Evocation Savant", "level": 2},
                    {"name": "Sculpt Spells", "level": 2},
                    {"name": "Potent Cantrip", "level": 6},
                ],
            },
            {
                "id": "champion",
                "name": "Champion",
                "parentClassId": "fighter",
                "subclassLevel": 3,
                "features": [{"name": "Improved Critical", "level": 3}],
            },
        ],
        "backgrounds": [
            {
                "id": "sage",
                "name": "Sage",
                "skillProficiencies": ["Arcana", "History"],
                "languages": 2,
                "equipment": ["Bottle of Black Ink", "Quill", "Small Knife", "Common Clothes", "Pouch"],
                "feature": {"name": "Researcher"},
            },
            {
                "id": "soldier",
                "name": "Soldier",
                "skillProficiencies": ["Athletics", "Intimidation"],
                "toolProficiencies": ["Dice set"],
                "equipment": ["Insignia of Rank", "Common Clothes", "Pouch"],
                "feature": {"name": "Military Rank"},
            },
        ],
        "weapons": [
            {
                "id": "dagger",
                "name": "Dagger",
                "category": "Simple",
                "range": "Melee",
                "damageDice": "1d4",
                "damageType": "piercing",
                "properties": ["Finesse", "Light", "Thrown (range 20/60)"],
                "weight": "1 lb.",
            },
            {
                "id": "quarterstaff",
                "name": "Quarterstaff",
                "damageDice": "1d6",
                "damageType": "bludgeoning",
                "properties": ["Versatile (1d8)"],
                "weight": 4,
            },
            {
                "id": "longsword",
                "name": "Longsword",
                "category": "martial",
                "damageDice": "1d8",
                "damageType": "slashing",
                "properties": ["Versatile (1d10)"],
                "weight": 3,
            },
            {
                "id": "rapier",
                "name": "Rapier",
                "category": "martial",
                "damageDice": "1d8",
                "damageType": "piercing",
                "properties": ["Finesse"],
                "weight": 2,
            },
            {
                "id": "longbow",
                "name": "Longbow",
                "category": "martial",
                "range": "ranged",
                "damageDice": "1d8",
                "damageType": "piercing",
                "properties": ["Ammunition (range 150/600)", "Heavy", "Two-Handed"],
                "weight": 2,
            },
        ],
        "armor": [
            {"id": "leather", "name": "Leather Armor", "category": "Light Armor", "armorClass": 11, "weight": 10},
            {
                "id": "scale_mail",
                "name": "Scale Mail",
                "category": "medium",
                "baseAc": 14,
                "dexBonus": "max2",
                "stealthDisadvantage": True,
                "weight": 45,
            },
            {
                "id": "chain_mail",
                "name": "Chain Mail",
                "category": "heavy",
                "baseAc": 16,
                "dexBonus": "none",
                "strengthRequirement": 13,
                "stealthDisadvantage": True,
                "weight": 55,
            },
            {
                "id": "plate",
                "name": "Plate Armor",
                "category": "heavy",
                "baseAc": 18,
                "dexBonus": "none",
                "strengthRequirement": 15,
                "weight": 65,
            },
            {"id": "shield", "name": "Shield", "category": "shield", "baseAc": 2, "weight": 6},
        ],
        "gear": [
            {"id": "spellbook", "name": "Spellbook", "weight": 3},
            {"id": "pouch", "name": "Pouch", "weight": 1},
            {"id": "common_clothes", "name": "Common Clothes", "weight": 3},
        ],
        "spells": [
            {"id": "fire_bolt", "name": "Fire Bolt", "level": 0, "school": "Evocation", "classes": ["wizard"]},
            {"id": "light", "name": "Light", "level": 0, "school": "Evocation", "classes": ["wizard"]},
            {"id": "mage_hand", "name": "Mage Hand", "level": 0, "school": "Conjuration", "classes": ["wizard"]},
            {"id": "magic_missile", "name": "Magic Missile", "level": 1, "school": "Evocation"},
            {"id": "shield_spell", "name": "Shield", "level": 1, "school": "Abjuration"},
            {"id": "sleep", "name": "Sleep", "level": 1, "school": "Enchantment"},
            {"id": "detect_magic", "name": "Detect Magic", "level": 1, "ritual": True, "concentration": True},
            {"id": "burning_hands", "name": "Burning Hands", "level": 1, "school": "Evocation"},
            {"id": "mage_armor", "name": "Mage Armor", "level": 1, "school": "Abjuration"},
            {"id": "misty_step", "name": "Misty Step", "level": 2, "school": "Conjuration"},
        ],
        "conditions": [
            {"id": "poisoned", "name": "Poisoned"},
            {"id": "exhaustion", "name": "Exhaustion", "maxLevel": 6},
        ],
    }


@pytest.fixture
def catalog(catalog_data: dict[str, Any]) -> ReferenceCatalog:
    """Provide the sample reference catalog."""
    return ReferenceCatalog.from_dict(catalog_data)


# =============================================================================
# Character Fixtures
# =============================================================================


@pytest.fixture
def sample_scores() -> dict[str, int]:
    """Standard-array scores for a wizard (CON 13, DEX 14).

    Returns:
        Dictionary of ability scores.
    """
    return {
        "strength": 8,
        "dexterity": 14,
        "constitution": 13,
        "intelligence": 15,
        "wisdom": 12,
        "charisma": 10,
    }


@pytest.fixture
def make_character(
    catalog: ReferenceCatalog,
    sample_scores: dict[str, int],
) -> Callable[..., Character]:
    """Factory for characters built straight from catalog records.

    The first class given is the starting class. HP is the average-method
    maximum and spell slots start full unless overridden.
    """

    def _make(
        *class_levels: tuple[str, int],
        scores: dict[str, int] | None = None,
        species_id: str = "human",
        subspecies_id: str | None = None,
        origin_id: str = "sage",
        **overrides: Any,
    ) -> Character:
        class_levels = class_levels or (("wizard", 1),)
        classes = [
            ClassLevel(character_class=catalog.character_class(class_id), level=level)
            for class_id, level in class_levels
        ]
        ability_scores = AbilityScores(**(scores or sample_scores))
        hp = max_hit_points(classes, ability_scores.modifier(Ability.CON))

        data: dict[str, Any] = {
            "id": f"char_test_{class_levels[0][0]}",
            "name": "Test Hero",
            "character_class": classes[0].character_class,
            "classes": classes,
            "species": catalog.species(species_id),
            "subspecies": catalog.subspecies(subspecies_id),
            "origin": catalog.origin(origin_id),
            "base_ability_scores": ability_scores,
            "ability_scores": ability_scores,
            "current_hit_points": hp,
            "max_hit_points": hp,
            "spell_slots": spell_slot_table(classes),
        }
        data.update(overrides)
        return Character(**data)

    return _make


@pytest.fixture
def wizard(make_character: Callable[..., Character]) -> Character:
    """A level-1 wizard with CON +1 and DEX +2."""
    return make_character(("wizard", 1))


@pytest.fixture
def fighter(make_character: Callable[..., Character]) -> Character:
    """A level-2 fighter with STR 15, CON 14."""
    return make_character(
        ("fighter", 2),
        scores={
            "strength": 15,
            "dexterity": 13,
            "constitution": 14,
            "intelligence": 8,
            "wisdom": 12,
            "charisma": 10,
        },
        origin_id="soldier",
    )
