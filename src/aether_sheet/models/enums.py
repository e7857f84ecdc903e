"""Enumeration types for the Aether character engine.

Ability scores, the eighteen skills with their governing abilities, armor
and weapon categories, and the small state vocabularies used by the
level-up and creation flows.
"""

from __future__ import annotations

from enum import StrEnum


class Ability(StrEnum):
    """D&D 5E ability scores."""

    STR = "strength"
    DEX = "dexterity"
    CON = "constitution"
    INT = "intelligence"
    WIS = "wisdom"
    CHA = "charisma"

    @property
    def full_name(self) -> str:
        """Get the full name of the ability (e.g., 'Strength')."""
        return self.value.capitalize()

    @property
    def abbreviation(self) -> str:
        """Get the three-letter abbreviation (e.g., 'STR')."""
        return self.name

    @classmethod
    def from_name(cls, name: str) -> Ability:
        """Resolve an ability from its value, full name or abbreviation.

        Args:
            name: Text such as 'Dexterity', 'dexterity' or 'DEX'.

        Returns:
            The matching Ability.

        Raises:
            ValueError: If the text names no ability.
        """
        key = name.strip().lower()
        for ability in cls:
            if key in (ability.value, ability.name.lower()):
                return ability
        raise ValueError(f"Unknown ability: {name!r}")


class Skill(StrEnum):
    """D&D 5E skills and their associated abilities."""

    # Strength skills
    ATHLETICS = "athletics"

    # Dexterity skills
    ACROBATICS = "acrobatics"
    SLEIGHT_OF_HAND = "sleight_of_hand"
    STEALTH = "stealth"

    # Intelligence skills
    ARCANA = "arcana"
    HISTORY = "history"
    INVESTIGATION = "investigation"
    NATURE = "nature"
    RELIGION = "religion"

    # Wisdom skills
    ANIMAL_HANDLING = "animal_handling"
    INSIGHT = "insight"
    MEDICINE = "medicine"
    PERCEPTION = "perception"
    SURVIVAL = "survival"

    # Charisma skills
    DECEPTION = "deception"
    INTIMIDATION = "intimidation"
    PERFORMANCE = "performance"
    PERSUASION = "persuasion"

    @property
    def ability(self) -> Ability:
        """Get the ability score governing checks with this skill."""
        return SKILL_ABILITIES[self]

    @property
    def display_name(self) -> str:
        """Get the name as printed on a sheet (e.g., 'Sleight of Hand')."""
        return " ".join(
            word if word == "of" else word.capitalize() for word in self.value.split("_")
        )

    @classmethod
    def from_name(cls, name: str) -> Skill:
        """Resolve a skill from its display name or value.

        Args:
            name: Text such as 'Animal Handling' or 'animal_handling'.

        Returns:
            The matching Skill.

        Raises:
            ValueError: If the text names no skill.
        """
        key = name.strip().lower().replace(" ", "_").replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown skill: {name!r}") from None


SKILL_ABILITIES: dict[Skill, Ability] = {
    Skill.ATHLETICS: Ability.STR,
    Skill.ACROBATICS: Ability.DEX,
    Skill.SLEIGHT_OF_HAND: Ability.DEX,
    Skill.STEALTH: Ability.DEX,
    Skill.ARCANA: Ability.INT,
    Skill.HISTORY: Ability.INT,
    Skill.INVESTIGATION: Ability.INT,
    Skill.NATURE: Ability.INT,
    Skill.RELIGION: Ability.INT,
    Skill.ANIMAL_HANDLING: Ability.WIS,
    Skill.INSIGHT: Ability.WIS,
    Skill.MEDICINE: Ability.WIS,
    Skill.PERCEPTION: Ability.WIS,
    Skill.SURVIVAL: Ability.WIS,
    Skill.DECEPTION: Ability.CHA,
    Skill.INTIMIDATION: Ability.CHA,
    Skill.PERFORMANCE: Ability.CHA,
    Skill.PERSUASION: Ability.CHA,
}
"""Fixed skill to ability table of the 5E rules."""


class Alignment(StrEnum):
    """D&D 5E character alignments."""

    LAWFUL_GOOD = "lawful_good"
    NEUTRAL_GOOD = "neutral_good"
    CHAOTIC_GOOD = "chaotic_good"
    LAWFUL_NEUTRAL = "lawful_neutral"
    TRUE_NEUTRAL = "true_neutral"
    CHAOTIC_NEUTRAL = "chaotic_neutral"
    LAWFUL_EVIL = "lawful_evil"
    NEUTRAL_EVIL = "neutral_evil"
    CHAOTIC_EVIL = "chaotic_evil"
    UNALIGNED = "unaligned"

    @property
    def display_name(self) -> str:
        """Get human-readable alignment name (e.g., 'Lawful Good')."""
        return self.value.replace("_", " ").title()


class Size(StrEnum):
    """D&D 5E creature sizes."""

    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"
    GARGANTUAN = "gargantuan"


class ArmorCategory(StrEnum):
    """Armor weight categories."""

    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    SHIELD = "shield"


class DexBonusRule(StrEnum):
    """How much of the dexterity modifier an armor allows."""

    FULL = "full"
    MAX2 = "max2"
    NONE = "none"


class WeaponCategory(StrEnum):
    """Weapon training categories."""

    SIMPLE = "simple"
    MARTIAL = "martial"


class WeaponRange(StrEnum):
    """Melee or ranged weapon."""

    MELEE = "melee"
    RANGED = "ranged"


class HpMethod(StrEnum):
    """How hit points are gained on a new level."""

    AVERAGE = "average"
    ROLL = "roll"


class CasterType(StrEnum):
    """How quickly a class gains spell slots relative to its level.

    The divisor applied to the class level when aggregating a multiclass
    caster level is exposed through ``level_divisor``.
    """

    FULL = "full"
    HALF = "half"
    THIRD = "third"
    NONE = "none"

    @property
    def level_divisor(self) -> int | None:
        """Divisor for the multiclass caster level, or None for non-casters."""
        return {
            CasterType.FULL: 1,
            CasterType.HALF: 2,
            CasterType.THIRD: 3,
            CasterType.NONE: None,
        }[self]


class LevelUpPhase(StrEnum):
    """Phases of a level-up session."""

    IDLE = "idle"
    CONFIGURING = "configuring"
    AWAITING_SUBCLASS_CHOICE = "awaiting_subclass_choice"
    READY = "ready"
    COMMITTED = "committed"


class CatalogKind(StrEnum):
    """Kinds of record held by the reference catalog."""

    SPECIES = "species"
    SUBSPECIES = "subspecies"
    CLASS = "class"
    SUBCLASS = "subclass"
    ORIGIN = "origin"
    WEAPON = "weapon"
    ARMOR = "armor"
    SPELL = "spell"
    CONDITION = "condition"
    EQUIPMENT = "equipment"


class CreationStep(StrEnum):
    """Steps of the character creation wizard, in order."""

    CLASS = "class"
    SPECIES = "species"
    ORIGIN = "origin"
    ABILITY_SCORES = "ability_scores"
    SKILLS = "skills"
    SPELLS = "spells"
    EQUIPMENT = "equipment"
    DETAILS = "details"


__all__ = [
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
]
