"""Pydantic V2 schemas for read-only reference data.

These records are what the reference catalog hands out: species, classes,
origins, weapons, armor, spells and so on. They accept both snake_case
keys and the camelCase keys used by the exported SRD JSON files, so a
catalog can be loaded from either.

Records are frozen. A character embeds copies of the records it was built
from, and those copies are refreshed from the catalog when a saved
character is loaded.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from aether_sheet.models.enums import (
    Ability,
    ArmorCategory,
    CatalogKind,
    DexBonusRule,
    Size,
    WeaponCategory,
    WeaponRange,
)


# =============================================================================
# Validators and Type Definitions
# =============================================================================

_WEIGHT_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


def parse_weight(value: Any) -> float:
    """Parse an item weight that may be written as text (e.g. '65 lb.').

    Args:
        value: A number, numeric string, or None.

    Returns:
        The weight in pounds, 0.0 when no number is present.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    match = _WEIGHT_PATTERN.search(str(value))
    return float(match.group()) if match else 0.0


def _ability_list(value: Any) -> Any:
    if isinstance(value, list):
        return [Ability.from_name(v) if isinstance(v, str) else v for v in value]
    return value


def _ability_map(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            Ability.from_name(k) if isinstance(k, str) else k: v for k, v in value.items()
        }
    return value


HitDie = Literal[6, 8, 10, 12]
Level = Annotated[int, Field(ge=1, le=20)]


class CatalogRecord(BaseModel):
    """Base for every catalog record: an id and a display name."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(..., min_length=1, description="Unique record identifier")
    name: str = Field(..., min_length=1, description="Display name")


class RecordPart(BaseModel):
    """Base for nested parts of a record (traits, features, choices)."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Species
# =============================================================================


class Trait(RecordPart):
    """A species or subspecies trait."""

    name: str
    description: str = ""
    is_passive: bool = True


class Species(CatalogRecord):
    """A playable species.

    Attributes:
        speed: Walking speed in feet.
        size: Creature size.
        ability_increases: Score increases granted, by ability.
        traits: Species traits.
        languages: Languages known.
        proficiencies: Extra proficiencies granted.
    """

    speed: int = Field(default=30, ge=0)
    size: Size = Size.MEDIUM
    ability_increases: dict[Ability, int] = Field(default_factory=dict)
    traits: list[Trait] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    proficiencies: list[str] = Field(default_factory=list)

    @field_validator("size", mode="before")
    @classmethod
    def normalize_size(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("ability_increases", mode="before")
    @classmethod
    def normalize_increases(cls, value: Any) -> Any:
        return _ability_map(value)


class Subspecies(CatalogRecord):
    """A subspecies stacking its own increases and traits on its parent."""

    parent_species_id: str
    ability_increases: dict[Ability, int] = Field(default_factory=dict)
    traits: list[Trait] = Field(default_factory=list)
    proficiencies: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    description: str = ""

    @field_validator("ability_increases", mode="before")
    @classmethod
    def normalize_increases(cls, value: Any) -> Any:
        return _ability_map(value)


# =============================================================================
# Classes
# =============================================================================


class ClassFeature(RecordPart):
    """A level-gated class or subclass feature."""

    name: str
    level: Level
    description: str = ""
    is_passive: bool = False


class SkillChoice(RecordPart):
    """Choose ``choose`` skills from ``options``."""

    choose: int = Field(default=0, ge=0)
    options: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("options", "from"),
    )


class EquipmentChoice(RecordPart):
    """One equipment-choice slot: a description and its option bundles."""

    description: str = ""
    options: list[list[str]] = Field(default_factory=list)


class MulticlassPrerequisite(RecordPart):
    """Minimum score needed to multiclass into a class."""

    ability: Ability
    minimum_score: int = Field(default=13, ge=1, le=30)

    @field_validator("ability", mode="before")
    @classmethod
    def normalize_ability(cls, value: Any) -> Any:
        return Ability.from_name(value) if isinstance(value, str) else value


class Multiclassing(RecordPart):
    """Multiclassing requirements and the proficiencies gained."""

    prerequisites: list[MulticlassPrerequisite] = Field(default_factory=list)
    proficiencies_gained: list[str] = Field(default_factory=list)


class SpellcastingSpec(RecordPart):
    """Spellcasting progression of a class.

    Known-counts are stepwise tables keyed by class level: the value at the
    greatest key not above the class level applies. A plain integer is read
    as a constant from level 1.

    Attributes:
        ability: Spellcasting ability.
        cantrips_known: Cantrips known, by class level.
        spells_known: Spells known, by class level; None for prepared casters.
        prepared: Whether the class prepares spells instead of knowing them.
        ritual_casting: Whether the class can cast rituals.
        spell_slots_by_level: Slots per spell level, keyed by class level.
    """

    ability: Ability
    cantrips_known: dict[int, int] = Field(default_factory=dict)
    spells_known: dict[int, int] | None = None
    prepared: bool = False
    ritual_casting: bool = False
    spell_slots_by_level: dict[int, dict[int, int]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def normalize_source_shape(cls, data: Any) -> Any:
        """Accept the exported SRD shape.

        That shape stores counts as plain integers, marks prepared casters
        with a ``preparedSpells`` formula and lists slot tables as an array
        whose index 0 is class level 1.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key in ("cantrips_known", "cantripsKnown", "spells_known", "spellsKnown"):
            if isinstance(data.get(key), int):
                data[key] = {1: data[key]}
        known = data.get("spells_known", data.get("spellsKnown"))
        if known is None or data.get("preparedSpells") or data.get("prepared_spells"):
            data.setdefault("prepared", True)
        for key in ("spell_slots_by_level", "spellSlotsByLevel"):
            if isinstance(data.get(key), list):
                data[key] = {index + 1: slots or {} for index, slots in enumerate(data[key])}
        return data

    @field_validator("ability", mode="before")
    @classmethod
    def normalize_ability(cls, value: Any) -> Any:
        return Ability.from_name(value) if isinstance(value, str) else value


class CharacterClass(CatalogRecord):
    """A character class.

    Proficiencies may be given flat or nested under ``proficiencies``
    (armor, weapons, tools, savingThrows) as in the exported data.
    """

    hit_die: HitDie
    primary_ability: list[Ability] = Field(default_factory=list)
    saving_throws: list[Ability] = Field(default_factory=list)
    armor_proficiencies: list[str] = Field(default_factory=list)
    weapon_proficiencies: list[str] = Field(default_factory=list)
    tool_proficiencies: list[str] = Field(default_factory=list)
    skill_choices: SkillChoice = Field(default_factory=SkillChoice)
    starting_equipment: list[str] = Field(default_factory=list)
    equipment_choices: list[EquipmentChoice] = Field(default_factory=list)
    subclass_ids: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("subclass_ids", "subclassIds", "subclasses"),
    )
    spellcasting: SpellcastingSpec | None = None
    multiclassing: Multiclassing | None = None
    features: list[ClassFeature] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def flatten_proficiencies(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not isinstance(data.get("proficiencies"), dict):
            return data
        data = dict(data)
        nested = data.pop("proficiencies")
        data.setdefault("armor_proficiencies", nested.get("armor", []))
        data.setdefault("weapon_proficiencies", nested.get("weapons", []))
        data.setdefault("tool_proficiencies", nested.get("tools", []))
        if "savingThrows" not in data and "saving_throws" not in data:
            data["saving_throws"] = nested.get("savingThrows", [])
        return data

    @field_validator("primary_ability", "saving_throws", mode="before")
    @classmethod
    def normalize_abilities(cls, value: Any) -> Any:
        return _ability_list(value)

    def features_at(self, level: int) -> list[ClassFeature]:
        """Return the features gained at exactly ``level``."""
        return [feature for feature in self.features if feature.level == level]


class Subclass(CatalogRecord):
    """A class specialization chosen at ``subclass_level``."""

    parent_class_id: str
    subclass_level: Level = 3
    description: str = ""
    features: list[ClassFeature] = Field(default_factory=list)

    def features_at(self, level: int) -> list[ClassFeature]:
        """Return the features gained at exactly ``level``."""
        return [feature for feature in self.features if feature.level == level]


# =============================================================================
# Origins
# =============================================================================


class OriginFeature(RecordPart):
    """The single feature an origin grants."""

    name: str
    description: str = ""


class SuggestedCharacteristics(RecordPart):
    """Suggested personality text for an origin."""

    traits: list[str] = Field(default_factory=list)
    ideals: list[str] = Field(default_factory=list)
    bonds: list[str] = Field(default_factory=list)
    flaws: list[str] = Field(default_factory=list)


class Origin(CatalogRecord):
    """A character origin (background)."""

    skill_proficiencies: list[str] = Field(default_factory=list)
    tool_proficiencies: list[str] = Field(default_factory=list)
    languages: int = Field(default=0, ge=0)
    equipment: list[str] = Field(default_factory=list)
    feature: OriginFeature
    description: str = ""
    suggested_characteristics: SuggestedCharacteristics | None = None


# =============================================================================
# Equipment
# =============================================================================


class Weapon(CatalogRecord):
    """A weapon and the properties attack math depends on."""

    category: WeaponCategory = WeaponCategory.SIMPLE
    range: WeaponRange = WeaponRange.MELEE
    damage_dice: str = "1d4"
    damage_type: str = "bludgeoning"
    properties: list[str] = Field(default_factory=list)
    weight: float = 0.0

    @field_validator("category", "range", mode="before")
    @classmethod
    def normalize_enum_text(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("weight", mode="before")
    @classmethod
    def normalize_weight(cls, value: Any) -> float:
        return parse_weight(value)

    @property
    def is_finesse(self) -> bool:
        return any(prop.strip().lower().startswith("finesse") for prop in self.properties)

    @property
    def is_ranged(self) -> bool:
        return self.range == WeaponRange.RANGED


class Armor(CatalogRecord):
    """A suit of armor or a shield.

    Attributes:
        category: Light, medium, heavy or shield.
        base_ac: Base armor class (bonus for shields).
        dex_bonus: How much dexterity modifier applies.
        strength_requirement: Minimum Strength, informational only.
        stealth_disadvantage: Whether Stealth checks have disadvantage.
        weight: Weight in pounds.
    """

    category: ArmorCategory
    base_ac: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("base_ac", "baseAc", "armorClass", "armor_class"),
    )
    dex_bonus: DexBonusRule = Field(
        default=DexBonusRule.FULL,
        validation_alias=AliasChoices("dex_bonus", "dexBonus", "dexModifier"),
    )
    strength_requirement: int | None = None
    stealth_disadvantage: bool = False
    weight: float = 0.0

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.lower().replace(" armor", "").strip()
        return value

    @field_validator("weight", mode="before")
    @classmethod
    def normalize_weight(cls, value: Any) -> float:
        return parse_weight(value)


class EquipmentItem(CatalogRecord):
    """Adventuring gear; packs list their ``contents``."""

    weight: float = 0.0
    contents: list[str] = Field(default_factory=list)

    @field_validator("weight", mode="before")
    @classmethod
    def normalize_weight(cls, value: Any) -> float:
        return parse_weight(value)


# =============================================================================
# Spells and Conditions
# =============================================================================


class Spell(CatalogRecord):
    """A spell. Level 0 is a cantrip."""

    level: int = Field(default=0, ge=0, le=9)
    school: str = ""
    classes: list[str] = Field(default_factory=list)
    description: str = ""
    ritual: bool = False
    concentration: bool = False

    @property
    def is_cantrip(self) -> bool:
        return self.level == 0


class ConditionRecord(CatalogRecord):
    """A condition; ``max_level`` is set for leveled conditions like Exhaustion."""

    description: str = ""
    max_level: int | None = Field(default=None, ge=1)


RECORD_TYPES: dict[CatalogKind, type[CatalogRecord]] = {
    CatalogKind.SPECIES: Species,
    CatalogKind.SUBSPECIES: Subspecies,
    CatalogKind.CLASS: CharacterClass,
    CatalogKind.SUBCLASS: Subclass,
    CatalogKind.ORIGIN: Origin,
    CatalogKind.WEAPON: Weapon,
    CatalogKind.ARMOR: Armor,
    CatalogKind.SPELL: Spell,
    CatalogKind.CONDITION: ConditionRecord,
    CatalogKind.EQUIPMENT: EquipmentItem,
}
"""Record model for each catalog kind."""


__all__ = [
    "parse_weight",
    "CatalogRecord",
    "Trait",
    "Species",
    "Subspecies",
    "ClassFeature",
    "SkillChoice",
    "EquipmentChoice",
    "MulticlassPrerequisite",
    "Multiclassing",
    "SpellcastingSpec",
    "CharacterClass",
    "Subclass",
    "OriginFeature",
    "SuggestedCharacteristics",
    "Origin",
    "Weapon",
    "Armor",
    "EquipmentItem",
    "Spell",
    "ConditionRecord",
    "RECORD_TYPES",
]
