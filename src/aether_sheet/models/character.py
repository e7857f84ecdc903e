"""Pydantic V2 schemas for the character aggregate.

A Character is built once at the end of creation with the reference records
it was built from embedded, and afterwards changes only through level-up,
rests, combat-state edits and deletion. Level and proficiency bonus are
computed from the class entries on every read, so they cannot go stale.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Mapping

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from aether_sheet.core.constants import (
    EXHAUSTION_MAX_LEVEL,
    MAX_ABILITY_SCORE,
    MIN_ABILITY_SCORE,
)
from aether_sheet.models.enums import Ability, Alignment
from aether_sheet.models.reference import CharacterClass, Origin, Species, Subclass, Subspecies


AbilityScore = Annotated[
    int,
    Field(ge=MIN_ABILITY_SCORE, le=MAX_ABILITY_SCORE, description="Ability score (1-30)"),
]


def calculate_modifier(score: int) -> int:
    """Calculate the ability modifier from an ability score.

    Example:
        >>> calculate_modifier(15)
        2
        >>> calculate_modifier(8)
        -1
    """
    return (score - 10) // 2


# =============================================================================
# Ability Scores
# =============================================================================


class AbilityScores(BaseModel):
    """The six ability scores.

    Example:
        >>> scores = AbilityScores(strength=15, dexterity=14)
        >>> scores.modifier(Ability.DEX)
        2
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    strength: AbilityScore = 10
    dexterity: AbilityScore = 10
    constitution: AbilityScore = 10
    intelligence: AbilityScore = 10
    wisdom: AbilityScore = 10
    charisma: AbilityScore = 10

    def get(self, ability: Ability) -> int:
        """Return the score for ``ability``."""
        return getattr(self, ability.value)

    def modifier(self, ability: Ability) -> int:
        """Return the modifier for ``ability``."""
        return calculate_modifier(self.get(ability))

    def with_increases(self, increases: Mapping[Ability, int]) -> AbilityScores:
        """Return new scores with ``increases`` added, capped at 30.

        Args:
            increases: Partial map of ability to increase.

        Returns:
            A new AbilityScores; self is unchanged.
        """
        updated = {
            ability.value: min(MAX_ABILITY_SCORE, self.get(ability) + increases.get(ability, 0))
            for ability in Ability
        }
        return AbilityScores(**updated)

    def as_dict(self) -> dict[Ability, int]:
        return {ability: self.get(ability) for ability in Ability}


# =============================================================================
# Class Entries
# =============================================================================


class ClassLevel(BaseModel):
    """Levels held in one class, with that class's hit dice and subclass.

    Attributes:
        character_class: The embedded class record.
        level: Levels held in this class.
        hit_dice_used: Hit dice of this class already spent.
        subclass_id: Chosen subclass id, once chosen.
        subclass: The embedded subclass record, once chosen.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    character_class: CharacterClass
    level: int = Field(default=1, ge=1, le=20)
    hit_dice_used: int = Field(default=0, ge=0)
    subclass_id: str | None = None
    subclass: Subclass | None = None

    @model_validator(mode="after")
    def validate_hit_dice(self) -> ClassLevel:
        if self.hit_dice_used > self.level:
            raise ValueError(
                f"hit_dice_used ({self.hit_dice_used}) exceeds class level ({self.level})"
            )
        return self

    @property
    def class_id(self) -> str:
        return self.character_class.id

    @property
    def hit_die(self) -> int:
        return self.character_class.hit_die

    @property
    def hit_dice_remaining(self) -> int:
        return self.level - self.hit_dice_used


class Personality(BaseModel):
    """Free-text personality fields."""

    model_config = ConfigDict(extra="ignore")

    traits: str = ""
    ideals: str = ""
    bonds: str = ""
    flaws: str = ""


# =============================================================================
# Character
# =============================================================================


class Character(BaseModel):
    """A player character snapshot.

    Attributes:
        id: Unique character identifier.
        name: Character name.
        character_class: Primary class record (the class taken at level 1).
        classes: One entry per class the character has levels in.
        species: Embedded species record.
        subspecies: Embedded subspecies record, if any.
        origin: Embedded origin record.
        base_ability_scores: Scores before species increases.
        ability_scores: Final scores with species increases applied once.
        current_hit_points: Current HP, excluding temporary HP.
        max_hit_points: Maximum HP.
        temporary_hit_points: Temporary HP, absorbed first by damage.
        armor_class: AC recorded at the last derivation.
        equipment: Flat list of item names.
        equipped_armor: Name of the worn armor, if any.
        has_shield: Whether a shield is wielded.
        skill_proficiencies: Names of proficient skills.
        cantrips: Known cantrip names.
        spells: Known or prepared spell names.
        spell_slots: Current slots remaining, by spell level.
        conditions: Active conditions, name to optional severity level.
        inspiration: Whether the character has inspiration.
        alignment: Alignment, if chosen.
        personality: Personality text.
        notes: Free-text notes.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="ignore",
    )

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)

    character_class: CharacterClass
    classes: list[ClassLevel] = Field(..., min_length=1)
    species: Species
    subspecies: Subspecies | None = None
    origin: Origin

    base_ability_scores: AbilityScores = Field(default_factory=AbilityScores)
    ability_scores: AbilityScores = Field(default_factory=AbilityScores)

    current_hit_points: int = Field(..., ge=0)
    max_hit_points: int = Field(..., ge=1)
    temporary_hit_points: int = Field(default=0, ge=0)
    armor_class: int = Field(default=10, ge=0)

    equipment: list[str] = Field(default_factory=list)
    equipped_armor: str | None = None
    has_shield: bool = False
    skill_proficiencies: list[str] = Field(default_factory=list)
    cantrips: list[str] = Field(default_factory=list)
    spells: list[str] = Field(default_factory=list)
    spell_slots: dict[int, int] = Field(default_factory=dict)
    conditions: dict[str, int | None] = Field(default_factory=dict)
    inspiration: bool = False

    alignment: Alignment | None = None
    personality: Personality = Field(default_factory=Personality)
    notes: str = ""

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("spell_slots")
    @classmethod
    def validate_spell_slots(cls, value: dict[int, int]) -> dict[int, int]:
        for spell_level, count in value.items():
            if not 1 <= spell_level <= 9:
                raise ValueError(f"Spell level must be 1-9, got {spell_level}")
            if count < 0:
                raise ValueError(f"Spell slot count cannot be negative, got {count}")
        return value

    @model_validator(mode="after")
    def validate_hit_points(self) -> Character:
        ceiling = self.max_hit_points + self.temporary_hit_points
        if self.current_hit_points > ceiling:
            raise ValueError(
                f"current_hit_points ({self.current_hit_points}) exceeds "
                f"max plus temporary ({ceiling})"
            )
        return self

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    @computed_field
    @property
    def level(self) -> int:
        """Total character level across all classes."""
        return sum(entry.level for entry in self.classes)

    @computed_field
    @property
    def proficiency_bonus(self) -> int:
        """Proficiency bonus for the current total level."""
        return (self.level - 1) // 4 + 2

    @property
    def hit_dice_remaining(self) -> int:
        return sum(entry.hit_dice_remaining for entry in self.classes)

    @property
    def is_multiclassed(self) -> bool:
        return len(self.classes) > 1

    @property
    def is_unconscious(self) -> bool:
        return self.current_hit_points == 0

    @property
    def primary_entry(self) -> ClassLevel:
        """The class entry of the primary class (first entry as fallback)."""
        return self.class_entry(self.character_class.id) or self.classes[0]

    def class_entry(self, class_id: str) -> ClassLevel | None:
        """Return the entry for ``class_id``, or None if no levels are held."""
        for entry in self.classes:
            if entry.class_id == class_id:
                return entry
        return None

    def class_level(self, class_id: str) -> int:
        entry = self.class_entry(class_id)
        return entry.level if entry else 0

    # -------------------------------------------------------------------------
    # Combat-state edits
    # -------------------------------------------------------------------------

    def apply_damage(self, amount: int) -> int:
        """Apply damage, depleting temporary HP first.

        Args:
            amount: Damage to apply (negative values are treated as 0).

        Returns:
            Hit points actually lost from current HP.
        """
        amount = max(0, amount)
        absorbed = min(self.temporary_hit_points, amount)
        self.temporary_hit_points -= absorbed
        remaining = amount - absorbed

        lost = min(self.current_hit_points, remaining)
        self.current_hit_points -= lost
        self.touch()
        return lost

    def heal(self, amount: int) -> int:
        """Restore hit points up to the maximum. Temporary HP is unaffected.

        Returns:
            Hit points actually restored.
        """
        amount = max(0, amount)
        restored = max(0, min(amount, self.max_hit_points - self.current_hit_points))
        self.current_hit_points += restored
        self.touch()
        return restored

    def set_temporary_hit_points(self, value: int) -> None:
        """Replace temporary HP (temporary HP never stacks)."""
        self.temporary_hit_points = max(0, value)
        self.touch()

    def add_condition(self, name: str, level: int | None = None) -> None:
        """Add or update a condition.

        Exhaustion always carries a level, clamped to 1-6.
        """
        if name.strip().lower() == "exhaustion":
            level = min(EXHAUSTION_MAX_LEVEL, max(1, level or 1))
        self.conditions = {**self.conditions, name: level}
        self.touch()

    def remove_condition(self, name: str) -> bool:
        """Remove a condition. Returns False if it was not active."""
        if name not in self.conditions:
            return False
        self.conditions = {k: v for k, v in self.conditions.items() if k != name}
        self.touch()
        return True

    def set_inspiration(self, value: bool) -> None:
        self.inspiration = value
        self.touch()

    def touch(self) -> None:
        """Stamp ``updated_at`` with the current time."""
        self.updated_at = datetime.now()

    def to_storage_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict, computed fields included."""
        return self.model_dump(mode="json")


__all__ = [
    "AbilityScore",
    "calculate_modifier",
    "AbilityScores",
    "ClassLevel",
    "Personality",
    "Character",
]
