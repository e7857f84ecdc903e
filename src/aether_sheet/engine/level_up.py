"""Level-up state machine.

A LevelUpSession is opened on a character, collects the player's choices
(target class, HP method and roll, subclass when due) and either commits
them into a new character snapshot or is cancelled. The character passed
in is never modified; ``commit`` works on a deep copy.

Phases:
    CONFIGURING: open, but commit is blocked (character at max level).
    AWAITING_SUBCLASS_CHOICE: the target class reaches its subclass level
        and no subclass is recorded for it yet.
    READY: every required choice is made.
    COMMITTED: applied; the session is closed.
    IDLE: cancelled; the session is closed.

Example:
    >>> session = LevelUpSession(character, catalog)
    >>> session.set_hp_method(HpMethod.AVERAGE)
    >>> if session.requires_subclass_choice:
    ...     session.choose_subclass("evocation")
    >>> result = session.commit()
    >>> result.character.level
    4
"""

from __future__ import annotations

from dataclasses import dataclass, field

from aether_sheet.core.config import get_settings
from aether_sheet.core.exceptions import InvalidGameStateError, ValidationError
from aether_sheet.core.logging import get_logger
from aether_sheet.engine.catalog import ReferenceCatalog
from aether_sheet.engine.dice import DiceRoller
from aether_sheet.engine.spellcasting import spell_slot_table
from aether_sheet.engine.stats import hit_point_gain, proficiency_bonus
from aether_sheet.models.character import Character, ClassLevel
from aether_sheet.models.enums import Ability, CatalogKind, HpMethod, LevelUpPhase
from aether_sheet.models.reference import CharacterClass, ClassFeature, Subclass


logger = get_logger(__name__)


@dataclass
class LevelUpResult:
    """What a committed level-up produced.

    Attributes:
        character: The advanced character snapshot.
        class_id: Class that gained the level.
        new_class_level: Level now held in that class.
        new_level: New total character level.
        hp_increase: Hit points gained.
        proficiency_bonus: Proficiency bonus at the new level.
        subclass: Subclass chosen during this level-up, if any.
        new_features: Class and subclass features gained at the new class level.
        spell_slots_before: Maximum slots before the level-up.
        spell_slots_after: Maximum slots after the level-up.
    """

    character: Character
    class_id: str
    new_class_level: int
    new_level: int
    hp_increase: int
    proficiency_bonus: int
    subclass: Subclass | None = None
    new_features: list[ClassFeature] = field(default_factory=list)
    spell_slots_before: dict[int, int] = field(default_factory=dict)
    spell_slots_after: dict[int, int] = field(default_factory=dict)

    @property
    def spell_slots_changed(self) -> bool:
        return self.spell_slots_before != self.spell_slots_after


class LevelUpSession:
    """One in-progress level-up of a character."""

    def __init__(
        self,
        character: Character,
        catalog: ReferenceCatalog,
        roller: DiceRoller | None = None,
        *,
        hp_method: HpMethod | None = None,
        max_level: int | None = None,
    ) -> None:
        """Open a level-up session targeting the character's primary class.

        Args:
            character: Character to advance. It is not modified.
            catalog: Reference catalog for classes and subclasses.
            roller: Dice roller for the roll HP method.
            hp_method: Initial HP method; settings default when None.
            max_level: Highest total level; settings value when None.
        """
        settings = get_settings()
        self._character = character
        self._catalog = catalog
        self._roller = roller or DiceRoller()
        self._max_level = max_level if max_level is not None else settings.rules.max_level
        self._target: CharacterClass = character.character_class
        self._hp_method = HpMethod(hp_method or settings.rules.default_hp_method)
        self._hp_roll: int | None = None
        self._chosen_subclass: Subclass | None = None
        self._closed_phase: LevelUpPhase | None = None

        if self._hp_method == HpMethod.ROLL:
            self.roll_hp()
        logger.debug(
            "Level up opened",
            character_id=character.id,
            character_level=character.level,
            class_id=self._target.id,
        )

    # =========================================================================
    # State
    # =========================================================================

    @property
    def phase(self) -> LevelUpPhase:
        if self._closed_phase is not None:
            return self._closed_phase
        if self.new_level > self._max_level:
            return LevelUpPhase.CONFIGURING
        if self.requires_subclass_choice and self._chosen_subclass is None:
            return LevelUpPhase.AWAITING_SUBCLASS_CHOICE
        return LevelUpPhase.READY

    @property
    def can_commit(self) -> bool:
        return self.phase == LevelUpPhase.READY

    def _ensure_open(self) -> None:
        if self._closed_phase is not None:
            raise InvalidGameStateError(
                "Level up session is closed",
                current_state=self._closed_phase.value,
                expected_states=[
                    LevelUpPhase.CONFIGURING.value,
                    LevelUpPhase.AWAITING_SUBCLASS_CHOICE.value,
                    LevelUpPhase.READY.value,
                ],
            )

    # =========================================================================
    # Target class
    # =========================================================================

    @property
    def target_class(self) -> CharacterClass:
        return self._target

    @property
    def is_multiclassing(self) -> bool:
        return self._target.id != self._character.character_class.id

    @property
    def current_class_level(self) -> int:
        return self._character.class_level(self._target.id)

    @property
    def new_class_level(self) -> int:
        return self.current_class_level + 1

    @property
    def new_level(self) -> int:
        return self._character.level + 1

    def select_class(self, class_id: str) -> None:
        """Choose the class that gains the level.

        Switching class clears any HP roll and subclass choice; with the
        roll method a fresh roll is made for the new hit die.

        Raises:
            ValidationError: If the class is neither held nor in the catalog.
        """
        self._ensure_open()
        entry = self._character.class_entry(class_id)
        target = entry.character_class if entry else self._catalog.character_class(class_id)
        if target is None:
            raise ValidationError(
                "Unknown class for level up",
                field_name="class_id",
                invalid_value=class_id,
            )

        changed = target.id != self._target.id
        self._target = target
        if changed:
            self._hp_roll = None
            self._chosen_subclass = None
            if self._hp_method == HpMethod.ROLL:
                self.roll_hp()
        logger.debug(
            "Level up class selected",
            class_id=target.id,
            multiclassing=self.is_multiclassing,
            new_class_level=self.new_class_level,
        )

    # =========================================================================
    # Hit points
    # =========================================================================

    @property
    def hp_method(self) -> HpMethod:
        return self._hp_method

    @property
    def hp_roll(self) -> int | None:
        return self._hp_roll

    def set_hp_method(self, method: HpMethod) -> None:
        """Switch between average and rolled HP; rolling happens on first switch."""
        self._ensure_open()
        self._hp_method = HpMethod(method)
        if self._hp_method == HpMethod.ROLL and self._hp_roll is None:
            self.roll_hp()

    def roll_hp(self) -> int:
        """Roll the target class's hit die, replacing any earlier roll."""
        self._ensure_open()
        self._hp_method = HpMethod.ROLL
        self._hp_roll = self._roller.roll_die(self._target.hit_die)
        logger.debug("Level up HP rolled", hit_die=self._target.hit_die, roll=self._hp_roll)
        return self._hp_roll

    @property
    def average_hp_increase(self) -> int:
        return hit_point_gain(self._target.hit_die, self._con_mod)

    @property
    def final_hp_increase(self) -> int:
        """HP the commit will add, at least 1."""
        if self._hp_method == HpMethod.ROLL and self._hp_roll is not None:
            return hit_point_gain(self._target.hit_die, self._con_mod, self._hp_roll)
        return self.average_hp_increase

    @property
    def _con_mod(self) -> int:
        return self._character.ability_scores.modifier(Ability.CON)

    # =========================================================================
    # Subclass
    # =========================================================================

    @property
    def available_subclasses(self) -> list[Subclass]:
        records = self._catalog.list(CatalogKind.SUBCLASS, parent_id=self._target.id)
        return [record for record in records if isinstance(record, Subclass)]

    @property
    def subclass_level(self) -> int | None:
        """Level at which the target class picks a subclass, if it has any."""
        subclasses = self.available_subclasses
        return min(s.subclass_level for s in subclasses) if subclasses else None

    @property
    def recorded_subclass_id(self) -> str | None:
        entry = self._character.class_entry(self._target.id)
        return entry.subclass_id if entry else None

    @property
    def requires_subclass_choice(self) -> bool:
        """True iff the new class level is the subclass level and none is recorded."""
        return (
            self.subclass_level is not None
            and self.new_class_level == self.subclass_level
            and self.recorded_subclass_id is None
        )

    @property
    def chosen_subclass(self) -> Subclass | None:
        return self._chosen_subclass

    def choose_subclass(self, subclass_id: str) -> None:
        """Record the subclass for the target class.

        Raises:
            InvalidGameStateError: If no subclass choice is due at this level.
            ValidationError: If the subclass does not belong to the target class.
        """
        self._ensure_open()
        if not self.requires_subclass_choice:
            raise InvalidGameStateError(
                "No subclass choice is due at this level",
                current_state=self.phase.value,
                expected_states=[LevelUpPhase.AWAITING_SUBCLASS_CHOICE.value],
            )
        subclass = self._catalog.subclass(subclass_id)
        if subclass is None or subclass.parent_class_id != self._target.id:
            raise ValidationError(
                "Subclass does not belong to the selected class",
                field_name="subclass_id",
                invalid_value=subclass_id,
            )
        self._chosen_subclass = subclass

    def _active_subclass(self) -> Subclass | None:
        if self._chosen_subclass is not None:
            return self._chosen_subclass
        entry = self._character.class_entry(self._target.id)
        if entry is None or entry.subclass_id is None:
            return None
        return entry.subclass or self._catalog.subclass(entry.subclass_id)

    # =========================================================================
    # Preview
    # =========================================================================

    @property
    def new_features(self) -> list[ClassFeature]:
        """Class and subclass features gained at exactly the new class level."""
        level = self.new_class_level
        features = self._target.features_at(level)
        subclass = self._active_subclass()
        if subclass is not None:
            features.extend(subclass.features_at(level))
        return features

    @property
    def new_proficiency_bonus(self) -> int:
        return proficiency_bonus(self.new_level)

    @property
    def proficiency_increases(self) -> bool:
        return self.new_proficiency_bonus > self._character.proficiency_bonus

    def _projected_classes(self) -> list[ClassLevel]:
        classes: list[ClassLevel] = []
        found = False
        for entry in self._character.classes:
            if entry.class_id == self._target.id:
                found = True
                subclass = self._chosen_subclass
                classes.append(
                    entry.model_copy(
                        update={
                            "level": entry.level + 1,
                            "subclass_id": subclass.id if subclass else entry.subclass_id,
                            "subclass": subclass or entry.subclass,
                        },
                        deep=True,
                    )
                )
            else:
                classes.append(entry.model_copy(deep=True))
        if not found:
            subclass = self._chosen_subclass
            classes.append(
                ClassLevel(
                    character_class=self._target,
                    level=1,
                    subclass_id=subclass.id if subclass else None,
                    subclass=subclass,
                )
            )
        return classes

    @property
    def current_spell_slots(self) -> dict[int, int]:
        return spell_slot_table(self._character.classes)

    @property
    def projected_spell_slots(self) -> dict[int, int]:
        return spell_slot_table(self._projected_classes())

    @property
    def spell_slots_change(self) -> bool:
        return self.current_spell_slots != self.projected_spell_slots

    # =========================================================================
    # Transitions
    # =========================================================================

    def commit(self) -> LevelUpResult:
        """Apply the level-up to a copy of the character.

        Returns:
            LevelUpResult holding the advanced character.

        Raises:
            InvalidGameStateError: If ``can_commit`` is False.
        """
        if not self.can_commit:
            raise InvalidGameStateError(
                "Level up cannot be committed",
                current_state=self.phase.value,
                expected_states=[LevelUpPhase.READY.value],
            )

        new_class_level = self.new_class_level
        before_slots = self.current_spell_slots
        after_slots = self.projected_spell_slots
        hp_increase = self.final_hp_increase
        features = self.new_features

        updated = self._character.model_copy(deep=True)
        updated.classes = self._projected_classes()
        updated.max_hit_points += hp_increase
        updated.current_hit_points += hp_increase

        current_slots = dict(updated.spell_slots)
        updated.spell_slots = {
            spell_level: max(
                0,
                min(
                    maximum,
                    current_slots.get(spell_level, 0) + maximum - before_slots.get(spell_level, 0),
                ),
            )
            for spell_level, maximum in after_slots.items()
        }
        updated.touch()

        self._closed_phase = LevelUpPhase.COMMITTED
        result = LevelUpResult(
            character=updated,
            class_id=self._target.id,
            new_class_level=new_class_level,
            new_level=updated.level,
            hp_increase=hp_increase,
            proficiency_bonus=updated.proficiency_bonus,
            subclass=self._chosen_subclass,
            new_features=features,
            spell_slots_before=before_slots,
            spell_slots_after=after_slots,
        )
        logger.info(
            "Level up committed",
            character=updated,
            class_id=result.class_id,
            class_level=result.new_class_level,
            hp_increase=hp_increase,
            subclass=self._chosen_subclass.id if self._chosen_subclass else None,
        )
        return result

    def cancel(self) -> Character:
        """Discard all selections. Returns the unchanged character."""
        self._ensure_open()
        self._hp_roll = None
        self._chosen_subclass = None
        self._closed_phase = LevelUpPhase.IDLE
        logger.debug("Level up cancelled", character_id=self._character.id)
        return self._character


__all__ = [
    "LevelUpResult",
    "LevelUpSession",
]
