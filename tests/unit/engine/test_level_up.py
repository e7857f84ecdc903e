"""Tests for the level-up state machine."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from aether_sheet.core.exceptions import InvalidGameStateError, ValidationError
from aether_sheet.engine.catalog import ReferenceCatalog
from aether_sheet.engine.level_up import LevelUpSession
from aether_sheet.models.character import Character
from aether_sheet.models.enums import HpMethod, LevelUpPhase


def _with_subclass(character: Character, catalog: ReferenceCatalog, subclass_id: str) -> Character:
    entry = character.classes[0]
    character.classes = [
        entry.model_copy(
            update={"subclass_id": subclass_id, "subclass": catalog.subclass(subclass_id)}
        ),
        *character.classes[1:],
    ]
    return character


class TestSessionBasics:
    """Tests for opening and previewing a level-up."""

    def test_defaults_to_primary_class(self, fighter: Character, catalog: ReferenceCatalog) -> None:
        """Test the session starts on the primary class with average HP."""
        session = LevelUpSession(fighter, catalog)

        assert session.target_class.id == "fighter"
        assert not session.is_multiclassing
        assert session.hp_method == HpMethod.AVERAGE
        assert session.current_class_level == 2
        assert session.new_class_level == 3
        assert session.new_level == 3

    def test_default_method_from_settings(
        self,
        wizard: Character,
        catalog: ReferenceCatalog,
        fixed_roller,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test the configured HP method is preselected and rolled."""
        monkeypatch.setenv("AETHER_RULES_DEFAULT_HP_METHOD", "roll")

        session = LevelUpSession(wizard, catalog, fixed_roller(2))

        assert session.hp_method == HpMethod.ROLL
        assert session.hp_roll == 2

    def test_average_increase(self, wizard: Character, catalog: ReferenceCatalog) -> None:
        """Test the average gain is half the die plus one plus CON."""
        session = LevelUpSession(wizard, catalog)

        assert session.average_hp_increase == 5
        assert session.final_hp_increase == 5

    def test_proficiency_preview(
        self,
        make_character: Callable[..., Character],
        catalog: ReferenceCatalog,
    ) -> None:
        """Test the proficiency change from level 4 to 5."""
        session = LevelUpSession(make_character(("fighter", 4)), catalog)

        assert session.new_proficiency_bonus == 3
        assert session.proficiency_increases

    def test_spell_slot_preview(
        self,
        make_character: Callable[..., Character],
        catalog: ReferenceCatalog,
    ) -> None:
        """Test current and projected slot tables."""
        character = _with_subclass(make_character(("wizard", 2)), catalog, "evocation")

        session = LevelUpSession(character, catalog)

        assert session.current_spell_slots == {1: 3}
        assert session.projected_spell_slots == {1: 4, 2: 2}
        assert session.spell_slots_change

    def test_no_slot_change_for_fighter(self, fighter: Character, catalog: ReferenceCatalog) -> None:
        """Test non-casters see no slot change."""
        assert not LevelUpSession(fighter, catalog).spell_slots_change


class TestHitPointMethod:
    """Tests for average and rolled HP."""

    def test_roll_and_reroll(self, wizard: Character, catalog: ReferenceCatalog, fixed_roller) -> None:
        """Test each roll replaces the previous proposal."""
        session = LevelUpSession(wizard, catalog, fixed_roller(3, 5))

        session.set_hp_method(HpMethod.ROLL)
        assert session.final_hp_increase == 4

        session.roll_hp()
        assert session.final_hp_increase == 6

        session.set_hp_method(HpMethod.AVERAGE)
        assert session.final_hp_increase == 5

    @pytest.mark.parametrize("class_id", ["wizard", "rogue", "fighter", "barbarian"])
    @pytest.mark.parametrize("constitution", [3, 8, 10])
    @pytest.mark.parametrize("method", [HpMethod.AVERAGE, HpMethod.ROLL])
    def test_max_hp_strictly_increases(
        self,
        make_character: Callable[..., Character],
        catalog: ReferenceCatalog,
        fixed_roller,
        sample_scores: dict[str, int],
        class_id: str,
        constitution: int,
        method: HpMethod,
    ) -> None:
        """Test every level-up adds at least 1 max HP, even with a low CON."""
        character = make_character(
            (class_id, 1),
            scores={**sample_scores, "constitution": constitution},
        )
        session = LevelUpSession(character, catalog, fixed_roller(1), hp_method=method)
        if session.requires_subclass_choice:
            session.choose_subclass(session.available_subclasses[0].id)

        result = session.commit()

        assert result.hp_increase >= 1
        assert result.character.max_hit_points > character.max_hit_points


class TestSubclassGating:
    """Tests for the subclass choice."""

    def test_awaiting_subclass(self, fighter: Character, catalog: ReferenceCatalog) -> None:
        """Test reaching the subclass level blocks commit."""
        session = LevelUpSession(fighter, catalog)

        assert session.requires_subclass_choice
        assert session.phase == LevelUpPhase.AWAITING_SUBCLASS_CHOICE
        assert not session.can_commit
        with pytest.raises(InvalidGameStateError):
            session.commit()

    def test_choose_subclass_unblocks(self, fighter: Character, catalog: ReferenceCatalog) -> None:
        """Test picking a subclass makes the session ready."""
        session = LevelUpSession(fighter, catalog)

        session.choose_subclass("champion")

        assert session.phase == LevelUpPhase.READY
        result = session.commit()
        assert result.subclass is not None
        assert result.character.primary_entry.subclass_id == "champion"
        assert [f.name for f in result.new_features] == ["Martial Archetype", "Improved Critical"]

    def test_wrong_parent_rejected(self, fighter: Character, catalog: ReferenceCatalog) -> None:
        """Test another class's subclass is refused."""
        session = LevelUpSession(fighter, catalog)

        with pytest.raises(ValidationError):
            session.choose_subclass("evocation")

    def test_choice_not_due(self, wizard: Character, catalog: ReferenceCatalog) -> None:
        """Test choosing when no choice is due is refused."""
        session = LevelUpSession(_with_subclass(wizard, catalog, "evocation"), catalog)

        with pytest.raises(InvalidGameStateError):
            session.choose_subclass("evocation")

    def test_recorded_subclass_never_reprompts(
        self,
        wizard: Character,
        catalog: ReferenceCatalog,
    ) -> None:
        """Test a recorded subclass skips the choice even at the subclass level."""
        character = _with_subclass(wizard, catalog, "evocation")

        session = LevelUpSession(character, catalog)

        assert session.new_class_level == 2
        assert not session.requires_subclass_choice
        assert session.phase == LevelUpPhase.READY

    def test_repeated_level_ups_stay_ready(self, wizard: Character, catalog: ReferenceCatalog) -> None:
        """Test later level-ups of the same class never await a subclass."""
        first = LevelUpSession(wizard, catalog)
        first.choose_subclass("evocation")
        character = first.commit().character

        for _ in range(3):
            session = LevelUpSession(character, catalog)
            assert session.phase == LevelUpPhase.READY
            character = session.commit().character

        assert character.level == 5
        assert character.primary_entry.subclass_id == "evocation"

    def test_subclass_features_surface(
        self,
        make_character: Callable[..., Character],
        catalog: ReferenceCatalog,
    ) -> None:
        """Test recorded subclass features appear at their level."""
        character = _with_subclass(make_character(("wizard", 5)), catalog, "evocation")

        session = LevelUpSession(character, catalog)

        assert [f.name for f in session.new_features] == ["Potent Cantrip"]


class TestMulticlassing:
    """Tests for levelling a new class."""

    def test_new_class_starts_at_one(self, fighter: Character, catalog: ReferenceCatalog) -> None:
        """Test a class with no levels becomes level 1, not current level plus one."""
        session = LevelUpSession(fighter, catalog)

        session.select_class("wizard")

        assert session.is_multiclassing
        assert session.current_class_level == 0
        assert session.new_class_level == 1
        assert session.new_level == 3
        assert session.average_hp_increase == 6

    def test_commit_adds_entry(self, fighter: Character, catalog: ReferenceCatalog) -> None:
        """Test commit appends the new class entry and its slots."""
        session = LevelUpSession(fighter, catalog)
        session.select_class("wizard")

        result = session.commit()

        character = result.character
        assert [(e.class_id, e.level) for e in character.classes] == [("fighter", 2), ("wizard", 1)]
        assert character.level == 3
        assert character.character_class.id == "fighter"
        assert character.max_hit_points == fighter.max_hit_points + 6
        assert character.spell_slots == {1: 2}
        assert [f.name for f in result.new_features] == ["Spellcasting", "Arcane Recovery"]

    def test_switching_class_rerolls(
        self,
        wizard: Character,
        catalog: ReferenceCatalog,
        fixed_roller,
    ) -> None:
        """Test switching class discards the old roll and rolls the new die."""
        roller = fixed_roller(3, 9)
        session = LevelUpSession(wizard, catalog, roller, hp_method=HpMethod.ROLL)

        session.select_class("fighter")

        assert session.hp_roll == 9
        assert roller.sizes == [6, 10]

    def test_unknown_class(self, wizard: Character, catalog: ReferenceCatalog) -> None:
        """Test unknown classes are refused."""
        session = LevelUpSession(wizard, catalog)

        with pytest.raises(ValidationError):
            session.select_class("artificer")


class TestCommit:
    """Tests for committing a level-up."""

    def test_wizard_to_level_two(self, wizard: Character, catalog: ReferenceCatalog) -> None:
        """Test the full effect of a wizard's second level."""
        session = LevelUpSession(wizard, catalog)
        session.choose_subclass("evocation")

        result = session.commit()

        character = result.character
        assert result.new_level == 2
        assert result.new_class_level == 2
        assert result.hp_increase == 5
        assert character.max_hit_points == 12
        assert character.current_hit_points == 12
        assert character.proficiency_bonus == 2
        assert character.spell_slots == {1: 3}
        assert result.spell_slots_changed
        assert [f.name for f in result.new_features] == [
            "Arcane Tradition",
            "Evocation Savant",
            "Sculpt Spells",
        ]

    def test_original_untouched(self, wizard: Character, catalog: ReferenceCatalog) -> None:
        """Test commit works on a copy."""
        session = LevelUpSession(wizard, catalog)
        session.choose_subclass("evocation")

        result = session.commit()

        assert wizard.level == 1
        assert wizard.max_hit_points == 7
        assert result.character is not wizard

    def test_spent_slots_shift_by_delta(
        self,
        make_character: Callable[..., Character],
        catalog: ReferenceCatalog,
    ) -> None:
        """Test spent slots stay spent while new maximums are granted."""
        character = _with_subclass(make_character(("wizard", 2)), catalog, "evocation")
        character.spell_slots = {1: 1}

        result = LevelUpSession(character, catalog).commit()

        assert result.character.spell_slots == {1: 2, 2: 2}

    def test_commit_closes_session(self, wizard: Character, catalog: ReferenceCatalog) -> None:
        """Test a committed session cannot be reused."""
        session = LevelUpSession(_with_subclass(wizard, catalog, "evocation"), catalog)
        session.commit()

        assert session.phase == LevelUpPhase.COMMITTED
        with pytest.raises(InvalidGameStateError):
            session.commit()
        with pytest.raises(InvalidGameStateError):
            session.roll_hp()

    def test_max_level_blocks_commit(self, wizard: Character, catalog: ReferenceCatalog) -> None:
        """Test a character at the level cap cannot advance."""
        session = LevelUpSession(wizard, catalog, max_level=1)

        assert session.phase == LevelUpPhase.CONFIGURING
        assert not session.can_commit
        with pytest.raises(InvalidGameStateError):
            session.commit()


class TestCancel:
    """Tests for cancelling a level-up."""

    def test_cancel_returns_unchanged(self, wizard: Character, catalog: ReferenceCatalog) -> None:
        """Test cancel discards selections and returns the same character."""
        session = LevelUpSession(wizard, catalog)
        session.choose_subclass("evocation")

        returned = session.cancel()

        assert returned is wizard
        assert wizard.level == 1
        assert session.phase == LevelUpPhase.IDLE
        assert session.chosen_subclass is None

    def test_cancelled_session_closed(self, wizard: Character, catalog: ReferenceCatalog) -> None:
        """Test a cancelled session refuses further changes."""
        session = LevelUpSession(wizard, catalog)
        session.cancel()

        with pytest.raises(InvalidGameStateError):
            session.select_class("fighter")
        with pytest.raises(InvalidGameStateError):
            session.cancel()
