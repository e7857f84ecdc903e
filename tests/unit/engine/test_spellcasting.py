"""Tests for spellcasting capacity, caster types and spell slots."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from aether_sheet.core.constants import FULL_CASTER_SLOTS
from aether_sheet.engine.catalog import ReferenceCatalog
from aether_sheet.engine.spellcasting import (
    SpellSelection,
    cantrips_known,
    caster_type,
    clamp_spell_slots,
    effective_caster_level,
    expend_spell_slot,
    has_spellcasting,
    restore_spell_slots,
    spell_slot_table,
    spells_known,
)
from aether_sheet.models.character import Character, ClassLevel
from aether_sheet.models.enums import CasterType
from aether_sheet.models.reference import CharacterClass


def _entries(catalog: ReferenceCatalog, *levels: tuple[str, int]) -> list[ClassLevel]:
    return [
        ClassLevel(character_class=catalog.character_class(class_id), level=level)
        for class_id, level in levels
    ]


@pytest.fixture
def third_caster() -> CharacterClass:
    """A homebrew class that gains slots at level 3."""
    return CharacterClass.model_validate(
        {
            "id": "spellblade",
            "name": "Spellblade",
            "hitDie": 8,
            "spellcasting": {
                "ability": "INT",
                "cantripsKnown": 2,
                "spellsKnown": {3: 3, 4: 4},
                "spellSlotsByLevel": {3: {1: 2}, 4: {1: 3}, 7: {1: 4, 2: 2}},
            },
        }
    )


class TestCapacity:
    """Tests for cantrip and spell capacity."""

    def test_non_caster(self, catalog: ReferenceCatalog) -> None:
        """Test classes without spellcasting have no capacity."""
        fighter = catalog.character_class("fighter")

        assert not has_spellcasting(fighter)
        assert cantrips_known(fighter, 5) == 0
        assert spells_known(fighter, 5) == 0

    def test_stepwise_cantrips(self, catalog: ReferenceCatalog) -> None:
        """Test the greatest table level not above the class level applies."""
        wizard = catalog.character_class("wizard")

        assert cantrips_known(wizard, 1) == 3
        assert cantrips_known(wizard, 3) == 3
        assert cantrips_known(wizard, 4) == 4
        assert cantrips_known(wizard, 20) == 5

    def test_prepared_caster_default(self, catalog: ReferenceCatalog) -> None:
        """Test prepared casters fall back to the configured count."""
        wizard = catalog.character_class("wizard")

        assert spells_known(wizard, 1) == 6
        assert spells_known(wizard, 1, prepared_default=4) == 4

    def test_prepared_default_from_settings(
        self,
        catalog: ReferenceCatalog,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test the prepared count is read from rules settings."""
        monkeypatch.setenv("AETHER_RULES_PREPARED_CASTER_SPELL_COUNT", "8")

        assert spells_known(catalog.character_class("wizard"), 1) == 8

    def test_known_table(self, third_caster: CharacterClass) -> None:
        """Test known-spell tables are stepwise too."""
        assert spells_known(third_caster, 2) == 0
        assert spells_known(third_caster, 3) == 3
        assert spells_known(third_caster, 9) == 4


class TestSpellSelection:
    """Tests for capped spell selection."""

    def test_wizard_level_one(self, catalog: ReferenceCatalog) -> None:
        """Test a level-1 wizard picks 3 cantrips and 6 spells."""
        selection = SpellSelection.for_class(catalog.character_class("wizard"))

        assert selection.cantrip_capacity == 3
        assert selection.spell_capacity == 6
        assert not selection.is_skippable
        assert not selection.is_complete()

    def test_capacity_enforced(self) -> None:
        """Test toggling past capacity is refused."""
        selection = SpellSelection(cantrip_capacity=1, spell_capacity=1)

        assert selection.toggle_cantrip("Light")
        assert not selection.toggle_cantrip("Mage Hand")
        assert selection.cantrips == ["Light"]

    def test_toggle_off(self) -> None:
        """Test toggling a selected name removes it."""
        selection = SpellSelection(cantrip_capacity=0, spell_capacity=2, spells=["Sleep"])

        assert selection.toggle_spell("Sleep")
        assert selection.spells == []

    def test_seeded_picks_trimmed(self) -> None:
        """Test seeded picks are de-duplicated and cut to capacity."""
        selection = SpellSelection(1, 2, ["Light", "Light"], ["Sleep", "Shield", "Mage Armor"])

        assert selection.cantrips == ["Light"]
        assert selection.spells == ["Sleep", "Shield"]
        assert selection.is_complete()

    def test_non_caster_skippable(self, catalog: ReferenceCatalog) -> None:
        """Test non-casters skip spell selection."""
        selection = SpellSelection.for_class(catalog.character_class("fighter"))

        assert selection.is_skippable
        assert selection.is_complete()

    def test_no_class_skippable(self) -> None:
        """Test an unchosen class skips spell selection."""
        assert SpellSelection.for_class(None).is_skippable


class TestCasterType:
    """Tests for caster classification from slot tables."""

    def test_full(self, catalog: ReferenceCatalog) -> None:
        """Test wizard is a full caster."""
        assert caster_type(catalog.character_class("wizard")) == CasterType.FULL

    def test_half(self, catalog: ReferenceCatalog) -> None:
        """Test paladin is a half caster."""
        assert caster_type(catalog.character_class("paladin")) == CasterType.HALF

    def test_third(self, third_caster: CharacterClass) -> None:
        """Test slots from level 3 make a third caster."""
        assert caster_type(third_caster) == CasterType.THIRD

    def test_none(self, catalog: ReferenceCatalog) -> None:
        """Test fighter is not a caster."""
        assert caster_type(catalog.character_class("fighter")) == CasterType.NONE


class TestSpellSlotTable:
    """Tests for maximum slot tables."""

    def test_single_class_uses_own_table(self, catalog: ReferenceCatalog) -> None:
        """Test single-class slots come straight from the class."""
        assert spell_slot_table(_entries(catalog, ("wizard", 3))) == {1: 4, 2: 2}
        assert spell_slot_table(_entries(catalog, ("paladin", 1))) == {}
        assert spell_slot_table(_entries(catalog, ("paladin", 2))) == {1: 2}
        assert spell_slot_table(_entries(catalog, ("fighter", 5))) == {}

    def test_full_plus_non_caster(self, catalog: ReferenceCatalog) -> None:
        """Test a non-caster adds nothing to the caster level."""
        multiclass = spell_slot_table(_entries(catalog, ("wizard", 2), ("fighter", 2)))

        assert multiclass == spell_slot_table(_entries(catalog, ("wizard", 2)))

    def test_full_plus_half(self, catalog: ReferenceCatalog) -> None:
        """Test full 1 plus half 2 gives caster level 2."""
        entries = _entries(catalog, ("wizard", 1), ("paladin", 2))

        assert effective_caster_level(entries) == 2
        assert spell_slot_table(entries) == {1: 3}

    def test_half_plus_third_without_full(
        self,
        catalog: ReferenceCatalog,
        third_caster: CharacterClass,
    ) -> None:
        """Test multiclasses without a full caster use the standard progression."""
        entries = [
            ClassLevel(character_class=catalog.character_class("paladin"), level=4),
            ClassLevel(character_class=third_caster, level=3),
        ]

        assert effective_caster_level(entries) == 3
        assert spell_slot_table(entries) == FULL_CASTER_SLOTS[3]

    def test_multiclass_non_casters(self, catalog: ReferenceCatalog) -> None:
        """Test a caster level of zero yields no slots."""
        entries = _entries(catalog, ("fighter", 3), ("paladin", 1))

        assert spell_slot_table(entries) == {}


class TestExpendableSlots:
    """Tests for current slot counters."""

    def test_expend(self, make_character: Callable[..., Character]) -> None:
        """Test spending a slot decrements only that level."""
        character = make_character(("wizard", 3))

        assert expend_spell_slot(character, 2)
        assert character.spell_slots == {1: 4, 2: 1}

    def test_expend_empty(self, wizard: Character) -> None:
        """Test spending from an empty level fails without change."""
        assert not expend_spell_slot(wizard, 3)
        wizard.spell_slots = {1: 0}
        assert not expend_spell_slot(wizard, 1)
        assert wizard.spell_slots == {1: 0}

    def test_restore(self, make_character: Callable[..., Character]) -> None:
        """Test restoring refills to the computed maximum."""
        character = make_character(("wizard", 3))
        character.spell_slots = {1: 0, 2: 0}

        assert restore_spell_slots(character) == {1: 4, 2: 2}
        assert character.spell_slots == {1: 4, 2: 2}

    def test_clamp(self) -> None:
        """Test counters never exceed the maximum."""
        assert clamp_spell_slots({1: 5, 2: 1, 3: 1}, {1: 4, 2: 3}) == {1: 4, 2: 1}
