"""Tests for enumeration types."""

from __future__ import annotations

import pytest

from aether_sheet.models.enums import (
    SKILL_ABILITIES,
    Ability,
    Alignment,
    CasterType,
    Skill,
)


class TestAbility:
    """Tests for the Ability enum."""

    @pytest.mark.parametrize("text", ["dexterity", "Dexterity", "DEX", "dex", " Dexterity "])
    def test_from_name(self, text: str) -> None:
        """Test resolving an ability from any common spelling."""
        assert Ability.from_name(text) == Ability.DEX

    def test_from_name_unknown(self) -> None:
        """Test unknown names are rejected."""
        with pytest.raises(ValueError, match="Unknown ability"):
            Ability.from_name("luck")

    def test_names(self) -> None:
        """Test full name and abbreviation."""
        assert Ability.WIS.full_name == "Wisdom"
        assert Ability.WIS.abbreviation == "WIS"


class TestSkill:
    """Tests for the Skill enum."""

    def test_eighteen_skills_mapped(self) -> None:
        """Test every skill has a governing ability."""
        assert len(Skill) == 18
        assert set(SKILL_ABILITIES) == set(Skill)

    @pytest.mark.parametrize(
        ("skill", "ability"),
        [
            (Skill.ATHLETICS, Ability.STR),
            (Skill.STEALTH, Ability.DEX),
            (Skill.ARCANA, Ability.INT),
            (Skill.PERCEPTION, Ability.WIS),
            (Skill.PERSUASION, Ability.CHA),
        ],
    )
    def test_ability(self, skill: Skill, ability: Ability) -> None:
        """Test skill to ability table."""
        assert skill.ability == ability

    def test_display_name(self) -> None:
        """Test sheet display names."""
        assert Skill.SLEIGHT_OF_HAND.display_name == "Sleight of Hand"
        assert Skill.ANIMAL_HANDLING.display_name == "Animal Handling"

    @pytest.mark.parametrize("text", ["Animal Handling", "animal_handling", "animal-handling"])
    def test_from_name(self, text: str) -> None:
        """Test resolving a skill from display name or value."""
        assert Skill.from_name(text) == Skill.ANIMAL_HANDLING

    def test_from_name_unknown(self) -> None:
        """Test unknown skills are rejected."""
        with pytest.raises(ValueError, match="Unknown skill"):
            Skill.from_name("Cooking")


class TestMiscEnums:
    """Tests for the smaller enums."""

    def test_alignment_display(self) -> None:
        """Test alignment display name."""
        assert Alignment.LAWFUL_GOOD.display_name == "Lawful Good"

    def test_caster_divisors(self) -> None:
        """Test caster level divisors."""
        assert CasterType.FULL.level_divisor == 1
        assert CasterType.HALF.level_divisor == 2
        assert CasterType.THIRD.level_divisor == 3
        assert CasterType.NONE.level_divisor is None
