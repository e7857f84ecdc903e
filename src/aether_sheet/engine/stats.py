"""Derived statistics for D&D 5E characters.

Pure functions computing proficiency bonus, hit points, armor class,
saving throws, skills, passive scores, weapon attacks and encumbrance,
plus ``derive_stats`` which runs them all for a character.

A catalog miss never raises here. The affected value falls back to a
neutral default and a DataIntegrityWarning is returned alongside the
numbers (and logged), so a sheet can still render.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from aether_sheet.core.constants import (
    CARRYING_CAPACITY_MULTIPLIER,
    MARTIAL_WEAPONS_PROFICIENCY,
    MEDIUM_ARMOR_MAX_DEX,
    PASSIVE_BASE,
    SHIELD_AC_BONUS,
    SIMPLE_WEAPONS_PROFICIENCY,
    UNARMORED_BASE_AC,
)
from aether_sheet.core.logging import get_logger
from aether_sheet.engine.catalog import ReferenceCatalog
from aether_sheet.engine.dice import DiceRoller
from aether_sheet.models.character import Character, ClassLevel, calculate_modifier
from aether_sheet.models.enums import (
    Ability,
    ArmorCategory,
    CatalogKind,
    DexBonusRule,
    HpMethod,
    Skill,
    WeaponCategory,
)
from aether_sheet.models.reference import Armor, CharacterClass, EquipmentItem, Weapon


logger = get_logger(__name__)


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class DataIntegrityWarning:
    """A reference that could not be resolved against the catalog.

    Attributes:
        kind: Catalog kind that was searched.
        reference: The id or name that was not found.
        message: Human-readable explanation.
    """

    kind: CatalogKind
    reference: str
    message: str


@dataclass(frozen=True)
class WeaponAttack:
    """Attack and damage bonuses for one weapon."""

    weapon_name: str
    ability: Ability
    attack_bonus: int
    damage_bonus: int
    damage_dice: str
    damage_type: str
    proficient: bool

    @property
    def damage(self) -> str:
        """Damage formula as shown on a sheet (e.g. '1d8+3')."""
        if self.damage_bonus == 0:
            return self.damage_dice
        return f"{self.damage_dice}{self.damage_bonus:+d}"


@dataclass(frozen=True)
class LoadSummary:
    """What a character carries.

    Attributes:
        item_count: Number of equipment entries.
        total_weight: Summed weight of entries found in the catalog.
        unweighed: Entries the catalog holds no weight for.
    """

    item_count: int
    total_weight: float
    unweighed: list[str] = field(default_factory=list)


@dataclass
class DerivedStats:
    """Everything a sheet shows that is computed rather than stored."""

    level: int
    proficiency_bonus: int
    ability_modifiers: dict[Ability, int]
    armor_class: int
    speed: int
    saving_throws: dict[Ability, int]
    skills: dict[Skill, int]
    passive_perception: int
    passive_investigation: int
    passive_insight: int
    attacks: list[WeaponAttack]
    carrying_capacity: int
    load: LoadSummary
    spell_save_dc: int | None = None
    spell_attack_bonus: int | None = None
    strength_shortfall: bool = False
    warnings: list[DataIntegrityWarning] = field(default_factory=list)


# =============================================================================
# Proficiency and Hit Points
# =============================================================================


def proficiency_bonus(level: int) -> int:
    """Proficiency bonus for a total character level: ``ceil(level/4) + 1``.

    Example:
        >>> [proficiency_bonus(n) for n in (1, 4, 5, 17, 20)]
        [2, 2, 3, 6, 6]
    """
    return (max(1, level) - 1) // 4 + 2


def average_hit_die(hit_die: int) -> int:
    """Fixed per-level value of a hit die (PHB rounds the average up)."""
    return hit_die // 2 + 1


def first_level_hit_points(hit_die: int, con_mod: int, roll: int | None = None) -> int:
    """HP for the character's very first level: the full die (or a roll) plus CON.

    Never less than 1.
    """
    from_die = hit_die if roll is None else roll
    return max(1, from_die + con_mod)


def hit_point_gain(hit_die: int, con_mod: int, roll: int | None = None) -> int:
    """HP for any level after the first, minimum 1.

    Args:
        hit_die: Hit die size of the class taking the level.
        con_mod: Constitution modifier.
        roll: A die roll to use; the fixed average when None.
    """
    from_die = average_hit_die(hit_die) if roll is None else roll
    return max(1, from_die + con_mod)


def max_hit_points(
    classes: Sequence[ClassLevel],
    con_mod: int,
    hp_method: HpMethod = HpMethod.AVERAGE,
    roller: DiceRoller | None = None,
) -> int:
    """Maximum HP for a set of class entries.

    The first entry is the class taken at level 1; only its first level
    gets the full-die bonus. Every other level, in any class, uses the
    per-level formula with that class's hit die.

    Args:
        classes: Class entries, starting class first.
        con_mod: Constitution modifier.
        hp_method: Average or rolled hit points.
        roller: Dice roller for the roll method.

    Returns:
        Maximum hit points.
    """
    if hp_method == HpMethod.ROLL and roller is None:
        roller = DiceRoller()

    total = 0
    first = True
    for entry in classes:
        hit_die = entry.hit_die
        for _ in range(entry.level):
            roll = roller.roll_die(hit_die) if hp_method == HpMethod.ROLL and roller else None
            if first:
                total += first_level_hit_points(hit_die, con_mod, roll)
                first = False
            else:
                total += hit_point_gain(hit_die, con_mod, roll)
    return total


# =============================================================================
# Armor Class
# =============================================================================


def armor_class(armor: Armor | None, dex_mod: int, has_shield: bool = False) -> int:
    """Armor class from worn armor, dexterity and shield.

    Unarmored is ``10 + dex``; light armor adds full dex, medium at most
    +2, heavy none. A shield adds +2. Passing a shield record as ``armor``
    counts as unarmored with a shield.

    Example:
        >>> armor_class(None, 3)
        13
    """
    if armor is not None and armor.category == ArmorCategory.SHIELD:
        armor, has_shield = None, True

    if armor is None:
        ac = UNARMORED_BASE_AC + dex_mod
    elif armor.dex_bonus == DexBonusRule.FULL:
        ac = armor.base_ac + dex_mod
    elif armor.dex_bonus == DexBonusRule.MAX2:
        ac = armor.base_ac + min(dex_mod, MEDIUM_ARMOR_MAX_DEX)
    else:
        ac = armor.base_ac

    if has_shield:
        ac += SHIELD_AC_BONUS
    return ac


def meets_strength_requirement(armor: Armor | None, strength: int) -> bool:
    """Whether ``strength`` meets the armor's requirement (informational only)."""
    if armor is None or not armor.strength_requirement:
        return True
    return strength >= armor.strength_requirement


# =============================================================================
# Saves, Skills, Passives
# =============================================================================


def saving_throw_bonus(
    ability: Ability,
    saving_throws: Iterable[Ability],
    ability_mod: int,
    prof_bonus: int,
) -> int:
    """Save bonus: the ability modifier plus proficiency when proficient."""
    return ability_mod + (prof_bonus if ability in set(saving_throws) else 0)


def is_skill_proficient(skill: Skill, skill_proficiencies: Iterable[str]) -> bool:
    """Check ``skill`` against proficiency names in any common spelling."""
    for name in skill_proficiencies:
        try:
            if Skill.from_name(name) == skill:
                return True
        except ValueError:
            continue
    return False


def skill_bonus(
    skill: Skill,
    skill_proficiencies: Iterable[str],
    ability_mod: int,
    prof_bonus: int,
) -> int:
    """Skill bonus: the governing ability's modifier plus proficiency when proficient."""
    return ability_mod + (prof_bonus if is_skill_proficient(skill, skill_proficiencies) else 0)


def passive_score(bonus: int) -> int:
    """Passive check score: ``10 + bonus``."""
    return PASSIVE_BASE + bonus


# =============================================================================
# Weapons
# =============================================================================


def is_weapon_proficient(weapon: Weapon, weapon_proficiencies: Iterable[str]) -> bool:
    """Proficient if the weapon's name or its category training is listed."""
    category_entry = (
        MARTIAL_WEAPONS_PROFICIENCY
        if weapon.category == WeaponCategory.MARTIAL
        else SIMPLE_WEAPONS_PROFICIENCY
    )
    names = {weapon.name.lower(), f"{weapon.name.lower()}s", category_entry.lower()}
    return any(entry.strip().lower() in names for entry in weapon_proficiencies)


def weapon_attack(
    weapon: Weapon,
    str_mod: int,
    dex_mod: int,
    prof_bonus: int,
    weapon_proficiencies: Iterable[str],
) -> WeaponAttack:
    """Attack and damage bonus for ``weapon``.

    Finesse weapons use the better of STR and DEX, other ranged weapons
    use DEX, other melee weapons use STR.
    """
    if weapon.is_finesse:
        ability = Ability.DEX if dex_mod > str_mod else Ability.STR
    elif weapon.is_ranged:
        ability = Ability.DEX
    else:
        ability = Ability.STR
    ability_mod = dex_mod if ability == Ability.DEX else str_mod

    proficient = is_weapon_proficient(weapon, weapon_proficiencies)
    return WeaponAttack(
        weapon_name=weapon.name,
        ability=ability,
        attack_bonus=ability_mod + (prof_bonus if proficient else 0),
        damage_bonus=ability_mod,
        damage_dice=weapon.damage_dice,
        damage_type=weapon.damage_type,
        proficient=proficient,
    )


# =============================================================================
# Encumbrance
# =============================================================================


def carrying_capacity(strength: int) -> int:
    """Carrying capacity in pounds: Strength times 15."""
    return strength * CARRYING_CAPACITY_MULTIPLIER


def item_weight(name: str, catalog: ReferenceCatalog) -> float | None:
    """Weight of a named item from the catalog, or None if unknown."""
    for kind in (CatalogKind.WEAPON, CatalogKind.ARMOR, CatalogKind.EQUIPMENT):
        record = catalog.find_by_name(kind, name)
        if isinstance(record, (Weapon, Armor, EquipmentItem)):
            return record.weight
    return None


def current_load(equipment: Sequence[str], catalog: ReferenceCatalog) -> LoadSummary:
    """Sum the catalog weights of ``equipment``.

    Items the catalog cannot weigh still count toward ``item_count`` and
    are listed in ``unweighed``.
    """
    total = 0.0
    unweighed: list[str] = []
    for name in equipment:
        weight = item_weight(name, catalog)
        if weight is None:
            unweighed.append(name)
        else:
            total += weight
    return LoadSummary(item_count=len(equipment), total_weight=total, unweighed=unweighed)


# =============================================================================
# Whole-Character Derivation
# =============================================================================


def weapon_proficiencies_for(character: Character) -> list[str]:
    """Weapon proficiencies from the starting class plus multiclass grants."""
    proficiencies = list(character.character_class.weapon_proficiencies)
    for entry in character.classes:
        if entry.class_id == character.character_class.id:
            continue
        if entry.character_class.multiclassing is not None:
            proficiencies.extend(entry.character_class.multiclassing.proficiencies_gained)
    return proficiencies


def spellcasting_class(character: Character) -> CharacterClass | None:
    """The class whose spellcasting ability sets DC and attack bonus."""
    if character.character_class.spellcasting is not None:
        return character.character_class
    for entry in character.classes:
        if entry.character_class.spellcasting is not None:
            return entry.character_class
    return None


def derive_stats(character: Character, catalog: ReferenceCatalog) -> DerivedStats:
    """Compute every derived statistic for ``character``.

    Args:
        character: The character to derive for.
        catalog: Reference catalog used for armor, weapon and spell lookups.

    Returns:
        DerivedStats, with a warning for every unresolved reference.
    """
    scores = character.ability_scores
    mods = {ability: calculate_modifier(scores.get(ability)) for ability in Ability}
    prof = proficiency_bonus(character.level)
    warnings: list[DataIntegrityWarning] = []

    armor: Armor | None = None
    if character.equipped_armor:
        armor = catalog.armor_named(character.equipped_armor)
        if armor is None:
            warnings.append(
                DataIntegrityWarning(
                    kind=CatalogKind.ARMOR,
                    reference=character.equipped_armor,
                    message="Equipped armor not found; treated as unarmored",
                )
            )

    saves = {
        ability: saving_throw_bonus(
            ability, character.character_class.saving_throws, mods[ability], prof
        )
        for ability in Ability
    }
    skills = {
        skill: skill_bonus(skill, character.skill_proficiencies, mods[skill.ability], prof)
        for skill in Skill
    }

    weapon_profs = weapon_proficiencies_for(character)
    attacks: list[WeaponAttack] = []
    for item in character.equipment:
        weapon = catalog.weapon_named(item)
        if weapon is not None:
            attacks.append(
                weapon_attack(weapon, mods[Ability.STR], mods[Ability.DEX], prof, weapon_profs)
            )

    for spell_name in [*character.cantrips, *character.spells]:
        if catalog.find_by_name(CatalogKind.SPELL, spell_name) is None:
            warnings.append(
                DataIntegrityWarning(
                    kind=CatalogKind.SPELL,
                    reference=spell_name,
                    message="Known spell not found in catalog",
                )
            )

    spell_save_dc = spell_attack = None
    caster = spellcasting_class(character)
    if caster is not None and caster.spellcasting is not None:
        casting_mod = mods[caster.spellcasting.ability]
        spell_save_dc = 8 + prof + casting_mod
        spell_attack = prof + casting_mod

    for warning in warnings:
        logger.warning(
            "Data integrity warning",
            character_id=character.id,
            kind=warning.kind.value,
            reference=warning.reference,
            detail=warning.message,
        )

    return DerivedStats(
        level=character.level,
        proficiency_bonus=prof,
        ability_modifiers=mods,
        armor_class=armor_class(armor, mods[Ability.DEX], character.has_shield),
        speed=character.species.speed,
        saving_throws=saves,
        skills=skills,
        passive_perception=passive_score(skills[Skill.PERCEPTION]),
        passive_investigation=passive_score(skills[Skill.INVESTIGATION]),
        passive_insight=passive_score(skills[Skill.INSIGHT]),
        attacks=attacks,
        carrying_capacity=carrying_capacity(scores.strength),
        load=current_load(character.equipment, catalog),
        spell_save_dc=spell_save_dc,
        spell_attack_bonus=spell_attack,
        strength_shortfall=not meets_strength_requirement(armor, scores.strength),
        warnings=warnings,
    )


__all__ = [
    "DataIntegrityWarning",
    "WeaponAttack",
    "LoadSummary",
    "DerivedStats",
    "proficiency_bonus",
    "average_hit_die",
    "first_level_hit_points",
    "hit_point_gain",
    "max_hit_points",
    "armor_class",
    "meets_strength_requirement",
    "saving_throw_bonus",
    "is_skill_proficient",
    "skill_bonus",
    "passive_score",
    "is_weapon_proficient",
    "weapon_attack",
    "carrying_capacity",
    "item_weight",
    "current_load",
    "weapon_proficiencies_for",
    "spellcasting_class",
    "derive_stats",
]
