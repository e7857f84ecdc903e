"""Rules constants for the Aether character engine.

Values here are fixed by the 5e rules rather than by reference data, so
they live in code instead of the catalog.
"""

from __future__ import annotations

# =============================================================================
# Ability Scores
# =============================================================================

MIN_ABILITY_SCORE = 1
"""Minimum ability score (1 is barely functioning)."""

MAX_ABILITY_SCORE = 30
"""Maximum ability score for any creature."""

STANDARD_ARRAY = [15, 14, 13, 12, 10, 8]
"""Standard array values for ability scores."""

# =============================================================================
# Levels and Hit Dice
# =============================================================================

MIN_LEVEL = 1
MAX_LEVEL = 20
"""Highest character level in the core rules."""

VALID_HIT_DICE = (6, 8, 10, 12)
"""Hit die sizes a class may declare."""

# =============================================================================
# Armor Class
# =============================================================================

UNARMORED_BASE_AC = 10
"""AC before dexterity when no armor is worn."""

MEDIUM_ARMOR_MAX_DEX = 2
"""Cap on the dexterity bonus medium armor allows."""

SHIELD_AC_BONUS = 2
"""Flat AC bonus for a wielded shield."""

# =============================================================================
# Encumbrance and Conditions
# =============================================================================

CARRYING_CAPACITY_MULTIPLIER = 15
"""Pounds carried per point of Strength."""

EXHAUSTION_MAX_LEVEL = 6
"""Exhaustion level at which a creature dies."""

PASSIVE_BASE = 10
"""Base value for passive checks."""

# =============================================================================
# Spellcasting
# =============================================================================

PREPARED_CASTER_DEFAULT_SPELLS = 6
"""Spell capacity for a prepared caster whose class has no spells-known table."""

# Standard full-caster slot progression (PHB p.113), by caster level
FULL_CASTER_SLOTS: dict[int, dict[int, int]] = {
    1:  {1: 2},
    2:  {1: 3},
    3:  {1: 4, 2: 2},
    4:  {1: 4, 2: 3},
    5:  {1: 4, 2: 3, 3: 2},
    6:  {1: 4, 2: 3, 3: 3},
    7:  {1: 4, 2: 3, 3: 3, 4: 1},
    8:  {1: 4, 2: 3, 3: 3, 4: 2},
    9:  {1: 4, 2: 3, 3: 3, 4: 3, 5: 1},
    10: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2},
    11: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1},
    12: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1},
    13: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1},
    14: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1},
    15: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1},
    16: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1},
    17: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1, 9: 1},
    18: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 1, 7: 1, 8: 1, 9: 1},
    19: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 1, 8: 1, 9: 1},
    20: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 2, 8: 1, 9: 1},
}

# =============================================================================
# Weapon Tables (SRD)
# =============================================================================

SIMPLE_MELEE_WEAPONS = [
    "Club",
    "Dagger",
    "Greatclub",
    "Handaxe",
    "Javelin",
    "Light Hammer",
    "Mace",
    "Quarterstaff",
    "Sickle",
    "Spear",
]

SIMPLE_RANGED_WEAPONS = [
    "Light Crossbow",
    "Dart",
    "Shortbow",
    "Sling",
]

MARTIAL_MELEE_WEAPONS = [
    "Battleaxe",
    "Flail",
    "Glaive",
    "Greataxe",
    "Greatsword",
    "Halberd",
    "Lance",
    "Longsword",
    "Maul",
    "Morningstar",
    "Pike",
    "Rapier",
    "Scimitar",
    "Shortsword",
    "Trident",
    "War Pick",
    "Warhammer",
    "Whip",
]

MARTIAL_RANGED_WEAPONS = [
    "Blowgun",
    "Hand Crossbow",
    "Heavy Crossbow",
    "Longbow",
    "Net",
]

# Generic equipment labels and the concrete weapons each may resolve to.
# Ordered most specific first; matching is by case-insensitive substring.
GENERIC_WEAPON_CHOICES: dict[str, list[str]] = {
    "simple melee weapon": SIMPLE_MELEE_WEAPONS,
    "simple ranged weapon": SIMPLE_RANGED_WEAPONS,
    "simple weapon": SIMPLE_MELEE_WEAPONS + SIMPLE_RANGED_WEAPONS,
    "martial melee weapon": MARTIAL_MELEE_WEAPONS,
    "martial ranged weapon": MARTIAL_RANGED_WEAPONS,
    "martial weapon": MARTIAL_MELEE_WEAPONS + MARTIAL_RANGED_WEAPONS,
}

SIMPLE_WEAPONS_PROFICIENCY = "Simple weapons"
MARTIAL_WEAPONS_PROFICIENCY = "Martial weapons"
