"""Aether Character Sheet - D&D 5E character derivation and progression.

Turns reference data (species, classes, origins, gear, spells) and player
choices into playable character sheets, and moves those characters through
level-ups and rests.

Example:
    >>> from aether_sheet import ReferenceCatalog, CharacterDraft, build_character
    >>>
    >>> catalog = ReferenceCatalog.from_json_file("data/reference.json")
    >>> draft = CharacterDraft(name="Mira", class_id="wizard", ...)
    >>> hero = build_character(draft, catalog)
    >>> derive_stats(hero, catalog).armor_class

Modules:
    core: Configuration, logging, constants and base exceptions.
    models: Pydantic V2 schemas for reference records and characters.
    engine: Derivation, creation, level-up, rests and dice.
    storage: SQLite character persistence.
"""

from __future__ import annotations

# Core
from aether_sheet.core.config import Settings, get_settings
from aether_sheet.core.exceptions import AetherError
from aether_sheet.core.logging import configure_logging, get_logger, setup_logging

# Models
from aether_sheet.models import (
    Ability,
    AbilityScores,
    Character,
    CharacterClass,
    ClassLevel,
    Origin,
    Skill,
    Species,
)

# Engine
from aether_sheet.engine import (
    CharacterDraft,
    DerivedStats,
    DiceRoller,
    LevelUpSession,
    ReferenceCatalog,
    ShortRestSession,
    build_character,
    derive_stats,
    long_rest,
)

# Storage
from aether_sheet.storage import CharacterStore, get_character_store


__version__ = "0.1.0"

__all__ = [
    # Core
    "Settings",
    "get_settings",
    "AetherError",
    "configure_logging",
    "get_logger",
    "setup_logging",
    # Models
    "Ability",
    "Skill",
    "AbilityScores",
    "Character",
    "CharacterClass",
    "ClassLevel",
    "Origin",
    "Species",
    # Engine
    "ReferenceCatalog",
    "DiceRoller",
    "CharacterDraft",
    "build_character",
    "DerivedStats",
    "derive_stats",
    "LevelUpSession",
    "ShortRestSession",
    "long_rest",
    # Storage
    "CharacterStore",
    "get_character_store",
    "__version__",
]
