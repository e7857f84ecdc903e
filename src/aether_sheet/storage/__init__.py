"""Storage module for character persistence.

Provides SQLite-based storage for saved characters, hydrated against the
reference catalog on load.
"""

from aether_sheet.storage.repository import (
    CharacterRecord,
    CharacterStore,
    InvalidCharacterRecord,
    get_character_store,
    hydrate_character,
)

__all__ = [
    "CharacterRecord",
    "CharacterStore",
    "InvalidCharacterRecord",
    "get_character_store",
    "hydrate_character",
]
