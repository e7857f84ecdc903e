"""SQLite persistence for character snapshots.

Each character is stored as one JSON snapshot row, with a few columns
duplicated out of the snapshot for listing. On load the embedded class,
subclass, species, subspecies and origin records are refreshed from the
current reference catalog, so rules changes reach saved characters.

Storage location defaults to the ``database_path`` setting.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Generator

from pydantic import ValidationError as PydanticValidationError

from aether_sheet.core.config import get_settings
from aether_sheet.core.exceptions import StorageError
from aether_sheet.core.logging import character_context, get_logger
from aether_sheet.engine.catalog import ReferenceCatalog
from aether_sheet.models.character import Character

logger = get_logger(__name__)


INVALID_CHARACTER_LABEL = "Invalid Character Data"


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class CharacterRecord:
    """Row summary of a stored character.

    Attributes:
        id: Character id.
        name: Character name.
        level: Total level at the last save.
        class_name: Starting class name.
        species_name: Species name.
        created_at: When the character was first saved.
        updated_at: When the character was last saved.
    """

    id: str
    name: str
    level: int
    class_name: str
    species_name: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> CharacterRecord:
        """Create from database row."""
        return cls(
            id=row[0],
            name=row[1],
            level=row[2],
            class_name=row[3],
            species_name=row[4],
            created_at=datetime.fromisoformat(row[5]),
            updated_at=datetime.fromisoformat(row[6]),
        )


@dataclass
class InvalidCharacterRecord:
    """Placeholder for a stored row whose snapshot no longer validates.

    Listing returns these instead of failing, so one bad row cannot hide
    the rest.
    """

    id: str
    error: str
    label: str = INVALID_CHARACTER_LABEL


# =============================================================================
# Hydration
# =============================================================================


def hydrate_character(character: Character, catalog: ReferenceCatalog) -> Character:
    """Replace embedded reference records with the catalog's current versions.

    Records missing from the catalog keep their embedded copy.

    Returns:
        A new Character; the input is unchanged.
    """
    hydrated = character.model_copy(deep=True)

    fresh_class = catalog.character_class(hydrated.character_class.id)
    if fresh_class is not None:
        hydrated.character_class = fresh_class

    classes = []
    for entry in hydrated.classes:
        update: dict[str, Any] = {}
        entry_class = catalog.character_class(entry.class_id)
        if entry_class is not None:
            update["character_class"] = entry_class
        if entry.subclass_id:
            entry_subclass = catalog.subclass(entry.subclass_id)
            if entry_subclass is not None:
                update["subclass"] = entry_subclass
        classes.append(entry.model_copy(update=update))
    hydrated.classes = classes

    fresh_species = catalog.species(hydrated.species.id)
    if fresh_species is not None:
        hydrated.species = fresh_species

    if hydrated.subspecies is not None:
        fresh_subspecies = catalog.subspecies(hydrated.subspecies.id)
        if fresh_subspecies is not None:
            hydrated.subspecies = fresh_subspecies

    fresh_origin = catalog.origin(hydrated.origin.id)
    if fresh_origin is not None:
        hydrated.origin = fresh_origin

    return hydrated


# =============================================================================
# Store
# =============================================================================


class CharacterStore:
    """SQLite store of character snapshots."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path | None = None) -> None:
        """Initialize the store.

        Args:
            db_path: Path to database file. If None, uses the configured path.
        """
        if db_path is None:
            self.db_path = get_settings().storage.database_path
        else:
            self.db_path = Path(db_path)

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

        logger.info("Character store initialized", path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as exc:
            raise StorageError(
                f"Cannot open character store: {exc}",
                details={"path": str(self.db_path)},
            ) from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS characters (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    level INTEGER NOT NULL,
                    class_name TEXT NOT NULL,
                    species_name TEXT NOT NULL,
                    payload_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_characters_updated
                ON characters(updated_at DESC)
            """)

            cursor.execute("""
                INSERT OR REPLACE INTO schema_version (version) VALUES (?)
            """, (self.SCHEMA_VERSION,))

    # =========================================================================
    # Character Operations
    # =========================================================================

    def save(self, character: Character) -> CharacterRecord:
        """Insert or replace a character snapshot, stamping ``updated_at``.

        Args:
            character: Character to save. Its ``updated_at`` is refreshed.

        Returns:
            The saved row summary.

        Raises:
            StorageError: If the write fails.
        """
        character.touch()
        payload = character.model_dump_json()

        try:
            with self._get_connection() as conn:
                conn.execute("""
                    INSERT INTO characters
                    (id, name, level, class_name, species_name, payload_json,
                     created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        name = excluded.name,
                        level = excluded.level,
                        class_name = excluded.class_name,
                        species_name = excluded.species_name,
                        payload_json = excluded.payload_json,
                        updated_at = excluded.updated_at
                """, (
                    character.id,
                    character.name,
                    character.level,
                    character.character_class.name,
                    character.species.name,
                    payload,
                    character.created_at.isoformat(),
                    character.updated_at.isoformat(),
                ))
        except sqlite3.Error as exc:
            raise StorageError(
                f"Failed to save character: {exc}",
                character_id=character.id,
            ) from exc

        logger.info("Character saved", character=character)
        return CharacterRecord(
            id=character.id,
            name=character.name,
            level=character.level,
            class_name=character.character_class.name,
            species_name=character.species.name,
            created_at=character.created_at,
            updated_at=character.updated_at,
        )

    def load(
        self,
        character_id: str,
        catalog: ReferenceCatalog | None = None,
    ) -> Character | None:
        """Load a character, hydrated against ``catalog`` when given.

        Returns:
            The character, or None if no row has this id.

        Raises:
            StorageError: If the stored snapshot is invalid.
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT payload_json FROM characters WHERE id = ?", (character_id,)
            ).fetchone()

        if row is None:
            return None
        with character_context(character_id):
            character = self._parse(character_id, row[0])
            if catalog is not None:
                character = hydrate_character(character, catalog)
            logger.debug("Character loaded", hydrated=catalog is not None)
        return character

    def list_characters(
        self,
        catalog: ReferenceCatalog | None = None,
    ) -> list[Character | InvalidCharacterRecord]:
        """Load every character, most recently updated first.

        Rows that no longer validate come back as InvalidCharacterRecord.
        """
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT id, payload_json FROM characters ORDER BY updated_at DESC"
            ).fetchall()

        results: list[Character | InvalidCharacterRecord] = []
        for row in rows:
            try:
                character = self._parse(row[0], row[1])
            except StorageError as exc:
                results.append(InvalidCharacterRecord(id=row[0], error=exc.message))
                continue
            results.append(
                hydrate_character(character, catalog) if catalog is not None else character
            )
        return results

    def get_records(self) -> list[CharacterRecord]:
        """Row summaries of every stored character, most recent first."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT id, name, level, class_name, species_name, created_at, updated_at
                FROM characters ORDER BY updated_at DESC
            """).fetchall()
        return [CharacterRecord.from_row(tuple(row)) for row in rows]

    def delete(self, character_id: str) -> bool:
        """Delete a character.

        Returns:
            True if deleted, False if not found.
        """
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM characters WHERE id = ?", (character_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("Character deleted", character_id=character_id)
        return deleted

    def count(self) -> int:
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM characters").fetchone()[0]

    @staticmethod
    def _parse(character_id: str, payload: str) -> Character:
        try:
            return Character.model_validate_json(payload)
        except PydanticValidationError as exc:
            logger.warning(
                "Invalid stored character",
                character_id=character_id,
                errors=exc.error_count(),
            )
            raise StorageError(
                f"Stored character is invalid: {exc.error_count()} validation error(s)",
                character_id=character_id,
            ) from exc


# =============================================================================
# Singleton Instance
# =============================================================================


_store_instance: CharacterStore | None = None


def get_character_store() -> CharacterStore:
    """Get the global character store instance."""
    global _store_instance

    if _store_instance is None:
        _store_instance = CharacterStore()

    return _store_instance


__all__ = [
    "INVALID_CHARACTER_LABEL",
    "CharacterRecord",
    "InvalidCharacterRecord",
    "hydrate_character",
    "CharacterStore",
    "get_character_store",
]
