"""Read-only reference catalog.

The catalog is built once (from records, a mapping, or a JSON file) and
passed explicitly into every derivation call. Lookups never raise: a miss
returns None and the caller decides how to degrade.

Example:
    >>> catalog = ReferenceCatalog.from_json_file("data/srd.json")
    >>> wizard = catalog.get(CatalogKind.CLASS, "wizard")
    >>> schools = catalog.list(CatalogKind.SUBCLASS, parent_id="wizard")
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError

from aether_sheet.core.config import get_settings
from aether_sheet.core.exceptions import CatalogError, ConfigurationError
from aether_sheet.core.logging import get_logger
from aether_sheet.models.enums import CatalogKind
from aether_sheet.models.reference import (
    RECORD_TYPES,
    Armor,
    CatalogRecord,
    CharacterClass,
    Origin,
    Species,
    Subclass,
    Subspecies,
    Weapon,
)


logger = get_logger(__name__)

RecordT = TypeVar("RecordT", bound=CatalogRecord)

# Alternative top-level keys accepted in catalog files
_KIND_ALIASES: dict[str, CatalogKind] = {
    "species": CatalogKind.SPECIES,
    "races": CatalogKind.SPECIES,
    "subspecies": CatalogKind.SUBSPECIES,
    "class": CatalogKind.CLASS,
    "classes": CatalogKind.CLASS,
    "subclass": CatalogKind.SUBCLASS,
    "subclasses": CatalogKind.SUBCLASS,
    "origin": CatalogKind.ORIGIN,
    "origins": CatalogKind.ORIGIN,
    "backgrounds": CatalogKind.ORIGIN,
    "weapon": CatalogKind.WEAPON,
    "weapons": CatalogKind.WEAPON,
    "armor": CatalogKind.ARMOR,
    "spell": CatalogKind.SPELL,
    "spells": CatalogKind.SPELL,
    "condition": CatalogKind.CONDITION,
    "conditions": CatalogKind.CONDITION,
    "equipment": CatalogKind.EQUIPMENT,
    "gear": CatalogKind.EQUIPMENT,
}


def _parent_id(record: CatalogRecord) -> str | None:
    if isinstance(record, Subspecies):
        return record.parent_species_id
    if isinstance(record, Subclass):
        return record.parent_class_id
    return None


def _normalize_name(name: str) -> str:
    return " ".join(name.lower().replace("-", " ").split())


class ReferenceCatalog:
    """Read-only lookup of reference records by kind and id."""

    def __init__(self, records: Iterable[CatalogRecord] = ()) -> None:
        tables: dict[CatalogKind, dict[str, CatalogRecord]] = {kind: {} for kind in CatalogKind}
        kinds_by_type = {record_type: kind for kind, record_type in RECORD_TYPES.items()}

        for record in records:
            kind = kinds_by_type.get(type(record))
            if kind is None:
                raise CatalogError(
                    f"Unsupported record type: {type(record).__name__}",
                    record_id=record.id,
                )
            if record.id in tables[kind]:
                raise CatalogError("Duplicate record id", kind=kind.value, record_id=record.id)
            tables[kind][record.id] = record

        self._tables: Mapping[CatalogKind, Mapping[str, CatalogRecord]] = MappingProxyType(
            {kind: MappingProxyType(table) for kind, table in tables.items()}
        )
        logger.debug(
            "Reference catalog built",
            counts={kind.value: len(table) for kind, table in tables.items() if table},
        )

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReferenceCatalog:
        """Build a catalog from a mapping of kind to a list (or id-map) of records.

        Lists are read as records carrying their own ``id``; id-keyed maps
        (as in the armor table of the exported data) get the key as id and,
        when missing, as name.

        Raises:
            CatalogError: If a kind is unknown or a record fails validation.
        """
        records: list[CatalogRecord] = []
        for key, entries in data.items():
            kind = _KIND_ALIASES.get(key.lower())
            if kind is None:
                raise CatalogError(f"Unknown catalog section: {key!r}", kind=key)
            record_type = RECORD_TYPES[kind]

            if isinstance(entries, Mapping):
                raw_entries = [
                    {"id": record_id, "name": record_id, **payload}
                    for record_id, payload in entries.items()
                ]
            else:
                raw_entries = list(entries)

            for raw in raw_entries:
                try:
                    records.append(record_type.model_validate(raw))
                except PydanticValidationError as exc:
                    raise CatalogError(
                        f"Invalid {kind.value} record: {exc.error_count()} validation error(s)",
                        kind=kind.value,
                        record_id=str(raw.get("id", "")) if isinstance(raw, Mapping) else None,
                        details={"errors": exc.errors(include_url=False)},
                    ) from exc
        return cls(records)

    @classmethod
    def from_json_file(cls, path: str | Path) -> ReferenceCatalog:
        """Load a catalog from a JSON file shaped as in ``from_dict``.

        Raises:
            CatalogError: If the file is missing, not JSON, or invalid.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise CatalogError(f"Catalog file not found: {path}") from exc
        except json.JSONDecodeError as exc:
            raise CatalogError(
                f"Catalog file is not valid JSON: {path}",
                details={"line": exc.lineno, "column": exc.colno},
            ) from exc

        if not isinstance(data, Mapping):
            raise CatalogError(f"Catalog file must hold a JSON object: {path}")

        catalog = cls.from_dict(data)
        logger.info("Reference catalog loaded", path=str(path), records=len(catalog))
        return catalog

    # =========================================================================
    # Lookup
    # =========================================================================

    def get(self, kind: CatalogKind, record_id: str | None) -> CatalogRecord | None:
        """Return the record of ``kind`` with ``record_id``, or None."""
        if not record_id:
            return None
        return self._tables[CatalogKind(kind)].get(record_id)

    def list(self, kind: CatalogKind, parent_id: str | None = None) -> list[CatalogRecord]:
        """List records of ``kind``, optionally filtered by parent id.

        The parent filter applies to subspecies (parent species) and
        subclasses (parent class); other kinds have no parent and return
        nothing when a parent is given.
        """
        records = list(self._tables[CatalogKind(kind)].values())
        if parent_id is None:
            return records
        return [record for record in records if _parent_id(record) == parent_id]

    def find_by_name(self, kind: CatalogKind, name: str) -> CatalogRecord | None:
        """Find a record by display name or id, ignoring case.

        Equipment lists store plain item names, so weapon and armor identity
        is recovered this way. Quantity prefixes such as '2 Daggers' or
        'Dagger (2)' are tolerated.
        """
        table = self._tables[CatalogKind(kind)]
        if name in table:
            return table[name]

        wanted = _strip_quantity(_normalize_name(name))
        for record in table.values():
            candidates = {_normalize_name(record.name), _normalize_name(record.id)}
            if wanted in candidates or wanted.rstrip("s") in candidates:
                return record
        return None

    # Typed shortcuts used throughout the engine

    def species(self, record_id: str | None) -> Species | None:
        return self._typed(CatalogKind.SPECIES, record_id, Species)

    def subspecies(self, record_id: str | None) -> Subspecies | None:
        return self._typed(CatalogKind.SUBSPECIES, record_id, Subspecies)

    def character_class(self, record_id: str | None) -> CharacterClass | None:
        return self._typed(CatalogKind.CLASS, record_id, CharacterClass)

    def subclass(self, record_id: str | None) -> Subclass | None:
        return self._typed(CatalogKind.SUBCLASS, record_id, Subclass)

    def origin(self, record_id: str | None) -> Origin | None:
        return self._typed(CatalogKind.ORIGIN, record_id, Origin)

    def weapon_named(self, name: str) -> Weapon | None:
        record = self.find_by_name(CatalogKind.WEAPON, name)
        return record if isinstance(record, Weapon) else None

    def armor_named(self, name: str) -> Armor | None:
        record = self.find_by_name(CatalogKind.ARMOR, name)
        return record if isinstance(record, Armor) else None

    def _typed(
        self, kind: CatalogKind, record_id: str | None, record_type: type[RecordT]
    ) -> RecordT | None:
        record = self.get(kind, record_id)
        return record if isinstance(record, record_type) else None

    def __len__(self) -> int:
        return sum(len(table) for table in self._tables.values())

    def __contains__(self, item: object) -> bool:
        if not isinstance(item, tuple) or len(item) != 2:
            return False
        kind, record_id = item
        return self.get(kind, record_id) is not None


def _strip_quantity(name: str) -> str:
    words = name.split()
    if len(words) > 1 and words[0].isdigit():
        words = words[1:]
    if len(words) > 1 and words[-1].startswith("(") and words[-1].endswith(")"):
        words = words[:-1]
    return " ".join(words)



# =============================================================================
# Singleton Instance
# =============================================================================


_catalog_instance: ReferenceCatalog | None = None


def get_reference_catalog() -> ReferenceCatalog:
    """Get the global catalog, loaded from the configured ``catalog_path``.

    Raises:
        ConfigurationError: If no catalog path is configured.
        CatalogError: If the file cannot be loaded.
    """
    global _catalog_instance

    if _catalog_instance is None:
        path = get_settings().storage.catalog_path
        if path is None:
            raise ConfigurationError(
                "No reference catalog configured",
                config_key="AETHER_CATALOG_PATH",
            )
        _catalog_instance = ReferenceCatalog.from_json_file(path)

    return _catalog_instance


__all__ = [
    "ReferenceCatalog",
    "get_reference_catalog",
]
