"""Starting equipment resolution.

A class grants fixed starting equipment plus a series of choice slots,
each offering option bundles. Some bundle items are generic placeholders
such as "Martial melee weapon" that must be bound to a concrete weapon.

Selections are keyed the way the creation wizard records them:

- ``choice_selections``: slot index to chosen option index.
- ``sub_selections``: ``(slot_index, option_index, item_index)`` to weapon name.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from aether_sheet.core.constants import GENERIC_WEAPON_CHOICES
from aether_sheet.core.logging import get_logger
from aether_sheet.models.reference import CharacterClass, Origin


logger = get_logger(__name__)

SubSelectionKey = tuple[int, int, int]


def _generic_label(item: str) -> str | None:
    lowered = item.lower()
    for label in GENERIC_WEAPON_CHOICES:
        if label in lowered:
            return label
    return None


def needs_sub_selection(item: str) -> bool:
    """Whether ``item`` is a generic weapon placeholder.

    Example:
        >>> needs_sub_selection("Martial melee weapon")
        True
        >>> needs_sub_selection("Longsword")
        False
    """
    return _generic_label(item) is not None


def weapon_choices(item: str) -> list[str]:
    """Concrete weapons a generic placeholder may resolve to.

    Returns an empty list for items that are not placeholders.
    """
    label = _generic_label(item)
    return list(GENERIC_WEAPON_CHOICES[label]) if label else []


@dataclass(frozen=True)
class SlotStatus:
    """Completion of one equipment-choice slot.

    Attributes:
        slot_index: Index of the slot in the class's choices.
        description: Slot description.
        selected_option: Chosen option index, if any.
        missing_sub_selections: Keys of placeholders still unbound.
    """

    slot_index: int
    description: str
    selected_option: int | None
    missing_sub_selections: tuple[SubSelectionKey, ...] = ()

    @property
    def is_satisfied(self) -> bool:
        return self.selected_option is not None and not self.missing_sub_selections


@dataclass
class EquipmentResolution:
    """Result of resolving a class's starting equipment."""

    items: list[str]
    slots: list[SlotStatus] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return all(slot.is_satisfied for slot in self.slots)

    @property
    def unresolved_items(self) -> list[str]:
        """Placeholder labels left in ``items`` because no weapon was bound."""
        return [item for item in self.items if needs_sub_selection(item)]


def resolve(
    character_class: CharacterClass | None,
    origin: Origin | None,
    choice_selections: Mapping[int, int] | None = None,
    sub_selections: Mapping[SubSelectionKey, str] | None = None,
) -> EquipmentResolution:
    """Resolve starting equipment into a flat list with per-slot status.

    The list is origin equipment, then class starting equipment, then one
    bundle per chosen slot. Placeholders are replaced by their
    sub-selection when it names a weapon from the placeholder's category;
    unbound or mismatched ones stay as their label. A slot with an
    out-of-range option index counts as unselected.

    Args:
        character_class: The starting class, or None if not chosen yet.
        origin: The origin, or None if not chosen yet.
        choice_selections: Slot index to option index.
        sub_selections: (slot, option, item) to concrete weapon name.

    Returns:
        EquipmentResolution with the items and one SlotStatus per slot.
    """
    choice_selections = choice_selections or {}
    sub_selections = sub_selections or {}

    items: list[str] = []
    if origin is not None:
        items.extend(origin.equipment)
    if character_class is None:
        return EquipmentResolution(items=items)
    items.extend(character_class.starting_equipment)

    slots: list[SlotStatus] = []
    for slot_index, choice in enumerate(character_class.equipment_choices):
        option_index = choice_selections.get(slot_index)
        if option_index is None or not 0 <= option_index < len(choice.options):
            slots.append(SlotStatus(slot_index, choice.description, None))
            continue

        missing: list[SubSelectionKey] = []
        for item_index, item in enumerate(choice.options[option_index]):
            if not needs_sub_selection(item):
                items.append(item)
                continue
            key = (slot_index, option_index, item_index)
            bound = sub_selections.get(key)
            if bound in weapon_choices(item):
                items.append(bound)
            else:
                missing.append(key)
                items.append(item)

        slots.append(SlotStatus(slot_index, choice.description, option_index, tuple(missing)))

    resolution = EquipmentResolution(items=items, slots=slots)
    logger.debug(
        "Equipment resolved",
        class_id=character_class.id,
        items=len(items),
        complete=resolution.is_complete,
    )
    return resolution


__all__ = [
    "SubSelectionKey",
    "needs_sub_selection",
    "weapon_choices",
    "SlotStatus",
    "EquipmentResolution",
    "resolve",
]
