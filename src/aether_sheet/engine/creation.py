"""Character creation from wizard selections.

A CharacterDraft holds what the player has picked so far. ``step_status``
reports which wizard steps are complete so a UI can gate its forward
button, and ``build_character`` turns a complete draft into a level-1
Character with every reference record embedded.
"""

from __future__ import annotations

import re
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from aether_sheet.core.exceptions import ValidationError
from aether_sheet.core.logging import get_logger
from aether_sheet.engine.abilities import (
    StandardArrayAssignment,
    apply_species_increases,
    is_complete_standard_array,
)
from aether_sheet.engine.catalog import ReferenceCatalog
from aether_sheet.engine.equipment import SubSelectionKey, resolve
from aether_sheet.engine.spellcasting import SpellSelection, spell_slot_table
from aether_sheet.engine.stats import armor_class, first_level_hit_points
from aether_sheet.models.character import Character, ClassLevel, Personality
from aether_sheet.models.enums import Ability, Alignment, CatalogKind, CreationStep
from aether_sheet.models.reference import CharacterClass, Subclass


logger = get_logger(__name__)

REQUIRED_STEPS: tuple[CreationStep, ...] = tuple(
    step for step in CreationStep if step != CreationStep.SPELLS
)
"""Steps that must be complete before a character can be built.

Spell picks may be left short; the spells step only reports it.
"""


class CharacterDraft(BaseModel):
    """Selections made in the creation wizard.

    Weapon sub-selections are keyed ``"slot-option-item"`` so the draft
    stays JSON-friendly between wizard pages.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    name: str = ""
    class_id: str | None = None
    subclass_id: str | None = None
    species_id: str | None = None
    subspecies_id: str | None = None
    origin_id: str | None = None
    ability_assignments: dict[Ability, int] = Field(default_factory=dict)
    selected_skills: list[str] = Field(default_factory=list)
    equipment_choices: dict[int, int] = Field(default_factory=dict)
    weapon_sub_selections: dict[str, str] = Field(default_factory=dict)
    cantrips: list[str] = Field(default_factory=list)
    spells: list[str] = Field(default_factory=list)
    alignment: Alignment | None = None
    personality: Personality = Field(default_factory=Personality)
    notes: str = ""

    def sub_selection_map(self) -> dict[SubSelectionKey, str]:
        """Weapon sub-selections keyed by ``(slot, option, item)`` tuples."""
        parsed: dict[SubSelectionKey, str] = {}
        for key, weapon in self.weapon_sub_selections.items():
            parts = key.split("-")
            if len(parts) == 3 and all(part.isdigit() for part in parts):
                parsed[(int(parts[0]), int(parts[1]), int(parts[2]))] = weapon
        return parsed

    def set_sub_selection(self, key: SubSelectionKey, weapon: str) -> None:
        slot, option, item = key
        self.weapon_sub_selections = {
            **self.weapon_sub_selections,
            f"{slot}-{option}-{item}": weapon,
        }


def generate_character_id(name: str) -> str:
    """Build an id like ``char_mira_3f9a1`` from a character name.

    The name is lowercased and stripped to at most 20 letters and digits.
    """
    sanitized = re.sub(r"[^a-z0-9]", "", name.lower())[:20]
    return f"char_{sanitized}_{uuid4().hex[:5]}"


# =============================================================================
# Step Completion
# =============================================================================


def class_skill_count(draft: CharacterDraft, catalog: ReferenceCatalog) -> int:
    """Number of selected skills that count against the class's choice."""
    character_class = catalog.character_class(draft.class_id)
    if character_class is None:
        return 0
    options = set(character_class.skill_choices.options)
    return len({skill for skill in draft.selected_skills if skill in options})


def starting_subclasses(
    character_class: CharacterClass | None,
    catalog: ReferenceCatalog,
) -> list[Subclass]:
    """Subclasses of ``character_class`` that are picked at level 1."""
    if character_class is None:
        return []
    return [
        record
        for record in catalog.list(CatalogKind.SUBCLASS, parent_id=character_class.id)
        if isinstance(record, Subclass) and record.subclass_level <= 1
    ]


def _chosen_subclass(draft: CharacterDraft, catalog: ReferenceCatalog) -> Subclass | None:
    options = starting_subclasses(catalog.character_class(draft.class_id), catalog)
    return next((s for s in options if s.id == draft.subclass_id), None)


def spell_selection(draft: CharacterDraft, catalog: ReferenceCatalog) -> SpellSelection:
    """Level-1 spell selection for the draft's class, seeded with its picks."""
    return SpellSelection.for_class(
        catalog.character_class(draft.class_id),
        1,
        draft.cantrips,
        draft.spells,
    )


def step_status(draft: CharacterDraft, catalog: ReferenceCatalog) -> dict[CreationStep, bool]:
    """Report completion of every wizard step.

    Args:
        draft: The selections so far.
        catalog: Reference catalog the ids point into.

    Returns:
        Mapping of step to whether it is complete.
    """
    character_class = catalog.character_class(draft.class_id)
    species = catalog.species(draft.species_id)
    origin = catalog.origin(draft.origin_id)

    species_done = species is not None
    if species is not None and catalog.list(CatalogKind.SUBSPECIES, parent_id=species.id):
        subspecies = catalog.subspecies(draft.subspecies_id)
        species_done = subspecies is not None and subspecies.parent_species_id == species.id

    skills_done = False
    if character_class is not None:
        required = min(
            character_class.skill_choices.choose,
            len(character_class.skill_choices.options),
        )
        skills_done = class_skill_count(draft, catalog) == required

    equipment_done = False
    if character_class is not None and origin is not None:
        equipment_done = resolve(
            character_class,
            origin,
            draft.equipment_choices,
            draft.sub_selection_map(),
        ).is_complete

    class_done = character_class is not None
    if starting_subclasses(character_class, catalog):
        class_done = _chosen_subclass(draft, catalog) is not None

    selection = spell_selection(draft, catalog)
    return {
        CreationStep.CLASS: class_done,
        CreationStep.SPECIES: species_done,
        CreationStep.ORIGIN: origin is not None,
        CreationStep.ABILITY_SCORES: is_complete_standard_array(draft.ability_assignments),
        CreationStep.SKILLS: skills_done,
        CreationStep.SPELLS: selection.is_skippable or selection.is_complete(),
        CreationStep.EQUIPMENT: equipment_done,
        CreationStep.DETAILS: bool(draft.name.strip()),
    }


def is_ready(draft: CharacterDraft, catalog: ReferenceCatalog) -> bool:
    """Whether every required step is complete."""
    status = step_status(draft, catalog)
    return all(status[step] for step in REQUIRED_STEPS)


# =============================================================================
# Build
# =============================================================================


def build_character(draft: CharacterDraft, catalog: ReferenceCatalog) -> Character:
    """Build the level-1 character described by ``draft``.

    Final scores are the assigned scores plus species and subspecies
    increases. HP is the full hit die plus CON, AC is unarmored, skills are
    the origin's plus the selected class options, and spell slots start full.

    Raises:
        ValidationError: If a required step is incomplete.
    """
    status = step_status(draft, catalog)
    incomplete = [step.value for step in REQUIRED_STEPS if not status[step]]
    if incomplete:
        raise ValidationError(
            "Character draft is incomplete",
            field_name="draft",
            details={"incomplete_steps": incomplete},
        )

    character_class = catalog.character_class(draft.class_id)
    species = catalog.species(draft.species_id)
    subspecies = catalog.subspecies(draft.subspecies_id)
    origin = catalog.origin(draft.origin_id)
    if character_class is None or species is None or origin is None:
        raise ValidationError(
            "Character draft references unknown records",
            field_name="draft",
            details={
                "class_id": draft.class_id,
                "species_id": draft.species_id,
                "origin_id": draft.origin_id,
            },
        )
    if subspecies is not None and subspecies.parent_species_id != species.id:
        subspecies = None

    base_scores = StandardArrayAssignment(draft.ability_assignments).to_scores()
    final_scores = apply_species_increases(base_scores, species, subspecies)

    max_hp = first_level_hit_points(
        character_class.hit_die, final_scores.modifier(Ability.CON)
    )
    equipment = resolve(
        character_class, origin, draft.equipment_choices, draft.sub_selection_map()
    ).items
    class_options = set(character_class.skill_choices.options)
    chosen_skills = [skill for skill in draft.selected_skills if skill in class_options]
    skills = list(dict.fromkeys([*origin.skill_proficiencies, *chosen_skills]))
    selection = spell_selection(draft, catalog)

    subclass = _chosen_subclass(draft, catalog)
    classes = [
        ClassLevel(
            character_class=character_class,
            level=1,
            subclass_id=subclass.id if subclass else None,
            subclass=subclass,
        )
    ]
    character = Character(
        id=generate_character_id(draft.name),
        name=draft.name.strip(),
        character_class=character_class,
        classes=classes,
        species=species,
        subspecies=subspecies,
        origin=origin,
        base_ability_scores=base_scores,
        ability_scores=final_scores,
        current_hit_points=max_hp,
        max_hit_points=max_hp,
        armor_class=armor_class(None, final_scores.modifier(Ability.DEX)),
        equipment=equipment,
        skill_proficiencies=skills,
        cantrips=selection.cantrips,
        spells=selection.spells,
        spell_slots=spell_slot_table(classes),
        alignment=draft.alignment,
        personality=draft.personality,
        notes=draft.notes,
    )
    logger.info(
        "Character built",
        character_id=character.id,
        class_id=character_class.id,
        species_id=species.id,
        max_hit_points=max_hp,
    )
    return character


__all__ = [
    "REQUIRED_STEPS",
    "CharacterDraft",
    "generate_character_id",
    "class_skill_count",
    "starting_subclasses",
    "spell_selection",
    "step_status",
    "is_ready",
    "build_character",
]
