"""
Normalization of raw selection slot values.

The form layer hands the engine either plain values or structured
{rating, categories} / {totalDuration} objects depending on the widget.
Rules only ever see the plain values produced here.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from domain.models import AnalysisContext, DurationSelection, RatedSelection, WorkoutSelections


def energy_level(raw: Any) -> Optional[float]:
    """Energy rating as a number, or None when not selected."""
    if raw is None:
        return None
    if isinstance(raw, RatedSelection):
        return raw.rating
    if isinstance(raw, dict):
        return raw.get("rating")
    return raw


def soreness_areas(raw: Any) -> Optional[List[str]]:
    """Sore areas as a list, or None when not selected."""
    if raw is None:
        return None
    if isinstance(raw, RatedSelection):
        return list(raw.categories)
    if isinstance(raw, dict):
        return list(raw.get("categories") or [])
    if isinstance(raw, str):
        return [raw]
    return list(raw)


def focus_name(raw: Any) -> Optional[str]:
    """Lower-cased focus name; '' when explicitly empty, None when not selected."""
    if raw is None:
        return None
    if isinstance(raw, RatedSelection):
        return raw.categories[0].strip().lower() if raw.categories else ""
    if isinstance(raw, dict):
        value = raw.get("focus") or next(iter(raw.get("categories") or []), "")
        return str(value).strip().lower()
    return str(raw).strip().lower()


def duration_minutes(raw: Any) -> Optional[float]:
    """Duration in minutes, or None when not selected."""
    if raw is None:
        return None
    if isinstance(raw, DurationSelection):
        return raw.total_duration
    if isinstance(raw, dict):
        return raw.get("totalDuration", raw.get("total_duration"))
    return raw


def equipment_items(raw: Any) -> Optional[List[str]]:
    """Equipment as a list, or None when not selected."""
    if raw is None:
        return None
    if isinstance(raw, RatedSelection):
        return list(raw.categories)
    if isinstance(raw, dict):
        return list(raw.get("categories") or [])
    if isinstance(raw, str):
        return [raw]
    return list(raw)


# =============================================================================
# Selection view
# =============================================================================


@dataclass(frozen=True)
class SelectionView:
    """Plain-value view over every slot of a WorkoutSelections."""

    energy: Optional[float]
    soreness: Tuple[str, ...]
    focus: Optional[str]
    duration: Optional[float]
    equipment: Optional[Tuple[str, ...]]
    areas: Tuple[str, ...]

    @property
    def soreness_count(self) -> int:
        return len(self.soreness)

    @property
    def equipment_count(self) -> int:
        return len(self.equipment or ())

    @property
    def low_energy(self) -> bool:
        return self.energy is not None and self.energy <= 2

    @property
    def high_energy(self) -> bool:
        return self.energy is not None and self.energy >= 4

    def has_equipment(self, name: str) -> bool:
        return name in (self.equipment or ())

    def overlapping_areas(self) -> List[str]:
        """Sore areas that are also target areas, in soreness order."""
        targets = set(self.areas)
        return [area for area in self.soreness if area in targets]


def view(selections: WorkoutSelections) -> SelectionView:
    """Normalize every slot of `selections`."""
    equipment = equipment_items(selections.equipment)
    return SelectionView(
        energy=energy_level(selections.energy),
        soreness=tuple(soreness_areas(selections.soreness) or ()),
        focus=focus_name(selections.focus),
        duration=duration_minutes(selections.duration),
        equipment=tuple(equipment) if equipment is not None else None,
        areas=tuple(selections.areas or ()),
    )


def selections_of(context: AnalysisContext) -> SelectionView:
    return view(context.current_selections)


# =============================================================================
# Profile and environment accessors
# =============================================================================


def fitness_level(context: AnalysisContext) -> str:
    if context.user_profile is None:
        return ""
    return context.user_profile.fitness_level.strip().lower()


def is_new_to_exercise(context: AnalysisContext) -> bool:
    return fitness_level(context) == "new to exercise"


def is_advanced_athlete(context: AnalysisContext) -> bool:
    return fitness_level(context) == "advanced athlete"


def is_beginner(context: AnalysisContext) -> bool:
    level = fitness_level(context)
    return "beginner" in level or "novice" in level


def goals(context: AnalysisContext) -> List[str]:
    if context.user_profile is None:
        return []
    return [goal.strip().lower() for goal in context.user_profile.goals]


def time_of_day(context: AnalysisContext) -> Optional[str]:
    value = context.environmental_factors.time_of_day
    return value.strip().lower() if value else None


def location(context: AnalysisContext) -> Optional[str]:
    value = context.environmental_factors.location
    return value.strip().lower() if value else None


def history_for(context: AnalysisContext, domain: str) -> list:
    """Session history entries concerning one domain, oldest first."""
    return [entry for entry in context.session_history if entry.component == domain]
