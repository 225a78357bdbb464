"""
Cross-component conflict and synergy rules.

These rules look at the whole selection set plus context at once and
produce request-scoped Conflict and Synergy records. Every matching rule
fires.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from domain.models import AnalysisContext, Conflict, ConflictType, Severity, Synergy
from domain.rules import selection as sel
from domain.rules.selection import SelectionView

ConflictPredicate = Callable[[SelectionView, AnalysisContext], bool]


@dataclass(frozen=True)
class ConflictRule:
    key: str
    predicate: ConflictPredicate
    generate: Callable[[SelectionView, AnalysisContext], Conflict]


@dataclass(frozen=True)
class SynergyRule:
    key: str
    predicate: ConflictPredicate
    generate: Callable[[SelectionView, AnalysisContext], Synergy]


# Which slots an analysis of each slot depends on
COMPONENT_DEPENDENCIES: Dict[str, Tuple[str, ...]] = {
    "energy": ("duration", "focus", "equipment"),
    "soreness": ("focus", "areas", "duration"),
    "focus": ("equipment", "duration", "energy"),
    "duration": ("energy", "focus", "equipment"),
    "equipment": ("focus", "duration"),
    "areas": ("soreness", "focus"),
}


def _conflict(key, components, type, severity, description, resolution, confidence, **metadata):
    return Conflict(
        id=f"conflict_{key}",
        components=list(components),
        type=type,
        severity=severity,
        description=description,
        suggested_resolution=resolution,
        confidence=confidence,
        metadata=metadata,
    )


# =============================================================================
# Conflicts
# =============================================================================


def _energy_duration(s: SelectionView, context):
    return _conflict(
        "energy_duration",
        ("energy", "duration"),
        ConflictType.EFFICIENCY,
        Severity.HIGH,
        "Low energy with a long workout will likely lead to early fatigue.",
        "Reduce the duration to 30-45 minutes or choose a lighter focus.",
        0.9,
        energy=s.energy,
        duration=s.duration,
    )


def _energy_intensity(s: SelectionView, context):
    return _conflict(
        "energy_intensity",
        ("energy", "focus"),
        ConflictType.SAFETY,
        Severity.HIGH,
        f"Low energy with a {s.focus} focus increases the risk of injury.",
        "Switch to a recovery, mobility or flexibility focus today.",
        0.95,
        energy=s.energy,
        focus=s.focus,
    )


def _soreness_target_overlap(s: SelectionView, context):
    overlap = s.overlapping_areas()
    return _conflict(
        "soreness_target_overlap",
        ("soreness", "areas"),
        ConflictType.SAFETY,
        Severity.MEDIUM,
        f"Training sore areas ({', '.join(overlap)}) can delay recovery.",
        "Target different areas or reduce intensity for the sore ones.",
        0.85,
        overlapping_areas=overlap,
    )


def _soreness_intensity(s: SelectionView, context):
    return _conflict(
        "soreness_intensity",
        ("soreness", "focus"),
        ConflictType.SAFETY,
        Severity.HIGH,
        f"Widespread soreness with a demanding {s.focus} focus.",
        "Choose a recovery or mobility session to let your muscles repair.",
        0.9,
        affected_areas=list(s.soreness),
    )


def _strength_short(s: SelectionView, context):
    return _conflict(
        "strength_short_duration",
        ("focus", "duration"),
        ConflictType.EFFICIENCY,
        Severity.MEDIUM,
        "Strength training needs more than 30 minutes for warm-up and proper rest between sets.",
        "Extend the session to 45 minutes or more, or switch to a circuit format.",
        0.8,
    )


def _strength_no_equipment(s: SelectionView, context):
    return _conflict(
        "strength_no_equipment",
        ("focus", "equipment"),
        ConflictType.EFFICIENCY,
        Severity.MEDIUM,
        "Strength focus without any equipment limits progressive overload.",
        "Add resistance equipment or use bodyweight progressions.",
        0.75,
    )


def _equipment_duration(s: SelectionView, context):
    return _conflict(
        "equipment_duration",
        ("equipment", "duration"),
        ConflictType.EFFICIENCY,
        Severity.MEDIUM,
        "Many pieces of equipment in a short session leads to lost time on setup.",
        "Select fewer items or extend the workout.",
        0.8,
        equipment_count=s.equipment_count,
    )


def _beginner_intensity(s: SelectionView, context):
    return _conflict(
        "beginner_intensity",
        ("focus", "user_profile"),
        ConflictType.SAFETY,
        Severity.MEDIUM,
        f"A {s.focus} focus is very demanding when you are new to exercise.",
        "Start with foundational strength or general fitness work.",
        0.85,
    )


def _evening_intensity(s: SelectionView, context):
    return _conflict(
        "evening_intensity",
        ("focus", "duration", "time_of_day"),
        ConflictType.USER_EXPERIENCE,
        Severity.LOW,
        "A long, intense evening session may disrupt your sleep.",
        "Shorten the session or move intense training earlier in the day.",
        0.7,
    )


def _weight_loss_strength(s: SelectionView, context):
    return _conflict(
        "weight_loss_goal_alignment",
        ("focus", "duration", "user_profile"),
        ConflictType.GOAL_ALIGNMENT,
        Severity.LOW,
        "Long strength sessions are not the most efficient route to weight loss.",
        "Mix in cardio intervals or a circuit format to increase energy expenditure.",
        0.65,
    )


CONFLICT_RULES = (
    ConflictRule(
        "energy_duration",
        lambda s, c: s.low_energy and (s.duration or 0) > 60,
        _energy_duration,
    ),
    ConflictRule(
        "energy_intensity",
        lambda s, c: s.low_energy and s.focus in ("strength", "power"),
        _energy_intensity,
    ),
    ConflictRule(
        "soreness_target_overlap",
        lambda s, c: bool(s.overlapping_areas()),
        _soreness_target_overlap,
    ),
    ConflictRule(
        "soreness_intensity",
        lambda s, c: s.soreness_count >= 3 and s.focus in ("strength", "power", "endurance"),
        _soreness_intensity,
    ),
    ConflictRule(
        "strength_short_duration",
        lambda s, c: s.focus == "strength" and 0 < (s.duration or 0) < 30,
        _strength_short,
    ),
    ConflictRule(
        "strength_no_equipment",
        lambda s, c: s.focus == "strength" and s.equipment == (),
        _strength_no_equipment,
    ),
    ConflictRule(
        "equipment_duration",
        lambda s, c: s.equipment_count > 4 and 0 < (s.duration or 0) < 45,
        _equipment_duration,
    ),
    ConflictRule(
        "beginner_intensity",
        lambda s, c: sel.is_new_to_exercise(c) and s.focus in ("power", "endurance"),
        _beginner_intensity,
    ),
    ConflictRule(
        "evening_intensity",
        lambda s, c: sel.time_of_day(c) == "evening"
        and s.focus in ("power", "strength")
        and (s.duration or 0) > 60,
        _evening_intensity,
    ),
    ConflictRule(
        "weight_loss_goal_alignment",
        lambda s, c: "weight_loss" in [g.replace(" ", "_") for g in sel.goals(c)]
        and s.focus == "strength"
        and (s.duration or 0) > 60,
        _weight_loss_strength,
    ),
)


# =============================================================================
# Synergies
# =============================================================================


SYNERGY_RULES = (
    SynergyRule(
        "strength_dumbbells",
        lambda s, c: s.focus == "strength" and s.has_equipment("Dumbbells"),
        lambda s, c: Synergy(
            id="synergy_strength_dumbbells",
            components=["focus", "equipment"],
            type="performance",
            description="Dumbbells are an excellent match for strength training.",
            benefit="Versatile loading for both compound and isolation work.",
            confidence=0.9,
        ),
    ),
    SynergyRule(
        "recovery_foam_roller",
        lambda s, c: s.focus == "recovery"
        and s.soreness_count > 0
        and s.has_equipment("Foam Roller"),
        lambda s, c: Synergy(
            id="synergy_recovery_foam_roller",
            components=["focus", "soreness", "equipment"],
            type="recovery",
            description="Recovery focus with a foam roller directly addresses your soreness.",
            benefit="Myofascial release speeds up recovery of the sore areas.",
            confidence=0.95,
        ),
    ),
    SynergyRule(
        "cardio_moderate_session",
        lambda s, c: s.focus == "cardio"
        and s.energy is not None and s.energy >= 3
        and 20 <= (s.duration or 0) <= 45,
        lambda s, c: Synergy(
            id="synergy_cardio_moderate_session",
            components=["focus", "energy", "duration"],
            type="performance",
            description="Good energy and a moderate duration suit cardio training.",
            benefit="Enough energy to sustain effort for the whole session.",
            confidence=0.8,
        ),
    ),
)
