"""
Energy domain rules.

Energy is a 1-5 self rating. Low energy (1-2) drives most warnings; high
energy (4-5) drives encouragement and suggestions to raise intensity.
Fractional ratings are bucketed to the nearest whole level.
"""

from typing import Optional

from domain.models import AnalysisContext, EnergyMetadata, Insight, InsightType, InteractionAction
from domain.rules import selection as sel
from domain.rules.rule import DomainRuleSet, Rule, RuleGroup, make_insight

DOMAIN = "energy"

MIN_ENERGY = 1
MAX_ENERGY = 5

# Learning thresholds
MIN_PATTERN_INTERACTIONS = 3
DISMISSAL_RATE_THRESHOLD = 0.7

_DESCRIPTIONS = {
    1: "Very low energy",
    2: "Low energy",
    3: "Moderate energy",
    4: "High energy",
    5: "Very high energy",
}

_INTENSITY = {
    1: "very light",
    2: "light",
    3: "moderate",
    4: "vigorous",
    5: "maximum",
}

_BASE_DURATION = {1: 15, 2: 25, 3: 35, 4: 50, 5: 60}

_COMPATIBLE_FOCUS = {
    1: {"recovery", "flexibility", "mobility"},
    2: {"recovery", "flexibility", "mobility", "cardio"},
    3: {"recovery", "flexibility", "mobility", "cardio", "strength"},
    4: {"cardio", "strength", "power", "endurance", "flexibility", "mobility"},
    5: {"cardio", "strength", "power", "endurance", "flexibility", "mobility"},
}


# =============================================================================
# Helpers
# =============================================================================


def _level(value: float) -> int:
    return max(MIN_ENERGY, min(MAX_ENERGY, int(round(value))))


def energy_description(value: float) -> str:
    """Short label for an energy rating."""
    return _DESCRIPTIONS[_level(value)]


def recommended_intensity(value: float) -> str:
    return _INTENSITY[_level(value)]


def recommended_duration(value: float, context: Optional[AnalysisContext] = None) -> int:
    """
    Suggested session length for an energy rating.

    Args:
        value: Energy rating 1-5.
        context: Optional context; shortens the session by 20% for people new
            to exercise and lengthens it by 20% for advanced athletes.

    Returns:
        Duration in whole minutes.
    """
    minutes = float(_BASE_DURATION[_level(value)])
    if context is not None:
        if sel.is_new_to_exercise(context):
            minutes *= 0.8
        elif sel.is_advanced_athlete(context):
            minutes *= 1.2
    return int(round(minutes))


def is_energy_compatible_with_focus(value: float, focus: str) -> bool:
    return focus.strip().lower() in _COMPATIBLE_FOCUS[_level(value)]


def _metadata(value: float, **extra) -> EnergyMetadata:
    return EnergyMetadata(
        energy_level=value,
        recommended_intensity=recommended_intensity(value),
        **extra,
    )


# =============================================================================
# Validation
# =============================================================================


def validate(value: float) -> Optional[Insight]:
    if MIN_ENERGY <= value <= MAX_ENERGY:
        return None
    return make_insight(
        DOMAIN,
        "invalid_value",
        InsightType.WARNING,
        f"Invalid energy level: {value}. Energy must be between {MIN_ENERGY} and {MAX_ENERGY}.",
        "Select an energy level from 1 (very low) to 5 (very high).",
        1.0,
        actionable=False,
        metadata=EnergyMetadata(provided_value=value, expected_range=f"{MIN_ENERGY}-{MAX_ENERGY}"),
    )


# =============================================================================
# Base rules
# =============================================================================


def _critical_low(value, context):
    return make_insight(
        DOMAIN,
        "critical_low",
        InsightType.CRITICAL_WARNING,
        "Very low energy detected. Intense training now carries a real risk of injury.",
        "Choose gentle recovery work such as stretching or a light walk, or rest today.",
        0.95,
        metadata=_metadata(value, recommended_duration=recommended_duration(value, context)),
    )


def _low(value, context):
    return make_insight(
        DOMAIN,
        "low_energy",
        InsightType.WARNING,
        "Low energy level. Your body may need a lighter session today.",
        "Reduce intensity and keep the workout short.",
        0.85,
        metadata=_metadata(value, recommended_duration=recommended_duration(value, context)),
    )


def _moderate(value, context):
    return make_insight(
        DOMAIN,
        "moderate_energy",
        InsightType.OPTIMIZATION,
        "Moderate energy. Good conditions for a balanced workout.",
        "Keep intensity moderate and adjust as you warm up.",
        0.75,
        metadata=_metadata(value),
    )


def _high(value, context):
    return make_insight(
        DOMAIN,
        "high_energy",
        InsightType.ENCOURAGEMENT,
        "High energy. A great day for a challenging session.",
        "Consider progressive overload or a more demanding workout.",
        0.85,
        metadata=_metadata(value),
    )


def _maximum(value, context):
    return make_insight(
        DOMAIN,
        "maximum_energy",
        InsightType.ENCOURAGEMENT,
        "Peak energy. Make the most of it.",
        "Go for your most challenging planned workout or a personal best.",
        0.9,
        metadata=_metadata(value),
    )


# =============================================================================
# Contextual rules
# =============================================================================


def _morning_low(value, context):
    return make_insight(
        DOMAIN,
        "morning_low_energy",
        InsightType.EDUCATION,
        "Energy is often lower in the morning before the body fully wakes up.",
        "Start with a longer, gradual warm-up to raise energy naturally.",
        0.8,
        related_fields=[DOMAIN, "time_of_day"],
        metadata=_metadata(value, time_of_day="morning"),
    )


def _evening_low(value, context):
    return make_insight(
        DOMAIN,
        "evening_low_energy",
        InsightType.EDUCATION,
        "Low energy in the evening is common after a full day.",
        "Favor lower-intensity movement that will not disturb your sleep.",
        0.8,
        related_fields=[DOMAIN, "time_of_day"],
        metadata=_metadata(value, time_of_day="evening"),
    )


def _beginner_low(value, context):
    return make_insight(
        DOMAIN,
        "beginner_low_energy",
        InsightType.EDUCATION,
        "Low energy days are normal when building a new exercise habit.",
        "Showing up counts: a short, easy session still builds consistency.",
        0.9,
        related_fields=[DOMAIN, "user_profile"],
        metadata=_metadata(value),
    )


def _advanced_high(value, context):
    return make_insight(
        DOMAIN,
        "advanced_high_energy",
        InsightType.ENCOURAGEMENT,
        "High energy combined with your training experience allows for advanced work.",
        "Consider advanced techniques such as supersets or higher training volume.",
        0.85,
        related_fields=[DOMAIN, "user_profile"],
        metadata=_metadata(value),
    )


# =============================================================================
# Cross-component rules
# =============================================================================


def _long_duration_low(value, context):
    return make_insight(
        DOMAIN,
        "energy_duration_mismatch",
        InsightType.WARNING,
        "A long workout may be hard to sustain at your current energy level.",
        f"Consider shortening the session to about {recommended_duration(value, context)} minutes.",
        0.9,
        related_fields=[DOMAIN, "duration"],
        metadata=_metadata(value, recommended_duration=recommended_duration(value, context)),
    )


def _power_low(value, context):
    return make_insight(
        DOMAIN,
        "energy_power_mismatch",
        InsightType.WARNING,
        "Power training needs explosive effort that low energy cannot support safely.",
        "Switch to mobility or technique work and save power training for a fresher day.",
        0.85,
        related_fields=[DOMAIN, "focus"],
        metadata=_metadata(value),
    )


def _recovery_high(value, context):
    return make_insight(
        DOMAIN,
        "energy_underutilized",
        InsightType.OPTIMIZATION,
        "Your energy is high but the selected focus is recovery.",
        "You could use this energy for a more demanding session if you feel recovered.",
        0.7,
        related_fields=[DOMAIN, "focus"],
        metadata=_metadata(value),
    )


# =============================================================================
# Learning rules
# =============================================================================


def _low_energy_interactions(context: AnalysisContext):
    return [
        entry
        for entry in sel.history_for(context, DOMAIN)
        if isinstance(entry.value, (int, float)) and entry.value <= 2
    ]


def _dismissal_rate(context: AnalysisContext) -> float:
    entries = _low_energy_interactions(context)
    if not entries:
        return 0.0
    dismissed = sum(1 for e in entries if e.action == InteractionAction.DISMISSED)
    return dismissed / len(entries)


def _dismisses_low_energy_advice(value, context) -> bool:
    return (
        _level(value) <= 2
        and len(_low_energy_interactions(context)) >= MIN_PATTERN_INTERACTIONS
        and _dismissal_rate(context) > DISMISSAL_RATE_THRESHOLD
    )


def _dismissal_pattern(value, context):
    rate = _dismissal_rate(context)
    return make_insight(
        DOMAIN,
        "low_energy_dismissal_pattern",
        InsightType.EDUCATION,
        "You often train through low energy and skip the suggestion to ease off.",
        "Listen to your body: a lighter session on low days supports long-term progress.",
        0.8,
        metadata=_metadata(value, dismissal_rate=round(rate, 2)),
    )


def _same_hour_entries(context: AnalysisContext):
    history = sel.history_for(context, DOMAIN)
    if not history:
        return []
    hour = history[-1].timestamp.hour
    return [entry for entry in history if entry.timestamp.hour == hour]


def _consistent_high_energy_time(value, context) -> bool:
    return (
        sel.time_of_day(context) is not None
        and _level(value) >= 4
        and len(_same_hour_entries(context)) >= MIN_PATTERN_INTERACTIONS
    )


def _time_pattern(value, context):
    return make_insight(
        DOMAIN,
        "optimal_time_pattern",
        InsightType.EDUCATION,
        "Your energy tends to be high at this time of day.",
        "Schedule your most demanding workouts around this time.",
        0.75,
        related_fields=[DOMAIN, "time_of_day"],
        metadata=_metadata(
            value,
            time_of_day=sel.time_of_day(context),
            pattern_count=len(_same_hour_entries(context)),
        ),
    )


# =============================================================================
# Rule table
# =============================================================================

RULES = (
    Rule("critical_low", RuleGroup.BASE, lambda v, c: _level(v) <= 1, _critical_low),
    Rule("low_energy", RuleGroup.BASE, lambda v, c: _level(v) == 2, _low),
    Rule("moderate_energy", RuleGroup.BASE, lambda v, c: _level(v) == 3, _moderate),
    Rule("high_energy", RuleGroup.BASE, lambda v, c: _level(v) == 4, _high),
    Rule("maximum_energy", RuleGroup.BASE, lambda v, c: _level(v) >= 5, _maximum),
    Rule(
        "morning_low_energy",
        RuleGroup.CONTEXTUAL,
        lambda v, c: _level(v) <= 2 and sel.time_of_day(c) == "morning",
        _morning_low,
    ),
    Rule(
        "evening_low_energy",
        RuleGroup.CONTEXTUAL,
        lambda v, c: _level(v) <= 2 and sel.time_of_day(c) == "evening",
        _evening_low,
    ),
    Rule(
        "beginner_low_energy",
        RuleGroup.CONTEXTUAL,
        lambda v, c: _level(v) <= 2 and sel.is_new_to_exercise(c),
        _beginner_low,
    ),
    Rule(
        "advanced_high_energy",
        RuleGroup.CONTEXTUAL,
        lambda v, c: _level(v) >= 4 and sel.is_advanced_athlete(c),
        _advanced_high,
    ),
    Rule(
        "energy_duration_mismatch",
        RuleGroup.CROSS_COMPONENT,
        lambda v, c: _level(v) <= 2 and (sel.selections_of(c).duration or 0) > 45,
        _long_duration_low,
    ),
    Rule(
        "energy_power_mismatch",
        RuleGroup.CROSS_COMPONENT,
        lambda v, c: _level(v) <= 2 and sel.selections_of(c).focus == "power",
        _power_low,
    ),
    Rule(
        "energy_underutilized",
        RuleGroup.CROSS_COMPONENT,
        lambda v, c: _level(v) >= 4 and sel.selections_of(c).focus == "recovery",
        _recovery_high,
    ),
    Rule(
        "low_energy_dismissal_pattern",
        RuleGroup.LEARNING,
        _dismisses_low_energy_advice,
        _dismissal_pattern,
    ),
    Rule(
        "optimal_time_pattern",
        RuleGroup.LEARNING,
        _consistent_high_energy_time,
        _time_pattern,
    ),
)

ENERGY_RULES = DomainRuleSet(
    name=DOMAIN,
    select=lambda selections: sel.energy_level(selections.energy),
    rules=RULES,
    validate=validate,
)
