"""
Duration domain rules.

Duration is the planned session length in minutes. Each focus has its own
minimum, optimal and maximum window.
"""

from typing import List, Optional

from domain.models import DurationMetadata, Insight, InsightType
from domain.rules import selection as sel
from domain.rules.rule import DomainRuleSet, Rule, RuleGroup, make_insight

DOMAIN = "duration"

MIN_DURATION = 5
MAX_DURATION = 240

VERY_SHORT = 15
SHORT = 30
MODERATE = 45
LONG = 60
VERY_LONG = 90

MIN_DURATION_HISTORY = 3
INCONSISTENCY_THRESHOLD = 20
DEVIATION_THRESHOLD = 25

# focus -> (minimum, optimal, maximum) minutes
FOCUS_WINDOWS = {
    "strength": (45, 60, 90),
    "cardio": (20, 40, 60),
    "flexibility": (15, 30, 45),
    "recovery": (20, 30, 45),
    "mobility": (15, 25, 40),
    "power": (30, 45, 60),
    "endurance": (45, 75, 120),
}


def _meta(minutes, **extra) -> DurationMetadata:
    return DurationMetadata(duration=minutes, **extra)


def _window_meta(minutes, focus) -> DurationMetadata:
    low, optimal, high = FOCUS_WINDOWS[focus]
    return _meta(minutes, min_duration=low, optimal_duration=optimal, max_duration=high)


def _focus(context) -> Optional[str]:
    focus = sel.selections_of(context).focus
    return focus if focus in FOCUS_WINDOWS else None


def recent_durations(context) -> List[float]:
    return [
        float(entry.value)
        for entry in sel.history_for(context, DOMAIN)
        if isinstance(entry.value, (int, float)) and not isinstance(entry.value, bool)
    ]


def _average(values: List[float]) -> float:
    return sum(values) / len(values)


# =============================================================================
# Validation
# =============================================================================


def validate(minutes: float) -> Optional[Insight]:
    if MIN_DURATION <= minutes <= MAX_DURATION:
        return None
    return make_insight(
        DOMAIN,
        "invalid_value",
        InsightType.WARNING,
        f"Invalid duration: {minutes} minutes. Duration must be between "
        f"{MIN_DURATION} and {MAX_DURATION} minutes.",
        f"Select a duration from {MIN_DURATION} to {MAX_DURATION} minutes.",
        1.0,
        actionable=False,
        metadata=DurationMetadata(
            provided_value=minutes,
            expected_range=f"{MIN_DURATION}-{MAX_DURATION}",
        ),
    )


# =============================================================================
# Base rules
# =============================================================================


def _very_short(minutes, context):
    return make_insight(
        DOMAIN,
        "very_short",
        InsightType.WARNING,
        "Very short workout. There may not be enough time to warm up properly.",
        "Keep intensity moderate, or extend to at least 20 minutes for a full session.",
        0.85,
        metadata=_meta(minutes),
    )


def _long_for_beginner(minutes, context):
    return make_insight(
        DOMAIN,
        "long_for_beginner",
        InsightType.WARNING,
        "Sessions over an hour are demanding at your current fitness level.",
        "Start with 30-45 minute sessions and build up gradually.",
        0.9,
        related_fields=[DOMAIN, "user_profile"],
        metadata=_meta(minutes),
    )


# =============================================================================
# Contextual rules
# =============================================================================


def _long_low_energy(minutes, context):
    return make_insight(
        DOMAIN,
        "long_low_energy",
        InsightType.WARNING,
        "A long session on low energy increases fatigue and injury risk.",
        "Shorten the workout to 30 minutes or less today.",
        0.95,
        related_fields=[DOMAIN, "energy"],
        metadata=_meta(minutes),
    )


def _long_with_soreness(minutes, context):
    return make_insight(
        DOMAIN,
        "long_with_soreness",
        InsightType.WARNING,
        "Extended training with widespread soreness can delay recovery.",
        "Keep the session under 45 minutes.",
        0.9,
        related_fields=[DOMAIN, "soreness"],
        metadata=_meta(minutes),
    )


def _long_evening(minutes, context):
    return make_insight(
        DOMAIN,
        "long_evening",
        InsightType.OPTIMIZATION,
        "A long evening session may affect your sleep.",
        "Finish at least two hours before bed and end with a cool-down.",
        0.75,
        related_fields=[DOMAIN, "time_of_day"],
        metadata=_meta(minutes),
    )


def _long_new_to_exercise(minutes, context):
    return make_insight(
        DOMAIN,
        "long_new_to_exercise",
        InsightType.WARNING,
        "More than an hour is a lot when you are new to exercise.",
        "Aim for 20-40 minutes while your body adapts.",
        0.9,
        related_fields=[DOMAIN, "user_profile"],
        metadata=_meta(minutes),
    )


# =============================================================================
# Cross-component rules
# =============================================================================


def _below_focus_window(minutes, context) -> bool:
    focus = _focus(context)
    return focus is not None and minutes < FOCUS_WINDOWS[focus][0]


def _above_focus_window(minutes, context) -> bool:
    focus = _focus(context)
    return focus is not None and minutes > FOCUS_WINDOWS[focus][2]


def _within_focus_window(minutes, context) -> bool:
    focus = _focus(context)
    if focus is None:
        return False
    low, _, high = FOCUS_WINDOWS[focus]
    return low <= minutes <= high


def _too_short_for_focus(minutes, context):
    focus = _focus(context)
    low, optimal, _ = FOCUS_WINDOWS[focus]
    return make_insight(
        DOMAIN,
        "too_short_for_focus",
        InsightType.WARNING,
        f"{minutes:g} minutes is short for a {focus} workout (minimum {low}).",
        f"Extend to about {optimal} minutes for the best results.",
        0.85,
        related_fields=[DOMAIN, "focus"],
        metadata=_window_meta(minutes, focus),
    )


def _too_long_for_focus(minutes, context):
    focus = _focus(context)
    _, optimal, high = FOCUS_WINDOWS[focus]
    return make_insight(
        DOMAIN,
        "too_long_for_focus",
        InsightType.OPTIMIZATION,
        f"{minutes:g} minutes is longer than a {focus} workout needs (maximum {high}).",
        f"Around {optimal} minutes gives the same benefit with less fatigue.",
        0.75,
        related_fields=[DOMAIN, "focus"],
        metadata=_window_meta(minutes, focus),
    )


def _fits_focus(minutes, context):
    focus = _focus(context)
    return make_insight(
        DOMAIN,
        "fits_focus",
        InsightType.ENCOURAGEMENT,
        f"{minutes:g} minutes suits a {focus} workout.",
        "Your duration is well matched to your focus.",
        0.8,
        actionable=False,
        related_fields=[DOMAIN, "focus"],
        metadata=_window_meta(minutes, focus),
    )


def _short_much_equipment(minutes, context):
    return make_insight(
        DOMAIN,
        "short_with_equipment",
        InsightType.OPTIMIZATION,
        "Several pieces of equipment in a short session means a lot of setup time.",
        "Pick one or two pieces of equipment to keep the session efficient.",
        0.8,
        related_fields=[DOMAIN, "equipment"],
        metadata=_meta(minutes),
    )


def _exceeds_available_time(minutes, context):
    available = context.environmental_factors.available_time
    return make_insight(
        DOMAIN,
        "exceeds_available_time",
        InsightType.WARNING,
        f"The planned {minutes:g} minutes exceeds your available {available:g} minutes.",
        f"Shorten the workout to fit within {available:g} minutes.",
        0.95,
        related_fields=[DOMAIN, "available_time"],
        metadata=_meta(minutes, available_time=available),
    )


# =============================================================================
# Learning rules
# =============================================================================


def _is_inconsistent(minutes, context) -> bool:
    values = recent_durations(context)
    if len(values) < MIN_DURATION_HISTORY:
        return False
    average = _average(values)
    return any(abs(value - average) > INCONSISTENCY_THRESHOLD for value in values)


def _inconsistent(minutes, context):
    values = recent_durations(context)
    return make_insight(
        DOMAIN,
        "inconsistent_duration",
        InsightType.EDUCATION,
        "Your recent session lengths vary a lot.",
        "A consistent session length makes it easier to build a routine.",
        0.7,
        metadata=_meta(minutes, average_duration=round(_average(values), 1)),
    )


def _deviates_from_typical(minutes, context) -> bool:
    values = recent_durations(context)
    if len(values) < MIN_DURATION_HISTORY:
        return False
    return abs(minutes - _average(values)) > DEVIATION_THRESHOLD


def _deviation(minutes, context):
    average = _average(recent_durations(context))
    direction = "longer" if minutes > average else "shorter"
    return make_insight(
        DOMAIN,
        "typical_duration_deviation",
        InsightType.OPTIMIZATION,
        f"This session is much {direction} than your usual {average:.0f} minutes.",
        "Make sure the change is intentional and adjust intensity accordingly.",
        0.75,
        metadata=_meta(minutes, average_duration=round(average, 1)),
    )


# =============================================================================
# Rule table
# =============================================================================

RULES = (
    Rule("very_short", RuleGroup.BASE, lambda m, c: m <= VERY_SHORT, _very_short),
    Rule(
        "long_for_beginner",
        RuleGroup.BASE,
        lambda m, c: m > LONG and sel.is_beginner(c),
        _long_for_beginner,
    ),
    Rule(
        "long_low_energy",
        RuleGroup.CONTEXTUAL,
        lambda m, c: m > LONG and sel.selections_of(c).low_energy,
        _long_low_energy,
    ),
    Rule(
        "long_with_soreness",
        RuleGroup.CONTEXTUAL,
        lambda m, c: m > MODERATE and sel.selections_of(c).soreness_count >= 3,
        _long_with_soreness,
    ),
    Rule(
        "long_evening",
        RuleGroup.CONTEXTUAL,
        lambda m, c: m > LONG and sel.time_of_day(c) == "evening",
        _long_evening,
    ),
    Rule(
        "long_new_to_exercise",
        RuleGroup.CONTEXTUAL,
        lambda m, c: m > LONG and sel.is_new_to_exercise(c),
        _long_new_to_exercise,
    ),
    Rule("too_short_for_focus", RuleGroup.CROSS_COMPONENT, _below_focus_window, _too_short_for_focus),
    Rule("too_long_for_focus", RuleGroup.CROSS_COMPONENT, _above_focus_window, _too_long_for_focus),
    Rule("fits_focus", RuleGroup.CROSS_COMPONENT, _within_focus_window, _fits_focus),
    Rule(
        "short_with_equipment",
        RuleGroup.CROSS_COMPONENT,
        lambda m, c: m < SHORT and sel.selections_of(c).equipment_count > 3,
        _short_much_equipment,
    ),
    Rule(
        "exceeds_available_time",
        RuleGroup.CROSS_COMPONENT,
        lambda m, c: c.environmental_factors.available_time is not None
        and m > c.environmental_factors.available_time,
        _exceeds_available_time,
    ),
    Rule("inconsistent_duration", RuleGroup.LEARNING, _is_inconsistent, _inconsistent),
    Rule("typical_duration_deviation", RuleGroup.LEARNING, _deviates_from_typical, _deviation),
)

DURATION_RULES = DomainRuleSet(
    name=DOMAIN,
    select=lambda selections: sel.duration_minutes(selections.duration),
    rules=RULES,
    validate=validate,
)
