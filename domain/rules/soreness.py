"""
Soreness domain rules.

Soreness is the list of body areas the user reports as sore. An empty list
means no soreness and earns a single encouragement.
"""

from collections import Counter

from domain.models import InsightType, SorenessMetadata
from domain.rules import selection as sel
from domain.rules.rule import DomainRuleSet, Rule, RuleGroup, make_insight

DOMAIN = "soreness"

HIGH_SORENESS_AREAS = 4
LARGE_MUSCLE_AREAS = ("Back", "Lower Body")
MIN_PATTERN_INTERACTIONS = 3
HISTORY_WINDOW = 5


def _meta(areas, **extra) -> SorenessMetadata:
    return SorenessMetadata(areas=list(areas), affected_count=len(areas), **extra)


# =============================================================================
# Base rules
# =============================================================================


def _no_soreness(areas, context):
    return make_insight(
        DOMAIN,
        "no_soreness",
        InsightType.ENCOURAGEMENT,
        "No soreness reported. Your body is ready for training.",
        "You can train at your planned intensity.",
        0.9,
        actionable=False,
        metadata=_meta(areas),
    )


def _high_soreness(areas, context):
    return make_insight(
        DOMAIN,
        "high_soreness",
        InsightType.WARNING,
        f"Soreness reported in {len(areas)} areas. Your body may need more recovery.",
        "Consider a recovery or mobility session instead of intense training.",
        0.95,
        metadata=_meta(areas),
    )


def _large_muscle_soreness(areas, context):
    affected = [area for area in areas if area in LARGE_MUSCLE_AREAS]
    return make_insight(
        DOMAIN,
        "large_muscle_soreness",
        InsightType.WARNING,
        f"Soreness in large muscle groups ({', '.join(affected)}) affects most compound movements.",
        "Avoid heavy loading of these areas and favor light movement to aid recovery.",
        0.9,
        metadata=_meta(areas, overlapping_areas=affected),
    )


def _mild_soreness(areas, context):
    return make_insight(
        DOMAIN,
        "mild_soreness",
        InsightType.OPTIMIZATION,
        "Mild, localized soreness.",
        "Train other areas today or include light work for the sore areas.",
        0.8,
        metadata=_meta(areas),
    )


# =============================================================================
# Contextual rules
# =============================================================================


def _soreness_low_energy(areas, context):
    return make_insight(
        DOMAIN,
        "soreness_with_low_energy",
        InsightType.WARNING,
        "Soreness combined with low energy suggests incomplete recovery.",
        "Prioritize rest or gentle recovery work today.",
        0.95,
        related_fields=[DOMAIN, "energy"],
        metadata=_meta(areas),
    )


def _upper_body_strength(areas, context):
    return make_insight(
        DOMAIN,
        "upper_body_strength_conflict",
        InsightType.WARNING,
        "Upper body soreness may limit strength training for that area.",
        "Shift today's strength work to the lower body or reduce upper body load.",
        0.85,
        related_fields=[DOMAIN, "focus"],
        metadata=_meta(areas, overlapping_areas=["Upper Body"]),
    )


def _morning_soreness(areas, context):
    return make_insight(
        DOMAIN,
        "morning_soreness",
        InsightType.OPTIMIZATION,
        "Soreness often feels worse in the morning before the body warms up.",
        "Extend your warm-up and include dynamic mobility for the sore areas.",
        0.8,
        related_fields=[DOMAIN, "time_of_day"],
        metadata=_meta(areas),
    )


# =============================================================================
# Cross-component rules
# =============================================================================


def _target_overlap(areas, context):
    overlap = sel.selections_of(context).overlapping_areas()
    return make_insight(
        DOMAIN,
        "target_area_overlap",
        InsightType.WARNING,
        f"You selected sore areas as workout targets: {', '.join(overlap)}.",
        "Choose different target areas or reduce intensity for the sore ones.",
        0.9,
        related_fields=[DOMAIN, "areas"],
        metadata=_meta(areas, overlapping_areas=overlap),
    )


def _long_session_soreness(areas, context):
    return make_insight(
        DOMAIN,
        "soreness_duration_conflict",
        InsightType.WARNING,
        "A long session with widespread soreness can slow recovery.",
        "Keep the workout under 45 minutes while these areas recover.",
        0.85,
        related_fields=[DOMAIN, "duration"],
        metadata=_meta(areas),
    )


# =============================================================================
# Learning rules
# =============================================================================


def _recurring_areas(areas, context):
    """Areas of the current list that recur in recent soreness history."""
    history = [
        entry for entry in sel.history_for(context, DOMAIN)
        if isinstance(entry.value, list)
    ]
    counts = Counter(area for entry in history for area in entry.value)
    return [area for area in areas if counts[area] >= MIN_PATTERN_INTERACTIONS]


def _recurring_soreness(areas, context):
    recurring = _recurring_areas(areas, context)
    return make_insight(
        DOMAIN,
        "recurring_soreness_pattern",
        InsightType.EDUCATION,
        f"Soreness keeps coming back in: {', '.join(recurring)}.",
        "Recurring soreness can point to insufficient recovery or form issues. "
        "Consider more rest days or a technique check.",
        0.75,
        metadata=_meta(areas, overlapping_areas=recurring, pattern_count=len(recurring)),
    )


def _beginner_soreness(areas, context):
    return make_insight(
        DOMAIN,
        "beginner_soreness_education",
        InsightType.EDUCATION,
        "Muscle soreness is normal when starting to exercise and fades as you adapt.",
        "Gentle movement and good sleep help soreness pass faster.",
        0.8,
        related_fields=[DOMAIN, "user_profile"],
        metadata=_meta(areas),
    )


# =============================================================================
# Rule table
# =============================================================================

RULES = (
    Rule("no_soreness", RuleGroup.BASE, lambda a, c: len(a) == 0, _no_soreness),
    Rule("high_soreness", RuleGroup.BASE, lambda a, c: len(a) >= HIGH_SORENESS_AREAS, _high_soreness),
    Rule(
        "large_muscle_soreness",
        RuleGroup.BASE,
        lambda a, c: any(area in LARGE_MUSCLE_AREAS for area in a),
        _large_muscle_soreness,
    ),
    Rule("mild_soreness", RuleGroup.BASE, lambda a, c: 1 <= len(a) <= 2, _mild_soreness),
    Rule(
        "soreness_with_low_energy",
        RuleGroup.CONTEXTUAL,
        lambda a, c: len(a) > 0 and sel.selections_of(c).low_energy,
        _soreness_low_energy,
    ),
    Rule(
        "upper_body_strength_conflict",
        RuleGroup.CONTEXTUAL,
        lambda a, c: "Upper Body" in a and sel.selections_of(c).focus == "strength",
        _upper_body_strength,
    ),
    Rule(
        "morning_soreness",
        RuleGroup.CONTEXTUAL,
        lambda a, c: len(a) > 0 and sel.time_of_day(c) == "morning",
        _morning_soreness,
    ),
    Rule(
        "target_area_overlap",
        RuleGroup.CROSS_COMPONENT,
        lambda a, c: len(a) > 0 and bool(sel.selections_of(c).overlapping_areas()),
        _target_overlap,
    ),
    Rule(
        "soreness_duration_conflict",
        RuleGroup.CROSS_COMPONENT,
        lambda a, c: len(a) >= 3 and (sel.selections_of(c).duration or 0) > 45,
        _long_session_soreness,
    ),
    Rule(
        "recurring_soreness_pattern",
        RuleGroup.LEARNING,
        lambda a, c: len(a) > 0 and bool(_recurring_areas(a, c)),
        _recurring_soreness,
    ),
    Rule(
        "beginner_soreness_education",
        RuleGroup.LEARNING,
        lambda a, c: len(a) > 0 and sel.is_new_to_exercise(c),
        _beginner_soreness,
    ),
)

SORENESS_RULES = DomainRuleSet(
    name=DOMAIN,
    select=lambda selections: sel.soreness_areas(selections.soreness),
    rules=RULES,
    history_window=HISTORY_WINDOW,
)
