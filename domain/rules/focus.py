"""
Focus domain rules.

Focus is the training emphasis of the session (strength, cardio,
flexibility, recovery, power, mobility, endurance).
"""

from collections import Counter
from typing import Optional

from domain.models import FocusMetadata, InsightType
from domain.rules import selection as sel
from domain.rules.rule import DomainRuleSet, Rule, RuleGroup, make_insight

DOMAIN = "focus"

MIN_FOCUS_HISTORY = 5
MIN_DOMINANT_COUNT = 3
GOAL_ALIGNMENT_THRESHOLD = 0.7

# Goals each focus serves
GOAL_ALIGNMENT = {
    "strength": ("muscle_building", "strength", "toning"),
    "cardio": ("weight_loss", "endurance", "heart_health"),
    "flexibility": ("mobility", "injury_prevention", "wellness"),
    "recovery": ("injury_prevention", "wellness", "stress_relief"),
}

# Focus choices that balance a dominant focus
COMPLEMENTARY_FOCUS = {
    "strength": ("mobility", "flexibility"),
    "cardio": ("recovery", "flexibility"),
    "flexibility": ("strength", "cardio"),
    "recovery": ("strength", "cardio"),
    "power": ("mobility", "recovery"),
    "mobility": ("strength", "power"),
    "endurance": ("strength", "recovery"),
}


def _meta(focus, **extra) -> FocusMetadata:
    return FocusMetadata(focus=focus, **extra)


# =============================================================================
# Helpers
# =============================================================================


def goal_alignment_score(focus: str, goals) -> Optional[float]:
    """
    Fraction of the user's goals served by `focus`.

    Returns:
        Score between 0 and 1, or None when the user has no goals or the
        focus has no known goal mapping.
    """
    aligned = GOAL_ALIGNMENT.get(focus)
    normalized = [goal.replace(" ", "_") for goal in goals]
    if not normalized or aligned is None:
        return None
    matching = sum(1 for goal in normalized if goal in aligned)
    return matching / len(normalized)


def dominant_focus(context) -> Optional[str]:
    """Most frequent focus in recent history, when it is a clear habit."""
    values = [
        str(entry.value).lower()
        for entry in sel.history_for(context, DOMAIN)
        if isinstance(entry.value, str)
    ]
    if len(values) < MIN_FOCUS_HISTORY:
        return None
    focus, count = Counter(values).most_common(1)[0]
    return focus if count >= MIN_DOMINANT_COUNT else None


# =============================================================================
# Base rules
# =============================================================================


def _no_focus(focus, context):
    return make_insight(
        DOMAIN,
        "no_focus",
        InsightType.WARNING,
        "No workout focus selected.",
        "Choose a focus so the workout can target what matters to you today.",
        0.8,
        metadata=_meta(focus),
    )


def _strength(focus, context):
    return make_insight(
        DOMAIN,
        "strength_focus",
        InsightType.OPTIMIZATION,
        "Strength focus selected.",
        "Use progressive overload and rest 2-3 minutes between heavy sets.",
        0.9,
        metadata=_meta(focus),
    )


def _cardio(focus, context):
    return make_insight(
        DOMAIN,
        "cardio_focus",
        InsightType.OPTIMIZATION,
        "Cardio focus selected.",
        "Mix steady-state and interval work to build endurance.",
        0.9,
        metadata=_meta(focus),
    )


def _flexibility(focus, context):
    return make_insight(
        DOMAIN,
        "flexibility_focus",
        InsightType.OPTIMIZATION,
        "Flexibility focus selected.",
        "Hold static stretches for 30 seconds or more once you are warm.",
        0.85,
        metadata=_meta(focus),
    )


def _recovery(focus, context):
    return make_insight(
        DOMAIN,
        "recovery_focus",
        InsightType.ENCOURAGEMENT,
        "Recovery focus selected. Rest is part of training.",
        "Keep the effort easy and focus on breathing and mobility.",
        0.95,
        metadata=_meta(focus),
    )


# =============================================================================
# Contextual rules
# =============================================================================


def _strength_low_energy(focus, context):
    return make_insight(
        DOMAIN,
        "strength_low_energy",
        InsightType.WARNING,
        "Strength training at low energy increases the risk of poor form.",
        "Reduce the load or switch to technique work today.",
        0.9,
        related_fields=[DOMAIN, "energy"],
        metadata=_meta(focus, suggested_focus=["flexibility", "recovery"]),
    )


def _cardio_soreness(focus, context):
    return make_insight(
        DOMAIN,
        "cardio_soreness",
        InsightType.WARNING,
        "High-impact cardio with widespread soreness can aggravate sore muscles.",
        "Choose low-impact cardio such as cycling or swimming.",
        0.85,
        related_fields=[DOMAIN, "soreness"],
        metadata=_meta(focus),
    )


def _evening_power(focus, context):
    return make_insight(
        DOMAIN,
        "evening_power",
        InsightType.OPTIMIZATION,
        "Explosive power work late in the day can interfere with sleep.",
        "Finish with a thorough cool-down or move power work earlier in the day.",
        0.75,
        related_fields=[DOMAIN, "time_of_day"],
        metadata=_meta(focus),
    )


def _beginner_power(focus, context):
    return make_insight(
        DOMAIN,
        "beginner_power",
        InsightType.WARNING,
        "Power training demands technique that takes time to develop.",
        "Build a base of strength and movement quality before explosive work.",
        0.9,
        related_fields=[DOMAIN, "user_profile"],
        metadata=_meta(focus, suggested_focus=["strength", "mobility"]),
    )


# =============================================================================
# Cross-component rules
# =============================================================================


def _short_strength(focus, context):
    return make_insight(
        DOMAIN,
        "strength_short_duration",
        InsightType.WARNING,
        "Under 30 minutes leaves little time for warm-up and heavy sets.",
        "Extend the session to at least 30 minutes or focus on one or two lifts.",
        0.8,
        related_fields=[DOMAIN, "duration"],
        metadata=_meta(focus),
    )


def _strength_bodyweight(focus, context):
    return make_insight(
        DOMAIN,
        "strength_bodyweight",
        InsightType.OPTIMIZATION,
        "Strength focus with no equipment selected.",
        "Use bodyweight progressions such as tempo, pauses and single-leg variations.",
        0.85,
        related_fields=[DOMAIN, "equipment"],
        metadata=_meta(focus),
    )


def _cardio_many_areas(focus, context):
    return make_insight(
        DOMAIN,
        "cardio_full_body",
        InsightType.OPTIMIZATION,
        "Cardio across many target areas works well as a full-body circuit.",
        "Structure the session as a circuit alternating upper and lower body.",
        0.8,
        related_fields=[DOMAIN, "areas"],
        metadata=_meta(focus),
    )


# =============================================================================
# Learning rules
# =============================================================================


def _needs_variety(focus, context) -> bool:
    dominant = dominant_focus(context)
    if dominant is None:
        return False
    return focus not in COMPLEMENTARY_FOCUS.get(dominant, ())


def _variety(focus, context):
    dominant = dominant_focus(context)
    suggested = list(COMPLEMENTARY_FOCUS.get(dominant, ()))
    return make_insight(
        DOMAIN,
        "focus_variety",
        InsightType.EDUCATION,
        f"Most of your recent sessions focused on {dominant}.",
        f"Balance your training with {' or '.join(suggested)} work.",
        0.75,
        metadata=_meta(focus, dominant_focus=dominant, suggested_focus=suggested),
    )


def _poorly_aligned(focus, context) -> bool:
    score = goal_alignment_score(focus, sel.goals(context))
    return score is not None and score < GOAL_ALIGNMENT_THRESHOLD


def _goal_alignment(focus, context):
    score = goal_alignment_score(focus, sel.goals(context))
    better = [
        name for name, aligned in GOAL_ALIGNMENT.items()
        if any(goal.replace(" ", "_") in aligned for goal in sel.goals(context))
    ]
    return make_insight(
        DOMAIN,
        "goal_alignment",
        InsightType.OPTIMIZATION,
        f"A {focus} focus only partly supports your goals.",
        "Consider a focus that serves your goals more directly"
        + (f": {', '.join(better)}." if better else "."),
        0.8,
        related_fields=[DOMAIN, "user_profile"],
        metadata=_meta(focus, alignment_score=round(score, 2), suggested_focus=better),
    )


# =============================================================================
# Rule table
# =============================================================================

RULES = (
    Rule("no_focus", RuleGroup.BASE, lambda f, c: f == "", _no_focus),
    Rule("strength_focus", RuleGroup.BASE, lambda f, c: f == "strength", _strength),
    Rule("cardio_focus", RuleGroup.BASE, lambda f, c: f == "cardio", _cardio),
    Rule("flexibility_focus", RuleGroup.BASE, lambda f, c: f == "flexibility", _flexibility),
    Rule("recovery_focus", RuleGroup.BASE, lambda f, c: f == "recovery", _recovery),
    Rule(
        "strength_low_energy",
        RuleGroup.CONTEXTUAL,
        lambda f, c: f == "strength" and sel.selections_of(c).low_energy,
        _strength_low_energy,
    ),
    Rule(
        "cardio_soreness",
        RuleGroup.CONTEXTUAL,
        lambda f, c: f == "cardio" and sel.selections_of(c).soreness_count >= 3,
        _cardio_soreness,
    ),
    Rule(
        "evening_power",
        RuleGroup.CONTEXTUAL,
        lambda f, c: f == "power" and sel.time_of_day(c) == "evening",
        _evening_power,
    ),
    Rule(
        "beginner_power",
        RuleGroup.CONTEXTUAL,
        lambda f, c: f == "power" and sel.is_new_to_exercise(c),
        _beginner_power,
    ),
    Rule(
        "strength_short_duration",
        RuleGroup.CROSS_COMPONENT,
        lambda f, c: f == "strength" and (sel.selections_of(c).duration or 0) > 0
        and sel.selections_of(c).duration < 30,
        _short_strength,
    ),
    Rule(
        "strength_bodyweight",
        RuleGroup.CROSS_COMPONENT,
        lambda f, c: f == "strength" and sel.selections_of(c).equipment == (),
        _strength_bodyweight,
    ),
    Rule(
        "cardio_full_body",
        RuleGroup.CROSS_COMPONENT,
        lambda f, c: f == "cardio" and len(sel.selections_of(c).areas) > 3,
        _cardio_many_areas,
    ),
    Rule("focus_variety", RuleGroup.LEARNING, lambda f, c: bool(f) and _needs_variety(f, c), _variety),
    Rule("goal_alignment", RuleGroup.LEARNING, lambda f, c: bool(f) and _poorly_aligned(f, c), _goal_alignment),
)

FOCUS_RULES = DomainRuleSet(
    name=DOMAIN,
    select=lambda selections: sel.focus_name(selections.focus),
    rules=RULES,
)
