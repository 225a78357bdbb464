"""
Equipment domain rules.

Equipment is the list of equipment available for the session. An explicitly
empty list means the user has not chosen any, which is worth a warning
because every other suggestion depends on it.
"""

from collections import Counter
from typing import List

from domain.models import EquipmentMetadata, InsightType
from domain.rules import selection as sel
from domain.rules.rule import DomainRuleSet, Rule, RuleGroup, make_insight

DOMAIN = "equipment"

MAX_RECOMMENDED_ITEMS = 5
MIN_PATTERN_INTERACTIONS = 3

EQUIPMENT_CATEGORIES = {
    "strength": (
        "Dumbbells",
        "Barbells & Weight Plates",
        "Kettlebells",
        "Resistance Bands",
        "Strength Machines",
    ),
    "cardio": ("Treadmill", "Stationary Bike", "Elliptical", "Rowing Machine", "Jump Rope"),
    "flexibility": (
        "Yoga Mat",
        "Yoga Mat & Stretching Space",
        "Stretching & Mobility Zone (Yoga Mats, Foam Rollers)",
        "Foam Roller",
    ),
    "bodyweight": ("Body Weight", "Suspension Trainer/TRX", "Pull-up Bar"),
}

# focus -> equipment that supports it
FOCUS_EQUIPMENT = {
    "strength": EQUIPMENT_CATEGORIES["strength"] + ("Suspension Trainer/TRX", "Body Weight"),
    "cardio": EQUIPMENT_CATEGORIES["cardio"] + ("Body Weight", "Kettlebells"),
    "flexibility": EQUIPMENT_CATEGORIES["flexibility"],
    "mobility": EQUIPMENT_CATEGORIES["flexibility"] + ("Resistance Bands",),
    "recovery": EQUIPMENT_CATEGORIES["flexibility"] + ("Resistance Bands",),
    "power": ("Kettlebells", "Barbells & Weight Plates", "Dumbbells", "Body Weight"),
    "endurance": EQUIPMENT_CATEGORIES["cardio"] + ("Kettlebells", "Body Weight"),
}

SYNERGISTIC_COMBINATIONS = (
    ("Dumbbells", "Resistance Bands"),
    ("Kettlebells", "Yoga Mat"),
    ("Suspension Trainer/TRX", "Resistance Bands"),
    ("Barbells & Weight Plates", "Strength Machines"),
)

HEAVY_EQUIPMENT = ("Barbells & Weight Plates", "Strength Machines")
CARDIO_MACHINES = ("Treadmill", "Stationary Bike", "Elliptical")


def _meta(items, **extra) -> EquipmentMetadata:
    return EquipmentMetadata(equipment=list(items), count=len(items), **extra)


def aligned_items(items, focus) -> List[str]:
    """Selected items that support `focus`."""
    supported = FOCUS_EQUIPMENT.get(focus, ())
    return [item for item in items if item in supported]


def selected_combinations(items) -> List[tuple]:
    return [combo for combo in SYNERGISTIC_COMBINATIONS if all(i in items for i in combo)]


def favorite_equipment(context) -> List[str]:
    """Equipment chosen in at least three recent sessions."""
    counts = Counter(
        item
        for entry in sel.history_for(context, DOMAIN)
        if isinstance(entry.value, list)
        for item in entry.value
    )
    return [item for item, count in counts.most_common() if count >= MIN_PATTERN_INTERACTIONS]


def _has_alignment_info(items, context) -> bool:
    focus = sel.selections_of(context).focus
    return bool(items) and focus in FOCUS_EQUIPMENT


# =============================================================================
# Base rules
# =============================================================================


def _no_equipment(items, context):
    return make_insight(
        DOMAIN,
        "no_equipment",
        InsightType.WARNING,
        "No equipment selected.",
        "Select the equipment you have available, or choose Body Weight for a no-equipment workout.",
        0.9,
        metadata=_meta(items, suggested=["Body Weight"]),
    )


def _too_many(items, context):
    return make_insight(
        DOMAIN,
        "too_many_items",
        InsightType.WARNING,
        f"{len(items)} pieces of equipment can make the workout unfocused.",
        f"Narrow the selection to {MAX_RECOMMENDED_ITEMS} or fewer key items.",
        0.8,
        metadata=_meta(items),
    )


def _focused_selection(items, context):
    return make_insight(
        DOMAIN,
        "focused_selection",
        InsightType.ENCOURAGEMENT,
        "A focused equipment selection keeps the workout simple.",
        "Good choice. Fewer setups means more time training.",
        0.85,
        actionable=False,
        metadata=_meta(items),
    )


def _dumbbells(items, context):
    return make_insight(
        DOMAIN,
        "dumbbell_versatility",
        InsightType.OPTIMIZATION,
        "Dumbbells support a wide range of exercises.",
        "Use unilateral movements to fix imbalances and train stability.",
        0.9,
        metadata=_meta(items, matched=["Dumbbells"]),
    )


# =============================================================================
# Contextual rules
# =============================================================================


def _focus_mismatch(items, context):
    focus = sel.selections_of(context).focus
    return make_insight(
        DOMAIN,
        "focus_mismatch",
        InsightType.WARNING,
        f"None of the selected equipment supports a {focus} workout.",
        f"Consider adding: {', '.join(FOCUS_EQUIPMENT[focus][:3])}.",
        0.85,
        related_fields=[DOMAIN, "focus"],
        metadata=_meta(items, suggested=list(FOCUS_EQUIPMENT[focus][:3])),
    )


def _focus_aligned(items, context):
    focus = sel.selections_of(context).focus
    matched = aligned_items(items, focus)
    return make_insight(
        DOMAIN,
        "focus_aligned",
        InsightType.ENCOURAGEMENT,
        f"Your equipment suits a {focus} workout.",
        "Your equipment and focus work well together.",
        0.9,
        actionable=False,
        related_fields=[DOMAIN, "focus"],
        metadata=_meta(items, matched=matched),
    )


def _many_items_low_energy(items, context):
    return make_insight(
        DOMAIN,
        "complex_setup_low_energy",
        InsightType.WARNING,
        "A complex equipment setup takes effort you may not have today.",
        "Keep it simple with one or two pieces of equipment.",
        0.85,
        related_fields=[DOMAIN, "energy"],
        metadata=_meta(items),
    )


def _home_cardio_machine(items, context):
    machines = [item for item in items if item in CARDIO_MACHINES]
    return make_insight(
        DOMAIN,
        "home_cardio_machine",
        InsightType.OPTIMIZATION,
        "Home cardio machines make interval training easy to fit into your day.",
        "Try short intervals on the machine to make the most of it.",
        0.75,
        related_fields=[DOMAIN, "location"],
        metadata=_meta(items, matched=machines),
    )


def _barbell_beginner(items, context):
    return make_insight(
        DOMAIN,
        "barbell_beginner",
        InsightType.WARNING,
        "Barbell lifts need sound technique to be performed safely.",
        "Learn the movement with dumbbells or get coaching before loading a barbell.",
        0.9,
        related_fields=[DOMAIN, "user_profile"],
        metadata=_meta(items, matched=["Barbells & Weight Plates"], suggested=["Dumbbells"]),
    )


# =============================================================================
# Cross-component rules
# =============================================================================


def _many_items_short(items, context):
    return make_insight(
        DOMAIN,
        "too_many_for_duration",
        InsightType.WARNING,
        "Too much equipment for a short session. Transitions will eat into training time.",
        "Limit the selection to two or three items or extend the session.",
        0.8,
        related_fields=[DOMAIN, "duration"],
        metadata=_meta(items),
    )


def _dumbbells_upper_body(items, context):
    return make_insight(
        DOMAIN,
        "dumbbells_upper_body",
        InsightType.OPTIMIZATION,
        "Dumbbells are ideal for upper body training.",
        "Include presses, rows and curls for balanced upper body work.",
        0.9,
        related_fields=[DOMAIN, "areas"],
        metadata=_meta(items, matched=["Dumbbells"]),
    )


def _foam_roller_soreness(items, context):
    return make_insight(
        DOMAIN,
        "foam_roller_soreness",
        InsightType.ENCOURAGEMENT,
        "A foam roller is a great tool for easing soreness.",
        "Spend a few minutes rolling the sore areas before and after training.",
        0.95,
        related_fields=[DOMAIN, "soreness"],
        metadata=_meta(items, matched=["Foam Roller"]),
    )


# =============================================================================
# Learning rules
# =============================================================================


def _missing_favorites(items, context) -> List[str]:
    return [item for item in favorite_equipment(context) if item not in items]


def _favorites(items, context):
    missing = _missing_favorites(items, context)
    return make_insight(
        DOMAIN,
        "favorite_equipment",
        InsightType.OPTIMIZATION,
        f"You usually train with: {', '.join(missing)}.",
        "Add your usual equipment if it is available today.",
        0.75,
        metadata=_meta(items, suggested=missing),
    )


def _combination(items, context):
    combos = selected_combinations(items)
    matched = sorted({item for combo in combos for item in combo})
    return make_insight(
        DOMAIN,
        "synergistic_combination",
        InsightType.OPTIMIZATION,
        "Your equipment combines well for varied training.",
        "Pair these items in supersets to add variety.",
        0.8,
        actionable=False,
        metadata=_meta(items, matched=matched),
    )


def _heavy_safety(items, context):
    heavy = [item for item in items if item in HEAVY_EQUIPMENT]
    return make_insight(
        DOMAIN,
        "heavy_equipment_safety",
        InsightType.EDUCATION,
        "Heavy equipment selected.",
        "Warm up thoroughly, use collars and a spotter or safety pins for heavy lifts.",
        0.9,
        metadata=_meta(items, matched=heavy),
    )


# =============================================================================
# Rule table
# =============================================================================

RULES = (
    Rule("no_equipment", RuleGroup.BASE, lambda e, c: len(e) == 0, _no_equipment),
    Rule("too_many_items", RuleGroup.BASE, lambda e, c: len(e) > MAX_RECOMMENDED_ITEMS, _too_many),
    Rule("focused_selection", RuleGroup.BASE, lambda e, c: 1 <= len(e) <= 3, _focused_selection),
    Rule("dumbbell_versatility", RuleGroup.BASE, lambda e, c: "Dumbbells" in e, _dumbbells),
    Rule(
        "focus_mismatch",
        RuleGroup.CONTEXTUAL,
        lambda e, c: _has_alignment_info(e, c)
        and not aligned_items(e, sel.selections_of(c).focus),
        _focus_mismatch,
    ),
    Rule(
        "focus_aligned",
        RuleGroup.CONTEXTUAL,
        lambda e, c: _has_alignment_info(e, c)
        and bool(aligned_items(e, sel.selections_of(c).focus)),
        _focus_aligned,
    ),
    Rule(
        "complex_setup_low_energy",
        RuleGroup.CONTEXTUAL,
        lambda e, c: len(e) > 3 and sel.selections_of(c).low_energy,
        _many_items_low_energy,
    ),
    Rule(
        "home_cardio_machine",
        RuleGroup.CONTEXTUAL,
        lambda e, c: sel.location(c) == "home" and any(i in CARDIO_MACHINES for i in e),
        _home_cardio_machine,
    ),
    Rule(
        "barbell_beginner",
        RuleGroup.CONTEXTUAL,
        lambda e, c: "Barbells & Weight Plates" in e and sel.is_new_to_exercise(c),
        _barbell_beginner,
    ),
    Rule(
        "too_many_for_duration",
        RuleGroup.CROSS_COMPONENT,
        lambda e, c: len(e) > 4 and 0 < (sel.selections_of(c).duration or 0) < 45,
        _many_items_short,
    ),
    Rule(
        "dumbbells_upper_body",
        RuleGroup.CROSS_COMPONENT,
        lambda e, c: "Dumbbells" in e and "Upper Body" in sel.selections_of(c).areas,
        _dumbbells_upper_body,
    ),
    Rule(
        "foam_roller_soreness",
        RuleGroup.CROSS_COMPONENT,
        lambda e, c: "Foam Roller" in e and sel.selections_of(c).soreness_count > 0,
        _foam_roller_soreness,
    ),
    Rule(
        "favorite_equipment",
        RuleGroup.LEARNING,
        lambda e, c: bool(_missing_favorites(e, c)),
        _favorites,
    ),
    Rule(
        "synergistic_combination",
        RuleGroup.LEARNING,
        lambda e, c: bool(selected_combinations(e)),
        _combination,
    ),
    Rule(
        "heavy_equipment_safety",
        RuleGroup.LEARNING,
        lambda e, c: any(item in HEAVY_EQUIPMENT for item in e),
        _heavy_safety,
    ),
)

EQUIPMENT_RULES = DomainRuleSet(
    name=DOMAIN,
    select=lambda selections: sel.equipment_items(selections.equipment),
    rules=RULES,
)
