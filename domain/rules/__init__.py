"""
Rule tables for the five selection domains and the cross-component
analyzer.

Each domain module exposes one DomainRuleSet; the evaluator in
backend.services.domain_rule_service runs them.
"""

from domain.rules.cross_component import (
    COMPONENT_DEPENDENCIES,
    CONFLICT_RULES,
    SYNERGY_RULES,
    ConflictRule,
    SynergyRule,
)
from domain.rules.duration import DURATION_RULES
from domain.rules.energy import ENERGY_RULES
from domain.rules.equipment import EQUIPMENT_RULES
from domain.rules.focus import FOCUS_RULES
from domain.rules.rule import DomainRuleSet, Rule, RuleGroup, make_insight
from domain.rules.soreness import SORENESS_RULES

DOMAIN_RULE_SETS = (
    ENERGY_RULES,
    SORENESS_RULES,
    FOCUS_RULES,
    DURATION_RULES,
    EQUIPMENT_RULES,
)

__all__ = [
    "COMPONENT_DEPENDENCIES",
    "CONFLICT_RULES",
    "DOMAIN_RULE_SETS",
    "DURATION_RULES",
    "ENERGY_RULES",
    "EQUIPMENT_RULES",
    "FOCUS_RULES",
    "SORENESS_RULES",
    "SYNERGY_RULES",
    "ConflictRule",
    "DomainRuleSet",
    "Rule",
    "RuleGroup",
    "SynergyRule",
    "make_insight",
]
