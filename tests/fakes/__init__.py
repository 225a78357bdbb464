"""
Fake collaborator implementations for testing.

This package provides deterministic fakes of the engine's external ports
for fast, isolated testing. No network or external services required.

Usage:
    from tests.fakes import FakeExternalStrategy

    strategy = FakeExternalStrategy()
    strategy.set_error(TimeoutError("slow"), operations=["enhance_insights"])
    orchestrator.set_external_strategy(strategy)
"""

from tests.fakes.external_strategy import (
    ENHANCED_PREFIX,
    FakeExternalStrategy,
    IncompleteStrategy,
)

__all__ = [
    "ENHANCED_PREFIX",
    "FakeExternalStrategy",
    "IncompleteStrategy",
]
