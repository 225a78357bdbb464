"""
Interfaces (Ports) for the analysis engine.

This package defines the abstract interfaces that decouple the engine from
optional external collaborators. Implementations live outside the engine.

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the engine needs)
- Adapters: Concrete implementations supplied by the caller

Usage:
    from application.ports import ExternalStrategy

    class MyStrategy:
        async def enhance_insights(self, insights, context): ...
        async def generate_recommendations(self, context): ...
        async def analyze_user_preferences(self, context): ...
        async def generate_workout(self, context): ...

    orchestrator.set_external_strategy(MyStrategy())
"""

from application.ports.external_strategy import REQUIRED_METHODS, ExternalStrategy

__all__ = [
    "ExternalStrategy",
    "REQUIRED_METHODS",
]
