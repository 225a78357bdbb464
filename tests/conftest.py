"""
Pytest fixtures shared by the unit and integration tests.
"""

import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

# Ensure repository root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from api.deps import get_orchestrator
from application.orchestrator import AnalysisOrchestrator
from backend.engine import build_orchestrator
from backend.main import create_app
from backend.settings import Settings
from domain.models import (
    AnalysisContext,
    EnvironmentalFactors,
    Interaction,
    UserProfile,
    WorkoutSelections,
)
from tests.fakes import FakeExternalStrategy


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with no retries waiting and a short timeout."""
    return Settings(
        environment="test",
        external_strategy_timeout_seconds=0.5,
        external_strategy_backoff_seconds=0,
        _env_file=None,
    )


# ---------------------------------------------------------------------------
# Context factory
# ---------------------------------------------------------------------------


@pytest.fixture
def make_context() -> Callable[..., AnalysisContext]:
    """Factory for analysis contexts with sensible defaults."""

    def _make(
        selections: Optional[Dict[str, Any]] = None,
        fitness_level: str = "intermediate",
        goals: Optional[List[str]] = None,
        time_of_day: Optional[str] = None,
        location: Optional[str] = None,
        available_time: Optional[float] = None,
        history: Optional[List[Interaction]] = None,
    ) -> AnalysisContext:
        return AnalysisContext(
            user_profile=UserProfile(fitness_level=fitness_level, goals=goals or []),
            current_selections=WorkoutSelections(**(selections or {})),
            session_history=history or [],
            environmental_factors=EnvironmentalFactors(
                time_of_day=time_of_day,
                location=location,
                available_time=available_time,
            ),
        )

    return _make


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


@pytest.fixture
def orchestrator(test_settings: Settings) -> AnalysisOrchestrator:
    """A fresh orchestrator with no context."""
    return build_orchestrator(test_settings)


@pytest.fixture
def fake_strategy() -> FakeExternalStrategy:
    return FakeExternalStrategy()


# ---------------------------------------------------------------------------
# Test App and Client
# ---------------------------------------------------------------------------


@pytest.fixture
def client(test_settings: Settings, orchestrator: AnalysisOrchestrator):
    """Test client whose requests share the `orchestrator` fixture."""
    app = create_app(settings=test_settings)
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
