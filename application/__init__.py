"""
Application layer for the workout insights engine.

This package contains:
- orchestrator.py: AnalysisOrchestrator, the engine's public surface
- exceptions.py: Errors raised to (or absorbed on behalf of) callers
- ports/: Interfaces for optional external collaborators
"""
