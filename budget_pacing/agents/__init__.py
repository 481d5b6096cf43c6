"""LangGraph refresh workflow."""

from budget_pacing.agents.pacing_brain import PacingBrain, RefreshState

__all__ = [
    "PacingBrain",
    "RefreshState",
]
