"""Pacing calculation, spend aggregation, summaries and advisories."""

from budget_pacing.analyzers.pacing_calculator import PacingCalculator, calculate_pacing
from budget_pacing.analyzers.spend_aggregator import SpendAggregator
from budget_pacing.analyzers.portfolio_summarizer import summarize_portfolio
from budget_pacing.analyzers.alert_generator import generate_alerts
from budget_pacing.analyzers.sort_filter import filter_and_sort

__all__ = [
    "PacingCalculator",
    "calculate_pacing",
    "SpendAggregator",
    "summarize_portfolio",
    "generate_alerts",
    "filter_and_sort",
]
