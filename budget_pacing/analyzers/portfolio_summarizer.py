"""Portfolio summarizer: folds per-account pacing records into totals."""

from datetime import date
from typing import List, Optional, Tuple

from budget_pacing.analyzers.pacing_calculator import PacingCalculator
from budget_pacing.models.spend import (
    AccountConfig,
    PacingRecord,
    PacingStatus,
    PortfolioSummary,
)


def summarize_portfolio(
    pairs: List[Tuple[AccountConfig, Optional[PacingRecord]]],
    today: Optional[date] = None,
    calculator: Optional[PacingCalculator] = None
) -> PortfolioSummary:
    """
    Aggregate pacing across a portfolio.

    Only accounts with a positive budget feed the totals, the average pacing
    ratio and the status counts. No-budget accounts are counted separately;
    accounts without a record are ignored.

    Args:
        pairs: (AccountConfig, PacingRecord) pairs
        today: When given, also compute the overall record for the
            aggregate budget and spend over the calendar month
        calculator: Calculator used for the overall record

    Returns:
        PortfolioSummary
    """
    summary = PortfolioSummary()
    ratio_sum = 0.0

    for _, record in pairs:
        if record is None:
            continue

        if record.status == PacingStatus.NO_BUDGET or record.budget <= 0:
            summary.no_budget_accounts += 1
            continue

        summary.tracked_accounts += 1
        summary.total_budget += record.budget
        summary.total_spend += record.spent
        summary.total_daily_recommended += record.daily_recommended_spend
        ratio_sum += record.pacing_ratio

        if record.status == PacingStatus.ON_TRACK:
            summary.on_track_count += 1
        elif record.status == PacingStatus.OVER:
            summary.over_count += 1
        elif record.status == PacingStatus.UNDER:
            summary.under_count += 1

    if summary.tracked_accounts > 0:
        summary.average_pacing_ratio = ratio_sum / summary.tracked_accounts

    if today is not None:
        calculator = calculator or PacingCalculator()
        summary.overall = calculator.calculate(
            budget=summary.total_budget,
            spent=summary.total_spend,
            today=today,
        )

    return summary
