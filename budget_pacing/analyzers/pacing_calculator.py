"""
Pacing calculator.

Compares spend-to-date against a linear ideal-spend line over the budget
period and classifies the account as on track, under-pacing or over-pacing.
"""

from datetime import date
from typing import Optional

from budget_pacing.models.spend import (
    AccountConfig,
    PacingRecord,
    PacingStatus,
    SpendSnapshot,
)
from budget_pacing.utils.period import resolve_period


class PacingCalculator:
    """
    Core pacing logic for ad account budgets.

    Classifies the pacing ratio (spent / ideal spend) into:
    - Over: ratio > 1.15
    - Under: ratio < 0.85
    - On track: anything in between
    Accounts without a positive budget are always no_budget.

    All divisions are guarded, so degenerate inputs yield zeros rather than
    NaN or infinity. Nothing here raises.
    """

    # Tolerance band around the ideal-spend line
    OVER_THRESHOLD = 1.15
    UNDER_THRESHOLD = 0.85

    def __init__(
        self,
        over_threshold: float = OVER_THRESHOLD,
        under_threshold: float = UNDER_THRESHOLD
    ):
        """
        Initialize calculator with configurable thresholds.

        Args:
            over_threshold: Pacing ratio above which an account is over-pacing
            under_threshold: Pacing ratio below which an account is under-pacing

        Raises:
            ValueError: If under_threshold is not below over_threshold
        """
        if under_threshold >= over_threshold:
            raise ValueError(
                f"under_threshold ({under_threshold}) must be below "
                f"over_threshold ({over_threshold})"
            )
        self.over_threshold = over_threshold
        self.under_threshold = under_threshold

    def classify(self, budget: float, pacing_ratio: float) -> PacingStatus:
        """
        Classify a pacing ratio. First match wins.

        Args:
            budget: Budget of the period
            pacing_ratio: spent / ideal spend (0 when ideal spend is 0)

        Returns:
            PacingStatus
        """
        if budget <= 0:
            return PacingStatus.NO_BUDGET
        if pacing_ratio > self.over_threshold:
            return PacingStatus.OVER
        if pacing_ratio < self.under_threshold:
            return PacingStatus.UNDER
        return PacingStatus.ON_TRACK

    def calculate(
        self,
        budget: float,
        spent: float,
        today: date,
        conversions: float = 0.0,
        target_cpa: Optional[float] = None,
        period_start: Optional[date] = None,
        period_end: Optional[date] = None
    ) -> PacingRecord:
        """
        Compute the full pacing record.

        Args:
            budget: Budget for the period
            spent: Spend to date
            today: Reference date
            conversions: Conversions to date
            target_cpa: Optional target cost per conversion
            period_start: Optional explicit period start
            period_end: Optional explicit period end

        Returns:
            PacingRecord
        """
        period = resolve_period(today, period_start, period_end)
        days_in_period = period.days_in_period
        day_of_period = period.day_of_period
        days_remaining = period.days_remaining

        ideal_spend = budget / days_in_period * day_of_period
        forecasted_spend = (spent / day_of_period) * days_in_period if day_of_period > 0 else 0.0
        pacing_ratio = spent / ideal_spend if ideal_spend > 0 else 0.0
        progress_percent = min(spent / budget * 100, 100.0) if budget > 0 else 0.0

        remaining_budget = max(budget - spent, 0.0)
        daily_recommended = remaining_budget / days_remaining if days_remaining > 0 else 0.0
        burn_rate = spent / day_of_period if day_of_period > 0 else 0.0

        actual_cpa = spent / conversions if conversions > 0 else None
        is_performance_good = (
            target_cpa is not None and
            actual_cpa is not None and
            actual_cpa <= target_cpa
        )

        return PacingRecord(
            budget=budget,
            spent=spent,
            ideal_spend=ideal_spend,
            forecasted_spend=forecasted_spend,
            pacing_ratio=pacing_ratio,
            status=self.classify(budget, pacing_ratio),
            days_in_period=days_in_period,
            day_of_period=day_of_period,
            days_remaining=days_remaining,
            progress_percent=progress_percent,
            daily_recommended_spend=daily_recommended,
            burn_rate=burn_rate,
            remaining_budget=remaining_budget,
            actual_cost_per_conversion=actual_cpa,
            is_performance_good=is_performance_good,
        )

    def for_account(
        self,
        account: AccountConfig,
        snapshot: SpendSnapshot,
        today: date,
        manual_spend: Optional[float] = None
    ) -> PacingRecord:
        """
        Compute pacing for a configured account.

        Uses the aggregated spend when at least one platform fetch succeeded,
        otherwise the manually entered spend figure (0 when none).
        """
        if snapshot.is_automatic:
            spent = snapshot.total_spend
            conversions = snapshot.total_conversions
        else:
            spent = manual_spend or 0.0
            conversions = 0.0

        return self.calculate(
            budget=account.monthly_budget or 0.0,
            spent=spent,
            today=today,
            conversions=conversions,
            target_cpa=account.target_cost_per_conversion,
            period_start=account.period_start,
            period_end=account.period_end,
        )

    def to_dict(self):
        """Export calculator configuration."""
        return {
            "over_threshold": self.over_threshold,
            "under_threshold": self.under_threshold,
        }


_default_calculator = PacingCalculator()


def calculate_pacing(
    budget: float,
    spent: float,
    today: date,
    conversions: float = 0.0,
    target_cpa: Optional[float] = None,
    period_start: Optional[date] = None,
    period_end: Optional[date] = None
) -> PacingRecord:
    """Compute a pacing record with the default ±15% band."""
    return _default_calculator.calculate(
        budget=budget,
        spent=spent,
        today=today,
        conversions=conversions,
        target_cpa=target_cpa,
        period_start=period_start,
        period_end=period_end,
    )
