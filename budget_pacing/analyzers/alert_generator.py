"""
Alert generator.

Scans pacing records across a portfolio and emits human-readable advisories:
accounts without a budget, over-pacing excess per day and under-pacing
deficit per day.
"""

from typing import List, Optional, Tuple

from budget_pacing.models.spend import (
    AccountConfig,
    PacingAlert,
    PacingRecord,
    PacingStatus,
)


def _round_amount(value: float) -> int:
    # Half away from zero, not banker's rounding
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def _format_amount(amount: int) -> str:
    return f"€{amount:,}"


def generate_alerts(
    pairs: List[Tuple[AccountConfig, Optional[PacingRecord]]]
) -> List[PacingAlert]:
    """
    Generate advisories for a portfolio.

    Args:
        pairs: (AccountConfig, PacingRecord) pairs

    Returns:
        List of PacingAlert; a single "healthy" advisory when nothing needs
        attention
    """
    alerts: List[PacingAlert] = []

    no_budget_count = sum(1 for account, _ in pairs if not account.has_budget)
    if no_budget_count > 0:
        noun = "account has" if no_budget_count == 1 else "accounts have"
        alerts.append(PacingAlert(
            alert_type="info",
            message=f"{no_budget_count} {noun} no monthly budget set.",
            amount=no_budget_count,
        ))

    for account, record in pairs:
        if record is None or record.status == PacingStatus.NO_BUDGET:
            continue
        if record.days_remaining <= 0:
            continue

        if record.status == PacingStatus.OVER:
            excess = _round_amount(record.burn_rate - record.daily_target)
            alerts.append(PacingAlert(
                alert_type="over",
                message=(
                    f"{account.name} is over-pacing: spending "
                    f"{_format_amount(excess)}/day above target. "
                    f"Consider lowering daily budgets."
                ),
                account_id=account.id,
                account_name=account.name,
                amount=excess,
            ))
        elif record.status == PacingStatus.UNDER:
            deficit = _round_amount(record.daily_target - record.burn_rate)
            alerts.append(PacingAlert(
                alert_type="under",
                message=(
                    f"{account.name} is under-pacing: spending "
                    f"{_format_amount(deficit)}/day below target. "
                    f"Consider raising bids or budgets."
                ),
                account_id=account.id,
                account_name=account.name,
                amount=deficit,
            ))

    if not alerts:
        alerts.append(PacingAlert(
            alert_type="healthy",
            message="All accounts are pacing within range. No action required.",
        ))

    return alerts
