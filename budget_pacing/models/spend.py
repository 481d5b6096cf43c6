"""
Data models for budget pacing.

This module defines the core data structures used throughout the pacing core:
- Platform enum and DataSourceRef for the ad sources attached to an account
- AccountConfig for the budget target owned by the external account store
- RawSpendRow and FetchResult for what platform fetchers hand back
- SpendSnapshot for merged spend across platforms
- PacingRecord, PacingAlert and PortfolioSummary for the computed outputs
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional, Dict, List, Any

from budget_pacing.utils.period import parse_iso_date, format_iso_date


def _optional_amount(value: Any, field_name: str) -> Optional[float]:
    """Parse a stored amount; None and blank strings mean unset."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be a number, got {value!r}")


class Platform(Enum):
    """Supported ad platforms."""
    GOOGLE_ADS = "google_ads"
    META_ADS = "meta_ads"


class PacingStatus(Enum):
    """Pacing classification of an account."""
    ON_TRACK = "on_track"
    UNDER = "under"
    OVER = "over"
    NO_BUDGET = "no_budget"


# Platform action types counted as conversions
CONVERSION_ACTION_TYPES = frozenset([
    "purchase",
    "lead",
    "complete_registration",
    "omni_purchase",
    "offsite_conversion.fb_pixel_purchase",
    "offsite_conversion.fb_pixel_lead",
    "offsite_conversion.fb_pixel_complete_registration",
    "onsite_conversion.lead_grouped",
])


@dataclass(frozen=True)
class DataSourceRef:
    """One (platform, external account id) pair feeding an account."""
    platform: Platform
    account_id: str

    def to_dict(self) -> Dict[str, str]:
        return {"platform": self.platform.value, "accountId": self.account_id}


@dataclass
class AccountConfig:
    """
    Budget configuration of a single ad account.

    Owned by the external account store and read-only to the pacing core.
    When no explicit period is set, the calendar month containing "today"
    is used.

    Raises:
        ValueError: If the budget is negative, only one period bound is set,
            or period_start is after period_end.
    """
    id: str
    name: str
    monthly_budget: Optional[float] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    target_cost_per_conversion: Optional[float] = None
    data_sources: List[DataSourceRef] = field(default_factory=list)

    def __post_init__(self):
        if self.monthly_budget is not None and self.monthly_budget < 0:
            raise ValueError(
                f"Account {self.id}: monthly budget must be non-negative, "
                f"got {self.monthly_budget}"
            )

        if (self.period_start is None) != (self.period_end is None):
            raise ValueError(
                f"Account {self.id}: period_start and period_end must be set together"
            )

        if self.period_start and self.period_end and self.period_start > self.period_end:
            raise ValueError(
                f"Account {self.id}: period_start ({self.period_start}) "
                f"is after period_end ({self.period_end})"
            )

    @property
    def has_budget(self) -> bool:
        """Check if a positive budget is configured."""
        return self.monthly_budget is not None and self.monthly_budget > 0

    @property
    def has_explicit_period(self) -> bool:
        return self.period_start is not None and self.period_end is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccountConfig":
        """
        Build a config from an account store document.

        Accepts camelCase keys as stored by the account store
        (monthlyBudget, periodStart, dataSources, ...).
        """
        sources = [
            DataSourceRef(
                platform=Platform(ds["platform"]),
                account_id=str(ds["accountId"]),
            )
            for ds in data.get("dataSources") or []
        ]

        budget = data.get("monthlyBudget")
        target_cpa = data.get("targetCostPerConversion")

        return cls(
            id=str(data["id"]),
            name=data.get("name") or str(data["id"]),
            monthly_budget=_optional_amount(budget, "monthlyBudget"),
            period_start=parse_iso_date(data.get("periodStart")),
            period_end=parse_iso_date(data.get("periodEnd")),
            target_cost_per_conversion=_optional_amount(target_cpa, "targetCostPerConversion"),
            data_sources=sources,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the account store document shape."""
        return {
            "id": self.id,
            "name": self.name,
            "monthlyBudget": self.monthly_budget,
            "periodStart": format_iso_date(self.period_start) if self.period_start else None,
            "periodEnd": format_iso_date(self.period_end) if self.period_end else None,
            "targetCostPerConversion": self.target_cost_per_conversion,
            "dataSources": [ds.to_dict() for ds in self.data_sources],
        }


@dataclass
class RawSpendRow:
    """
    Single per-day spend row returned by a platform fetcher.

    Amounts are in account currency units (euros, not cents).
    """
    date: str  # ISO YYYY-MM-DD
    spend: float
    conversions: float = 0.0
    dimension: Optional[str] = None
    actions: Dict[str, float] = field(default_factory=dict)

    @property
    def conversion_count(self) -> float:
        """
        Conversions carried by this row.

        When platform actions are present, only conversion-like action types
        (purchases, leads, registrations) are summed.
        """
        if not self.actions:
            return self.conversions
        return sum(
            value for action_type, value in self.actions.items()
            if action_type in CONVERSION_ACTION_TYPES
        )


@dataclass
class FetchResult:
    """Outcome of one platform fetch."""
    success: bool
    rows: List[RawSpendRow] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "FetchResult":
        return cls(success=False, rows=[], error=error)


@dataclass(frozen=True)
class SpendSnapshot:
    """
    Spend merged across every data source of an account.

    Snapshots are immutable: merge() returns a new snapshot, so partial
    results from concurrent fetches can be combined in any order.
    """
    total_spend: float = 0.0
    total_conversions: float = 0.0
    platform_spend: Dict[Platform, float] = field(default_factory=dict)
    daily_spend: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "SpendSnapshot":
        return cls()

    @classmethod
    def from_rows(cls, platform: Platform, rows: List[RawSpendRow]) -> "SpendSnapshot":
        """
        Build the partial snapshot of one successful fetch.

        The platform key is present even when the fetch returned no rows.
        """
        spend = 0.0
        conversions = 0.0
        daily: Dict[str, float] = {}

        for row in rows:
            spend += row.spend
            conversions += row.conversion_count
            daily[row.date] = daily.get(row.date, 0.0) + row.spend

        return cls(
            total_spend=spend,
            total_conversions=conversions,
            platform_spend={platform: spend},
            daily_spend=daily,
        )

    @property
    def is_automatic(self) -> bool:
        """True iff at least one platform fetch succeeded."""
        return len(self.platform_spend) > 0

    def merge(self, other: "SpendSnapshot") -> "SpendSnapshot":
        """Add two snapshots together."""
        platform_spend = dict(self.platform_spend)
        for platform, amount in other.platform_spend.items():
            platform_spend[platform] = platform_spend.get(platform, 0.0) + amount

        daily_spend = dict(self.daily_spend)
        for day, amount in other.daily_spend.items():
            daily_spend[day] = daily_spend.get(day, 0.0) + amount

        return SpendSnapshot(
            total_spend=self.total_spend + other.total_spend,
            total_conversions=self.total_conversions + other.total_conversions,
            platform_spend=platform_spend,
            daily_spend=dict(sorted(daily_spend.items())),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_spend": self.total_spend,
            "total_conversions": self.total_conversions,
            "platform_spend": {p.value: amount for p, amount in self.platform_spend.items()},
            "daily_spend": dict(self.daily_spend),
            "is_automatic": self.is_automatic,
        }


@dataclass(frozen=True)
class PacingRecord:
    """
    Full pacing picture of one account at a reference date.

    Produced by the pacing calculator; a pure function of its inputs.
    """
    budget: float
    spent: float
    ideal_spend: float
    forecasted_spend: float
    pacing_ratio: float
    status: PacingStatus
    days_in_period: int
    day_of_period: int
    days_remaining: int
    progress_percent: float
    daily_recommended_spend: float
    burn_rate: float
    remaining_budget: float
    actual_cost_per_conversion: Optional[float] = None
    is_performance_good: bool = False

    @property
    def is_favorable_over_pace(self) -> bool:
        """
        Over-pacing while beating the target cost per conversion.

        Display hint only; status stays OVER.
        """
        return self.status == PacingStatus.OVER and self.is_performance_good

    @property
    def daily_target(self) -> float:
        """Linear spend per day needed to land on budget."""
        return self.budget / self.days_in_period if self.days_in_period > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "budget": self.budget,
            "spent": self.spent,
            "ideal_spend": self.ideal_spend,
            "forecasted_spend": self.forecasted_spend,
            "pacing_ratio": self.pacing_ratio,
            "status": self.status.value,
            "days_in_period": self.days_in_period,
            "day_of_period": self.day_of_period,
            "days_remaining": self.days_remaining,
            "progress_percent": self.progress_percent,
            "daily_recommended_spend": self.daily_recommended_spend,
            "burn_rate": self.burn_rate,
            "remaining_budget": self.remaining_budget,
            "actual_cost_per_conversion": self.actual_cost_per_conversion,
            "is_performance_good": self.is_performance_good,
            "is_favorable_over_pace": self.is_favorable_over_pace,
        }


@dataclass
class PacingAlert:
    """
    Human-readable advisory about the portfolio.

    alert_type is one of "over", "under", "info" or "healthy".
    """
    alert_type: str
    message: str
    account_id: Optional[str] = None
    account_name: Optional[str] = None
    amount: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alert_type": self.alert_type,
            "message": self.message,
            "account_id": self.account_id,
            "account_name": self.account_name,
            "amount": self.amount,
        }

    def __str__(self) -> str:
        return f"PacingAlert(type={self.alert_type}, message={self.message!r})"


@dataclass
class PortfolioSummary:
    """Totals across every account with a budget."""
    tracked_accounts: int = 0
    no_budget_accounts: int = 0
    total_budget: float = 0.0
    total_spend: float = 0.0
    average_pacing_ratio: float = 0.0
    on_track_count: int = 0
    over_count: int = 0
    under_count: int = 0
    total_daily_recommended: float = 0.0
    overall: Optional[PacingRecord] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "tracked_accounts": self.tracked_accounts,
            "no_budget_accounts": self.no_budget_accounts,
            "total_budget": self.total_budget,
            "total_spend": self.total_spend,
            "average_pacing_ratio": self.average_pacing_ratio,
            "on_track_count": self.on_track_count,
            "over_count": self.over_count,
            "under_count": self.under_count,
            "total_daily_recommended": self.total_daily_recommended,
            "overall": self.overall.to_dict() if self.overall else None,
        }


@dataclass
class PortfolioReport:
    """Everything a presentation layer needs after one refresh."""
    today: date
    accounts: List[AccountConfig]
    snapshots: Dict[str, SpendSnapshot]
    records: Dict[str, Optional[PacingRecord]]
    summary: PortfolioSummary
    alerts: List[PacingAlert]
    generation: int = 0

    def pairs(self) -> List[tuple]:
        """(AccountConfig, PacingRecord) pairs in account order."""
        return [(account, self.records.get(account.id)) for account in self.accounts]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "today": format_iso_date(self.today),
            "generation": self.generation,
            "accounts": [
                {
                    "account": account.to_dict(),
                    "snapshot": self.snapshots[account.id].to_dict()
                    if account.id in self.snapshots else None,
                    "pacing": record.to_dict() if record else None,
                }
                for account, record in self.pairs()
            ],
            "summary": self.summary.to_dict(),
            "alerts": [alert.to_dict() for alert in self.alerts],
        }
