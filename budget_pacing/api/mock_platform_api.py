"""
Mock Platform API for Google Ads and Meta Ads.

Simulates platform report endpoints returning per-day spend rows, with
configurable pacing scenarios and failure injection, so the pacing core can
be exercised without real API credentials.
"""

import random
from datetime import date, timedelta
from typing import Dict, List, Optional, Set

from budget_pacing.api.platform_rows import (
    MICROS_PER_UNIT,
    parse_google_ads_rows,
    parse_meta_insights_rows,
)
from budget_pacing.models.spend import FetchResult, Platform
from budget_pacing.utils.period import format_iso_date, parse_iso_date


class MockPlatformAPI:
    """
    Simulated platform reporting API with deterministic output.

    Each account spends a daily budget scaled by a pace factor drawn from
    its scenario:
    - on_track: within ±8% of the daily budget
    - under: 50-75% of the daily budget
    - over: 125-160% of the daily budget
    - dark: no delivery at all

    The same (seed, account, day) always yields the same row, so any fetch
    window returns consistent numbers.
    """

    PACE_SCENARIOS = {
        "on_track": [0.92, 0.95, 0.97, 1.00, 1.03, 1.05, 1.08],
        "under": [0.50, 0.60, 0.70, 0.75],
        "over": [1.25, 1.35, 1.45, 1.60],
        "dark": [0.0],
    }

    # Cost per conversion relative to daily budget
    CONVERSION_COST_SHARE = 0.1

    def __init__(self, platform: Platform, num_accounts: int = 0, seed: Optional[int] = None):
        """
        Initialize mock API for a specific platform.

        Args:
            platform: Platform enum (GOOGLE_ADS or META_ADS)
            num_accounts: Number of accounts to generate up front
            seed: Random seed for reproducibility
        """
        self.platform = platform
        self.seed = seed if seed is not None else 0
        self.accounts: Dict[str, Dict] = {}
        self.failing_accounts: Set[str] = set()
        self.raising_accounts: Set[str] = set()
        self.calls: List[tuple] = []

        rng = random.Random(self.seed)
        scenario_distribution = ["on_track"] * 4 + ["under", "over"] * 2 + ["dark"]
        for i in range(num_accounts):
            self.add_account(
                account_id=f"{self.platform.value}_{i:03d}",
                daily_budget=round(rng.uniform(50, 500), 2),
                scenario=rng.choice(scenario_distribution),
            )

    def add_account(self, account_id: str, daily_budget: float, scenario: str = "on_track"):
        """
        Register an account.

        Raises:
            ValueError: If the scenario is unknown
        """
        if scenario not in self.PACE_SCENARIOS:
            raise ValueError(f"Unknown scenario: {scenario}")
        self.accounts[account_id] = {
            "daily_budget": daily_budget,
            "scenario": scenario,
        }

    def set_failing(self, account_id: str, failing: bool = True, raise_error: bool = False):
        """
        Make fetches for an account fail.

        Args:
            account_id: External account id
            failing: Enable or disable the failure
            raise_error: Raise an exception instead of returning success=False
        """
        target = self.raising_accounts if raise_error else self.failing_accounts
        if failing:
            target.add(account_id)
        else:
            target.discard(account_id)

    def list_account_ids(self) -> List[str]:
        return list(self.accounts)

    def _day_spend(self, account_id: str, day: date) -> float:
        account = self.accounts[account_id]
        rng = random.Random(f"{self.seed}:{self.platform.value}:{account_id}:{day.isoformat()}")
        factor = rng.choice(self.PACE_SCENARIOS[account["scenario"]])
        return round(account["daily_budget"] * factor, 2)

    def _native_row(self, account_id: str, day: date) -> Dict:
        spend = self._day_spend(account_id, day)
        cost_per_conversion = self.accounts[account_id]["daily_budget"] * self.CONVERSION_COST_SHARE
        conversions = int(spend // cost_per_conversion) if cost_per_conversion > 0 else 0

        if self.platform == Platform.GOOGLE_ADS:
            return {
                "segments": {"date": format_iso_date(day)},
                "metrics": {
                    "costMicros": str(int(round(spend * MICROS_PER_UNIT))),
                    "conversions": float(conversions),
                },
            }

        return {
            "date_start": format_iso_date(day),
            "date_stop": format_iso_date(day),
            "spend": f"{spend:.2f}",
            "actions": [
                {"action_type": "link_click", "value": str(conversions * 12)},
                {"action_type": "purchase", "value": str(conversions)},
            ],
        }

    def get_report_rows(self, account_id: str, start_date: str, end_date: str) -> List[Dict]:
        """
        Platform-native report rows, one per day in the inclusive range.

        Raises:
            ValueError: If the account is unknown
        """
        if account_id not in self.accounts:
            raise ValueError(
                f"Account {account_id} not found on {self.platform.value} platform"
            )

        start = parse_iso_date(start_date)
        end = parse_iso_date(end_date)

        rows = []
        day = start
        while day <= end:
            rows.append(self._native_row(account_id, day))
            day += timedelta(days=1)
        return rows

    def fetch(self, account_id: str, start_date: str, end_date: str) -> FetchResult:
        """
        Fetch spend rows for an account (outbound fetch contract).

        Unknown accounts return an unsuccessful result rather than raising.
        """
        self.calls.append((account_id, start_date, end_date))

        if account_id in self.raising_accounts:
            raise ConnectionError(f"[MOCK] {self.platform.value} API unavailable")
        if account_id in self.failing_accounts:
            return FetchResult.failure(f"[MOCK] {self.platform.value} returned an error")
        if account_id not in self.accounts:
            return FetchResult.failure(
                f"Account {account_id} not found on {self.platform.value} platform"
            )

        native = self.get_report_rows(account_id, start_date, end_date)
        if self.platform == Platform.GOOGLE_ADS:
            rows = parse_google_ads_rows(native)
        else:
            rows = parse_meta_insights_rows(native)

        return FetchResult(success=True, rows=rows)

    def get_summary_stats(self, start_date: str, end_date: str) -> Dict[str, any]:
        """
        Summary statistics for all accounts over a date range.

        Returns:
            Dictionary with aggregated stats
        """
        total_spend = 0.0
        scenario_counts = {}
        for account_id, account in self.accounts.items():
            result = self.fetch(account_id, start_date, end_date)
            if result.success:
                total_spend += sum(row.spend for row in result.rows)
            scenario = account["scenario"]
            scenario_counts[scenario] = scenario_counts.get(scenario, 0) + 1

        return {
            "platform": self.platform.value,
            "total_accounts": len(self.accounts),
            "total_spend": total_spend,
            "scenario_distribution": scenario_counts,
        }
