"""
Main orchestrator for budget pacing refreshes.

This module provides the entry point for refreshing a whole portfolio and
keeping the most recent report available to a presentation layer.
"""

import os
import threading
from datetime import date
from typing import Dict, List, Optional

from budget_pacing.agents.pacing_brain import PacingBrain
from budget_pacing.analyzers.pacing_calculator import PacingCalculator
from budget_pacing.analyzers.spend_aggregator import FetchFn, SpendAggregator
from budget_pacing.models.spend import AccountConfig, Platform, PortfolioReport
from budget_pacing.utils.audit_logger import AuditLogger


class PacingOrchestrator:
    """
    Orchestrates portfolio refreshes.

    Responsibilities:
    - Wire platform fetchers, calculator and audit logger together
    - Number every refresh with a generation
    - Publish a report only if no newer refresh has been published, so
      overlapping refreshes resolve to the most recently started one
    """

    def __init__(
        self,
        fetchers: Dict[Platform, FetchFn],
        audit_log_file: str = "audit_log.jsonl",
        max_workers: int = SpendAggregator.MAX_WORKERS,
        calculator: Optional[PacingCalculator] = None
    ):
        """
        Initialize orchestrator.

        Args:
            fetchers: Fetch function per platform kind
            audit_log_file: Path to audit log file
            max_workers: Thread pool size for concurrent fetches
            calculator: Optional PacingCalculator with custom thresholds
        """
        self.audit_logger = AuditLogger(log_file=audit_log_file)
        self.aggregator = SpendAggregator(
            fetchers=fetchers,
            audit_logger=self.audit_logger,
            max_workers=max_workers,
        )
        self.brain = PacingBrain(
            aggregator=self.aggregator,
            calculator=calculator,
            audit_logger=self.audit_logger,
        )

        self._lock = threading.Lock()
        self._next_generation = 0
        self._latest_report: Optional[PortfolioReport] = None

    @property
    def latest_report(self) -> Optional[PortfolioReport]:
        """Most recently started refresh that has completed."""
        with self._lock:
            return self._latest_report

    def refresh(
        self,
        accounts: List[AccountConfig],
        today: date,
        manual_spend: Optional[Dict[str, float]] = None
    ) -> PortfolioReport:
        """
        Refresh the whole portfolio.

        The returned report is always the one computed by this call; it only
        becomes latest_report if no newer refresh has been published first.

        Args:
            accounts: Portfolio accounts
            today: Reference date
            manual_spend: Manually entered spend per account id

        Returns:
            PortfolioReport
        """
        with self._lock:
            self._next_generation += 1
            generation = self._next_generation

        report = self.brain.run(
            accounts,
            today,
            manual_spend=manual_spend,
            generation=generation,
        )

        with self._lock:
            if self._latest_report is None or generation > self._latest_report.generation:
                self._latest_report = report

        return report


def _print_report(report: PortfolioReport):
    """Print summary report of a refresh."""
    summary = report.summary

    print(f"\n{'=' * 70}")
    print(f"📊 Budget Pacing — {report.today.isoformat()}")
    print(f"{'=' * 70}\n")

    for account, record in report.pairs():
        if record is None:
            continue
        snapshot = report.snapshots.get(account.id)
        source = "auto" if snapshot and snapshot.is_automatic else "manual"
        print(
            f"  {account.name:<28} {record.status.value:<10} "
            f"spent €{record.spent:>10,.0f} / €{record.budget:>10,.0f} "
            f"({record.pacing_ratio:.0%}, {source})"
        )

    print(f"\nTracked accounts:       {summary.tracked_accounts}")
    print(f"✅ On track:            {summary.on_track_count}")
    print(f"🔺 Over-pacing:         {summary.over_count}")
    print(f"🔻 Under-pacing:        {summary.under_count}")
    print(f"❔ No budget:           {summary.no_budget_accounts}")
    print(f"Average pacing:         {summary.average_pacing_ratio:.0%}")
    print(f"Daily recommended:      €{summary.total_daily_recommended:,.0f}")

    print("\nAlerts:")
    for alert in report.alerts:
        print(f"  - [{alert.alert_type}] {alert.message}")

    print(f"\n{'=' * 70}\n")


def main():
    """
    Run a refresh against mock platform APIs.

    Usage:
        python -m budget_pacing.orchestrator
    """
    from budget_pacing.api.mock_platform_api import MockPlatformAPI
    from budget_pacing.models.spend import DataSourceRef

    audit_log_file = os.getenv("PACING_AUDIT_LOG", "audit_log.jsonl")
    max_workers = int(os.getenv("PACING_MAX_WORKERS", str(SpendAggregator.MAX_WORKERS)))
    calculator = PacingCalculator(
        over_threshold=float(os.getenv("PACING_OVER_THRESHOLD", str(PacingCalculator.OVER_THRESHOLD))),
        under_threshold=float(os.getenv("PACING_UNDER_THRESHOLD", str(PacingCalculator.UNDER_THRESHOLD))),
    )

    apis = {
        platform: MockPlatformAPI(platform, num_accounts=5, seed=42)
        for platform in (Platform.GOOGLE_ADS, Platform.META_ADS)
    }

    today = date.today()
    accounts = []
    for i in range(5):
        google_id = apis[Platform.GOOGLE_ADS].list_account_ids()[i]
        meta_id = apis[Platform.META_ADS].list_account_ids()[i]
        daily = (
            apis[Platform.GOOGLE_ADS].accounts[google_id]["daily_budget"] +
            apis[Platform.META_ADS].accounts[meta_id]["daily_budget"]
        )
        accounts.append(AccountConfig(
            id=f"client_{i:03d}",
            name=f"Client {i + 1}",
            monthly_budget=round(daily * 30) if i != 4 else None,
            data_sources=[
                DataSourceRef(Platform.GOOGLE_ADS, google_id),
                DataSourceRef(Platform.META_ADS, meta_id),
            ],
        ))

    orchestrator = PacingOrchestrator(
        fetchers={platform: api.fetch for platform, api in apis.items()},
        audit_log_file=audit_log_file,
        max_workers=max_workers,
        calculator=calculator,
    )

    report = orchestrator.refresh(accounts, today)
    _print_report(report)


if __name__ == "__main__":
    main()
