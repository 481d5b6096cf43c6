"""
Spend aggregator.

Fetches raw spend rows from every data source of an account and merges them
into a single SpendSnapshot. Each data source is fetched concurrently and
independently: a failing source is logged and skipped, never fatal.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date
from functools import reduce
from typing import Callable, Dict, List, Optional, Tuple

from budget_pacing.models.spend import (
    AccountConfig,
    DataSourceRef,
    FetchResult,
    Platform,
    SpendSnapshot,
)
from budget_pacing.utils.audit_logger import AuditLogger
from budget_pacing.utils.period import format_iso_date, month_start

# (account_id, start_date, end_date) -> FetchResult; may raise
FetchFn = Callable[[str, str, str], FetchResult]


class SpendAggregator:
    """
    Merge per-platform spend into account snapshots.

    Responsibilities:
    - Work out the fetch window for an account and reference date
    - Fan out one fetch per data source on a thread pool
    - Fold successful partial snapshots into one
    - Log failed sources to the audit trail
    """

    MAX_WORKERS = 8

    def __init__(
        self,
        fetchers: Dict[Platform, FetchFn],
        audit_logger: Optional[AuditLogger] = None,
        max_workers: int = MAX_WORKERS
    ):
        """
        Initialize aggregator.

        Args:
            fetchers: Fetch function per platform kind
            audit_logger: Optional AuditLogger instance
            max_workers: Thread pool size for concurrent fetches
        """
        self.fetchers = dict(fetchers)
        self.audit_logger = audit_logger or AuditLogger()
        self.max_workers = max_workers

    def fetch_window(self, account: AccountConfig, today: date) -> Optional[Tuple[date, date]]:
        """
        Date range to fetch spend for.

        Explicit periods are capped at today so no future rows are pulled;
        a period that has not started yet has nothing to fetch (None).
        Without a period, the window is the first of the month through today.
        """
        if account.has_explicit_period:
            if today < account.period_start:
                return None
            return account.period_start, min(account.period_end, today)

        return month_start(today), today

    def fetch_source(
        self,
        account: AccountConfig,
        source: DataSourceRef,
        start: date,
        end: date
    ) -> Optional[SpendSnapshot]:
        """
        Fetch one data source.

        Returns:
            Partial SpendSnapshot, or None if the fetch failed
        """
        fetcher = self.fetchers.get(source.platform)
        if fetcher is None:
            self._log_failure(account, source, "No fetcher registered for platform")
            return None

        try:
            result = fetcher(source.account_id, format_iso_date(start), format_iso_date(end))
            if not result.success:
                self._log_failure(account, source, result.error or "Fetch reported failure")
                return None
            return SpendSnapshot.from_rows(source.platform, result.rows)
        except Exception as e:
            self._log_failure(account, source, str(e))
            return None

    def aggregate(self, account: AccountConfig, today: date) -> SpendSnapshot:
        """
        Aggregate spend across every data source of an account.

        Args:
            account: Account configuration
            today: Reference date

        Returns:
            Merged SpendSnapshot; empty (is_automatic False) when the account
            has no sources or every fetch failed
        """
        window = self.fetch_window(account, today)
        if not account.data_sources or window is None:
            return SpendSnapshot.empty()

        start, end = window
        partials: List[SpendSnapshot] = []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self.fetch_source, account, source, start, end)
                for source in account.data_sources
            ]
            for future in as_completed(futures):
                partial = future.result()
                if partial is not None:
                    partials.append(partial)

        return reduce(SpendSnapshot.merge, partials, SpendSnapshot.empty())

    def aggregate_many(
        self,
        accounts: List[AccountConfig],
        today: date
    ) -> Dict[str, SpendSnapshot]:
        """
        Aggregate every account of a portfolio concurrently.

        Waits for all accounts to settle. An unexpected failure for one
        account is logged and yields an empty snapshot for that account.
        """
        snapshots: Dict[str, SpendSnapshot] = {}
        if not accounts:
            return snapshots

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self.aggregate, account, today): account
                for account in accounts
            }
            for future in as_completed(futures):
                account = futures[future]
                try:
                    snapshots[account.id] = future.result()
                except Exception as e:
                    self.audit_logger.log_error(
                        error_type="aggregation_error",
                        error_message=str(e),
                        account_id=account.id,
                    )
                    snapshots[account.id] = SpendSnapshot.empty()

        return snapshots

    def _log_failure(self, account: AccountConfig, source: DataSourceRef, message: str):
        self.audit_logger.log_fetch_failure(
            account_id=account.id,
            platform=source.platform.value,
            source_account_id=source.account_id,
            error_message=message,
        )
