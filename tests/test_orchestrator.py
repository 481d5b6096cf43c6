"""
Integration tests for the refresh workflow.

Runs PacingBrain and PacingOrchestrator end to end against mock platform
APIs.
"""

import threading
import pytest
from datetime import date
from budget_pacing.agents.pacing_brain import PacingBrain
from budget_pacing.analyzers.spend_aggregator import SpendAggregator
from budget_pacing.api.mock_platform_api import MockPlatformAPI
from budget_pacing.models.spend import (
    AccountConfig,
    DataSourceRef,
    FetchResult,
    PacingStatus,
    Platform,
    RawSpendRow,
)
from budget_pacing.orchestrator import PacingOrchestrator
from budget_pacing.utils.audit_logger import AuditLogger

TODAY = date(2026, 4, 10)


@pytest.fixture
def apis():
    """Mock Google and Meta APIs with one account per scenario."""
    google = MockPlatformAPI(Platform.GOOGLE_ADS, seed=1)
    google.add_account("g_on", daily_budget=100, scenario="on_track")
    google.add_account("g_over", daily_budget=100, scenario="over")

    meta = MockPlatformAPI(Platform.META_ADS, seed=1)
    meta.add_account("m_down", daily_budget=50, scenario="on_track")
    meta.set_failing("m_down")

    return {Platform.GOOGLE_ADS: google, Platform.META_ADS: meta}


@pytest.fixture
def accounts():
    return [
        AccountConfig(
            id="on",
            name="On Track Co",
            monthly_budget=3000,
            data_sources=[DataSourceRef(Platform.GOOGLE_ADS, "g_on")],
        ),
        AccountConfig(
            id="over",
            name="Over Spend Ltd",
            monthly_budget=3000,
            data_sources=[DataSourceRef(Platform.GOOGLE_ADS, "g_over")],
        ),
        AccountConfig(
            id="manual",
            name="Manual Entry SA",
            monthly_budget=1500,
            data_sources=[DataSourceRef(Platform.META_ADS, "m_down")],
        ),
        AccountConfig(id="nobudget", name="No Budget Inc"),
    ]


@pytest.fixture
def orchestrator(apis, tmp_path):
    return PacingOrchestrator(
        fetchers={platform: api.fetch for platform, api in apis.items()},
        audit_log_file=str(tmp_path / "audit.jsonl"),
    )


class TestRefresh:
    """Test a full portfolio refresh."""

    def test_records_per_account(self, orchestrator, accounts):
        report = orchestrator.refresh(accounts, TODAY, manual_spend={"manual": 500})

        assert report.records["on"].status == PacingStatus.ON_TRACK
        assert report.records["over"].status == PacingStatus.OVER
        assert report.records["manual"].status == PacingStatus.ON_TRACK
        assert report.records["nobudget"].status == PacingStatus.NO_BUDGET

    def test_manual_fallback(self, orchestrator, accounts):
        """Test failed fetches fall back to manual spend."""
        report = orchestrator.refresh(accounts, TODAY, manual_spend={"manual": 500})

        assert report.snapshots["manual"].is_automatic is False
        assert report.records["manual"].spent == 500
        assert report.snapshots["on"].is_automatic is True
        assert len(report.snapshots["on"].daily_spend) == 10

    def test_summary_and_alerts(self, orchestrator, accounts):
        report = orchestrator.refresh(accounts, TODAY, manual_spend={"manual": 500})

        assert report.summary.tracked_accounts == 3
        assert report.summary.no_budget_accounts == 1
        assert report.summary.on_track_count == 2
        assert report.summary.over_count == 1
        assert report.summary.overall is not None
        assert [a.alert_type for a in report.alerts] == ["info", "over"]
        assert report.alerts[1].account_name == "Over Spend Ltd"

    def test_audit_trail(self, orchestrator, accounts):
        """Test fetch failures and the refresh are written to the audit log."""
        orchestrator.refresh(accounts, TODAY, manual_spend={"manual": 500})
        logger = orchestrator.audit_logger

        failures = logger.get_events(event_type="fetch_error")
        assert len(failures) == 1
        assert failures[0]["account_id"] == "manual"

        assert len(logger.get_events(event_type="pacing_record")) == 4
        assert len(logger.get_events(event_type="refresh_completed")) == 1
        assert logger.get_summary_stats()["alerts_by_type"] == {"info": 1, "over": 1}

    def test_empty_portfolio(self, orchestrator):
        """Test an empty portfolio still reports a healthy advisory."""
        report = orchestrator.refresh([], TODAY)

        assert report.records == {}
        assert report.summary.tracked_accounts == 0
        assert [a.alert_type for a in report.alerts] == ["healthy"]

    def test_report_to_dict(self, orchestrator, accounts):
        data = orchestrator.refresh(accounts, TODAY).to_dict()

        assert data["today"] == "2026-04-10"
        assert len(data["accounts"]) == 4
        assert data["accounts"][0]["pacing"]["status"] == "on_track"

    def test_repeatable(self, orchestrator, accounts):
        """Test two refreshes of identical inputs give identical records."""
        first = orchestrator.refresh(accounts, TODAY, manual_spend={"manual": 500})
        second = orchestrator.refresh(accounts, TODAY, manual_spend={"manual": 500})

        assert first.records == second.records
        assert second.generation == first.generation + 1


class TestOverlappingRefreshes:
    """Test last-started refresh wins."""

    def test_stale_refresh_is_not_published(self, tmp_path):
        """Test a slow earlier refresh does not overwrite a newer report."""
        entered = threading.Event()
        release = threading.Event()

        def fetch(account_id, start_date, end_date):
            if account_id == "slow":
                entered.set()
                release.wait(timeout=5)
            return FetchResult(success=True, rows=[RawSpendRow(start_date, 10)])

        orchestrator = PacingOrchestrator(
            fetchers={Platform.GOOGLE_ADS: fetch},
            audit_log_file=str(tmp_path / "audit.jsonl"),
        )
        slow_accounts = [AccountConfig(
            id="a", name="A", monthly_budget=100,
            data_sources=[DataSourceRef(Platform.GOOGLE_ADS, "slow")],
        )]
        fast_accounts = [AccountConfig(
            id="b", name="B", monthly_budget=100,
            data_sources=[DataSourceRef(Platform.GOOGLE_ADS, "fast")],
        )]

        results = {}
        worker = threading.Thread(
            target=lambda: results.setdefault("slow", orchestrator.refresh(slow_accounts, TODAY))
        )
        worker.start()
        assert entered.wait(timeout=5)

        fast = orchestrator.refresh(fast_accounts, TODAY)
        assert orchestrator.latest_report is fast

        release.set()
        worker.join(timeout=5)

        assert results["slow"].generation == 1
        assert fast.generation == 2
        assert orchestrator.latest_report is fast


class TestPacingBrain:
    """Test the LangGraph workflow directly."""

    def test_run(self, apis, accounts, tmp_path):
        logger = AuditLogger(log_file="audit.jsonl", log_dir=str(tmp_path))
        aggregator = SpendAggregator(
            fetchers={platform: api.fetch for platform, api in apis.items()},
            audit_logger=logger,
        )
        brain = PacingBrain(aggregator=aggregator)

        report = brain.run(accounts, TODAY, generation=7)

        assert report.generation == 7
        assert brain.audit_logger is logger
        assert set(report.records) == {"on", "over", "manual", "nobudget"}
        assert report.records["manual"].spent == 0
