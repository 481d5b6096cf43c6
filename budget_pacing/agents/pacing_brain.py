"""
PacingBrain: LangGraph-based portfolio refresh workflow.

This module wires the pacing components into a state machine that runs one
full refresh of a portfolio: aggregate spend, compute pacing, summarize and
generate advisories.
"""

from datetime import date
from typing import TypedDict, Optional, Dict, List, Literal

from langgraph.graph import StateGraph, END

from budget_pacing.analyzers.alert_generator import generate_alerts
from budget_pacing.analyzers.pacing_calculator import PacingCalculator
from budget_pacing.analyzers.portfolio_summarizer import summarize_portfolio
from budget_pacing.analyzers.spend_aggregator import SpendAggregator
from budget_pacing.models.spend import (
    AccountConfig,
    PacingAlert,
    PacingRecord,
    PortfolioReport,
    PortfolioSummary,
    SpendSnapshot,
)
from budget_pacing.utils.audit_logger import AuditLogger


class RefreshState(TypedDict):
    """
    State passed between nodes in the LangGraph workflow.

    Every refresh starts from a fresh state; nothing carries over between
    runs.
    """
    today: date
    accounts: List[AccountConfig]
    manual_spend: Dict[str, float]
    generation: int
    snapshots: Dict[str, SpendSnapshot]
    records: Dict[str, Optional[PacingRecord]]
    summary: PortfolioSummary
    alerts: List[PacingAlert]
    report: Optional[PortfolioReport]


class PacingBrain:
    """
    LangGraph workflow for a portfolio refresh.

    Steps:
    1. Aggregate spend for every account concurrently
    2. Compute a pacing record per account
    3. Summarize the portfolio
    4. Generate advisories
    5. Write the audit trail and assemble the report

    An empty portfolio skips straight to advisory generation.
    """

    def __init__(
        self,
        aggregator: SpendAggregator,
        calculator: Optional[PacingCalculator] = None,
        audit_logger: Optional[AuditLogger] = None
    ):
        """
        Initialize PacingBrain.

        Args:
            aggregator: SpendAggregator wired to platform fetchers
            calculator: Optional PacingCalculator (default ±15% band)
            audit_logger: Optional AuditLogger instance
        """
        self.aggregator = aggregator
        self.calculator = calculator or PacingCalculator()
        self.audit_logger = audit_logger or aggregator.audit_logger

        self.graph = self._build_graph()

    def _build_graph(self):
        """
        Construct the LangGraph state machine.

        Returns:
            Compiled graph ready for execution
        """
        workflow = StateGraph(RefreshState)

        workflow.add_node("aggregate_spend", self.aggregate_spend)
        workflow.add_node("calculate_pacing", self.calculate_pacing)
        workflow.add_node("summarize_portfolio", self.summarize_portfolio)
        workflow.add_node("generate_alerts", self.generate_alerts)
        workflow.add_node("audit_and_report", self.audit_and_report)

        workflow.set_entry_point("aggregate_spend")

        workflow.add_conditional_edges(
            "aggregate_spend",
            self.route_by_accounts,
            {
                "has_accounts": "calculate_pacing",
                "empty": "generate_alerts",
            }
        )

        workflow.add_edge("calculate_pacing", "summarize_portfolio")
        workflow.add_edge("summarize_portfolio", "generate_alerts")
        workflow.add_edge("generate_alerts", "audit_and_report")
        workflow.add_edge("audit_and_report", END)

        return workflow.compile()

    # ===================
    # Node Implementations
    # ===================

    def aggregate_spend(self, state: RefreshState) -> RefreshState:
        """Fetch and merge spend for every account."""
        state["snapshots"] = self.aggregator.aggregate_many(state["accounts"], state["today"])
        return state

    def route_by_accounts(self, state: RefreshState) -> Literal["has_accounts", "empty"]:
        return "has_accounts" if state["accounts"] else "empty"

    def calculate_pacing(self, state: RefreshState) -> RefreshState:
        """Compute a pacing record per account."""
        records: Dict[str, Optional[PacingRecord]] = {}

        for account in state["accounts"]:
            snapshot = state["snapshots"].get(account.id, SpendSnapshot.empty())
            records[account.id] = self.calculator.for_account(
                account,
                snapshot,
                state["today"],
                manual_spend=state["manual_spend"].get(account.id),
            )

        state["records"] = records
        return state

    def summarize_portfolio(self, state: RefreshState) -> RefreshState:
        pairs = [(a, state["records"].get(a.id)) for a in state["accounts"]]
        state["summary"] = summarize_portfolio(pairs, today=state["today"], calculator=self.calculator)
        return state

    def generate_alerts(self, state: RefreshState) -> RefreshState:
        pairs = [(a, state["records"].get(a.id)) for a in state["accounts"]]
        state["alerts"] = generate_alerts(pairs)
        return state

    def audit_and_report(self, state: RefreshState) -> RefreshState:
        """Log the refresh to the audit trail and build the final report."""
        for account in state["accounts"]:
            snapshot = state["snapshots"].get(account.id)
            if snapshot is not None:
                self.audit_logger.log_snapshot(account.id, snapshot)
            record = state["records"].get(account.id)
            if record is not None:
                self.audit_logger.log_pacing(account.id, record)

        for alert in state["alerts"]:
            self.audit_logger.log_alert(alert)

        self.audit_logger.log_refresh(
            generation=state["generation"],
            account_count=len(state["accounts"]),
            summary=state["summary"],
        )

        state["report"] = PortfolioReport(
            today=state["today"],
            accounts=list(state["accounts"]),
            snapshots=state["snapshots"],
            records=state["records"],
            summary=state["summary"],
            alerts=state["alerts"],
            generation=state["generation"],
        )
        return state

    # ===================
    # Public Interface
    # ===================

    def run(
        self,
        accounts: List[AccountConfig],
        today: date,
        manual_spend: Optional[Dict[str, float]] = None,
        generation: int = 0
    ) -> PortfolioReport:
        """
        Execute one full refresh.

        Args:
            accounts: Portfolio accounts
            today: Reference date
            manual_spend: Manually entered spend per account id, used for
                accounts where no platform fetch succeeded
            generation: Refresh generation number

        Returns:
            PortfolioReport
        """
        initial_state = RefreshState(
            today=today,
            accounts=list(accounts),
            manual_spend=dict(manual_spend or {}),
            generation=generation,
            snapshots={},
            records={},
            summary=PortfolioSummary(),
            alerts=[],
            report=None,
        )

        final_state = self.graph.invoke(initial_state)

        return final_state["report"]
