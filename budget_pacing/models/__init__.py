"""Data models for accounts, spend snapshots and pacing records."""

from budget_pacing.models.spend import (
    Platform,
    PacingStatus,
    DataSourceRef,
    AccountConfig,
    RawSpendRow,
    FetchResult,
    SpendSnapshot,
    PacingRecord,
    PacingAlert,
    PortfolioSummary,
    PortfolioReport,
)

__all__ = [
    "Platform",
    "PacingStatus",
    "DataSourceRef",
    "AccountConfig",
    "RawSpendRow",
    "FetchResult",
    "SpendSnapshot",
    "PacingRecord",
    "PacingAlert",
    "PortfolioSummary",
    "PortfolioReport",
]
