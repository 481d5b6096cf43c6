"""
Quick example demonstrating a budget pacing refresh.

Run this to see pacing computed from mock platform data, including an
account whose platform fetch fails and falls back to manual spend.
"""

from datetime import date

from budget_pacing.api.mock_platform_api import MockPlatformAPI
from budget_pacing.analyzers.sort_filter import filter_and_sort
from budget_pacing.models.spend import AccountConfig, DataSourceRef, Platform
from budget_pacing.orchestrator import PacingOrchestrator


def main():
    print("\n" + "=" * 70)
    print(" BUDGET PACING - DEMO")
    print("=" * 70 + "\n")

    google = MockPlatformAPI(Platform.GOOGLE_ADS, seed=7)
    meta = MockPlatformAPI(Platform.META_ADS, seed=7)

    google.add_account("123-456-7890", daily_budget=100, scenario="on_track")
    google.add_account("222-333-4444", daily_budget=150, scenario="over")
    meta.add_account("act_1001", daily_budget=80, scenario="under")
    meta.add_account("act_2002", daily_budget=60, scenario="on_track")
    meta.set_failing("act_2002")

    accounts = [
        AccountConfig(
            id="bakery",
            name="Bakery Dupont",
            monthly_budget=3000,
            target_cost_per_conversion=15,
            data_sources=[DataSourceRef(Platform.GOOGLE_ADS, "123-456-7890")],
        ),
        AccountConfig(
            id="garage",
            name="Garage Martin",
            monthly_budget=4500,
            data_sources=[
                DataSourceRef(Platform.GOOGLE_ADS, "222-333-4444"),
                DataSourceRef(Platform.META_ADS, "act_1001"),
            ],
        ),
        AccountConfig(
            id="florist",
            name="Florist Leroy",
            monthly_budget=1800,
            data_sources=[DataSourceRef(Platform.META_ADS, "act_2002")],
        ),
        AccountConfig(id="dentist", name="Dentist Moreau"),
    ]

    orchestrator = PacingOrchestrator(
        fetchers={Platform.GOOGLE_ADS: google.fetch, Platform.META_ADS: meta.fetch},
    )

    today = date.today()
    report = orchestrator.refresh(accounts, today, manual_spend={"florist": 650})

    for account, record in filter_and_sort(report.pairs(), sort_by="pacing_ratio"):
        snapshot = report.snapshots[account.id]
        print(f"{account.name}")
        print(f"  Status:          {record.status.value}")
        print(f"  Spent:           €{record.spent:,.2f} / €{record.budget:,.2f}")
        print(f"  Pacing ratio:    {record.pacing_ratio:.0%}")
        print(f"  Forecast:        €{record.forecasted_spend:,.2f}")
        print(f"  Daily target:    €{record.daily_recommended_spend:,.2f}")
        print(f"  Spend source:    {'platforms' if snapshot.is_automatic else 'manual'}")
        if record.is_favorable_over_pace:
            print("  Note:            over-pacing, but beating the target cost per conversion")
        print()

    print("Alerts:")
    for alert in report.alerts:
        print(f"  - {alert.message}")

    print("\n" + "=" * 70)
    print(" END OF DEMO")
    print("=" * 70 + "\n")

    print("✅ Check 'audit_log.jsonl' for the full audit trail")


if __name__ == "__main__":
    main()
