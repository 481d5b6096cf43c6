"""
Unit tests for PacingCalculator.

Tests ideal spend, forecasts, classification bands, recommendations and
division guards.
"""

import pytest
from datetime import date
from budget_pacing.analyzers.pacing_calculator import PacingCalculator, calculate_pacing
from budget_pacing.models.spend import (
    AccountConfig,
    PacingStatus,
    Platform,
    SpendSnapshot,
)

# April 2026 has 30 days; day 10 puts the ideal line at exactly 1/3 of budget
APRIL_10 = date(2026, 4, 10)


@pytest.fixture
def calculator():
    """Create PacingCalculator with default thresholds."""
    return PacingCalculator()


class TestScenarios:
    """Test reference pacing scenarios."""

    def test_calendar_month_on_track(self):
        """Budget 3000, day 15 of 30, spent 1400 is on track."""
        record = calculate_pacing(budget=3000, spent=1400, today=date(2026, 4, 15))

        assert record.days_in_period == 30
        assert record.day_of_period == 15
        assert record.ideal_spend == pytest.approx(1500)
        assert record.pacing_ratio == pytest.approx(0.9333, abs=1e-4)
        assert record.status == PacingStatus.ON_TRACK
        assert record.forecasted_spend == pytest.approx(2800)
        assert record.daily_recommended_spend == pytest.approx(1600 / 15)
        assert record.burn_rate == pytest.approx(1400 / 15)

    def test_explicit_period_over(self):
        """Budget 1000 over 10 days, day 5, spent 700 is over-pacing."""
        record = calculate_pacing(
            budget=1000,
            spent=700,
            today=date(2026, 1, 5),
            period_start=date(2026, 1, 1),
            period_end=date(2026, 1, 10),
        )

        assert record.days_in_period == 10
        assert record.day_of_period == 5
        assert record.ideal_spend == pytest.approx(500)
        assert record.pacing_ratio == pytest.approx(1.4)
        assert record.status == PacingStatus.OVER
        assert record.daily_recommended_spend == pytest.approx(60)
        assert record.forecasted_spend == pytest.approx(1400)

    def test_period_not_started(self):
        """Before the period starts the zero guard yields ratio 0, classified under."""
        record = calculate_pacing(
            budget=500,
            spent=0,
            today=date(2025, 12, 20),
            period_start=date(2026, 1, 1),
            period_end=date(2026, 1, 10),
        )

        assert record.day_of_period == 0
        assert record.ideal_spend == 0
        assert record.pacing_ratio == 0
        assert record.forecasted_spend == 0
        assert record.burn_rate == 0
        # 0 is below the 0.85 band floor; the guard does not make it on_track
        assert record.status == PacingStatus.UNDER
        assert record.daily_recommended_spend == pytest.approx(50)


class TestClassification:
    """Test status classification."""

    @pytest.mark.parametrize("budget", [0, -100])
    def test_no_budget_overrides_everything(self, budget):
        """Test that budget <= 0 is always no_budget."""
        record = calculate_pacing(budget=budget, spent=5000, today=APRIL_10, conversions=10, target_cpa=1000)

        assert record.status == PacingStatus.NO_BUDGET
        assert record.progress_percent == 0

    def test_ratio_exactly_one(self):
        """Test that spending exactly the ideal gives ratio 1.0."""
        record = calculate_pacing(budget=3000, spent=1000, today=APRIL_10)

        assert record.ideal_spend == 1000
        assert record.pacing_ratio == 1.0
        assert record.status == PacingStatus.ON_TRACK

    @pytest.mark.parametrize("spent", [850, 900, 1000, 1100, 1150])
    def test_band_is_inclusive(self, spent):
        """Test that ratios within [0.85, 1.15] are on track."""
        record = calculate_pacing(budget=3000, spent=spent, today=APRIL_10)

        assert record.status == PacingStatus.ON_TRACK

    def test_just_above_band(self):
        record = calculate_pacing(budget=3000, spent=1151, today=APRIL_10)
        assert record.status == PacingStatus.OVER

    def test_just_below_band(self):
        record = calculate_pacing(budget=3000, spent=849, today=APRIL_10)
        assert record.status == PacingStatus.UNDER

    def test_custom_thresholds(self):
        """Test that a narrower band is respected."""
        calculator = PacingCalculator(over_threshold=1.05, under_threshold=0.95)
        record = calculator.calculate(budget=3000, spent=1100, today=APRIL_10)

        assert record.status == PacingStatus.OVER

    def test_invalid_thresholds(self):
        """Test that an inverted band is rejected."""
        with pytest.raises(ValueError, match="must be below"):
            PacingCalculator(over_threshold=0.9, under_threshold=1.1)


class TestDerivedMetrics:
    """Test forecasts, recommendations and guards."""

    def test_forecast_converges_at_period_end(self):
        """Test forecast equals spend on the last day."""
        record = calculate_pacing(budget=3000, spent=2750, today=date(2026, 4, 30))

        assert record.day_of_period == record.days_in_period
        assert record.forecasted_spend == pytest.approx(2750)
        assert record.days_remaining == 0
        assert record.daily_recommended_spend == 0

    def test_progress_is_clamped(self):
        """Test progress never exceeds 100%."""
        record = calculate_pacing(budget=1000, spent=1500, today=APRIL_10)

        assert record.progress_percent == 100
        assert record.remaining_budget == 0
        assert record.daily_recommended_spend == 0

    def test_progress_percent(self):
        record = calculate_pacing(budget=2000, spent=500, today=APRIL_10)
        assert record.progress_percent == pytest.approx(25)

    def test_cost_per_conversion_absent_without_conversions(self):
        record = calculate_pacing(budget=3000, spent=1000, today=APRIL_10, conversions=0, target_cpa=50)

        assert record.actual_cost_per_conversion is None
        assert record.is_performance_good is False

    def test_good_performance(self):
        """Test actual CPA at or below target is good performance."""
        record = calculate_pacing(budget=3000, spent=1000, today=APRIL_10, conversions=20, target_cpa=50)

        assert record.actual_cost_per_conversion == pytest.approx(50)
        assert record.is_performance_good is True

    def test_bad_performance(self):
        record = calculate_pacing(budget=3000, spent=1000, today=APRIL_10, conversions=10, target_cpa=50)

        assert record.actual_cost_per_conversion == pytest.approx(100)
        assert record.is_performance_good is False

    def test_no_target_is_not_good(self):
        record = calculate_pacing(budget=3000, spent=1000, today=APRIL_10, conversions=100)
        assert record.is_performance_good is False

    def test_favorable_over_pace_keeps_status(self):
        """Test that good performance never changes the over status."""
        record = calculate_pacing(budget=3000, spent=1500, today=APRIL_10, conversions=100, target_cpa=20)

        assert record.status == PacingStatus.OVER
        assert record.is_favorable_over_pace is True

    def test_idempotent(self):
        """Test that identical inputs produce identical records."""
        kwargs = dict(budget=3000, spent=1234.5, today=APRIL_10, conversions=7, target_cpa=200)

        assert calculate_pacing(**kwargs) == calculate_pacing(**kwargs)

    def test_to_dict(self):
        record = calculate_pacing(budget=3000, spent=1000, today=APRIL_10)
        data = record.to_dict()

        assert data["status"] == "on_track"
        assert data["days_in_period"] == 30
        assert data["is_favorable_over_pace"] is False


class TestForAccount:
    """Test pacing from account config and spend snapshot."""

    @pytest.fixture
    def account(self):
        return AccountConfig(
            id="acc_1",
            name="Account One",
            monthly_budget=3000,
            target_cost_per_conversion=40,
        )

    def test_uses_snapshot_when_automatic(self, calculator, account):
        """Test that fetched spend wins over manual spend."""
        snapshot = SpendSnapshot(
            total_spend=1000,
            total_conversions=50,
            platform_spend={Platform.GOOGLE_ADS: 1000},
        )

        record = calculator.for_account(account, snapshot, APRIL_10, manual_spend=5)

        assert record.spent == 1000
        assert record.actual_cost_per_conversion == pytest.approx(20)
        assert record.is_performance_good is True

    def test_falls_back_to_manual_spend(self, calculator, account):
        """Test manual spend is used when no fetch succeeded."""
        record = calculator.for_account(account, SpendSnapshot.empty(), APRIL_10, manual_spend=900)

        assert record.spent == 900
        assert record.actual_cost_per_conversion is None

    def test_no_manual_spend_means_zero(self, calculator, account):
        record = calculator.for_account(account, SpendSnapshot.empty(), APRIL_10)

        assert record.spent == 0
        assert record.status == PacingStatus.UNDER

    def test_unset_budget(self, calculator):
        """Test an account without budget is no_budget."""
        account = AccountConfig(id="acc_2", name="No Budget")
        record = calculator.for_account(account, SpendSnapshot.empty(), APRIL_10, manual_spend=100)

        assert record.status == PacingStatus.NO_BUDGET

    def test_explicit_period(self, calculator):
        account = AccountConfig(
            id="acc_3",
            name="Flight",
            monthly_budget=1000,
            period_start=date(2026, 1, 1),
            period_end=date(2026, 1, 10),
        )
        record = calculator.for_account(account, SpendSnapshot.empty(), date(2026, 1, 5), manual_spend=700)

        assert record.days_in_period == 10
        assert record.status == PacingStatus.OVER
