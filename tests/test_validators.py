"""
Tests for Period Record Validation
"""

from pharmaflow.models import DataFrequency, PeriodRecord, Product
from pharmaflow.validators import validate_period, validate_product


class TestValidatePeriod:

    def test_valid_period(self):
        result = validate_period(
            PeriodRecord(period=1, beginning_balance=100, consumption_issue=40),
            max_stock_out=90
        )

        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_negative_quantity_is_error(self):
        result = validate_period(PeriodRecord(period=1, received=-5), max_stock_out=90)

        assert not result.is_valid
        assert "received is negative" in result.errors[0]

    def test_stock_out_days_over_calendar_bound(self):
        result = validate_period(PeriodRecord(period=1, stock_out_days=31), max_stock_out=30)

        assert not result.is_valid
        assert "exceeds the period maximum" in result.errors[0]

    def test_inconsistent_ending_balance_is_warning(self):
        period = PeriodRecord(period=1, period_name="Quarter 1", beginning_balance=100,
                              consumption_issue=40, ending_balance=75)

        result = validate_period(period, max_stock_out=90)

        assert result.is_valid
        assert result.warnings == ["Quarter 1: ending_balance 75 does not match movements (60.0)"]


class TestValidateProduct:

    def test_collects_errors_across_periods(self):
        product = Product(
            id="ORS-1",
            name="Oral rehydration salts",
            unit_price=-1,
            frequency=DataFrequency.MONTHLY,
            periods=[
                PeriodRecord(period=1, consumption_issue=-3),
                PeriodRecord(period=2, stock_out_days=45),
            ]
        )

        result = validate_product(product)

        assert not result.is_valid
        assert len(result.errors) == 3
        assert result.info == {"product_id": "ORS-1", "period_count": 2}

    def test_out_of_order_periods_warn(self):
        product = Product(id="X", name="X", periods=[PeriodRecord(period=2), PeriodRecord(period=1)])

        result = validate_product(product)

        assert result.is_valid
        assert "not in chronological order" in result.warnings[0]

    def test_empty_history_warns(self):
        result = validate_product(Product(id="EMPTY", name="Empty"))

        assert result.is_valid
        assert result.to_dict()["warnings"] == ["EMPTY has no period records"]

    def test_issues_point_at_period_and_field(self):
        product = Product(
            id="ORS-2",
            name="Oral rehydration salts",
            periods=[
                PeriodRecord(period=1, consumption_issue=20, ending_balance=0),
                PeriodRecord(period=2, received=-4),
            ]
        )

        result = validate_product(product)

        [issue] = result.issues_for_period(2)
        assert issue.severity == "error"
        assert issue.field == "received"
        assert result.issues_for_period(1) == []
        assert result.to_dict()["issues"][0]["field"] == "received"
