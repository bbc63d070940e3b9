"""
Tests for Portfolio Metrics
Inventory roll-ups and the performance score
"""

import pytest

from pharmaflow.metrics import MetricsAggregator
from pharmaflow.models import PeriodRecord, Product
from pharmaflow.stock_status import StockStatusEvaluator


@pytest.fixture
def aggregator(config):
    return MetricsAggregator(config)


@pytest.fixture
def portfolio(make_product):
    return [
        make_product([100, 110, 95], current_stock=200, product_id="A", unit_price=2.0),
        make_product([50, 50], current_stock=0, stock_out_days=[0, 12], product_id="B",
                     unit_price=1.0),
    ]


class TestInventoryMetrics:

    def test_counts_value_turnover_and_stock_outs(self, aggregator, config, portfolio):
        statuses = StockStatusEvaluator(config=config).evaluate_many(portfolio)

        metrics = aggregator.calculate_inventory_metrics(portfolio, statuses)

        assert metrics.total_products == 2
        assert metrics.critical_stock_count == 1
        assert metrics.adequate_stock_count == 1
        assert metrics.low_stock_count == 0
        assert metrics.excess_stock_count == 0
        assert metrics.total_inventory_value == pytest.approx(400.0)
        assert metrics.turnover_rate == pytest.approx(405 / 200)
        assert metrics.stock_out_frequency == pytest.approx(20.0)

    def test_empty_portfolio_has_zero_ratios(self, aggregator):
        metrics = aggregator.calculate_inventory_metrics([], [])

        assert metrics.total_products == 0
        assert metrics.turnover_rate == 0.0
        assert metrics.stock_out_frequency == 0.0

    def test_zero_inventory_value_gives_zero_turnover(self, aggregator, make_product):
        product = make_product([100, 110, 95], current_stock=0)

        assert aggregator.calculate_inventory_metrics([product], []).turnover_rate == 0.0


class TestPortfolioSummary:

    def test_summary_and_score(self, aggregator, portfolio):
        summary = aggregator.summarize_portfolio(portfolio)

        assert summary.total_products == 2
        assert summary.total_consumption == pytest.approx(405.0)
        assert summary.stock_out_rate == pytest.approx(50.0)
        assert summary.wastage_rate == 0.0
        assert summary.performance_score == 50

    def test_wastage_lowers_score(self, aggregator):
        product = Product(
            id="SAL-01",
            name="Salbutamol inhaler",
            periods=[
                PeriodRecord(period=1, beginning_balance=100, received=100,
                             consumption_issue=150, expired_damaged=10),
            ]
        )

        summary = aggregator.summarize_portfolio([product])

        assert summary.wastage_rate == pytest.approx(5.0)
        assert summary.performance_score == 85

    def test_empty_portfolio(self, aggregator):
        assert aggregator.summarize_portfolio([]).performance_score == 0

    @pytest.mark.parametrize("stock_out_rate,wastage_rate,expected", [
        (0, 0, 100),
        (10, 0, 80),
        (0, 10, 70),
        (50, 50, 0),
    ])
    def test_performance_score(self, aggregator, stock_out_rate, wastage_rate, expected):
        assert aggregator.performance_score(stock_out_rate, wastage_rate) == expected
