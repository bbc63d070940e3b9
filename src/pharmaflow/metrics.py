"""
Portfolio Metrics
=================
Roll stock statuses and period histories up across a product portfolio.

InventoryMetrics:
- Product counts per status bucket
- Total inventory value = sum(current stock x unit price)
- Turnover rate = annual consumption / (inventory value / 2)
- Stock-out frequency = % of all periods with stock-out days

PortfolioSummary:
- Average annual AAMC, average wastage rate
- Stock-out rate = % of products with any stock-out period
- Performance score (0-100): stock-outs and wastage lose points

Every ratio substitutes 0 when its denominator is 0.
"""

from typing import List, Optional

from .config import Config, DEFAULT_CONFIG
from .logger import get_logger
from .models import InventoryMetrics, PortfolioSummary, Product, StockLevel, StockStatus
from .period_calculations import calculate_annual_averages, recalculate_product

logger = get_logger(__name__)


class MetricsAggregator:
    """
    Pure roll-ups over a product portfolio.

    Usage:
        aggregator = MetricsAggregator()
        metrics = aggregator.calculate_inventory_metrics(products, statuses)
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or DEFAULT_CONFIG

    def calculate_inventory_metrics(
        self,
        products: List[Product],
        statuses: List[StockStatus]
    ) -> InventoryMetrics:
        """
        Dashboard metrics for a portfolio.

        Args:
            products: Portfolio products (value, consumption, stock-outs)
            statuses: Latest stock status per product (bucket counts)

        Returns:
            InventoryMetrics
        """
        counts = {level: 0 for level in StockLevel}
        for status in statuses:
            counts[status.status] += 1

        total_value = sum(p.current_stock * p.unit_price for p in products)

        annual_consumption = sum(
            sum(period.consumption_issue for period in p.periods)
            for p in products
        )
        average_inventory_value = total_value / 2
        turnover_rate = (
            annual_consumption / average_inventory_value
            if average_inventory_value > 0 else 0.0
        )

        total_periods = sum(len(p.periods) for p in products)
        stock_out_periods = sum(
            1 for p in products for period in p.periods if period.stock_out_days > 0
        )
        stock_out_frequency = (
            stock_out_periods / total_periods * 100 if total_periods > 0 else 0.0
        )

        metrics = InventoryMetrics(
            total_products=len(products),
            critical_stock_count=counts[StockLevel.CRITICAL],
            low_stock_count=counts[StockLevel.LOW],
            adequate_stock_count=counts[StockLevel.ADEQUATE],
            excess_stock_count=counts[StockLevel.EXCESS],
            total_inventory_value=total_value,
            turnover_rate=turnover_rate,
            stock_out_frequency=stock_out_frequency
        )

        logger.info(
            f"Portfolio metrics: {metrics.total_products} products, "
            f"{metrics.critical_stock_count} critical, {metrics.low_stock_count} low, "
            f"value={metrics.total_inventory_value:,.2f}"
        )
        return metrics

    def summarize_portfolio(self, products: List[Product]) -> PortfolioSummary:
        """
        Consumption, stock-out and wastage summary with a performance score.

        Period AAMC and wastage rates are recomputed from the raw movements
        before averaging.
        """
        if not products:
            return PortfolioSummary()

        averages = [
            calculate_annual_averages(recalculate_product(p).periods)
            for p in products
        ]
        total_products = len(products)

        products_with_stock_outs = sum(
            1 for p in products if any(period.stock_out_days > 0 for period in p.periods)
        )
        stock_out_rate = products_with_stock_outs / total_products * 100
        wastage_rate = sum(a.wastage_rate for a in averages) / total_products

        return PortfolioSummary(
            total_consumption=sum(a.annual_consumption for a in averages),
            total_products=total_products,
            average_aamc=sum(a.aamc for a in averages) / total_products,
            stock_out_rate=stock_out_rate,
            wastage_rate=wastage_rate,
            performance_score=self.performance_score(stock_out_rate, wastage_rate)
        )

    def performance_score(self, stock_out_rate: float, wastage_rate: float) -> int:
        """Lower stock-out and wastage rates score higher"""
        weights = self.config.portfolio
        stock_out_score = max(0.0, 100 - stock_out_rate * weights.stock_out_penalty)
        wastage_score = max(0.0, 100 - wastage_rate * weights.wastage_penalty)
        return round((stock_out_score + wastage_score) / 2)
