"""
Stock Status Evaluation
=======================
Classify the current stock health of a product.

    days_of_stock = current_stock / AAMC * 30   (0 when AAMC is 0)

Status (first match wins):
- CRITICAL: no stock, or no days of stock
- LOW:      fewer than 30 days of stock
- EXCESS:   more than 180 days of stock
- ADEQUATE: everything else

Each evaluation produces a fresh StockStatus that fully supersedes the
previous one for that product.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional

from .config import Config, DEFAULT_CONFIG
from .constants import DAYS_PER_MONTH
from .consumption import ConsumptionAnalyzer
from .forecaster import ForecastingEngine
from .logger import get_logger
from .models import ForecastResult, Product, StockLevel, StockStatus

logger = get_logger(__name__)


class StockStatusEvaluator:
    """
    Stateless stock-health classification.

    Usage:
        evaluator = StockStatusEvaluator()
        status = evaluator.evaluate(product)
        if status.status == StockLevel.CRITICAL: ...
    """

    def __init__(
        self,
        analyzer: Optional[ConsumptionAnalyzer] = None,
        forecaster: Optional[ForecastingEngine] = None,
        config: Optional[Config] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Args:
            analyzer: Supplies AAMC for days-of-stock
            forecaster: Produces a forecast when the caller does not pass one
            config: Configuration object
            clock: Source of `last_updated` timestamps
        """
        self.config = config or DEFAULT_CONFIG
        self.analyzer = analyzer or ConsumptionAnalyzer(self.config)
        self.forecaster = forecaster or ForecastingEngine(self.analyzer, self.config)
        self.clock = clock

    def classify(self, current_stock: float, days_of_stock: float) -> StockLevel:
        """Map stock on hand and coverage to a status bucket"""
        thresholds = self.config.stock

        if current_stock == 0 or days_of_stock == 0:
            return StockLevel.CRITICAL
        if days_of_stock < thresholds.low_days_of_stock:
            return StockLevel.LOW
        if days_of_stock > thresholds.excess_days_of_stock:
            return StockLevel.EXCESS
        return StockLevel.ADEQUATE

    @staticmethod
    def days_of_stock(current_stock: float, aamc: float) -> float:
        if aamc <= 0:
            return 0.0
        return current_stock / aamc * DAYS_PER_MONTH

    def evaluate(
        self,
        product: Product,
        forecast: Optional[ForecastResult] = None
    ) -> StockStatus:
        """
        Build the current StockStatus for a product.

        Args:
            product: Product with its chronological period history
            forecast: Pre-computed forecast (generated if not provided)

        Returns:
            StockStatus with sizing copied from the forecast
        """
        if forecast is None:
            forecast = self.forecaster.generate_forecast(product)

        current_stock = product.current_stock
        aamc = self.analyzer.calculate_aamc(product.periods)
        days = self.days_of_stock(current_stock, aamc)

        status = StockStatus(
            product_id=product.id,
            current_stock=current_stock,
            safety_stock=forecast.safety_stock,
            reorder_point=forecast.reorder_point,
            max_stock=forecast.max_stock,
            days_of_stock=days,
            status=self.classify(current_stock, days),
            last_updated=self.clock()
        )

        logger.debug(
            f"Stock status for {product.id}: {status.status.value} "
            f"({current_stock:.0f} units, {days:.1f} days)"
        )
        return status

    def evaluate_many(self, products: List[Product]) -> List[StockStatus]:
        return [self.evaluate(p) for p in products]

    def products_requiring_attention(
        self,
        products: List[Product],
        statuses: Optional[List[StockStatus]] = None
    ) -> Dict[str, List[Product]]:
        """
        Group products needing action by status.

        Args:
            products: Portfolio to inspect
            statuses: Statuses for the portfolio (evaluated if not provided)

        Returns:
            Dict with 'critical', 'low' and 'excess' product lists
        """
        if statuses is None:
            statuses = self.evaluate_many(products)
        by_id = {s.product_id: s.status for s in statuses}

        groups = {'critical': [], 'low': [], 'excess': []}
        for product in products:
            level = by_id.get(product.id)
            if level is not None and level.value in groups:
                groups[level.value].append(product)

        return groups
