"""
Inventory Pipeline
==================
Per-product recompute: analyze -> forecast -> evaluate -> alert.

State lives in an InventoryStore owned by the caller. Recomputes of the
same product are serialized by a per-product lock so the "replace
unacknowledged alerts" step never interleaves; different products run
independently and may be fanned out over a thread pool.

Usage:
    store = InventoryStore()
    pipeline = InventoryPipeline(store)
    outcome = pipeline.recompute(product)
    pipeline.recompute_portfolio(products, max_workers=4)
    metrics = pipeline.portfolio_metrics(products)
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .alerts import AlertEngine, AlertStore
from .config import Config, DEFAULT_CONFIG
from .consumption import ConsumptionAnalyzer
from .forecaster import ForecastingEngine
from .logger import get_logger, LogContext
from .metrics import MetricsAggregator
from .models import (
    ConsumptionAnalysisResult,
    ForecastParameters,
    ForecastResult,
    InventoryMetrics,
    Product,
    StockAlert,
    StockLevel,
    StockStatus,
)
from .stock_status import StockStatusEvaluator

logger = get_logger(__name__)


@dataclass
class RecomputeOutcome:
    """Everything produced by one product recompute"""
    analysis: ConsumptionAnalysisResult
    forecast: ForecastResult
    status: StockStatus
    alerts: List[StockAlert] = field(default_factory=list)


class InventoryStore:
    """Latest stock status per product plus the alert store"""

    def __init__(self, alerts: Optional[AlertStore] = None):
        self.alerts = alerts if alerts is not None else AlertStore()
        self._statuses: Dict[str, StockStatus] = {}
        self._product_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def lock_for(self, product_id: str) -> threading.Lock:
        """The lock serializing recomputes of one product"""
        with self._lock:
            if product_id not in self._product_locks:
                self._product_locks[product_id] = threading.Lock()
            return self._product_locks[product_id]

    def get_status(self, product_id: str) -> Optional[StockStatus]:
        with self._lock:
            return self._statuses.get(product_id)

    def put_status(self, status: StockStatus) -> None:
        with self._lock:
            self._statuses[status.product_id] = status

    def statuses(self, product_ids: Optional[List[str]] = None) -> List[StockStatus]:
        with self._lock:
            if product_ids is None:
                return list(self._statuses.values())
            return [self._statuses[pid] for pid in product_ids if pid in self._statuses]

    def remove_product(self, product_id: str) -> None:
        """
        Forget a retired product: its status, alerts and recompute lock.

        Locks are otherwise kept for the life of the store, one per product
        ever recomputed.
        """
        with self.lock_for(product_id):
            with self._lock:
                self._statuses.pop(product_id, None)
                self._product_locks.pop(product_id, None)
            self.alerts.remove_product(product_id)


class InventoryPipeline:
    """
    Orchestrates the analytical components against an InventoryStore.

    Components share one Config; each may be injected for testing.
    """

    def __init__(
        self,
        store: Optional[InventoryStore] = None,
        config: Optional[Config] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.config = config or DEFAULT_CONFIG
        self.store = store if store is not None else InventoryStore()

        self.analyzer = ConsumptionAnalyzer(self.config)
        self.forecaster = ForecastingEngine(self.analyzer, self.config)
        self.evaluator = StockStatusEvaluator(
            self.analyzer, self.forecaster, self.config, clock=clock
        )
        self.alert_engine = AlertEngine(
            self.store.alerts, self.analyzer, self.config, clock=clock
        )
        self.aggregator = MetricsAggregator(self.config)

    def recompute(
        self,
        product: Product,
        parameters: Optional[ForecastParameters] = None
    ) -> RecomputeOutcome:
        """
        Recompute one product and atomically replace its stored state.

        Args:
            product: Product snapshot with its period history
            parameters: Forecast parameters (configuration defaults if omitted)

        Returns:
            RecomputeOutcome with analysis, forecast, status and new alerts
        """
        with self.store.lock_for(product.id):
            analysis = self.analyzer.analyze_product(product)
            forecast = self.forecaster.generate_forecast(product, parameters)
            status = self.evaluator.evaluate(product, forecast)
            alerts = self.alert_engine.generate_alerts(product, status, analysis.metrics)

            self.store.put_status(status)

        return RecomputeOutcome(
            analysis=analysis,
            forecast=forecast,
            status=status,
            alerts=alerts
        )

    def recompute_portfolio(
        self,
        products: List[Product],
        parameters: Optional[ForecastParameters] = None,
        max_workers: Optional[int] = None
    ) -> List[RecomputeOutcome]:
        """
        Recompute every product, optionally in parallel.

        Args:
            products: Portfolio snapshot
            parameters: Forecast parameters shared by all products
            max_workers: Thread pool size; sequential when None or 1

        Returns:
            One outcome per product, in input order
        """
        with LogContext(logger, "Recomputing portfolio") as ctx:
            if max_workers is None or max_workers <= 1:
                outcomes = [self.recompute(p, parameters) for p in products]
            else:
                with ThreadPoolExecutor(max_workers=max_workers) as executor:
                    outcomes = list(executor.map(
                        lambda p: self.recompute(p, parameters), products
                    ))
            ctx.processed = len(outcomes)

        critical = sum(1 for o in outcomes if o.status.status == StockLevel.CRITICAL)
        alert_count = sum(len(o.alerts) for o in outcomes)
        logger.info(
            f"Recompute complete: {critical} critical products, {alert_count} new alerts"
        )
        return outcomes

    def portfolio_metrics(self, products: List[Product]) -> InventoryMetrics:
        """Inventory metrics from the stored status of each product"""
        statuses = self.store.statuses([p.id for p in products])
        return self.aggregator.calculate_inventory_metrics(products, statuses)

    def get_alerts(self, **filters) -> List[StockAlert]:
        return self.alert_engine.get_alerts(**filters)

    def acknowledge_alert(self, alert_id: str) -> bool:
        return self.alert_engine.acknowledge(alert_id)

    def get_status(self, product_id: str) -> Optional[StockStatus]:
        return self.store.get_status(product_id)
