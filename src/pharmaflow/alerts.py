"""
Stock Alert Engine
==================
Translate stock status and consumption anomalies into actionable alerts.

Stock-level alerts (first match wins, at most one per product per cycle):
1. STOCK_OUT / CRITICAL  - no stock on hand
2. LOW_STOCK / CRITICAL  - status critical, or stock at/below reorder point
3. LOW_STOCK / WARNING   - status low
4. OVER_STOCK / INFO     - status excess

Anomaly alert (independent, may accompany a stock-level alert):
5. CONSUMPTION / WARNING - consumption variability above threshold

Lifecycle:
- Each cycle replaces the product's unacknowledged alerts wholesale
- Acknowledgement only flips the `acknowledged` flag
- Acknowledged alerts are kept until they are older than the retention
  window, then pruned on the product's next cycle
"""

import itertools
import threading
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from .config import Config, DEFAULT_CONFIG
from .consumption import ConsumptionAnalyzer
from .logger import get_logger
from .models import (
    AlertLevel,
    AlertType,
    ConsumptionMetrics,
    Product,
    StockAlert,
    StockLevel,
    StockStatus,
)

logger = get_logger(__name__)


class AlertStore:
    """
    Thread-safe alert storage keyed by alert id.

    Owned by the caller and passed to the engine; there is no
    module-level alert state. Alert ids are issued by the store, so any
    number of engines may share one. Readers get copies; acknowledgement
    goes through `acknowledge`.
    """

    def __init__(self):
        self._alerts: Dict[str, StockAlert] = {}
        self._sequence = itertools.count(1)
        self._lock = threading.RLock()

    def next_id(self, product_id: str, alert_type: AlertType) -> str:
        with self._lock:
            return f"{product_id}-{alert_type.value}-{next(self._sequence):06d}"

    def __len__(self) -> int:
        with self._lock:
            return len(self._alerts)

    def get(self, alert_id: str) -> Optional[StockAlert]:
        with self._lock:
            alert = self._alerts.get(alert_id)
            return replace(alert) if alert is not None else None

    def all(self) -> List[StockAlert]:
        with self._lock:
            return [replace(a) for a in self._alerts.values()]

    def for_product(self, product_id: str) -> List[StockAlert]:
        with self._lock:
            return [replace(a) for a in self._alerts.values() if a.product_id == product_id]

    def replace_unacknowledged(
        self,
        product_id: str,
        alerts: List[StockAlert],
        prune_acknowledged_before: Optional[datetime] = None
    ) -> None:
        """
        Atomically swap a product's unacknowledged alerts for `alerts`.

        Acknowledged alerts for the product survive unless their timestamp
        is earlier than `prune_acknowledged_before`.
        """
        with self._lock:
            for alert_id, alert in list(self._alerts.items()):
                if alert.product_id != product_id:
                    continue
                if not alert.acknowledged:
                    del self._alerts[alert_id]
                elif (
                    prune_acknowledged_before is not None
                    and alert.timestamp < prune_acknowledged_before
                ):
                    del self._alerts[alert_id]

            for alert in alerts:
                self._alerts[alert.id] = replace(alert)

    def remove_product(self, product_id: str) -> int:
        """Drop every alert of a product, returning how many were removed"""
        with self._lock:
            doomed = [k for k, a in self._alerts.items() if a.product_id == product_id]
            for alert_id in doomed:
                del self._alerts[alert_id]
            return len(doomed)

    def acknowledge(self, alert_id: str) -> bool:
        with self._lock:
            alert = self._alerts.get(alert_id)
            if alert is None:
                return False
            alert.acknowledged = True
            return True


class AlertEngine:
    """
    Alert generation, retrieval and acknowledgement.

    Usage:
        engine = AlertEngine(AlertStore())
        engine.generate_alerts(product, status)
        critical = engine.get_alerts(level=AlertLevel.CRITICAL)
    """

    def __init__(
        self,
        store: Optional[AlertStore] = None,
        analyzer: Optional[ConsumptionAnalyzer] = None,
        config: Optional[Config] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Args:
            store: Alert storage (a private store is created if omitted)
            analyzer: Supplies consumption metrics when not passed in
            config: Configuration object
            clock: Source of alert timestamps
        """
        self.config = config or DEFAULT_CONFIG
        self.store = store if store is not None else AlertStore()
        self.analyzer = analyzer or ConsumptionAnalyzer(self.config)
        self.clock = clock

    def build_alerts(
        self,
        product: Product,
        status: StockStatus,
        metrics: ConsumptionMetrics
    ) -> List[StockAlert]:
        """
        Derive the alerts for one product without touching the store.

        Returns:
            Zero or one stock-level alert, plus an optional consumption
            anomaly alert
        """
        recommendations = self.config.alerts.recommendations
        timestamp = self.clock()
        alerts = []

        def make(alert_type, level, message, recommendation, threshold=None):
            return StockAlert(
                id=self.store.next_id(product.id, alert_type),
                product_id=product.id,
                product_name=product.name,
                type=alert_type,
                level=level,
                message=message,
                current_stock=status.current_stock,
                threshold=threshold,
                recommendation=recommendation,
                timestamp=timestamp
            )

        if status.current_stock == 0:
            alerts.append(make(
                AlertType.STOCK_OUT,
                AlertLevel.CRITICAL,
                f"{product.name} is out of stock",
                recommendations['stockOut']
            ))
        elif status.status == StockLevel.CRITICAL or status.current_stock <= status.reorder_point:
            alerts.append(make(
                AlertType.LOW_STOCK,
                AlertLevel.CRITICAL,
                f"{product.name} has reached reorder point",
                recommendations['lowStock_critical'],
                threshold=status.reorder_point
            ))
        elif status.status == StockLevel.LOW:
            alerts.append(make(
                AlertType.LOW_STOCK,
                AlertLevel.WARNING,
                f"{product.name} stock is running low",
                recommendations['lowStock_warning'],
                threshold=status.safety_stock
            ))
        elif status.status == StockLevel.EXCESS:
            alerts.append(make(
                AlertType.OVER_STOCK,
                AlertLevel.INFO,
                f"{product.name} has excess stock",
                recommendations['overStock'],
                threshold=status.max_stock
            ))

        if metrics.variability_coefficient > self.config.alerts.anomaly_variability_pct:
            alerts.append(make(
                AlertType.CONSUMPTION,
                AlertLevel.WARNING,
                f"{product.name} shows irregular consumption patterns",
                recommendations['consumption']
            ))

        return alerts

    def generate_alerts(
        self,
        product: Product,
        status: StockStatus,
        metrics: Optional[ConsumptionMetrics] = None
    ) -> List[StockAlert]:
        """
        Run one alert cycle for a product and store the result.

        Args:
            product: Product being evaluated
            status: Its freshly computed stock status
            metrics: Consumption metrics (computed if not provided)

        Returns:
            The newly created alerts
        """
        if metrics is None:
            metrics = self.analyzer.calculate_metrics(product.periods)

        alerts = self.build_alerts(product, status, metrics)

        retention_days = self.config.alerts.acknowledged_retention_days
        prune_before = None
        if retention_days is not None:
            prune_before = self.clock() - timedelta(days=retention_days)

        self.store.replace_unacknowledged(product.id, alerts, prune_before)

        if alerts:
            logger.debug(
                f"{len(alerts)} alerts for {product.id}: "
                f"{', '.join(a.type.value for a in alerts)}"
            )
        return alerts

    def get_alerts(
        self,
        level: Optional[AlertLevel] = None,
        alert_type: Optional[AlertType] = None,
        acknowledged: Optional[bool] = None
    ) -> List[StockAlert]:
        """
        Stored alerts matching every given filter.

        Sorted by level (critical > warning > info), newest first within
        a level.
        """
        alerts = self.store.all()

        if level is not None:
            alerts = [a for a in alerts if a.level == AlertLevel(level)]
        if alert_type is not None:
            alerts = [a for a in alerts if a.type == AlertType(alert_type)]
        if acknowledged is not None:
            alerts = [a for a in alerts if a.acknowledged == acknowledged]

        return sorted(
            alerts,
            key=lambda a: (-a.level.priority, -a.timestamp.timestamp())
        )

    def acknowledge(self, alert_id: str) -> bool:
        """
        Mark an alert as acknowledged.

        Returns:
            False when no alert has the given id
        """
        if self.store.acknowledge(alert_id):
            return True

        logger.warning(f"Cannot acknowledge unknown alert {alert_id}")
        return False
