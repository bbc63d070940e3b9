"""
PharmaFlow - Pharmaceutical Stock Analytics
============================================

Consumption analysis, demand forecasting and stock-health alerting for
pharmaceutical products tracked through periodic inventory reports.

Modules:
- models: Period records, products and derived result records
- consumption: AAMC/AMC, trend, variability and pattern classification
- forecaster: Moving average, exponential smoothing, Holt-Winters,
  safety stock and reorder point sizing
- stock_status: Stock-health classification
- alerts: Alert generation, retention and acknowledgement
- metrics: Portfolio roll-ups
- pipeline: Caller-owned store and per-product recompute
- period_calculations: Per-period derived fields and yearly averages
- validators: Structural checks on period histories
- reporting: pandas views of results

Usage:
    from pharmaflow import InventoryPipeline

    pipeline = InventoryPipeline()
    outcome = pipeline.recompute(product)
    alerts = pipeline.get_alerts(level='critical')
"""

__version__ = "1.0.0"

from .config import Config, DEFAULT_CONFIG
from .models import (
    AlertLevel,
    AlertType,
    Computed,
    ConsumptionAnalysisResult,
    ConsumptionMetrics,
    ConsumptionPattern,
    DataFrequency,
    ForecastMethod,
    ForecastParameters,
    ForecastResult,
    InsufficientData,
    InventoryMetrics,
    PeriodRecord,
    PortfolioSummary,
    Product,
    StockAlert,
    StockLevel,
    StockStatus,
    VENClassification,
)
from .consumption import ConsumptionAnalyzer
from .forecaster import ForecastingEngine
from .stock_status import StockStatusEvaluator
from .alerts import AlertEngine, AlertStore
from .metrics import MetricsAggregator
from .pipeline import InventoryPipeline, InventoryStore, RecomputeOutcome

__all__ = [
    'Config',
    'DEFAULT_CONFIG',
    'AlertLevel',
    'AlertType',
    'Computed',
    'ConsumptionAnalysisResult',
    'ConsumptionMetrics',
    'ConsumptionPattern',
    'DataFrequency',
    'ForecastMethod',
    'ForecastParameters',
    'ForecastResult',
    'InsufficientData',
    'InventoryMetrics',
    'PeriodRecord',
    'PortfolioSummary',
    'Product',
    'StockAlert',
    'StockLevel',
    'StockStatus',
    'VENClassification',
    'ConsumptionAnalyzer',
    'ForecastingEngine',
    'StockStatusEvaluator',
    'AlertEngine',
    'AlertStore',
    'MetricsAggregator',
    'InventoryPipeline',
    'InventoryStore',
    'RecomputeOutcome',
]
