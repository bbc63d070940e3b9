"""
PharmaFlow - Configuration Module
==================================

Typed configuration for the analytical components. Defaults come from
`pharmaflow.constants`; callers override individual thresholds by
building their own `Config` or using `Config.from_dict`.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    ANALYSIS_THRESHOLDS,
    FORECAST_DEFAULTS,
    SERVICE_LEVEL_Z_SCORES,
    DEFAULT_Z_SCORE,
    STOCK_THRESHOLDS,
    ALERT_CONFIG,
    ALERT_RECOMMENDATIONS,
    PERFORMANCE_SCORE_WEIGHTS,
)


@dataclass
class AnalysisConfig:
    """Thresholds for consumption pattern classification"""
    min_pattern_points: int = ANALYSIS_THRESHOLDS["min_pattern_points"]
    irregular_variability_pct: float = ANALYSIS_THRESHOLDS["irregular_variability_pct"]
    stable_trend_pct: float = ANALYSIS_THRESHOLDS["stable_trend_pct"]
    seasonal_autocorrelation: float = ANALYSIS_THRESHOLDS["seasonal_autocorrelation"]
    min_seasonality_points: int = ANALYSIS_THRESHOLDS["min_seasonality_points"]
    min_seasonality_index_points: int = ANALYSIS_THRESHOLDS["min_seasonality_index_points"]
    strong_trend_pct: float = ANALYSIS_THRESHOLDS["strong_trend_pct"]
    seasonal_index_threshold: float = ANALYSIS_THRESHOLDS["seasonal_index_threshold"]


@dataclass
class ForecastConfig:
    """Default forecasting parameters"""
    method: str = FORECAST_DEFAULTS["method"]
    horizon: int = FORECAST_DEFAULTS["horizon"]
    window: int = FORECAST_DEFAULTS["window"]
    alpha: float = FORECAST_DEFAULTS["alpha"]
    beta: float = FORECAST_DEFAULTS["beta"]
    gamma: float = FORECAST_DEFAULTS["gamma"]
    season_length: int = FORECAST_DEFAULTS["season_length"]
    lead_time_days: float = FORECAST_DEFAULTS["lead_time_days"]
    service_level: float = FORECAST_DEFAULTS["service_level"]
    confidence_with_history: float = FORECAST_DEFAULTS["confidence_with_history"]
    confidence_without_history: float = FORECAST_DEFAULTS["confidence_without_history"]
    max_stock_periods: float = FORECAST_DEFAULTS["max_stock_periods"]

    # (minimum service level, z-score), highest level first
    z_score_tiers: List[Tuple[float, float]] = field(
        default_factory=lambda: list(SERVICE_LEVEL_Z_SCORES)
    )
    default_z_score: float = DEFAULT_Z_SCORE


@dataclass
class StockConfig:
    """Days-of-stock boundaries for status classification"""
    low_days_of_stock: float = STOCK_THRESHOLDS["low_days_of_stock"]
    excess_days_of_stock: float = STOCK_THRESHOLDS["excess_days_of_stock"]


@dataclass
class AlertConfig:
    """Alert generation and retention rules"""
    anomaly_variability_pct: float = ALERT_CONFIG["anomaly_variability_pct"]
    acknowledged_retention_days: Optional[float] = ALERT_CONFIG["acknowledged_retention_days"]
    recommendations: Dict[str, str] = field(
        default_factory=lambda: dict(ALERT_RECOMMENDATIONS)
    )


@dataclass
class PortfolioConfig:
    """Penalties used by the portfolio performance score"""
    stock_out_penalty: float = PERFORMANCE_SCORE_WEIGHTS["stock_out_penalty"]
    wastage_penalty: float = PERFORMANCE_SCORE_WEIGHTS["wastage_penalty"]


@dataclass
class Config:
    """
    Master configuration for PharmaFlow

    Usage:
        config = Config()
        config.analysis.irregular_variability_pct = 40
        config = Config.from_dict({'stock': {'low_days_of_stock': 45}})
    """
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    forecast: ForecastConfig = field(default_factory=ForecastConfig)
    stock: StockConfig = field(default_factory=StockConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    portfolio: PortfolioConfig = field(default_factory=PortfolioConfig)

    @classmethod
    def from_dict(cls, overrides: Dict[str, Dict[str, Any]]) -> 'Config':
        """
        Build a config from partial section overrides.

        Args:
            overrides: Mapping of section name ('analysis', 'forecast',
                'stock', 'alerts', 'portfolio') to field overrides

        Returns:
            Config with defaults for everything not overridden

        Raises:
            ValueError: If a section or field name is unknown
        """
        config = cls()
        for section_name, values in overrides.items():
            section = getattr(config, section_name, None)
            if section is None:
                raise ValueError(f"Unknown config section: {section_name}")

            known = {f.name for f in fields(section)}
            for key, value in values.items():
                if key not in known:
                    raise ValueError(f"Unknown {section_name} setting: {key}")
                setattr(section, key, value)

        return config


# Default configuration instance
DEFAULT_CONFIG = Config()
