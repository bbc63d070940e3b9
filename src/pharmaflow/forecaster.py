"""
Demand Forecasting Service
===========================
Consumption forecasts and replenishment sizing for pharmaceutical products.

Key Algorithms:
1. Moving Average
   - Mean of the last `window` periods, held flat across the horizon
   - Too little history gives a zero forecast

2. Single Exponential Smoothing (default)
   - Seeded at the first observation, held flat across the horizon

3. Holt-Winters Triple Exponential Smoothing
   - Captures level, trend and multiplicative seasonality
   - Requires at least 2 full seasons, otherwise falls back to (2)

Replenishment sizing:
- Safety stock = z(service level) x sample stdev x sqrt(lead time / 30 days)
- Reorder point = average forecast + safety stock
- Max stock = reorder point + 2 x average forecast

Every path degrades to zeros or flat forecasts on short histories;
nothing here raises for insufficient data.
"""

import math
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from .config import Config, DEFAULT_CONFIG
from .consumption import ConsumptionAnalyzer, data_quality
from .constants import DAYS_PER_MONTH
from .logger import get_logger
from .models import (
    Computed,
    ForecastMethod,
    ForecastParameters,
    ForecastResult,
    InsufficientData,
    Measurement,
    Product,
)

logger = get_logger(__name__)


def _non_negative(data: Sequence[float]) -> np.ndarray:
    values = np.asarray(list(data), dtype=float)
    return values[values >= 0]


class ForecastingEngine:
    """
    Multi-method consumption forecasting engine.

    Usage
    -----
    >>> engine = ForecastingEngine()
    >>> result = engine.generate_forecast(product, method='holt_winters')
    >>> result.reorder_point
    """

    def __init__(
        self,
        analyzer: Optional[ConsumptionAnalyzer] = None,
        config: Optional[Config] = None
    ):
        """
        Parameters
        ----------
        analyzer : ConsumptionAnalyzer, optional
            Analyzer used for confidence and accuracy scoring
        config : Config, optional
            Custom configuration. Uses defaults if not provided.
        """
        self.config = config or DEFAULT_CONFIG
        self.analyzer = analyzer or ConsumptionAnalyzer(self.config)
        self.defaults = self.config.forecast

    # ------------------------------------------------------------------
    # Forecast methods
    # ------------------------------------------------------------------

    def moving_average_forecast(
        self,
        data: Sequence[float],
        window: int = 3,
        horizon: int = 12
    ) -> List[float]:
        """
        Flat forecast at the mean of the last `window` usable values.

        Parameters
        ----------
        data : Sequence[float]
            Chronological consumption history
        window : int
            Number of trailing periods to average
        horizon : int
            Number of future periods to forecast

        Returns
        -------
        List[float]
            `horizon` identical values; all zeros when `data` holds fewer
            than `window` points. Negative values are dropped after that
            check, so the trailing window may hold fewer points.
        """
        if len(data) < window:
            return [0.0] * horizon

        values = _non_negative(data)
        if len(values) == 0:
            return [0.0] * horizon

        average = float(values[-window:].mean())
        return [average] * horizon

    def exponential_smoothing_forecast(
        self,
        data: Sequence[float],
        alpha: float = 0.3,
        horizon: int = 12
    ) -> List[float]:
        """Single exponential smoothing held flat across the horizon."""
        values = _non_negative(data)
        if len(values) == 0:
            return [0.0] * horizon

        smoothed = values[0]
        for value in values[1:]:
            smoothed = alpha * value + (1 - alpha) * smoothed

        return [float(smoothed)] * horizon

    def holt_winters_forecast(
        self,
        data: Sequence[float],
        alpha: float = 0.3,
        beta: float = 0.1,
        gamma: float = 0.1,
        season_length: int = 12,
        horizon: int = 12
    ) -> List[float]:
        """
        Holt-Winters with additive trend and multiplicative seasonality.

        Initialization:
        - level: mean of the first season
        - trend: averaged per-period delta between the first two seasons
        - seasonal indices: average ratio of each value to its season mean

        Each historical step after the first season updates:
            level    = alpha * (x / s) + (1 - alpha) * (level + trend)
            trend    = beta * (level - previous level) + (1 - beta) * trend
            s        = gamma * (x / level) + (1 - gamma) * s

        Forecast i (0-based) is (level + (i + 1) * trend) * seasonal[i % L],
        floored at 0. The seasonal index is taken from the start of the
        cycle, not from where the history ends.

        Falls back to exponential smoothing with fewer than
        2 * season_length values.
        """
        values = _non_negative(data)
        if len(values) < season_length * 2:
            return self.exponential_smoothing_forecast(values, alpha, horizon)

        level = float(values[:season_length].mean())
        trend = self._initial_trend(values, season_length)
        seasonal = self._initial_seasonals(values, season_length)

        for i in range(season_length, len(values)):
            position = i % season_length
            observed = values[i]
            previous_level = level

            deseasonalized = observed / seasonal[position] if seasonal[position] > 0 else observed
            level = alpha * deseasonalized + (1 - alpha) * (level + trend)
            trend = beta * (level - previous_level) + (1 - beta) * trend
            if level > 0:
                seasonal[position] = gamma * (observed / level) + (1 - gamma) * seasonal[position]

        forecasts = []
        for i in range(horizon):
            index = seasonal[i % season_length]
            forecasts.append(max(0.0, float((level + (i + 1) * trend) * index)))

        return forecasts

    @staticmethod
    def _initial_trend(values: np.ndarray, season_length: int) -> float:
        first = values[:season_length]
        second = values[season_length:2 * season_length]
        return float(np.sum((second - first) / season_length) / season_length)

    @staticmethod
    def _initial_seasonals(values: np.ndarray, season_length: int) -> List[float]:
        """Average of value / season mean for each position in the season"""
        season_means = [
            values[start:start + season_length].mean()
            for start in range(0, len(values), season_length)
        ]

        seasonals = []
        for position in range(season_length):
            ratios = [
                values[j] / season_means[j // season_length]
                for j in range(position, len(values), season_length)
                if season_means[j // season_length] > 0
            ]
            seasonals.append(float(np.mean(ratios)) if ratios else 1.0)

        return seasonals

    # ------------------------------------------------------------------
    # Replenishment sizing
    # ------------------------------------------------------------------

    def z_score(self, service_level: float) -> float:
        """Stepped z-score for a service level"""
        for minimum_level, z in self.defaults.z_score_tiers:
            if service_level >= minimum_level:
                return z
        return self.defaults.default_z_score

    def assess_safety_stock(
        self,
        data: Sequence[float],
        lead_time_days: float = 30,
        service_level: float = 0.95
    ) -> Measurement:
        values = _non_negative(data)
        if len(values) < 2:
            return InsufficientData("safety stock needs at least 2 observations", len(values))

        std_dev = float(np.std(values, ddof=1))
        lead_time_months = lead_time_days / DAYS_PER_MONTH
        return Computed(self.z_score(service_level) * std_dev * math.sqrt(lead_time_months))

    def calculate_safety_stock(
        self,
        data: Sequence[float],
        lead_time_days: float = 30,
        service_level: float = 0.95
    ) -> float:
        """
        Safety stock sized for demand variability over the lead time.

        Returns 0 with fewer than 2 observations.
        """
        return self.assess_safety_stock(data, lead_time_days, service_level).value_or(0.0)

    # ------------------------------------------------------------------
    # Product forecast
    # ------------------------------------------------------------------

    def default_parameters(self, **overrides: Any) -> ForecastParameters:
        """Forecast parameters from configuration with optional overrides"""
        params: Dict[str, Any] = {
            'method': self.defaults.method,
            'window': self.defaults.window,
            'horizon': self.defaults.horizon,
            'alpha': self.defaults.alpha,
            'beta': self.defaults.beta,
            'gamma': self.defaults.gamma,
            'season_length': self.defaults.season_length,
            'lead_time_days': self.defaults.lead_time_days,
            'service_level': self.defaults.service_level
        }
        params.update(overrides)
        return ForecastParameters(**params)

    def predict(self, data: Sequence[float], params: ForecastParameters) -> List[float]:
        """Run the forecast method selected in `params`"""
        if params.method == ForecastMethod.MOVING_AVERAGE:
            return self.moving_average_forecast(data, params.window, params.horizon)

        if params.method == ForecastMethod.HOLT_WINTERS:
            if len(_non_negative(data)) < params.season_length * 2:
                logger.debug(
                    f"Holt-Winters needs {params.season_length * 2} periods, "
                    f"got {len(data)}; using exponential smoothing"
                )
            return self.holt_winters_forecast(
                data,
                params.alpha,
                params.beta,
                params.gamma,
                params.season_length,
                params.horizon
            )

        return self.exponential_smoothing_forecast(data, params.alpha, params.horizon)

    def generate_forecast(
        self,
        product: Product,
        parameters: Optional[ForecastParameters] = None,
        **overrides: Any
    ) -> ForecastResult:
        """
        Forecast consumption and size replenishment for one product.

        Parameters
        ----------
        product : Product
            Product with its chronological period history
        parameters : ForecastParameters, optional
            Complete parameter set. Built from configuration when omitted.
        **overrides
            Individual parameter overrides (method, horizon, alpha, ...)

        Returns
        -------
        ForecastResult
            Predicted consumption with safety stock, reorder point and
            max stock
        """
        if parameters is None:
            parameters = self.default_parameters(**overrides)
        elif overrides:
            parameters = ForecastParameters(**{**parameters.to_dict(), **overrides})

        consumption = product.consumption_history()
        predicted = self.predict(consumption, parameters)

        safety_stock = self.calculate_safety_stock(
            consumption,
            parameters.lead_time_days,
            parameters.service_level
        )

        average_forecast = float(np.mean(predicted)) if predicted else 0.0
        reorder_point = average_forecast + safety_stock
        max_stock = reorder_point + average_forecast * self.defaults.max_stock_periods

        metrics = self.analyzer.calculate_metrics(product.periods)
        confidence = min(
            1.0,
            self.defaults.confidence_with_history if metrics.aamc > 0
            else self.defaults.confidence_without_history
        )

        result = ForecastResult(
            product_id=product.id,
            predicted_consumption=predicted,
            safety_stock=safety_stock,
            reorder_point=reorder_point,
            max_stock=max_stock,
            forecast_accuracy=self._forecast_accuracy(product, metrics.variability_coefficient),
            confidence=confidence,
            parameters=parameters
        )

        logger.debug(
            f"Forecast for {product.id} ({parameters.method.value}): "
            f"avg={average_forecast:.1f}, safety={safety_stock:.1f}, "
            f"reorder={reorder_point:.1f}"
        )
        return result

    def forecast_portfolio(
        self,
        products: List[Product],
        parameters: Optional[ForecastParameters] = None
    ) -> List[ForecastResult]:
        """Forecast every product with the same parameters"""
        results = [self.generate_forecast(p, parameters) for p in products]
        logger.info(f"Forecasting complete for {len(results)} products")
        return results

    @staticmethod
    def _forecast_accuracy(product: Product, variability: float) -> float:
        """Mean of data quality and pattern stability, clamped to [0, 1]"""
        stability = max(0.0, 1 - variability / 100)
        accuracy = (data_quality(product.periods) + stability) / 2
        return min(1.0, max(0.0, accuracy))
