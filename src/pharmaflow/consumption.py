"""
Consumption Analysis Service
=============================
Derive a consumption profile from a product's period history.

Key Measures:
1. AAMC - mean consumption over periods with no stock-out days
2. AMC - mean consumption over every period with recorded consumption
3. Trend - least-squares slope of consumption, as % of mean per period
4. Variability - coefficient of variation of consumption (%)
5. Seasonality index - mean relative deviation from the mean

Pattern Classification (first match wins):
- variability above threshold     -> irregular
- |trend| below the stable band    -> stable
- trend above the band             -> increasing
- trend below the negative band    -> decreasing
- half-length-lag autocorrelation  -> seasonal, otherwise stable

Sparse histories never raise: they fall back to the conservative
profile (irregular, zero trend, 100% variability, zero confidence).
"""

from typing import List, Optional, Tuple

import numpy as np
from scipy import stats
from statsmodels.tsa.stattools import acf

from .config import Config, DEFAULT_CONFIG
from .logger import get_logger
from .models import (
    Computed,
    ConsumptionAnalysisResult,
    ConsumptionMetrics,
    ConsumptionPattern,
    InsufficientData,
    Measurement,
    PeriodRecord,
    Product,
)

logger = get_logger(__name__)


def _positive_consumption(periods: List[PeriodRecord]) -> np.ndarray:
    """Consumption values > 0, in period order"""
    values = np.array([p.consumption_issue for p in periods], dtype=float)
    return values[values > 0]


def data_quality(periods: List[PeriodRecord]) -> float:
    """Fraction of periods with positive consumption, 0 for no periods"""
    if not periods:
        return 0.0
    return len(_positive_consumption(periods)) / len(periods)


class ConsumptionAnalyzer:
    """
    Consumption statistics and pattern recognition for a product.

    Usage
    -----
    >>> analyzer = ConsumptionAnalyzer()
    >>> result = analyzer.analyze_product(product)
    >>> result.metrics.pattern
    <ConsumptionPattern.STABLE: 'stable'>
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Parameters
        ----------
        config : Config, optional
            Custom configuration. Uses defaults if not provided.
        """
        self.config = config or DEFAULT_CONFIG
        self.thresholds = self.config.analysis

    # ------------------------------------------------------------------
    # Averages
    # ------------------------------------------------------------------

    def assess_aamc(self, periods: List[PeriodRecord]) -> Measurement:
        """
        Adjusted Average Monthly Consumption as a tagged result.

        Only periods with positive consumption and zero stock-out days
        qualify.
        """
        qualifying = [
            p.consumption_issue for p in periods
            if p.consumption_issue > 0 and p.stock_out_days == 0
        ]
        if not qualifying:
            return InsufficientData("no periods with consumption and full stock availability")
        return Computed(float(np.mean(qualifying)))

    def calculate_aamc(self, periods: List[PeriodRecord]) -> float:
        """AAMC, or 0 when no period qualifies."""
        return self.assess_aamc(periods).value_or(0.0)

    def assess_amc(self, periods: List[PeriodRecord]) -> Measurement:
        values = _positive_consumption(periods)
        if len(values) == 0:
            return InsufficientData("no periods with recorded consumption")
        return Computed(float(values.mean()))

    def calculate_amc(self, periods: List[PeriodRecord]) -> float:
        """
        Average Monthly Consumption, including stock-out periods.

        The denominator is every period with positive consumption, so it is
        never smaller than the AAMC denominator.
        """
        return self.assess_amc(periods).value_or(0.0)

    # ------------------------------------------------------------------
    # Pattern
    # ------------------------------------------------------------------

    def analyze_consumption_pattern(
        self,
        periods: List[PeriodRecord]
    ) -> Tuple[ConsumptionPattern, float, float]:
        """
        Classify the consumption pattern.

        Parameters
        ----------
        periods : List[PeriodRecord]
            Chronological period history

        Returns
        -------
        Tuple[ConsumptionPattern, float, float]
            (pattern, trend % per period, variability %)
        """
        values = _positive_consumption(periods)

        if len(values) < self.thresholds.min_pattern_points:
            return ConsumptionPattern.IRREGULAR, 0.0, 100.0

        trend = self.calculate_trend(values)

        mean = values.mean()
        variability = float(values.std() / mean * 100) if mean > 0 else 100.0

        band = self.thresholds.stable_trend_pct
        if variability > self.thresholds.irregular_variability_pct:
            pattern = ConsumptionPattern.IRREGULAR
        elif abs(trend) < band:
            pattern = ConsumptionPattern.STABLE
        elif trend > band:
            pattern = ConsumptionPattern.INCREASING
        elif trend < -band:
            pattern = ConsumptionPattern.DECREASING
        elif self.detect_seasonality(values):
            pattern = ConsumptionPattern.SEASONAL
        else:
            pattern = ConsumptionPattern.STABLE

        return pattern, trend, variability

    @staticmethod
    def calculate_trend(values: np.ndarray) -> float:
        """Least-squares slope over the ordered values, as % of their mean"""
        if len(values) < 2:
            return 0.0

        mean = float(np.mean(values))
        if mean <= 0:
            return 0.0

        slope = stats.linregress(np.arange(len(values)), values).slope
        return float(slope / mean * 100)

    def detect_seasonality(self, values: np.ndarray) -> bool:
        """
        Autocorrelation test at a lag of half the series length.

        Uses the lag-adjusted estimator so only the overlapping half of the
        series is averaged; a series repeating every n // 2 periods scores 1.

        Returns False for short or constant series.
        """
        values = np.asarray(values, dtype=float)
        if len(values) < self.thresholds.min_seasonality_points:
            return False
        if np.allclose(values, values[0]):
            return False

        lag = len(values) // 2
        correlation = acf(values, nlags=lag, adjusted=True, fft=False)[lag]
        return bool(abs(correlation) > self.thresholds.seasonal_autocorrelation)

    def calculate_seasonality_index(self, periods: List[PeriodRecord]) -> float:
        """Mean of |value - mean| / mean over positive consumption values."""
        values = _positive_consumption(periods)
        if len(values) < self.thresholds.min_seasonality_index_points:
            return 0.0

        mean = values.mean()
        if mean <= 0:
            return 0.0
        return float(np.mean(np.abs(values - mean) / mean))

    # ------------------------------------------------------------------
    # Product analysis
    # ------------------------------------------------------------------

    def calculate_metrics(self, periods: List[PeriodRecord]) -> ConsumptionMetrics:
        pattern, trend, variability = self.analyze_consumption_pattern(periods)
        return ConsumptionMetrics(
            aamc=self.calculate_aamc(periods),
            amc=self.calculate_amc(periods),
            pattern=pattern,
            seasonality_index=self.calculate_seasonality_index(periods),
            variability_coefficient=variability,
            trend=trend
        )

    def analyze_product(self, product: Product) -> ConsumptionAnalysisResult:
        """
        Full consumption analysis for one product.

        Parameters
        ----------
        product : Product
            Product with its chronological period history

        Returns
        -------
        ConsumptionAnalysisResult
            Metrics, recommendations and a 0-1 confidence score
        """
        metrics = self.calculate_metrics(product.periods)
        insufficient = (
            len(_positive_consumption(product.periods)) < self.thresholds.min_pattern_points
        )

        result = ConsumptionAnalysisResult(
            product_id=product.id,
            metrics=metrics,
            recommendations=self._generate_recommendations(metrics, product),
            confidence=self._calculate_confidence(product.periods, metrics),
            insufficient_data=insufficient
        )

        logger.debug(
            f"Analyzed {product.id}: pattern={metrics.pattern.value}, "
            f"aamc={metrics.aamc:.1f}, variability={metrics.variability_coefficient:.1f}%"
        )
        return result

    def _generate_recommendations(
        self,
        metrics: ConsumptionMetrics,
        product: Product
    ) -> List[str]:
        recommendations = []
        strong = self.thresholds.strong_trend_pct

        if metrics.variability_coefficient > self.thresholds.irregular_variability_pct:
            recommendations.append("High variability detected - review ordering patterns")

        if metrics.pattern == ConsumptionPattern.INCREASING and metrics.trend > strong:
            recommendations.append("Increasing consumption trend - consider higher safety stock")

        if metrics.pattern == ConsumptionPattern.DECREASING and metrics.trend < -strong:
            recommendations.append("Decreasing consumption trend - review stock levels")

        if metrics.seasonality_index > self.thresholds.seasonal_index_threshold:
            recommendations.append("Seasonal patterns detected - implement seasonal forecasting")

        stock_out_periods = sum(1 for p in product.periods if p.stock_out_days > 0)
        if stock_out_periods > 0:
            recommendations.append(
                f"{stock_out_periods} stock-out periods detected - review safety stock"
            )

        return recommendations

    def _calculate_confidence(
        self,
        periods: List[PeriodRecord],
        metrics: ConsumptionMetrics
    ) -> float:
        variability_factor = max(0.0, 1 - metrics.variability_coefficient / 100)
        return min(1.0, data_quality(periods) * variability_factor)
