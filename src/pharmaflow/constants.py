"""
System-Wide Constants and Configurations
==========================================
Default thresholds for consumption analysis, forecasting, stock
classification and alerting. `pharmaflow.config` builds typed
configuration objects from these dictionaries.

All magic numbers used by the analytical components live here.
"""

from typing import Dict, Any

# =============================================================================
# CONSUMPTION ANALYSIS
# =============================================================================
# Pattern classification and recommendation thresholds.

ANALYSIS_THRESHOLDS: Dict[str, Any] = {
    # Fewer positive-consumption periods than this = irregular by default
    "min_pattern_points": 3,

    # Coefficient of variation (%) above which consumption is irregular
    "irregular_variability_pct": 50.0,

    # Trend band (% of mean per period) separating stable from trending
    "stable_trend_pct": 5.0,

    # Autocorrelation at half-length lag that signals a seasonal cycle
    "seasonal_autocorrelation": 0.6,
    "min_seasonality_points": 6,

    # Seasonality index needs at least this many positive periods
    "min_seasonality_index_points": 4,

    # Recommendation triggers
    "strong_trend_pct": 20.0,
    "seasonal_index_threshold": 0.3,
}

# =============================================================================
# FORECASTING
# =============================================================================

FORECAST_DEFAULTS: Dict[str, Any] = {
    "method": "exponential_smoothing",
    "horizon": 12,              # future periods
    "window": 6,                # moving average window
    "alpha": 0.3,               # level smoothing
    "beta": 0.1,                # trend smoothing
    "gamma": 0.1,               # seasonal smoothing
    "season_length": 12,        # monthly data, yearly cycle
    "lead_time_days": 30,
    "service_level": 0.95,

    # Confidence reported with each forecast
    "confidence_with_history": 0.8,
    "confidence_without_history": 0.3,

    # Maximum stock covers this many periods of forecast beyond the reorder point
    "max_stock_periods": 2,
}

# Service level -> z-score tiers, checked from the highest level down.
# Stepped tiers, not a continuous inverse-normal.
SERVICE_LEVEL_Z_SCORES = [
    (0.99, 2.326),
    (0.95, 1.645),
]
DEFAULT_Z_SCORE = 1.282

# Lead time is expressed in days, consumption per 30-day month
DAYS_PER_MONTH = 30

# =============================================================================
# STOCK STATUS
# =============================================================================

STOCK_THRESHOLDS: Dict[str, Any] = {
    "low_days_of_stock": 30,      # < 30 days of stock = low
    "excess_days_of_stock": 180,  # > 180 days of stock = excess
}

# =============================================================================
# ALERTS
# =============================================================================

ALERT_CONFIG: Dict[str, Any] = {
    # Variability (%) that raises a consumption anomaly alert
    "anomaly_variability_pct": 50.0,

    # Acknowledged alerts older than this are pruned on the next recompute
    # of their product. None keeps them forever.
    "acknowledged_retention_days": 30,
}

ALERT_RECOMMENDATIONS: Dict[str, str] = {
    "stockOut": "Immediate procurement required - critical stock-out situation",
    "lowStock_critical": "Place procurement order immediately",
    "lowStock_warning": "Monitor closely and prepare for procurement",
    "overStock": "Review consumption patterns and adjust procurement",
    "consumption": "Review consumption data and adjust forecasting parameters",
}

# =============================================================================
# PORTFOLIO SCORING
# =============================================================================

PERFORMANCE_SCORE_WEIGHTS: Dict[str, float] = {
    "stock_out_penalty": 4.0,   # points lost per % of products with stock-outs
    "wastage_penalty": 6.0,     # points lost per % wastage
}

# =============================================================================
# REPORTING FREQUENCIES
# =============================================================================
# Periods per year, period labels and the calendar bound on stock-out days.

FREQUENCY_CALENDAR: Dict[str, Dict[str, Any]] = {
    "weekly": {
        "count": 52,
        "names": [f"Week {i + 1}" for i in range(52)],
        "max_stock_out_days": 7,
    },
    "monthly": {
        "count": 12,
        "names": [
            "January", "February", "March", "April", "May", "June",
            "July", "August", "September", "October", "November", "December",
        ],
        "max_stock_out_days": 30,
    },
    "bimonthly": {
        "count": 6,
        "names": ["Jan-Feb", "Mar-Apr", "May-Jun", "Jul-Aug", "Sep-Oct", "Nov-Dec"],
        "max_stock_out_days": 60,
    },
    "quarterly": {
        "count": 4,
        "names": ["Quarter 1", "Quarter 2", "Quarter 3", "Quarter 4"],
        "max_stock_out_days": 90,
    },
    "yearly": {
        "count": 1,
        "names": ["Year 1"],
        "max_stock_out_days": 365,
    },
}

# Average days per month used to normalize per-period AAMC
AVERAGE_DAYS_PER_MONTH = 30.5

# =============================================================================
# LOGGING
# =============================================================================

LOGGING_CONFIG: Dict[str, Any] = {
    "level": "INFO",
    "format": "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    "date_format": "%Y-%m-%d %H:%M:%S",
    "log_file": None,
}
