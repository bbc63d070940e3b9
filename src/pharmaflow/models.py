"""
Data Models
===========
Plain data records exchanged by the analytical components.

Inputs (PeriodRecord, Product) are supplied by the facility application
after validation. Everything else is derived, recomputed from the period
history on demand and safe to render or serialize directly.
"""

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class DataFrequency(str, Enum):
    """Reporting interval of a product's inventory reports"""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    BIMONTHLY = "bimonthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class VENClassification(str, Enum):
    """Vital / Essential / Non-essential criticality tag"""
    VITAL = "V"
    ESSENTIAL = "E"
    NON_ESSENTIAL = "N"


class ConsumptionPattern(str, Enum):
    STABLE = "stable"
    INCREASING = "increasing"
    DECREASING = "decreasing"
    SEASONAL = "seasonal"
    IRREGULAR = "irregular"


class ForecastMethod(str, Enum):
    MOVING_AVERAGE = "moving_average"
    EXPONENTIAL_SMOOTHING = "exponential_smoothing"
    HOLT_WINTERS = "holt_winters"


class StockLevel(str, Enum):
    """Stock health classification"""
    CRITICAL = "critical"
    LOW = "low"
    ADEQUATE = "adequate"
    EXCESS = "excess"


class AlertType(str, Enum):
    STOCK_OUT = "stockOut"
    LOW_STOCK = "lowStock"
    OVER_STOCK = "overStock"
    EXPIRING = "expiring"
    FORECAST = "forecast"
    CONSUMPTION = "consumption"


class AlertLevel(str, Enum):
    """Alert severity levels"""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def priority(self) -> int:
        """Higher is more urgent"""
        return {"critical": 3, "warning": 2, "info": 1}[self.value]


# =============================================================================
# INPUT RECORDS
# =============================================================================

@dataclass
class PeriodRecord:
    """
    One reporting interval for one product.

    Attributes
    ----------
    period : int
        1-based index of the period within the reporting year
    period_name : str
        Display label ("Quarter 1", "March", ...)
    beginning_balance, received, positive_adjustment, negative_adjustment : float
        Stock movements during the period
    ending_balance : float, optional
        Derived when omitted:
        max(0, beginning + received + positive - negative - consumption - expired)
    stock_out_days : int
        Days without stock, bounded by the period's calendar length
    expired_damaged : float
        Quantity lost to expiry or damage
    consumption_issue : float
        Quantity consumed or issued
    aamc : float
        Period AAMC adjusted for stock-out days
    wastage_rate : float
        Expired/damaged as a percentage of stock available in the period
    """
    period: int
    period_name: str = ""
    beginning_balance: float = 0.0
    received: float = 0.0
    positive_adjustment: float = 0.0
    negative_adjustment: float = 0.0
    ending_balance: Optional[float] = None
    stock_out_days: int = 0
    expired_damaged: float = 0.0
    consumption_issue: float = 0.0
    aamc: float = 0.0
    wastage_rate: float = 0.0

    def __post_init__(self):
        if self.ending_balance is None:
            self.ending_balance = self.expected_ending_balance()

    def expected_ending_balance(self) -> float:
        """Ending balance implied by the period's stock movements"""
        return max(
            0.0,
            self.beginning_balance
            + self.received
            + self.positive_adjustment
            - self.negative_adjustment
            - self.consumption_issue
            - self.expired_damaged
        )

    @property
    def available_stock(self) -> float:
        """Stock available for issue during the period"""
        return self.beginning_balance + self.received + self.positive_adjustment

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Product:
    """A tracked pharmaceutical product with its period history"""
    id: str
    name: str
    unit: str = ""
    unit_price: float = 0.0
    ven_classification: VENClassification = VENClassification.VITAL
    frequency: DataFrequency = DataFrequency.QUARTERLY
    periods: List[PeriodRecord] = field(default_factory=list)
    code: Optional[str] = None

    @property
    def current_stock(self) -> float:
        """Ending balance of the latest period, 0 without history"""
        if not self.periods:
            return 0.0
        return self.periods[-1].ending_balance or 0.0

    def consumption_history(self) -> List[float]:
        """Consumption values in chronological order"""
        return [p.consumption_issue for p in self.periods]

    def append_period(self, period: PeriodRecord) -> None:
        """Add the next chronological period"""
        self.periods.append(period)


# =============================================================================
# TAGGED RESULTS
# =============================================================================

@dataclass(frozen=True)
class Computed:
    """A value backed by enough qualifying data points"""
    value: float

    @property
    def is_sufficient(self) -> bool:
        return True

    def value_or(self, default: float) -> float:
        return self.value


@dataclass(frozen=True)
class InsufficientData:
    """Too few qualifying data points to compute a value"""
    reason: str
    points: int = 0

    @property
    def is_sufficient(self) -> bool:
        return False

    def value_or(self, default: float) -> float:
        return default


Measurement = Union[Computed, InsufficientData]


# =============================================================================
# DERIVED RESULTS
# =============================================================================

@dataclass
class ConsumptionMetrics:
    """Consumption profile derived from a product's period history"""
    aamc: float
    amc: float
    pattern: ConsumptionPattern
    seasonality_index: float
    variability_coefficient: float
    trend: float  # percent of mean per period

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['pattern'] = self.pattern.value
        return data


@dataclass
class ConsumptionAnalysisResult:
    product_id: str
    metrics: ConsumptionMetrics
    recommendations: List[str] = field(default_factory=list)
    confidence: float = 0.0
    insufficient_data: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'metrics': self.metrics.to_dict(),
            'recommendations': list(self.recommendations),
            'confidence': self.confidence,
            'insufficient_data': self.insufficient_data
        }


@dataclass
class ForecastParameters:
    """
    Parameters for a single forecast request.

    Raises
    ------
    ValueError
        If a smoothing factor lies outside [0, 1], a count is not
        positive, or the service level lies outside (0, 1).
    """
    method: ForecastMethod = ForecastMethod.EXPONENTIAL_SMOOTHING
    window: int = 6
    horizon: int = 12
    alpha: float = 0.3
    beta: float = 0.1
    gamma: float = 0.1
    season_length: int = 12
    lead_time_days: float = 30
    service_level: float = 0.95

    def __post_init__(self):
        self.method = ForecastMethod(self.method)

        for name in ('alpha', 'beta', 'gamma'):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be within [0, 1], got {value}")

        for name in ('window', 'horizon', 'season_length'):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value}")

        if self.lead_time_days < 0:
            raise ValueError(f"lead_time_days must be non-negative, got {self.lead_time_days}")

        if not 0 < self.service_level < 1:
            raise ValueError(f"service_level must be within (0, 1), got {self.service_level}")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['method'] = self.method.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ForecastParameters':
        return cls(**data)


@dataclass
class ForecastResult:
    """
    Forecast and replenishment sizing for a single product.

    Attributes
    ----------
    product_id : str
        Identifier of the forecasted product
    predicted_consumption : List[float]
        One value per future period
    safety_stock : float
        Buffer absorbing demand variability during lead time
    reorder_point : float
        Average forecast plus safety stock
    max_stock : float
        Reorder point plus two periods of average forecast
    forecast_accuracy : float
        Data quality and pattern stability blended into [0, 1]
    confidence : float
        0.8 with adjusted consumption history, 0.3 without
    parameters : ForecastParameters
        Parameters the forecast was produced with
    """
    product_id: str
    predicted_consumption: List[float]
    safety_stock: float
    reorder_point: float
    max_stock: float
    forecast_accuracy: float
    confidence: float
    parameters: ForecastParameters = field(default_factory=ForecastParameters)

    @property
    def average_forecast(self) -> float:
        if not self.predicted_consumption:
            return 0.0
        return sum(self.predicted_consumption) / len(self.predicted_consumption)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary"""
        return {
            'product_id': self.product_id,
            'predicted_consumption': [float(v) for v in self.predicted_consumption],
            'safety_stock': float(self.safety_stock),
            'reorder_point': float(self.reorder_point),
            'max_stock': float(self.max_stock),
            'forecast_accuracy': float(self.forecast_accuracy),
            'confidence': float(self.confidence),
            'parameters': self.parameters.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ForecastResult':
        return cls(
            product_id=data['product_id'],
            predicted_consumption=list(data['predicted_consumption']),
            safety_stock=data['safety_stock'],
            reorder_point=data['reorder_point'],
            max_stock=data['max_stock'],
            forecast_accuracy=data['forecast_accuracy'],
            confidence=data['confidence'],
            parameters=ForecastParameters.from_dict(data['parameters'])
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, payload: str) -> 'ForecastResult':
        return cls.from_dict(json.loads(payload))


@dataclass
class StockStatus:
    """Current stock health of one product, superseded on each recompute"""
    product_id: str
    current_stock: float
    safety_stock: float
    reorder_point: float
    max_stock: float
    days_of_stock: float
    status: StockLevel
    last_updated: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['status'] = self.status.value
        data['last_updated'] = self.last_updated.isoformat()
        return data


@dataclass
class StockAlert:
    """An actionable stock alert; only `acknowledged` ever changes"""
    id: str
    product_id: str
    product_name: str
    type: AlertType
    level: AlertLevel
    message: str
    current_stock: float
    recommendation: str
    timestamp: datetime
    threshold: Optional[float] = None
    acknowledged: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'product_id': self.product_id,
            'product_name': self.product_name,
            'type': self.type.value,
            'level': self.level.value,
            'message': self.message,
            'current_stock': self.current_stock,
            'threshold': self.threshold,
            'recommendation': self.recommendation,
            'timestamp': self.timestamp.isoformat(),
            'acknowledged': self.acknowledged
        }


@dataclass
class InventoryMetrics:
    """Stock-status roll-up across a product portfolio"""
    total_products: int = 0
    critical_stock_count: int = 0
    low_stock_count: int = 0
    adequate_stock_count: int = 0
    excess_stock_count: int = 0
    total_inventory_value: float = 0.0
    turnover_rate: float = 0.0
    stock_out_frequency: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PortfolioSummary:
    """Consumption and wastage roll-up across a product portfolio"""
    total_consumption: float = 0.0
    total_products: int = 0
    average_aamc: float = 0.0
    stock_out_rate: float = 0.0
    wastage_rate: float = 0.0
    performance_score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AnnualAverages:
    """Per-product yearly roll-up of the period records"""
    annual_consumption: float = 0.0
    aamc: float = 0.0
    wastage_rate: float = 0.0
    awamc: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
