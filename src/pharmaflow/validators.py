"""
Period Record Validation
========================
Structural checks on period histories handed over by the facility
application.

The analytical components assume validated input; these checks let a
caller confirm that before recomputing. Nothing here raises: each problem
becomes a ValidationIssue tied to the period and field it concerns.

Errors (history unusable for analysis):
- negative quantities or unit price
- stock-out days outside 0..calendar bound of the reporting frequency

Warnings (worth surfacing to the data owner):
- ending balance that disagrees with the period's movements
- periods out of chronological order, empty history
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .logger import get_logger
from .models import PeriodRecord, Product
from .period_calculations import max_stock_out_days

logger = get_logger(__name__)

QUANTITY_FIELDS = [
    'beginning_balance',
    'received',
    'positive_adjustment',
    'negative_adjustment',
    'expired_damaged',
    'consumption_issue',
]

# Tolerance when comparing a supplied ending balance with the derived one
BALANCE_TOLERANCE = 1e-6

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class ValidationIssue:
    """One problem found in a product's history"""
    severity: str
    message: str
    period: Optional[int] = None
    field: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'severity': self.severity,
            'message': self.message,
            'period': self.period,
            'field': self.field
        }


@dataclass
class ValidationResult:
    """
    Issues collected while validating a product or period.

    Attributes
    ----------
    issues : List[ValidationIssue]
        Every problem found, in discovery order
    info : Dict[str, Any]
        Context about what was validated
    """
    issues: List[ValidationIssue] = field(default_factory=list)
    info: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not any(i.severity == ERROR for i in self.issues)

    @property
    def errors(self) -> List[str]:
        return [i.message for i in self.issues if i.severity == ERROR]

    @property
    def warnings(self) -> List[str]:
        return [i.message for i in self.issues if i.severity == WARNING]

    def issues_for_period(self, period: int) -> List[ValidationIssue]:
        return [i for i in self.issues if i.period == period]

    def extend(self, other: 'ValidationResult') -> None:
        self.issues.extend(other.issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_valid': self.is_valid,
            'errors': self.errors,
            'warnings': self.warnings,
            'issues': [i.to_dict() for i in self.issues],
            'info': self.info
        }


def validate_period(period: PeriodRecord, max_stock_out: int) -> ValidationResult:
    """Check one period record against the frequency's stock-out bound"""
    result = ValidationResult()
    label = period.period_name or f"period {period.period}"

    def report(severity, message, field_name=None):
        result.issues.append(
            ValidationIssue(severity, f"{label}: {message}", period.period, field_name)
        )

    for name in QUANTITY_FIELDS:
        value = getattr(period, name)
        if value < 0:
            report(ERROR, f"{name} is negative ({value})", name)

    if period.stock_out_days < 0:
        report(ERROR, f"stock_out_days is negative ({period.stock_out_days})", 'stock_out_days')
    elif period.stock_out_days > max_stock_out:
        report(
            ERROR,
            f"stock_out_days ({period.stock_out_days}) exceeds "
            f"the period maximum ({max_stock_out} days)",
            'stock_out_days'
        )

    expected = period.expected_ending_balance()
    if abs((period.ending_balance or 0) - expected) > BALANCE_TOLERANCE:
        report(
            WARNING,
            f"ending_balance {period.ending_balance} does not match movements ({expected})",
            'ending_balance'
        )

    return result


def validate_product(product: Product) -> ValidationResult:
    """
    Validate every period of a product plus its catalog attributes.

    Parameters
    ----------
    product : Product
        Product with its chronological period history

    Returns
    -------
    ValidationResult
        Combined result across all periods
    """
    result = ValidationResult(info={
        'product_id': product.id,
        'period_count': len(product.periods)
    })

    if product.unit_price < 0:
        result.issues.append(ValidationIssue(
            ERROR, f"unit_price is negative ({product.unit_price})", field='unit_price'
        ))

    if not product.periods:
        result.issues.append(ValidationIssue(WARNING, f"{product.id} has no period records"))

    period_numbers = [p.period for p in product.periods]
    if period_numbers != sorted(period_numbers):
        result.issues.append(ValidationIssue(
            WARNING, f"{product.id} periods are not in chronological order", field='period'
        ))

    bound = max_stock_out_days(product.frequency)
    for period in product.periods:
        result.extend(validate_period(period, bound))

    if result.is_valid:
        logger.debug(f"{product.id}: {len(product.periods)} periods valid")
    else:
        logger.warning(f"{product.id}: {len(result.errors)} validation errors, first: {result.errors[0]}")

    return result
