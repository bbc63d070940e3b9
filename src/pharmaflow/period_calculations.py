"""
Period Calculations
===================
Per-period derived fields and yearly roll-ups for a product's reports.

Derived fields:
- ending_balance: stock left after the period's movements (never negative)
- aamc: consumption normalized to a 30.5-day month over the days the
  product was actually in stock
- wastage_rate: expired/damaged as a percentage of available stock
"""

from dataclasses import replace
from typing import Any, Dict, List, Union

import numpy as np

from .constants import FREQUENCY_CALENDAR, AVERAGE_DAYS_PER_MONTH
from .models import AnnualAverages, DataFrequency, PeriodRecord, Product

# Calendar months covered by one reporting period
MONTHS_PER_PERIOD: Dict[str, float] = {
    "weekly": 7 / AVERAGE_DAYS_PER_MONTH,
    "monthly": 1,
    "bimonthly": 2,
    "quarterly": 3,
    "yearly": 12,
}


def frequency_calendar(frequency: Union[DataFrequency, str]) -> Dict[str, Any]:
    """Period count, labels and stock-out bound for a reporting frequency"""
    return FREQUENCY_CALENDAR[DataFrequency(frequency).value]


def max_stock_out_days(frequency: Union[DataFrequency, str]) -> int:
    return frequency_calendar(frequency)["max_stock_out_days"]


def create_empty_periods(frequency: Union[DataFrequency, str]) -> List[PeriodRecord]:
    """One zeroed period record per reporting interval of the year"""
    calendar = frequency_calendar(frequency)
    return [
        PeriodRecord(period=i + 1, period_name=calendar["names"][i])
        for i in range(calendar["count"])
    ]


def calculate_period_aamc(
    period: PeriodRecord,
    frequency: Union[DataFrequency, str] = DataFrequency.QUARTERLY
) -> float:
    """
    Monthly consumption adjusted for the days the product was in stock.

    A period that was out of stock for its whole length has no usable
    consumption signal and yields 0.
    """
    months = MONTHS_PER_PERIOD[DataFrequency(frequency).value]
    period_days = months * AVERAGE_DAYS_PER_MONTH

    if period.stock_out_days >= max_stock_out_days(frequency):
        return 0.0

    available_days = period_days - period.stock_out_days
    if available_days <= 0:
        return 0.0

    return period.consumption_issue / available_days * AVERAGE_DAYS_PER_MONTH


def calculate_wastage_rate(period: PeriodRecord) -> float:
    """Expired/damaged quantity as a percentage of available stock"""
    available = period.available_stock
    if available <= 0:
        return 0.0
    return period.expired_damaged / available * 100


def recalculate_period(
    period: PeriodRecord,
    frequency: Union[DataFrequency, str] = DataFrequency.QUARTERLY
) -> PeriodRecord:
    """Return a copy of the period with every derived field recomputed"""
    return replace(
        period,
        ending_balance=period.expected_ending_balance(),
        aamc=calculate_period_aamc(period, frequency),
        wastage_rate=calculate_wastage_rate(period)
    )


def recalculate_product(product: Product) -> Product:
    """Return a copy of the product with all period fields recomputed"""
    periods = [recalculate_period(p, product.frequency) for p in product.periods]
    return replace(product, periods=periods)


def calculate_annual_averages(periods: List[PeriodRecord]) -> AnnualAverages:
    """
    Yearly totals and averages over a product's periods.

    Averages are plain means of the per-period AAMC and wastage rate; an
    empty history yields all zeros.
    """
    if not periods:
        return AnnualAverages()

    consumption = np.array([p.consumption_issue for p in periods], dtype=float)
    aamc = np.array([p.aamc for p in periods], dtype=float)
    wastage = np.array([p.wastage_rate for p in periods], dtype=float)

    average_aamc = float(aamc.mean())
    return AnnualAverages(
        annual_consumption=float(consumption.sum()),
        aamc=average_aamc,
        wastage_rate=float(wastage.mean()),
        awamc=average_aamc
    )


def calculate_seasonality_shares(periods: List[PeriodRecord]) -> Dict[str, float]:
    """Each period's share of total consumption, keyed by period label"""
    total = sum(p.consumption_issue for p in periods)
    shares = {}
    for p in periods:
        label = p.period_name or f"Period {p.period}"
        shares[label] = p.consumption_issue / total if total > 0 else 0.0
    return shares
