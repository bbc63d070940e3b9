"""
Test Configuration and Fixtures
Shared builders and a controllable clock for the pharmaflow tests
"""

from datetime import datetime, timedelta
from typing import List, Optional

import pytest

from pharmaflow.config import Config
from pharmaflow.models import DataFrequency, PeriodRecord, Product


class FakeClock:
    """Callable clock that only moves when told to"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def build_product(
    consumption: List[float],
    current_stock: float = 500.0,
    stock_out_days: Optional[List[int]] = None,
    product_id: str = "AMX-500",
    name: str = "Amoxicillin 500mg",
    unit_price: float = 2.0,
    frequency: DataFrequency = DataFrequency.MONTHLY
) -> Product:
    """Product whose latest period closes at `current_stock`"""
    stock_out_days = stock_out_days or [0] * len(consumption)
    periods = []
    for i, (used, days) in enumerate(zip(consumption, stock_out_days)):
        is_last = i == len(consumption) - 1
        periods.append(PeriodRecord(
            period=i + 1,
            period_name=f"Period {i + 1}",
            consumption_issue=used,
            stock_out_days=days,
            ending_balance=current_stock if is_last else None
        ))
    return Product(
        id=product_id,
        name=name,
        unit="tablet",
        unit_price=unit_price,
        frequency=frequency,
        periods=periods
    )


@pytest.fixture
def config() -> Config:
    """Fresh configuration per test so overrides never leak"""
    return Config()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 1, 9, 0, 0))


@pytest.fixture
def make_product():
    """Factory fixture for products with a given consumption history"""
    return build_product


@pytest.fixture
def stable_product() -> Product:
    """Three stock-out free periods: [100, 110, 95]"""
    return build_product([100, 110, 95], current_stock=500)


@pytest.fixture
def sample_periods() -> List[PeriodRecord]:
    return [
        PeriodRecord(
            period=1,
            period_name="Quarter 1",
            beginning_balance=200,
            received=300,
            consumption_issue=300,
            expired_damaged=10
        ),
        PeriodRecord(
            period=2,
            period_name="Quarter 2",
            beginning_balance=190,
            received=250,
            consumption_issue=240,
            stock_out_days=15
        ),
    ]
