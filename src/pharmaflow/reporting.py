"""
Reporting Frames
================
pandas views of analytical results for dashboards and exports, plus a
bridge from an in-memory period table to PeriodRecord lists.
"""

from typing import List

import pandas as pd

from .models import (
    AlertLevel,
    ForecastResult,
    PeriodRecord,
    StockAlert,
    StockLevel,
    StockStatus,
)

PERIOD_COLUMNS = [
    'period',
    'period_name',
    'beginning_balance',
    'received',
    'positive_adjustment',
    'negative_adjustment',
    'ending_balance',
    'stock_out_days',
    'expired_damaged',
    'consumption_issue',
    'aamc',
    'wastage_rate',
]

STATUS_ORDER = {
    StockLevel.CRITICAL.value: 0,
    StockLevel.LOW.value: 1,
    StockLevel.EXCESS.value: 2,
    StockLevel.ADEQUATE.value: 3,
}


def statuses_to_dataframe(statuses: List[StockStatus]) -> pd.DataFrame:
    """
    Convert stock statuses to a DataFrame, most urgent first.

    Parameters
    ----------
    statuses : List[StockStatus]
        Latest status per product

    Returns
    -------
    pd.DataFrame
        One row per product, sorted by status then days of stock
    """
    if len(statuses) == 0:
        return pd.DataFrame()

    df = pd.DataFrame([s.to_dict() for s in statuses])

    df['_status_order'] = df['status'].map(STATUS_ORDER)
    df = df.sort_values(['_status_order', 'days_of_stock']).drop(columns=['_status_order'])

    return df.reset_index(drop=True)


def alerts_to_dataframe(alerts: List[StockAlert]) -> pd.DataFrame:
    """Convert alerts to a DataFrame sorted by level, newest first"""
    if len(alerts) == 0:
        return pd.DataFrame()

    df = pd.DataFrame([a.to_dict() for a in alerts])
    df['timestamp'] = pd.to_datetime(df['timestamp'])

    df['_priority'] = df['level'].map(lambda level: AlertLevel(level).priority)
    df = df.sort_values(['_priority', 'timestamp'], ascending=[False, False])
    df = df.drop(columns=['_priority'])

    return df.reset_index(drop=True)


def combine_forecast_results(results: List[ForecastResult]) -> pd.DataFrame:
    """
    Combine forecasts into a long DataFrame.

    Returns
    -------
    pd.DataFrame
        Columns: product_id, step, predicted_consumption, safety_stock,
        reorder_point, max_stock, method
    """
    records = []
    for result in results:
        for step, value in enumerate(result.predicted_consumption, start=1):
            records.append({
                'product_id': result.product_id,
                'step': step,
                'predicted_consumption': value,
                'safety_stock': result.safety_stock,
                'reorder_point': result.reorder_point,
                'max_stock': result.max_stock,
                'method': result.parameters.method.value
            })

    if len(records) == 0:
        return pd.DataFrame()

    return pd.DataFrame(records)


def periods_to_dataframe(periods: List[PeriodRecord]) -> pd.DataFrame:
    """One row per period, in chronological order"""
    if len(periods) == 0:
        return pd.DataFrame(columns=PERIOD_COLUMNS)
    return pd.DataFrame([p.to_dict() for p in periods], columns=PERIOD_COLUMNS)


def periods_from_dataframe(df: pd.DataFrame) -> List[PeriodRecord]:
    """
    Build PeriodRecords from an already-loaded period table.

    Missing optional columns default to 0; a missing or null
    ending_balance is derived from the period's movements. Rows are
    ordered by the `period` column.

    Raises
    ------
    ValueError
        If the `period` column is missing
    """
    if 'period' not in df.columns:
        raise ValueError("Period table requires a 'period' column")

    df = df.sort_values('period')
    records = []

    for row in df.to_dict(orient='records'):
        values = {}
        for column in PERIOD_COLUMNS:
            if column not in row:
                continue
            value = row[column]
            if pd.isna(value):
                continue
            values[column] = value

        values['period'] = int(values['period'])
        if 'stock_out_days' in values:
            values['stock_out_days'] = int(values['stock_out_days'])
        if 'period_name' in values:
            values['period_name'] = str(values['period_name'])

        records.append(PeriodRecord(**values))

    return records
