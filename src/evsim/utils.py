"""
Utility functions for the EV charger fleet simulator.

This module provides unit conversions, charger-group expansion and helpers
that turn a SimulationResult into pandas tables and the weekly / monthly
aggregates that reporting front ends chart.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from .data_structures import ChargerGroup, DayMetrics, SimulationResult


# Non-leap year so a 365-day horizon maps onto exactly twelve months
DEFAULT_START_DATE = "2025-01-01"

DAYS_PER_WEEK = 7


def demand_to_kwh(demand_km: float, consumption_factor: float) -> float:
    """
    Convert a range demand into an energy requirement.

    Args:
        demand_km: Range to replenish (km)
        consumption_factor: Energy used per 100 km (kWh)

    Returns:
        Energy in kWh

    Examples:
        >>> demand_to_kwh(100, 18.0)
        18.0
    """
    return demand_km * consumption_factor / 100.0


def expand_charger_groups(groups: Sequence[ChargerGroup]) -> List[float]:
    """
    Flatten charger groups into one power entry per unit, in group order.

    Examples:
        >>> expand_charger_groups([ChargerGroup(22.0, 1), ChargerGroup(11.0, 2)])
        [22.0, 11.0, 11.0]
    """
    chargers = []
    for group in groups:
        chargers.extend(group.expand())
    return chargers


def concurrency_factor(result: SimulationResult, chargers: Sequence[float]) -> float:
    """
    Ratio of the observed peak power to the fleet's theoretical maximum.

    Args:
        result: Output of a simulation run
        chargers: Power rating of every unit (kW)

    Returns:
        Concurrency factor in [0, 1]
    """
    theoretical = sum(chargers)
    if theoretical <= 0:
        return 0.0
    return result.total_max_power_kw / theoretical


def results_to_dataframe(
    result: SimulationResult,
    start_date: Optional[Union[str, pd.Timestamp]] = None
) -> pd.DataFrame:
    """
    One row per simulated day.

    Args:
        result: Output of a simulation run
        start_date: Calendar date of day 0. When given, the frame gets a
            DatetimeIndex; otherwise it is indexed by day number.

    Returns:
        DataFrame with columns max_power_kw and energy_consumed_kwh
    """
    df = pd.DataFrame(
        {
            'max_power_kw': [d.max_power_kw for d in result.results],
            'energy_consumed_kwh': [d.energy_consumed_kwh for d in result.results],
        }
    )
    df.index.name = 'day'

    if start_date is not None:
        df.index = pd.date_range(start=start_date, periods=len(df), freq='D', name='date')

    return df


def aggregate_results(
    result: SimulationResult,
    freq: str = 'week',
    start_date: Union[str, pd.Timestamp] = DEFAULT_START_DATE
) -> pd.DataFrame:
    """
    Weekly or monthly aggregates of a run.

    Weeks are consecutive blocks of seven days starting at day 0 (the last
    block may be shorter). Months are calendar months counted from
    ``start_date``.

    Args:
        result: Output of a simulation run
        freq: 'day', 'week' or 'month'
        start_date: Calendar date of day 0 (used for months)

    Returns:
        DataFrame with energy_consumed_kwh (sum), max_power_kw (max) and
        days (number of days in the period)
    """
    df = results_to_dataframe(result, start_date=start_date)
    df['days'] = 1

    if freq == 'day':
        keys = pd.RangeIndex(len(df), name='day')
    elif freq == 'week':
        keys = pd.Index([i // DAYS_PER_WEEK + 1 for i in range(len(df))], name='week')
    elif freq == 'month':
        keys = df.index.to_period('M').rename('month')
    else:
        raise ValueError(f"Unknown frequency: {freq}. Valid options: day, week, month")

    return df.groupby(keys).agg(
        {'energy_consumed_kwh': 'sum', 'max_power_kw': 'max', 'days': 'sum'}
    )


def metrics_to_dataframe_data(metrics: Sequence[DayMetrics]) -> List[Dict[str, Any]]:
    """
    Per-day counters as dictionaries, one per simulated day.
    """
    return [m.to_dict() for m in metrics]
