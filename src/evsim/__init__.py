"""
EV Charger Fleet Usage Simulator (evsim)

Estimates how a fleet of electric-vehicle chargers will be used. Given the
power rating of every charger, an hourly arrival-probability profile, a
distribution of per-arrival range demand and a consumption factor, the engine
simulates a horizon of days hour by hour and reports, per day, the peak
instantaneous power and the total energy delivered.

The model is a loss system: an EV that arrives while every charger is busy
is dropped, not queued. Chargers are allocated first-fit in their configured
order and deliver constant rated power until the session's energy is met.

Main Components:
- SimulationEngine / simulate: Run driver over the configured horizon
- HourlyStepper: Arrival, allocation and power integration for one hour
- ChargerPool: First-fit allocation and release of charger units
- DistributionSampler: Hourly arrival decision and demand sampling
- SimulationConfig: Declarative input, validated before any work starts
- SimulationResult / DayResult: Immutable per-day output

Quick Start:
    >>> from evsim import simulate, generate_config
    >>>
    >>> config = generate_config(n_chargers=4, power_kw=11.0)
    >>> result = simulate(config)
    >>> len(result.results)
    365
    >>> result.total_max_power_kw <= 44.0
    True
"""

from .exceptions import ConfigError, InternalInvariantError
from .data_structures import (
    HOURS_PER_DAY,
    DEFAULT_HORIZON_DAYS,
    DEFAULT_SEED,
    DEMAND_WEIGHT_TOLERANCE,
    ChargerGroup,
    SimulationConfig,
    SessionState,
    Session,
    DayAccumulator,
    DayResult,
    SimulationResult,
    DayMetrics,
    SimulationSummary,
)
from .sampler import DistributionSampler
from .charger_pool import ChargerPool, ChargerHandle
from .stepper import HourlyStepper
from .simulation import SimulationEngine, simulate
from .scenario_generator import (
    ScenarioGenerator,
    generate_config,
    REFERENCE_DEMAND_TABLE,
    REFERENCE_ARRIVAL_PROFILE,
    REFERENCE_CONSUMPTION_FACTOR,
    REFERENCE_CHARGER_POWER_KW,
)
from .utils import (
    demand_to_kwh,
    expand_charger_groups,
    concurrency_factor,
    results_to_dataframe,
    aggregate_results,
    metrics_to_dataframe_data,
)

__version__ = "0.1.0"

__all__ = [
    # Engine
    'SimulationEngine',
    'simulate',
    'HourlyStepper',
    'ChargerPool',
    'ChargerHandle',
    'DistributionSampler',

    # Errors
    'ConfigError',
    'InternalInvariantError',

    # Data structures
    'HOURS_PER_DAY',
    'DEFAULT_HORIZON_DAYS',
    'DEFAULT_SEED',
    'DEMAND_WEIGHT_TOLERANCE',
    'ChargerGroup',
    'SimulationConfig',
    'SessionState',
    'Session',
    'DayAccumulator',
    'DayResult',
    'SimulationResult',
    'DayMetrics',
    'SimulationSummary',

    # Scenario presets
    'ScenarioGenerator',
    'generate_config',
    'REFERENCE_DEMAND_TABLE',
    'REFERENCE_ARRIVAL_PROFILE',
    'REFERENCE_CONSUMPTION_FACTOR',
    'REFERENCE_CHARGER_POWER_KW',

    # Utilities
    'demand_to_kwh',
    'expand_charger_groups',
    'concurrency_factor',
    'results_to_dataframe',
    'aggregate_results',
    'metrics_to_dataframe_data',
]
