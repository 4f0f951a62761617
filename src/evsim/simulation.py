"""
Run driver for the EV charger fleet simulator.

The engine iterates the configured horizon day by day, 24 hourly steps per
day, folds each day's accumulator into a DayResult and reduces the days into
a SimulationResult. A run is a pure function of its config and random stream.
"""

import copy
import logging
import time
from typing import List, Optional

import numpy as np

from .charger_pool import ChargerPool
from .data_structures import (
    HOURS_PER_DAY,
    DayAccumulator,
    DayMetrics,
    DayResult,
    SimulationConfig,
    SimulationResult,
    SimulationSummary,
)
from .exceptions import ConfigError, InternalInvariantError
from .sampler import DistributionSampler
from .stepper import HourlyStepper
from .utils import metrics_to_dataframe_data


logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Simulates charger usage over a horizon of days.

    The engine keeps its own copy of the config, so later changes to the
    caller's object do not reach it. Every call to run() builds a fresh
    charger pool, so an engine never carries occupancy between runs.
    Per-day arrival counters of the latest run are kept in
    ``metrics_history`` for analysis.

    Attributes:
        config: Validated copy of the simulation configuration
        sampler: Arrival and demand sampler built from the config
        metrics_history: DayMetrics of the latest run

    Examples:
        >>> config = SimulationConfig(
        ...     chargers=[11.0, 11.0],
        ...     demand_table={0: 50.0, 100: 50.0},
        ...     arrival_profile=[5.0] * 24,
        ...     consumption_factor=18.0
        ... )
        >>> engine = SimulationEngine(config)
        >>> result = engine.run()
        >>> len(result.results)
        365
    """

    def __init__(self, config: SimulationConfig):
        """
        Initialize the engine.

        Args:
            config: Simulation configuration

        Raises:
            ConfigError: If the configuration is invalid
        """
        self.config = copy.deepcopy(config)
        self._check_config()

        self.sampler = DistributionSampler(
            demand_table=self.config.demand_table,
            arrival_profile=self.config.arrival_profile,
            consumption_factor=self.config.consumption_factor
        )
        self.metrics_history: List[DayMetrics] = []
        self._last_result: Optional[SimulationResult] = None
        self._last_run_time_ms = 0.0

        if self.config.enable_logging:
            logging.basicConfig(level=logging.INFO)
            logger.info(
                f"Simulation engine initialized: {len(self.config.chargers)} chargers "
                f"({self.config.total_power_kw:.1f}kW), {self.config.horizon_days} days, "
                f"seed={self.config.seed}"
            )

    def run(self, rng: Optional[np.random.Generator] = None) -> SimulationResult:
        """
        Simulate the full horizon.

        Args:
            rng: Random generator to draw from. A new generator seeded with
                ``config.seed`` is created when omitted.

        Returns:
            SimulationResult with one DayResult per simulated day

        Raises:
            ConfigError: If the engine's config was made invalid after construction
            InternalInvariantError: If an engine consistency check fails
        """
        self._check_config()
        if rng is None:
            rng = np.random.default_rng(self.config.seed)

        start = time.perf_counter()
        pool = ChargerPool(self.config.chargers)
        stepper = HourlyStepper(self.sampler, pool, rng)
        accumulator = DayAccumulator()

        days: List[DayResult] = []
        self.metrics_history = []

        try:
            for day in range(self.config.horizon_days):
                accumulator.reset(day)
                for hour in range(HOURS_PER_DAY):
                    stepper.step(hour, accumulator, day * HOURS_PER_DAY + hour)

                days.append(accumulator.to_result())
                self.metrics_history.append(accumulator.to_metrics())
                logger.debug(
                    f"Day {day}: peak={accumulator.max_power_kw:.1f}kW, "
                    f"energy={accumulator.energy_kwh:.2f}kWh, "
                    f"arrivals={accumulator.arrivals}, dropped={accumulator.dropped}"
                )

            result = SimulationResult.from_days(days)
        except InternalInvariantError as exc:
            logger.error(f"Simulation aborted: {exc}")
            self.metrics_history = []
            self._last_result = None
            raise

        self._last_run_time_ms = (time.perf_counter() - start) * 1000.0
        self._last_result = result

        if pool.busy_count:
            logger.debug(f"{pool.busy_count} sessions still charging at horizon end")

        logger.info(
            f"Simulation complete: {result.num_days} days, "
            f"energy={result.total_energy_consumed:.1f}kWh, "
            f"peak={result.total_max_power_kw:.1f}kW "
            f"({self._last_run_time_ms:.1f}ms)"
        )
        return result

    def _check_config(self) -> None:
        try:
            self.config.validate()
        except ConfigError as exc:
            logger.error(str(exc))
            raise

    def get_simulation_summary(self) -> SimulationSummary:
        """
        Aggregate statistics of the latest run.

        Returns:
            SimulationSummary (all zeros if run() has not completed yet)
        """
        summary = SimulationSummary(
            num_chargers=len(self.config.chargers),
            theoretical_max_power_kw=self.config.total_power_kw
        )
        if self._last_result is None:
            return summary

        summary.total_days = self._last_result.num_days
        summary.total_arrivals = sum(m.arrivals for m in self.metrics_history)
        summary.total_accepted = sum(m.accepted for m in self.metrics_history)
        summary.total_dropped = sum(m.dropped for m in self.metrics_history)
        summary.total_completed = sum(m.completed for m in self.metrics_history)
        summary.total_energy_kwh = self._last_result.total_energy_consumed
        summary.peak_power_kw = self._last_result.total_max_power_kw
        summary.run_time_ms = self._last_run_time_ms
        return summary

    def get_metrics_data(self) -> List[dict]:
        """Per-day counters as dictionaries, ready for a DataFrame."""
        return metrics_to_dataframe_data(self.metrics_history)

    def reset(self) -> None:
        """Forget the latest run."""
        self.metrics_history = []
        self._last_result = None
        self._last_run_time_ms = 0.0

    def __repr__(self) -> str:
        return (f"SimulationEngine(chargers={len(self.config.chargers)}, "
                f"days={self.config.horizon_days})")


def simulate(
    config: SimulationConfig,
    rng: Optional[np.random.Generator] = None
) -> SimulationResult:
    """
    Run one simulation with a fresh engine.

    Args:
        config: Simulation configuration
        rng: Optional random generator; defaults to one seeded with config.seed

    Returns:
        SimulationResult of the run

    Examples:
        >>> from evsim.scenario_generator import generate_config
        >>> result = simulate(generate_config(n_chargers=4))
        >>> result.total_max_power_kw <= 44.0
        True
    """
    return SimulationEngine(config).run(rng)
