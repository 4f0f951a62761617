"""
Scenario presets for simulation inputs.

This module holds the reference usage tables (demand distribution and hourly
arrival profile observed for a residential site) and builds SimulationConfig
objects from them. The engine never reads these presets on its own; callers
pass them in explicitly.
"""

from typing import Dict, List, Optional

import numpy as np

from .data_structures import (
    DEFAULT_HORIZON_DAYS,
    DEFAULT_SEED,
    HOURS_PER_DAY,
    ChargerGroup,
    SimulationConfig,
)


# Demand magnitude (km) -> share of arrivals (percent)
REFERENCE_DEMAND_TABLE: Dict[int, float] = {
    0: 34.31,
    5: 4.90,
    10: 9.80,
    20: 11.76,
    30: 8.82,
    50: 11.76,
    100: 10.78,
    200: 4.90,
    300: 2.94,
}

# Probability (percent) that one EV arrives during each hour of the day
REFERENCE_ARRIVAL_PROFILE: List[float] = [
    0.94, 0.94, 0.94, 0.94, 0.94, 0.94, 0.94, 0.94,
    2.83, 2.83, 5.66, 5.66, 5.66, 7.55, 7.55, 7.55,
    10.38, 10.38, 10.38, 4.72, 4.72, 4.72, 0.94, 0.94,
]

REFERENCE_CONSUMPTION_FACTOR = 18.0  # kWh / 100 km
REFERENCE_CHARGER_POWER_KW = 11.0


class ScenarioGenerator:
    """
    Build simulation configs from named arrival patterns.

    Patterns:
    - reference: Observed residential profile with an afternoon peak
    - uniform: Same daily arrival expectation spread evenly over 24 hours
    - commuter: Morning and evening peaks (bimodal)

    Attributes:
        demand_table: Demand distribution used for every scenario
        consumption_factor: Energy used per 100 km (kWh)
        horizon_days: Number of simulated days
    """

    SCENARIOS = {
        'reference': {
            'name': 'Reference',
            'arrival_pattern': 'reference',
            'description': 'Observed residential arrivals, afternoon peak'
        },
        'uniform': {
            'name': 'Uniform',
            'arrival_pattern': 'uniform',
            'description': 'Reference daily arrivals spread evenly'
        },
        'commuter': {
            'name': 'Commuter',
            'arrival_pattern': 'bimodal',
            'description': 'Morning and evening arrival peaks'
        },
    }

    def __init__(
        self,
        demand_table: Optional[Dict[float, float]] = None,
        consumption_factor: float = REFERENCE_CONSUMPTION_FACTOR,
        horizon_days: int = DEFAULT_HORIZON_DAYS
    ):
        self.demand_table = dict(demand_table or REFERENCE_DEMAND_TABLE)
        self.consumption_factor = consumption_factor
        self.horizon_days = horizon_days

    def arrival_profile(self, pattern: str) -> List[float]:
        """
        Hourly arrival probabilities (percent) for a pattern.

        Every pattern keeps the reference's expected number of arrivals
        per day.
        """
        reference = np.array(REFERENCE_ARRIVAL_PROFILE)
        daily_arrivals = reference.sum()

        if pattern == 'reference':
            profile = reference

        elif pattern == 'uniform':
            profile = np.full(HOURS_PER_DAY, daily_arrivals / HOURS_PER_DAY)

        elif pattern == 'bimodal':
            hours = np.arange(HOURS_PER_DAY)
            weights = (
                np.exp(-0.5 * ((hours - 8.0) / 1.5) ** 2)
                + np.exp(-0.5 * ((hours - 18.0) / 1.5) ** 2)
            )
            profile = weights / weights.sum() * daily_arrivals

        else:
            raise ValueError(
                f"Unknown arrival pattern: {pattern}. "
                f"Valid options: reference, uniform, bimodal"
            )

        return [float(p) for p in np.clip(profile, 0.0, 100.0)]

    def generate(
        self,
        scenario_key: str,
        chargers: List[float],
        seed: Optional[int] = DEFAULT_SEED
    ) -> SimulationConfig:
        """
        Generate a complete scenario config.

        Args:
            scenario_key: Scenario identifier (e.g. 'reference', 'commuter')
            chargers: Power rating (kW) of every unit
            seed: Random seed for reproducibility

        Returns:
            SimulationConfig for the scenario
        """
        if scenario_key not in self.SCENARIOS:
            raise ValueError(
                f"Unknown scenario: {scenario_key}. "
                f"Valid options: {list(self.SCENARIOS.keys())}"
            )

        pattern = self.SCENARIOS[scenario_key]['arrival_pattern']
        return SimulationConfig(
            chargers=list(chargers),
            demand_table=dict(self.demand_table),
            arrival_profile=self.arrival_profile(pattern),
            consumption_factor=self.consumption_factor,
            horizon_days=self.horizon_days,
            seed=seed
        )

    @classmethod
    def list_scenarios(cls) -> List[str]:
        """List available scenario keys."""
        return list(cls.SCENARIOS.keys())

    @classmethod
    def get_scenario_info(cls, scenario_key: str) -> dict:
        """Get information about a scenario."""
        if scenario_key not in cls.SCENARIOS:
            raise ValueError(f"Unknown scenario: {scenario_key}")
        return cls.SCENARIOS[scenario_key].copy()


def generate_config(
    n_chargers: int = 1,
    power_kw: float = REFERENCE_CHARGER_POWER_KW,
    scenario_key: str = 'reference',
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    seed: Optional[int] = DEFAULT_SEED
) -> SimulationConfig:
    """
    Convenience function for a fleet of identical chargers.

    Args:
        n_chargers: Number of units
        power_kw: Rated power of every unit (kW)
        scenario_key: Scenario identifier
        horizon_days: Number of simulated days
        seed: Random seed

    Returns:
        SimulationConfig

    Examples:
        >>> config = generate_config(n_chargers=10)
        >>> len(config.chargers)
        10
    """
    generator = ScenarioGenerator(horizon_days=horizon_days)
    chargers = ChargerGroup(power_kw=power_kw, count=n_chargers).expand()
    return generator.generate(scenario_key, chargers, seed=seed)
