"""
Distribution sampler for arrivals and charging demand.

All draws go through an explicitly passed numpy Generator so that a run is
reproducible from its seed alone.
"""

import logging
from typing import Dict, List

import numpy as np

from .data_structures import HOURS_PER_DAY
from .exceptions import ConfigError


logger = logging.getLogger(__name__)


class DistributionSampler:
    """
    Draws discrete random outcomes from the configured weighted tables.
    
    Demand entries are kept in ascending key order; entries with zero weight
    are never sampled.
    
    Attributes:
        arrival_profile: Hourly arrival probabilities (percent)
        consumption_factor: Energy used per 100 km (kWh)
        outcomes: Demand magnitudes (km) with positive weight
        cumulative_weights: Running sum of the weights of ``outcomes``
    """
    
    def __init__(
        self,
        demand_table: Dict[float, float],
        arrival_profile: List[float],
        consumption_factor: float
    ):
        """
        Initialize the sampler.
        
        Args:
            demand_table: Demand magnitude (km) -> weight (percent)
            arrival_profile: 24 hourly arrival probabilities (percent)
            consumption_factor: Energy used per 100 km (kWh)
        
        Raises:
            ConfigError: If the demand table is empty or has no weight, or
                the arrival profile does not cover every hour of the day
        """
        if not demand_table:
            raise ConfigError("Demand distribution cannot be empty")
        if len(arrival_profile) != HOURS_PER_DAY:
            raise ConfigError(
                f"Arrival profile must contain {HOURS_PER_DAY} values"
            )
        
        entries = [
            (km, weight) for km, weight in sorted(demand_table.items())
            if weight > 0
        ]
        if not entries:
            raise ConfigError("Demand distribution weights sum to zero")
        
        self.outcomes = [km for km, _ in entries]
        self.cumulative_weights = np.cumsum([weight for _, weight in entries])
        self.total_weight = float(self.cumulative_weights[-1])
        self.arrival_profile = list(arrival_profile)
        self.consumption_factor = consumption_factor
        
        logger.debug(
            f"Sampler ready: {len(self.outcomes)} demand outcomes, "
            f"total weight {self.total_weight:.2f}"
        )
    
    def arrives(self, hour: int, rng: np.random.Generator) -> bool:
        """
        Decide whether one EV arrives during the given hour of day.
        
        Args:
            hour: Hour of day (0-23)
            rng: Random generator of the run
        
        Returns:
            True iff a uniform draw in [0, 100) falls below the hour's percentage
        """
        return rng.random() * 100.0 < self.arrival_profile[hour]
    
    def sample_demand_km(self, rng: np.random.Generator) -> float:
        """
        Sample the range (km) an arriving EV wants replenished.
        
        Walks the cumulative weights and returns the first outcome whose
        cumulative weight meets or exceeds the draw.
        """
        draw = rng.random() * self.total_weight
        index = int(np.searchsorted(self.cumulative_weights, draw, side='left'))
        # searchsorted can only step past the end on rounding at the upper edge
        index = min(index, len(self.outcomes) - 1)
        return self.outcomes[index]
    
    def energy_for_demand(self, km: float) -> float:
        """Convert a demand magnitude (km) into required energy (kWh)."""
        return km * self.consumption_factor / 100.0
