"""
Hourly stepper: advances simulated time one hour at a time.

Each step runs the arrival decision, allocates a unit for the arriving EV,
integrates energy for every occupied unit and records the instantaneous
power of the hour into the day's accumulator.
"""

import logging

import numpy as np

from .charger_pool import ChargerPool
from .data_structures import DayAccumulator, Session
from .exceptions import InternalInvariantError
from .sampler import DistributionSampler


logger = logging.getLogger(__name__)

STEP_HOURS = 1.0


class HourlyStepper:
    """
    Drives the sampler and the charger pool for one hour at a time.
    
    Order within an hour:
    1. Arrival: sample demand and try to allocate a unit (dropped if none)
    2. Integration: every occupied unit delivers min(remaining, power * 1h)
    3. Power: sum of the ratings of units that delivered energy this hour
    
    Sessions that reach their requirement are released at the end of the
    hour, after they have contributed to that hour's power figure.
    
    Attributes:
        sampler: Arrival and demand sampler
        pool: Charger pool owned by this run
        rng: Random generator of the run
    """
    
    def __init__(
        self,
        sampler: DistributionSampler,
        pool: ChargerPool,
        rng: np.random.Generator
    ):
        self.sampler = sampler
        self.pool = pool
        self.rng = rng
    
    def step(
        self,
        hour: int,
        accumulator: DayAccumulator,
        absolute_hour: int = 0
    ) -> float:
        """
        Simulate one hour.
        
        Args:
            hour: Hour of day (0-23), selects the arrival probability
            accumulator: Running aggregates of the current day
            absolute_hour: Hours since the start of the run
        
        Returns:
            Instantaneous power drawn during the hour (kW)
        """
        self._handle_arrival(hour, accumulator, absolute_hour)
        return self._integrate(accumulator)
    
    def _handle_arrival(
        self,
        hour: int,
        accumulator: DayAccumulator,
        absolute_hour: int
    ) -> None:
        if not self.sampler.arrives(hour, self.rng):
            return
        
        accumulator.arrivals += 1
        demand_km = self.sampler.sample_demand_km(self.rng)
        energy_kwh = self.sampler.energy_for_demand(demand_km)
        
        handle = self.pool.try_allocate(energy_kwh, demand_km, absolute_hour)
        if handle is None:
            session = Session(
                energy_required=energy_kwh,
                demand_km=demand_km,
                arrival_hour=absolute_hour
            )
            session.drop()
            accumulator.dropped += 1
            logger.debug(
                f"Hour {absolute_hour}: all {len(self.pool)} chargers busy, "
                f"dropped {energy_kwh:.2f}kWh arrival"
            )
            return
        
        accumulator.accepted += 1
    
    def _integrate(self, accumulator: DayAccumulator) -> float:
        power_kw = 0.0
        finished = []
        
        for handle in self.pool.active():
            session = self.pool.session_at(handle)
            delivered = session.deliver(handle.power_kw * STEP_HOURS)
            
            if delivered < 0:
                raise InternalInvariantError(
                    f"Charger {handle.index} delivered negative energy: {delivered}"
                )
            if delivered > 0:
                power_kw += handle.power_kw
                accumulator.energy_kwh += delivered
                accumulator.busy_hours += 1
            
            if session.is_satisfied:
                finished.append(handle)
        
        for handle in finished:
            self.pool.release(handle)
            accumulator.completed += 1
        
        if power_kw > self.pool.total_power_kw:
            raise InternalInvariantError(
                f"Power {power_kw:.3f}kW exceeds fleet capacity "
                f"{self.pool.total_power_kw:.3f}kW"
            )
        
        accumulator.record_power(power_kw)
        return power_kw
