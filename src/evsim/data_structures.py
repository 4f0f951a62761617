"""
Data structures for the EV charger fleet simulator.

This module defines the configuration consumed by the engine, the per-arrival
charging session with its lifecycle, the per-day accumulator and the immutable
result records handed back to the caller.
"""

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

import numpy as np

from .exceptions import ConfigError, InternalInvariantError


HOURS_PER_DAY = 24
DEFAULT_HORIZON_DAYS = 365
DEFAULT_SEED = 1

# Percentage points; the reference demand table sums to 99.97
DEMAND_WEIGHT_TOLERANCE = 0.1


def _is_number(value) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _is_sequence(value) -> bool:
    if isinstance(value, (str, bytes)):
        return False
    return isinstance(value, (Sequence, np.ndarray))


@dataclass
class ChargerGroup:
    """
    A group of identical chargers as entered by a user.

    Attributes:
        power_kw: Rated power of every unit in the group (kW)
        count: Number of physical units in the group
        group_id: Optional identifier of the group
    """
    power_kw: float
    count: int = 1
    group_id: Optional[str] = None

    def validate(self) -> None:
        """Raise ConfigError unless count is a non-negative integer."""
        if (
            not isinstance(self.count, numbers.Integral)
            or isinstance(self.count, bool)
            or self.count < 0
        ):
            raise ConfigError(
                f"Charger group {self.group_id!r}: count must be a "
                f"non-negative integer, got {self.count!r}"
            )

    def expand(self) -> List[float]:
        """One power entry per physical unit."""
        self.validate()
        return [self.power_kw] * self.count


@dataclass
class SimulationConfig:
    """
    Declarative input of a simulation run.

    Attributes:
        chargers: Power rating (kW) of every physical unit, in allocation order
        demand_table: Demand magnitude (km) -> weight (percent), sums to 100
        arrival_profile: 24 hourly arrival probabilities (percent)
        consumption_factor: Energy used per 100 km (kWh)
        horizon_days: Number of simulated days
        seed: Seed for the run's random generator
        enable_logging: Whether to configure INFO logging for the run
    """
    chargers: List[float]
    demand_table: Dict[float, float]
    arrival_profile: List[float]
    consumption_factor: float
    horizon_days: int = DEFAULT_HORIZON_DAYS
    seed: Optional[int] = DEFAULT_SEED
    enable_logging: bool = False

    @classmethod
    def from_charger_groups(
        cls,
        groups: Sequence[ChargerGroup],
        demand_table: Dict[float, float],
        arrival_profile: List[float],
        consumption_factor: float,
        **kwargs
    ) -> 'SimulationConfig':
        """Build a config from charger groups, expanded in group order."""
        chargers = []
        for group in groups:
            chargers.extend(group.expand())
        return cls(
            chargers=chargers,
            demand_table=dict(demand_table),
            arrival_profile=list(arrival_profile),
            consumption_factor=consumption_factor,
            **kwargs
        )

    @property
    def total_power_kw(self) -> float:
        """Theoretical maximum power of the whole fleet."""
        return sum(self.chargers)

    def collect_errors(self) -> List[str]:
        """Return every validation problem (empty if valid)."""
        errors = []

        # Chargers
        if not _is_sequence(self.chargers):
            errors.append(
                f"chargers must be a sequence of powers, got {type(self.chargers).__name__}"
            )
        elif len(self.chargers) == 0:
            errors.append("chargers cannot be empty")
        else:
            for i, power in enumerate(self.chargers):
                if not _is_number(power) or power <= 0:
                    errors.append(f"chargers[{i}]: power must be positive, got {power!r}")

        # Demand distribution
        if not isinstance(self.demand_table, Mapping):
            errors.append(
                f"demand_table must be a mapping, got {type(self.demand_table).__name__}"
            )
        elif not self.demand_table:
            errors.append("demand_table cannot be empty")
        else:
            weights_ok = True
            for km, weight in self.demand_table.items():
                if not _is_number(km) or km < 0:
                    errors.append(f"demand_table key must be >= 0, got {km!r}")
                if not _is_number(weight) or weight < 0:
                    errors.append(
                        f"demand_table[{km!r}]: weight must be >= 0, got {weight!r}"
                    )
                    weights_ok = False
            if weights_ok:
                total = sum(self.demand_table.values())
                if abs(total - 100.0) > DEMAND_WEIGHT_TOLERANCE:
                    errors.append(
                        f"demand_table weights must sum to 100, got {total:.4f}"
                    )

        # Arrival profile
        if not _is_sequence(self.arrival_profile):
            errors.append(
                f"arrival_profile must be a sequence, "
                f"got {type(self.arrival_profile).__name__}"
            )
        else:
            if len(self.arrival_profile) != HOURS_PER_DAY:
                errors.append(
                    f"arrival_profile must contain {HOURS_PER_DAY} values, "
                    f"got {len(self.arrival_profile)}"
                )
            for hour, pct in enumerate(self.arrival_profile):
                if not _is_number(pct) or not 0.0 <= pct <= 100.0:
                    errors.append(
                        f"arrival_profile[{hour}]: must be within [0, 100], got {pct!r}"
                    )

        if not _is_number(self.consumption_factor) or self.consumption_factor <= 0:
            errors.append(
                f"consumption_factor must be positive, got {self.consumption_factor!r}"
            )

        if (
            not isinstance(self.horizon_days, numbers.Integral)
            or isinstance(self.horizon_days, bool)
            or self.horizon_days <= 0
        ):
            errors.append(
                f"horizon_days must be a positive integer, got {self.horizon_days!r}"
            )

        return errors

    def validate(self) -> None:
        """Validate configuration parameters, raising ConfigError."""
        errors = self.collect_errors()
        if errors:
            raise ConfigError(
                f"Invalid simulation config: {'; '.join(errors)}",
                errors
            )


class SessionState(Enum):
    """Lifecycle state of a charging session."""
    PENDING = "pending"      # Sampled, not yet allocated
    CHARGING = "charging"    # Bound to a unit, accumulating energy
    COMPLETED = "completed"  # Delivered >= required, unit released
    DROPPED = "dropped"      # No unit was free on arrival


@dataclass
class Session:
    """
    One EV's charging event from arrival to completion or rejection.

    Attributes:
        energy_required: Energy to deliver (kWh)
        demand_km: Sampled range demand the energy was derived from (km)
        arrival_hour: Absolute simulated hour of arrival
        charger_index: Index of the bound unit (None while pending)
        energy_delivered: Energy delivered so far (kWh)
        state: Current lifecycle state
    """
    energy_required: float
    demand_km: float = 0.0
    arrival_hour: int = 0
    charger_index: Optional[int] = None
    energy_delivered: float = 0.0
    state: SessionState = SessionState.PENDING

    @property
    def remaining_energy(self) -> float:
        """Energy still to be delivered (kWh)."""
        return max(0.0, self.energy_required - self.energy_delivered)

    @property
    def is_satisfied(self) -> bool:
        return self.energy_delivered >= self.energy_required

    def _require_state(self, expected: SessionState, action: str) -> None:
        if self.state is not expected:
            raise InternalInvariantError(
                f"Cannot {action} session in state {self.state.value}"
            )

    def bind(self, charger_index: int) -> None:
        """PENDING -> CHARGING."""
        self._require_state(SessionState.PENDING, "bind")
        self.charger_index = charger_index
        self.state = SessionState.CHARGING

    def drop(self) -> None:
        """PENDING -> DROPPED."""
        self._require_state(SessionState.PENDING, "drop")
        self.state = SessionState.DROPPED

    def deliver(self, max_energy_kwh: float) -> float:
        """
        Deliver up to max_energy_kwh and return the amount delivered.

        The final delivery snaps energy_delivered to energy_required so the
        completion check never depends on floating point residue.
        """
        self._require_state(SessionState.CHARGING, "deliver to")
        if max_energy_kwh < 0:
            raise InternalInvariantError(
                f"Negative energy delivery requested: {max_energy_kwh}"
            )

        remaining = self.remaining_energy
        if remaining <= max_energy_kwh:
            self.energy_delivered = self.energy_required
            return remaining

        self.energy_delivered += max_energy_kwh
        return max_energy_kwh

    def complete(self) -> None:
        """CHARGING -> COMPLETED."""
        self._require_state(SessionState.CHARGING, "complete")
        if not self.is_satisfied:
            raise InternalInvariantError(
                f"Session on charger {self.charger_index} completed with "
                f"{self.energy_delivered:.3f}/{self.energy_required:.3f} kWh"
            )
        self.state = SessionState.COMPLETED

    def __repr__(self) -> str:
        return (f"Session({self.state.value}, charger={self.charger_index}, "
                f"{self.energy_delivered:.1f}/{self.energy_required:.1f}kWh)")


@dataclass
class DayAccumulator:
    """
    Transient per-day state, reset at the start of every simulated day.

    Attributes:
        day: Index of the simulated day
        max_power_kw: Running maximum instantaneous power (kW)
        energy_kwh: Running total energy delivered (kWh)
        arrivals: EVs that arrived during the day
        accepted: Arrivals that found a free unit
        dropped: Arrivals lost because every unit was busy
        completed: Sessions that finished during the day
        busy_hours: Sum over hours of units delivering energy
    """
    day: int = 0
    max_power_kw: float = 0.0
    energy_kwh: float = 0.0
    arrivals: int = 0
    accepted: int = 0
    dropped: int = 0
    completed: int = 0
    busy_hours: int = 0

    def reset(self, day: int) -> None:
        self.day = day
        self.max_power_kw = 0.0
        self.energy_kwh = 0.0
        self.arrivals = 0
        self.accepted = 0
        self.dropped = 0
        self.completed = 0
        self.busy_hours = 0

    def record_power(self, power_kw: float) -> None:
        """Raise the running maximum if exceeded."""
        if power_kw > self.max_power_kw:
            self.max_power_kw = power_kw

    def to_result(self) -> 'DayResult':
        return DayResult(
            max_power_kw=self.max_power_kw,
            energy_consumed_kwh=self.energy_kwh
        )

    def to_metrics(self) -> 'DayMetrics':
        return DayMetrics(
            day=self.day,
            arrivals=self.arrivals,
            accepted=self.accepted,
            dropped=self.dropped,
            completed=self.completed,
            busy_hours=self.busy_hours
        )


@dataclass(frozen=True)
class DayResult:
    """Peak power and delivered energy of one simulated day."""
    max_power_kw: float
    energy_consumed_kwh: float

    def to_dict(self) -> Dict:
        """Convert to the camelCase shape used by API consumers."""
        return {
            'maxPowerKw': self.max_power_kw,
            'energyConsumedKwh': self.energy_consumed_kwh,
        }


@dataclass(frozen=True)
class SimulationResult:
    """
    Complete output of a simulation run.

    Attributes:
        results: One DayResult per simulated day, in chronological order
        total_energy_consumed: Sum of energy over all days (kWh)
        total_max_power_kw: Maximum daily peak power over all days (kW)
    """
    results: List[DayResult]
    total_energy_consumed: float
    total_max_power_kw: float

    @classmethod
    def from_days(cls, results: List[DayResult]) -> 'SimulationResult':
        """Reduce per-day results into run totals."""
        if not results:
            raise InternalInvariantError("A run must produce at least one day")
        return cls(
            results=list(results),
            total_energy_consumed=sum(day.energy_consumed_kwh for day in results),
            total_max_power_kw=max(day.max_power_kw for day in results)
        )

    @property
    def num_days(self) -> int:
        return len(self.results)

    def to_dict(self) -> Dict:
        """Convert to the camelCase shape used by API consumers."""
        return {
            'results': [day.to_dict() for day in self.results],
            'totalEnergyConsumed': self.total_energy_consumed,
            'totalMaxPowerKw': self.total_max_power_kw,
        }

    def __repr__(self) -> str:
        return (f"SimulationResult(days={self.num_days}, "
                f"energy={self.total_energy_consumed:.1f}kWh, "
                f"peak={self.total_max_power_kw:.1f}kW)")


@dataclass
class DayMetrics:
    """Arrival and occupancy counters of one simulated day."""
    day: int
    arrivals: int = 0
    accepted: int = 0
    dropped: int = 0
    completed: int = 0
    busy_hours: int = 0

    def to_dict(self) -> Dict:
        return {
            'day': self.day,
            'arrivals': self.arrivals,
            'accepted': self.accepted,
            'dropped': self.dropped,
            'completed': self.completed,
            'busy_hours': self.busy_hours,
        }


@dataclass
class SimulationSummary:
    """
    Aggregate statistics across a complete simulation run.

    Attributes:
        total_days: Number of simulated days
        num_chargers: Number of physical units
        total_arrivals: EVs that arrived over the horizon
        total_accepted: Arrivals that were allocated a unit
        total_dropped: Arrivals lost to a full pool
        total_completed: Sessions finished within the horizon
        total_energy_kwh: Energy delivered over the horizon
        peak_power_kw: Highest instantaneous power observed
        theoretical_max_power_kw: Sum of all unit ratings
        run_time_ms: Wall-clock duration of the run
    """
    total_days: int = 0
    num_chargers: int = 0
    total_arrivals: int = 0
    total_accepted: int = 0
    total_dropped: int = 0
    total_completed: int = 0
    total_energy_kwh: float = 0.0
    peak_power_kw: float = 0.0
    theoretical_max_power_kw: float = 0.0
    run_time_ms: float = 0.0

    @property
    def blocking_probability(self) -> float:
        """Share of arrivals that were dropped."""
        if self.total_arrivals <= 0:
            return 0.0
        return self.total_dropped / self.total_arrivals

    @property
    def concurrency_factor(self) -> float:
        """Observed peak power over theoretical fleet power."""
        if self.theoretical_max_power_kw <= 0:
            return 0.0
        return self.peak_power_kw / self.theoretical_max_power_kw

    def to_dict(self) -> Dict:
        """Convert to dictionary for export."""
        return {
            'total_days': self.total_days,
            'num_chargers': self.num_chargers,
            'total_arrivals': self.total_arrivals,
            'total_accepted': self.total_accepted,
            'total_dropped': self.total_dropped,
            'total_completed': self.total_completed,
            'blocking_probability': self.blocking_probability,
            'total_energy_kwh': self.total_energy_kwh,
            'peak_power_kw': self.peak_power_kw,
            'theoretical_max_power_kw': self.theoretical_max_power_kw,
            'concurrency_factor': self.concurrency_factor,
            'run_time_ms': self.run_time_ms,
        }

    def __repr__(self) -> str:
        return (f"SimulationSummary(days={self.total_days}, "
                f"arrivals={self.total_arrivals}, "
                f"blocking={self.blocking_probability * 100:.1f}%, "
                f"cf={self.concurrency_factor:.3f})")
