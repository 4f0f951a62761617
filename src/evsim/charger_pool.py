"""
Charger pool for the EV charger fleet simulator.

The pool owns the fixed array of charger units and mediates allocation and
release. It is a loss system: an arrival that finds every unit busy is
dropped, never queued.
"""

from dataclasses import dataclass
from typing import List, Optional

from .data_structures import Session
from .exceptions import InternalInvariantError


@dataclass(frozen=True)
class ChargerHandle:
    """
    Reference to an allocated charger unit.

    Attributes:
        index: Position of the unit in the configured charger list
        power_kw: Rated power of the unit (kW)
    """
    index: int
    power_kw: float


class ChargerPool:
    """
    Fixed multiset of charger units with first-fit allocation.

    Units are scanned in their configured order and the first idle one is
    taken, so higher-listed units are always preferred. Each unit holds at
    most one Session.

    Attributes:
        powers: Rated power of every unit (kW), in configured order
    """

    def __init__(self, powers: List[float]):
        """
        Initialize the pool.

        Args:
            powers: Rated power (kW) of every physical unit
        """
        self.powers = list(powers)
        self._sessions: List[Optional[Session]] = [None] * len(self.powers)

    def __len__(self) -> int:
        return len(self.powers)

    @property
    def total_power_kw(self) -> float:
        """Rated power of the whole fleet (kW)."""
        return sum(self.powers)

    @property
    def busy_count(self) -> int:
        return sum(1 for s in self._sessions if s is not None)

    @property
    def idle_count(self) -> int:
        return len(self.powers) - self.busy_count

    def is_idle(self, index: int) -> bool:
        return self._sessions[index] is None

    def session_at(self, handle: ChargerHandle) -> Optional[Session]:
        return self._sessions[handle.index]

    def try_allocate(
        self,
        energy_required_kwh: float,
        demand_km: float = 0.0,
        arrival_hour: int = 0
    ) -> Optional[ChargerHandle]:
        """
        Bind a new session to the first idle unit.

        Args:
            energy_required_kwh: Energy the arriving EV needs (kWh)
            demand_km: Sampled range demand (km), kept for inspection
            arrival_hour: Absolute simulated hour of arrival

        Returns:
            Handle of the allocated unit, or None if every unit is busy
        """
        if energy_required_kwh < 0:
            raise InternalInvariantError(
                f"Negative energy requirement: {energy_required_kwh}"
            )

        for index, occupant in enumerate(self._sessions):
            if occupant is None:
                session = Session(
                    energy_required=energy_required_kwh,
                    demand_km=demand_km,
                    arrival_hour=arrival_hour
                )
                session.bind(index)
                self._sessions[index] = session
                return ChargerHandle(index=index, power_kw=self.powers[index])

        return None

    def release(self, handle: ChargerHandle) -> Session:
        """
        Mark a unit idle again and complete its session.

        Args:
            handle: Handle returned by try_allocate

        Returns:
            The completed session

        Raises:
            InternalInvariantError: If the unit is already idle or its
                session has not received its full energy
        """
        session = self._sessions[handle.index]
        if session is None:
            raise InternalInvariantError(
                f"Release of already idle charger {handle.index}"
            )

        session.complete()
        self._sessions[handle.index] = None
        return session

    def active(self) -> List[ChargerHandle]:
        """Handles of all occupied units, in configured order."""
        return [
            ChargerHandle(index=i, power_kw=self.powers[i])
            for i, s in enumerate(self._sessions)
            if s is not None
        ]

    def active_sessions(self) -> List[Session]:
        """Sessions currently bound to a unit, in configured order."""
        return [s for s in self._sessions if s is not None]

    def reset(self) -> None:
        """Drop every session and mark all units idle."""
        self._sessions = [None] * len(self.powers)

    def __repr__(self) -> str:
        return (f"ChargerPool(units={len(self.powers)}, busy={self.busy_count}, "
                f"power={self.total_power_kw:.1f}kW)")
