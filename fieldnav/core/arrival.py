from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

log = logging.getLogger(__name__)

ENTER_RADIUS_M = 20.0
EXIT_RADIUS_M = 25.0


@dataclass(frozen=True, slots=True)
class ArrivalState:
    """Hysteresis state for the active waypoint."""

    inside_radius: bool = False
    arrival_notified: bool = False


OUTSIDE = ArrivalState()


def step_arrival(
    state: ArrivalState,
    distance_m: Optional[float],
    route_complete: bool = False,
    enter_m: float = ENTER_RADIUS_M,
    exit_m: float = EXIT_RADIUS_M,
) -> Tuple[ArrivalState, bool]:
    """Advance the arrival state machine by one distance reading.

    Enters the zone at ``distance <= enter_m`` and leaves it only at
    ``distance >= exit_m``. Returns the new state and whether this reading is
    the first entry for the current waypoint.
    """
    if distance_m is None or route_complete:
        return OUTSIDE, False

    if state.inside_radius:
        now_inside = distance_m < exit_m
    else:
        now_inside = distance_m <= enter_m

    arrived = now_inside and not state.inside_radius and not state.arrival_notified
    return (
        ArrivalState(
            inside_radius=now_inside,
            arrival_notified=state.arrival_notified or arrived,
        ),
        arrived,
    )


class ArrivalZoneDetector:
    """Owns an ArrivalState and applies step_arrival to incoming distances."""

    def __init__(self, enter_radius_m: float = ENTER_RADIUS_M, exit_radius_m: float = EXIT_RADIUS_M):
        if not 0 <= enter_radius_m < exit_radius_m:
            raise ValueError("enter radius must be non-negative and smaller than exit radius")
        self.enter_radius_m = float(enter_radius_m)
        self.exit_radius_m = float(exit_radius_m)
        self._state = OUTSIDE

    @property
    def state(self) -> ArrivalState:
        return self._state

    @property
    def inside(self) -> bool:
        return self._state.inside_radius

    def update(self, distance_m: Optional[float], route_complete: bool = False) -> bool:
        """Feed one distance reading; returns True on the arrival edge."""
        prev = self._state
        self._state, arrived = step_arrival(
            prev, distance_m, route_complete, self.enter_radius_m, self.exit_radius_m
        )
        if prev.inside_radius != self._state.inside_radius and distance_m is not None:
            log.debug(
                "Inside state %s -> %s at %.1f m", prev.inside_radius, self._state.inside_radius, distance_m
            )
        return arrived

    def reset(self) -> None:
        self._state = OUTSIDE
