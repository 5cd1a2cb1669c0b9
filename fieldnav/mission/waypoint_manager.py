from __future__ import annotations

from typing import Iterable, List, Optional

from ..core.types import Waypoint


class WaypointManager:
    """Ordered waypoint sequence with a cursor; index == len means complete."""

    def __init__(self, waypoints: Iterable[Waypoint] = ()):
        self._wps: List[Waypoint] = list(waypoints)
        self._idx = 0

    @property
    def index(self) -> int:
        return self._idx

    @property
    def total(self) -> int:
        return len(self._wps)

    @property
    def is_complete(self) -> bool:
        return bool(self._wps) and self._idx >= len(self._wps)

    def current(self) -> Optional[Waypoint]:
        return self._wps[self._idx] if self._idx < len(self._wps) else None

    def waypoints(self) -> List[Waypoint]:
        return list(self._wps)

    def replace_waypoints(self, waypoints: Iterable[Waypoint]) -> None:
        self._wps = list(waypoints)
        self._idx = 0

    def reset(self) -> None:
        self._idx = 0

    def advance(self) -> bool:
        if self._idx >= len(self._wps):
            return False
        self._idx += 1
        return True

    def retreat(self) -> bool:
        if self._idx <= 0:
            return False
        self._idx -= 1
        return True
