from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional, Tuple

from ..mission.route_loader import load_route_json
from ..mission.route_validator import validate_route
from ..mission.waypoint_manager import WaypointManager
from ..utils.geo import DISTANCE_MODELS, bearing_between, delta_heading, format_distance
from .arrival import ENTER_RADIUS_M, EXIT_RADIUS_M, ArrivalZoneDetector
from .smoothing import (
    BUFFER_SIZE,
    DEADBAND_DEG,
    MIN_INTERVAL_S,
    HeadingSmoother,
    alignment_cue,
    classify_alignment,
)
from .types import (
    CollectionEvent,
    HeadingSample,
    HeadingStatus,
    NavigationView,
    PermissionStatus,
    PositionSample,
    PrecisionStatus,
    ReferenceMode,
    Waypoint,
)

log = logging.getLogger(__name__)

SPEED_THRESHOLD_MPS = 1.5
HIGH_ACCURACY_M = 5.0
MODERATE_ACCURACY_M = 15.0


def select_reference(
    position: Optional[PositionSample],
    compass_heading: Optional[float],
    speed_threshold: float = SPEED_THRESHOLD_MPS,
) -> Tuple[ReferenceMode, Optional[float]]:
    """Pick the heading reference for the delta computation.

    GPS course wins when moving at least ``speed_threshold`` with a valid
    (non-negative) course; otherwise the compass heading is used, which may
    be None. Evaluated fresh every call, there is no hysteresis.
    """
    if (
        position is not None
        and position.speed is not None
        and position.speed >= speed_threshold
        and position.course is not None
        and position.course >= 0
    ):
        return ReferenceMode.GPS, position.course
    return ReferenceMode.COMPASS, compass_heading


def classify_precision(
    accuracy: Optional[float],
    high_m: float = HIGH_ACCURACY_M,
    moderate_m: float = MODERATE_ACCURACY_M,
) -> PrecisionStatus:
    if accuracy is None:
        return PrecisionStatus.UNAVAILABLE
    if accuracy < high_m:
        return PrecisionStatus.HIGH
    if accuracy <= moderate_m:
        return PrecisionStatus.MODERATE
    return PrecisionStatus.LOW


class NavigationSession:
    """Sequential waypoint guidance for one operator.

    The session owns the route, the waypoint cursor, the collection log and
    the arrival/smoothing state. Every input (position, heading, status change,
    navigation command) recomputes a NavigationView. Instances are not
    thread-safe; a single owner must serialize calls.
    """

    def __init__(
        self,
        cfg: Optional[dict] = None,
        clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        cfg = cfg or {}
        self.cfg = cfg
        arrival_cfg = cfg.get("arrival") or {}
        smoothing_cfg = cfg.get("smoothing") or {}
        precision_cfg = cfg.get("precision") or {}

        self.wp_mgr = WaypointManager()
        self.arrival = ArrivalZoneDetector(
            enter_radius_m=float(arrival_cfg.get("enter_radius_m", ENTER_RADIUS_M)),
            exit_radius_m=float(arrival_cfg.get("exit_radius_m", EXIT_RADIUS_M)),
        )
        self.smoother = HeadingSmoother(
            buffer_size=int(smoothing_cfg.get("buffer_size", BUFFER_SIZE)),
            min_interval_s=float(smoothing_cfg.get("min_interval_s", MIN_INTERVAL_S)),
            deadband_deg=float(smoothing_cfg.get("deadband_deg", DEADBAND_DEG)),
        )
        self.speed_threshold = float(cfg.get("speed_threshold_mps", SPEED_THRESHOLD_MPS))
        self.high_accuracy_m = float(precision_cfg.get("high_m", HIGH_ACCURACY_M))
        self.moderate_accuracy_m = float(precision_cfg.get("moderate_m", MODERATE_ACCURACY_M))

        model = str(cfg.get("distance_model", "haversine"))
        if model not in DISTANCE_MODELS:
            raise ValueError(f"Unknown distance_model {model!r}; expected one of {sorted(DISTANCE_MODELS)}")
        self._distance = DISTANCE_MODELS[model]

        self._clock = clock
        self._monotonic = monotonic

        self._collections: List[CollectionEvent] = []
        self.position: Optional[PositionSample] = None
        self.compass_heading: Optional[float] = None
        self.gps_status = PermissionStatus.PENDING
        self.heading_status = HeadingStatus.UNAVAILABLE
        self.mode: Optional[ReferenceMode] = None
        self.pending_confirmation = False
        self._view = NavigationView()

    # ------------------------------------------------------------------
    # Route
    # ------------------------------------------------------------------
    @property
    def waypoints(self) -> List[Waypoint]:
        return self.wp_mgr.waypoints()

    @property
    def index(self) -> int:
        return self.wp_mgr.index

    @property
    def route_complete(self) -> bool:
        return self.wp_mgr.is_complete

    @property
    def collections(self) -> Tuple[CollectionEvent, ...]:
        return tuple(self._collections)

    def load_route(self, raw: Any) -> NavigationView:
        """Validate ``raw`` (parsed JSON or JSON text) and make it the route.

        On RouteValidationError the session is left exactly as it was.
        """
        waypoints = load_route_json(raw) if isinstance(raw, str) else validate_route(raw)
        self.wp_mgr.replace_waypoints(waypoints)
        self._collections.clear()
        self._index_changed()
        log.info("Loaded route with %d waypoints", len(waypoints))
        return self._refresh()

    def clear_route(self) -> NavigationView:
        self.wp_mgr.replace_waypoints([])
        self._collections.clear()
        self._index_changed()
        return self._refresh()

    def current_waypoint(self) -> Optional[Waypoint]:
        return self.wp_mgr.current()

    # ------------------------------------------------------------------
    # Navigation commands
    # ------------------------------------------------------------------
    def request_advance(self) -> bool:
        """Ask to move on to the next waypoint; the caller must confirm."""
        if self.wp_mgr.index >= self.wp_mgr.total - 1:
            return False
        self.pending_confirmation = True
        log.debug("Advance requested at waypoint %d (inside=%s)", self.index + 1, self.arrival.inside)
        return True

    def request_completion(self) -> bool:
        """Ask to collect the last waypoint and finish the route."""
        if self.wp_mgr.total == 0 or self.wp_mgr.index != self.wp_mgr.total - 1:
            return False
        self.pending_confirmation = True
        return True

    def confirm_advance(self) -> Optional[CollectionEvent]:
        """Record a collection for the current waypoint and move past it."""
        self.pending_confirmation = False
        wp = self.wp_mgr.current()
        if wp is None:
            return None
        event = CollectionEvent(sequence_number=wp.sequence_number, timestamp=self._clock())
        self._collections.append(event)
        self.wp_mgr.advance()
        self._index_changed()
        log.info("Waypoint %d collected", wp.sequence_number)
        if self.wp_mgr.is_complete:
            log.info("Route complete: %d/%d collected", len(self._collections), self.wp_mgr.total)
        self._refresh()
        return event

    def cancel_advance(self) -> None:
        self.pending_confirmation = False

    def resolve_confirmation(self, accepted: bool) -> Optional[CollectionEvent]:
        """Apply the operator's accept/cancel answer to a pending request."""
        if not self.pending_confirmation:
            return None
        if accepted:
            return self.confirm_advance()
        self.cancel_advance()
        return None

    def retreat(self) -> bool:
        """Go back one waypoint; collection history is left untouched."""
        if not self.wp_mgr.retreat():
            return False
        self._index_changed()
        self._refresh()
        return True

    def reset(self) -> NavigationView:
        """Back to the first waypoint with an empty collection log."""
        self.wp_mgr.reset()
        self._collections.clear()
        self._index_changed()
        return self._refresh()

    # ------------------------------------------------------------------
    # Sensor inputs
    # ------------------------------------------------------------------
    def update_position(self, sample: Optional[PositionSample], now: Optional[float] = None) -> NavigationView:
        self.position = sample
        return self._refresh(self._now(now))

    def update_heading(self, sample: Optional[HeadingSample], now: Optional[float] = None) -> NavigationView:
        if sample is None:
            self.compass_heading = None
            self.heading_status = HeadingStatus.UNAVAILABLE
        else:
            self.compass_heading = sample.heading_deg
            self.heading_status = HeadingStatus.ACTIVE
        return self._refresh(self._now(now))

    def set_gps_status(self, status: PermissionStatus | str) -> NavigationView:
        status = PermissionStatus(status)
        if status != self.gps_status:
            log.info("GPS permission %s -> %s", self.gps_status.value, status.value)
        self.gps_status = status
        return self._refresh()

    def set_heading_status(self, status: HeadingStatus | str) -> NavigationView:
        self.heading_status = HeadingStatus(status)
        if self.heading_status == HeadingStatus.UNAVAILABLE:
            self.compass_heading = None
        return self._refresh()

    def tick(self, now: Optional[float] = None) -> NavigationView:
        return self._refresh(self._now(now))

    def view(self) -> NavigationView:
        return self._view

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _now(self, now: Optional[float]) -> float:
        return self._monotonic() if now is None else float(now)

    def _index_changed(self) -> None:
        self.arrival.reset()
        self.pending_confirmation = False
        log.debug("Active waypoint index is now %d", self.wp_mgr.index)

    def _refresh(self, now: Optional[float] = None) -> NavigationView:
        """Recompute every derived value; feeds the smoother only when ``now`` is given."""
        wp = self.wp_mgr.current()
        pos = self.position
        complete = self.wp_mgr.is_complete

        bearing = distance = None
        if pos is not None and wp is not None:
            bearing = bearing_between(pos.lat, pos.lng, wp.lat, wp.lng)
            distance = self._distance(pos.lat, pos.lng, wp.lat, wp.lng)

        mode, reference = select_reference(pos, self.compass_heading, self.speed_threshold)
        if mode != self.mode:
            if self.mode is not None:
                log.info("Reference mode %s -> %s", self.mode.value, mode.value)
            self.mode = mode

        arrived = self.arrival.update(distance, complete)
        if arrived:
            log.info("Waypoint %d reached at %.1f m", wp.sequence_number, distance)

        raw_delta = None
        if bearing is not None and reference is not None:
            raw_delta = delta_heading(bearing, reference)
        if raw_delta is None:
            self.smoother.reset()
        elif now is not None:
            self.smoother.update(raw_delta, now)
        smoothed = self.smoother.value
        alignment = classify_alignment(smoothed)
        cue_color, cue_opacity = alignment_cue(alignment)

        self._view = NavigationView(
            distance_m=distance,
            distance_text=format_distance(distance) if distance is not None else "--",
            bearing_deg=bearing,
            reference_heading_deg=reference,
            mode=mode,
            raw_delta_deg=raw_delta,
            smoothed_delta_deg=smoothed,
            alignment=alignment,
            cue_color_index=cue_color,
            cue_ring_opacity=cue_opacity,
            inside_radius=self.arrival.inside,
            arrived=arrived,
            current_number=min(self.wp_mgr.index + 1, self.wp_mgr.total),
            total=self.wp_mgr.total,
            route_complete=complete,
            destination=wp,
            collections=tuple(self._collections),
            gps_status=self.gps_status,
            heading_status=self.heading_status,
            precision=classify_precision(
                pos.accuracy if pos is not None else None, self.high_accuracy_m, self.moderate_accuracy_m
            ),
            pending_confirmation=self.pending_confirmation,
        )
        return self._view
