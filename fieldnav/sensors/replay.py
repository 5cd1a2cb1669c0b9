from __future__ import annotations

import logging
from typing import Annotated, Iterable, Iterator, Literal, Optional, Protocol, Tuple, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..core.session import NavigationSession
from ..core.types import HeadingSample, NavigationView, PermissionStatus, PositionSample

log = logging.getLogger(__name__)


class PositionEvent(BaseModel):
    kind: Literal["position"]
    t: float
    lat: float
    lng: float
    accuracy: Optional[float] = None
    speed: Optional[float] = None
    course: Optional[float] = None

    def sample(self) -> PositionSample:
        return PositionSample(
            lat=self.lat, lng=self.lng, accuracy=self.accuracy, speed=self.speed, course=self.course
        )


class PositionLostEvent(BaseModel):
    kind: Literal["position_lost"]
    t: float


class HeadingEvent(BaseModel):
    """Compass reading; no usable heading means the compass dropped out.

    ``heading`` is an already-resolved value. Raw device readings can be given
    as ``true_heading`` (negative when unknown) and ``mag_heading`` instead.
    """

    kind: Literal["heading"]
    t: float
    heading: Optional[float] = None
    true_heading: Optional[float] = None
    mag_heading: Optional[float] = None

    def sample(self) -> Optional[HeadingSample]:
        if self.heading is not None:
            return HeadingSample(heading_deg=self.heading)
        return HeadingSample.from_compass(self.true_heading, self.mag_heading)


class GpsStatusEvent(BaseModel):
    kind: Literal["gps_status"]
    t: float
    status: PermissionStatus


class ConfirmEvent(BaseModel):
    """Operator pressed "next" and answered the confirmation prompt."""

    kind: Literal["confirm"]
    t: float
    accepted: bool = True


SensorEvent = Annotated[
    Union[PositionEvent, PositionLostEvent, HeadingEvent, GpsStatusEvent, ConfirmEvent],
    Field(discriminator="kind"),
]

_EVENT = TypeAdapter(SensorEvent)


class SampleSource(Protocol):
    def events(self) -> Iterator[SensorEvent]: ...


class JsonlReplaySource:
    """Replays recorded samples from a JSON Lines file in file order.

    Blank lines and lines starting with '#' are ignored; malformed lines are
    logged and skipped.
    """

    def __init__(self, path: str) -> None:
        self._path = path

    def events(self) -> Iterator[SensorEvent]:
        # undecodable bytes become U+FFFD and the line then fails validation
        with open(self._path, "r", encoding="utf-8", errors="replace") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                try:
                    yield _EVENT.validate_json(line)
                except ValidationError as exc:
                    log.warning("Skipping %s:%d: %s", self._path, lineno, exc.errors()[0]["msg"])


class ListSource:
    """In-memory source, mostly for tests and embedding."""

    def __init__(self, records: Iterable[dict]) -> None:
        self._records = list(records)

    def events(self) -> Iterator[SensorEvent]:
        for rec in self._records:
            yield _EVENT.validate_python(rec)


def apply_event(session: NavigationSession, event: SensorEvent) -> NavigationView:
    """Route one event to the matching session input."""
    if isinstance(event, PositionEvent):
        return session.update_position(event.sample(), now=event.t)
    if isinstance(event, PositionLostEvent):
        return session.update_position(None, now=event.t)
    if isinstance(event, HeadingEvent):
        return session.update_heading(event.sample(), now=event.t)
    if isinstance(event, GpsStatusEvent):
        return session.set_gps_status(event.status)
    # ConfirmEvent
    if session.request_advance() or session.request_completion():
        if session.resolve_confirmation(event.accepted) is not None:
            # the refresh after the index change may already hold the next arrival
            return session.view()
    else:
        log.debug("Confirmation at t=%.2f ignored: nothing to advance", event.t)
    return session.tick(now=event.t)


def drive(session: NavigationSession, source: SampleSource) -> Iterator[Tuple[SensorEvent, NavigationView]]:
    """Feed every event of ``source`` into ``session`` in arrival order."""
    for event in source.events():
        yield event, apply_event(session, event)
