from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


class Waypoint(BaseModel):
    """Route waypoint; identity is the sequence number."""

    model_config = ConfigDict(frozen=True)

    sequence_number: int
    lat: float
    lng: float


class PositionSample(BaseModel):
    """Position fix delivered by the location feed.

    ``course`` is course over ground in degrees; negative values mean the
    receiver could not determine it.
    """

    lat: float
    lng: float
    accuracy: Optional[float] = None
    speed: Optional[float] = None
    course: Optional[float] = None


class HeadingSample(BaseModel):
    heading_deg: float

    @field_validator("heading_deg")
    @classmethod
    def normalize_heading(cls, value: float) -> float:
        wrapped = value % 360.0
        return 0.0 if wrapped >= 360.0 else wrapped

    @classmethod
    def from_compass(
        cls, true_heading: Optional[float], mag_heading: Optional[float]
    ) -> Optional["HeadingSample"]:
        """True heading when the device reports one (>= 0), else magnetic."""
        if true_heading is not None and true_heading >= 0:
            return cls(heading_deg=true_heading)
        if mag_heading is not None and mag_heading >= 0:
            return cls(heading_deg=mag_heading)
        return None


class CollectionEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    sequence_number: int
    timestamp: float


class PermissionStatus(str, Enum):
    PENDING = "pending"
    GRANTED = "granted"
    DENIED = "denied"


class HeadingStatus(str, Enum):
    ACTIVE = "active"
    UNAVAILABLE = "unavailable"


class ReferenceMode(str, Enum):
    GPS = "gps"
    COMPASS = "compass"


class Alignment(str, Enum):
    ALIGNED = "aligned"
    ADJUST = "adjust"
    OFF = "off"
    WAITING = "waiting"


class PrecisionStatus(str, Enum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    UNAVAILABLE = "unavailable"


class NavigationView(BaseModel):
    """Snapshot of everything the presentation layer needs after one tick.

    Derived values are ``None`` when the inputs they depend on are missing
    (no fix, no compass, no destination). ``arrived`` is an edge event: it is
    True only on the tick that entered the arrival radius.
    """

    model_config = ConfigDict(frozen=True)

    distance_m: Optional[float] = None
    distance_text: str = "--"
    bearing_deg: Optional[float] = None
    reference_heading_deg: Optional[float] = None
    mode: ReferenceMode = ReferenceMode.COMPASS
    raw_delta_deg: Optional[float] = None
    smoothed_delta_deg: Optional[float] = None
    alignment: Alignment = Alignment.WAITING
    cue_color_index: int = 3
    cue_ring_opacity: float = 0.0
    inside_radius: bool = False
    arrived: bool = False
    current_number: int = 0
    total: int = 0
    route_complete: bool = False
    destination: Optional[Waypoint] = None
    collections: Tuple[CollectionEvent, ...] = ()
    gps_status: PermissionStatus = PermissionStatus.PENDING
    heading_status: HeadingStatus = HeadingStatus.UNAVAILABLE
    precision: PrecisionStatus = PrecisionStatus.UNAVAILABLE
    pending_confirmation: bool = False
