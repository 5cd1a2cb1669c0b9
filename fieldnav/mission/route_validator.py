from __future__ import annotations

import logging
from typing import Annotated, Any, Iterable, List, Tuple

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter, ValidationError, field_validator

from ..core.types import Waypoint

log = logging.getLogger(__name__)


class RouteValidationError(ValueError):
    """Raised when a route is rejected; carries one message per violation."""

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__("\n".join(self.errors))


def _coordinate(value: Any, name: str, limit: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number.")
    # NaN fails the comparison as well
    if not -limit <= value <= limit:
        raise ValueError(f"{name} must be between {-limit:g} and {limit:g}.")
    return float(value)


class RoutePoint(BaseModel):
    """One raw route element as it arrives from the route source."""

    sequence_number: int = Field(
        validation_alias=AliasChoices("numPonto", "sequenceNumber", "sequence_number")
    )
    lat: float
    lng: float

    @field_validator("sequence_number", mode="before")
    @classmethod
    def check_sequence_number(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("numPonto must be an integer.")
        if isinstance(value, float) and not value.is_integer():
            raise ValueError("numPonto must be an integer.")
        if value < 1:
            raise ValueError("numPonto must be greater than or equal to 1.")
        return int(value)

    @field_validator("lat", mode="before")
    @classmethod
    def check_lat(cls, value: Any) -> float:
        return _coordinate(value, "lat", 90.0)

    @field_validator("lng", mode="before")
    @classmethod
    def check_lng(cls, value: Any) -> float:
        return _coordinate(value, "lng", 180.0)


_ROUTE = TypeAdapter(Annotated[List[RoutePoint], Field(min_length=1)])

_TOP_LEVEL_MESSAGES = {
    "list_type": "Route must be a list of points.",
    "too_short": "Provide at least one route point.",
}


def _describe(err: dict) -> str:
    """Turn one pydantic error record into a single human-readable line."""
    loc = err.get("loc", ())
    if err["type"] == "value_error" and "error" in err.get("ctx", {}):
        msg = str(err["ctx"]["error"])
    elif err["type"] == "missing":
        msg = "field is required."
    elif err["type"] == "model_type":
        msg = "expected an object with numPonto, lat and lng."
    else:
        msg = err["msg"]

    if not loc:
        return _TOP_LEVEL_MESSAGES.get(err["type"], msg)
    if len(loc) == 1 and isinstance(loc[0], int):
        return f"Point {loc[0] + 1}: {msg}"
    field = loc[-1]
    if isinstance(loc[0], int):
        return f"Point {loc[0] + 1}, field '{field}': {msg}"
    return f"Field '{field}': {msg}"


def validate_route(raw: Any) -> Tuple[Waypoint, ...]:
    """Validate and normalize an untyped route into ascending waypoints.

    Structural and range errors are collected across every element before
    raising. Duplicate and sequence checks run only once the structure is
    valid and stop at the first problem. Nothing is returned unless the whole
    route is valid.

    Raises:
        RouteValidationError: with one message per violation.
    """
    try:
        points = _ROUTE.validate_python(raw)
    except ValidationError as exc:
        errors = [_describe(err) for err in exc.errors()]
        log.debug("Route rejected with %d error(s)", len(errors))
        raise RouteValidationError(errors) from None

    seen = set()
    for p in points:
        if p.sequence_number in seen:
            raise RouteValidationError([f"Duplicate numPonto: {p.sequence_number}."])
        seen.add(p.sequence_number)

    points.sort(key=lambda p: p.sequence_number)

    for expected, p in enumerate(points, start=1):
        if p.sequence_number != expected:
            raise RouteValidationError(
                [
                    "Invalid numPonto sequence (use 1, 2, 3, ...). "
                    f"Expected {expected}, found {p.sequence_number}."
                ]
            )

    log.info("Route validated: %d waypoints", len(points))
    return tuple(Waypoint(sequence_number=p.sequence_number, lat=p.lat, lng=p.lng) for p in points)
