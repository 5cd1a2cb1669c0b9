"""Waypoint guidance engine: geodesy, route validation, arrival and heading smoothing."""

from .core.session import NavigationSession
from .core.types import CollectionEvent, HeadingSample, NavigationView, PositionSample, Waypoint
from .mission.route_validator import RouteValidationError, validate_route

__all__ = [
    "CollectionEvent",
    "HeadingSample",
    "NavigationSession",
    "NavigationView",
    "PositionSample",
    "RouteValidationError",
    "Waypoint",
    "validate_route",
]

__version__ = "0.1.0"
