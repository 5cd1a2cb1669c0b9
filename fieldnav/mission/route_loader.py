from __future__ import annotations

import json
from typing import Tuple

from ..core.types import Waypoint
from .route_validator import RouteValidationError, validate_route


def load_route_json(text: str) -> Tuple[Waypoint, ...]:
    """Parse route JSON text (array of {numPonto, lat, lng}) and validate it.

    Raises RouteValidationError for malformed JSON as well as invalid routes.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        raise RouteValidationError(["Invalid JSON."]) from None
    return validate_route(data)


def load_route_file(path: str) -> Tuple[Waypoint, ...]:
    """Read a JSON route file from disk. Minimal wrapper over load_route_json."""
    with open(path, "r", encoding="utf-8") as f:
        return load_route_json(f.read())
