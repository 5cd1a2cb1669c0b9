from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from .config import load_config
from .core.session import NavigationSession
from .mission.route_loader import load_route_file
from .mission.route_validator import RouteValidationError
from .sensors.replay import JsonlReplaySource, drive
from .utils.geo import format_distance
from .utils.logging_setup import setup_logging


def _cmd_validate(args: argparse.Namespace) -> int:
    try:
        waypoints = load_route_file(args.route)
    except RouteValidationError as exc:
        for i, msg in enumerate(exc.errors, start=1):
            print(f"{i}. {msg}")
        return 1
    print(f"Valid route: {len(waypoints)} waypoints")
    for wp in waypoints:
        print(f"{wp.sequence_number:>4}  {wp.lat:.6f}  {wp.lng:.6f}")
    return 0


def _cmd_replay(args: argparse.Namespace, cfg: dict, logger: logging.Logger) -> int:
    session = NavigationSession(cfg)
    try:
        with open(args.route, "r", encoding="utf-8") as f:
            session.load_route(f.read())
    except RouteValidationError as exc:
        for msg in exc.errors:
            logger.error("Route rejected: %s", msg)
        return 1

    for event, view in drive(session, JsonlReplaySource(args.samples)):
        if view.arrived:
            print(f"[t={event.t:.1f}s] Arrived at waypoint {view.current_number} of {view.total}")
        logger.debug(
            "t=%.2f %s dist=%s delta=%s align=%s",
            event.t,
            event.kind,
            view.distance_text,
            view.smoothed_delta_deg,
            view.alignment.value,
        )

    view = session.view()
    print(f"Collected {len(view.collections)} / {view.total} waypoints")
    for ev in view.collections:
        print(f"  waypoint {ev.sequence_number} at {ev.timestamp:.3f}")
    if view.route_complete:
        print("Route complete")
    elif view.distance_m is not None:
        print(f"Next: waypoint {view.current_number}, {format_distance(view.distance_m)} away")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="fieldnav")
    parser.add_argument("--log-level", type=str, default=os.getenv("LOG_LEVEL", None))
    parser.add_argument("--config", type=str, default=None, help="Path to a YAML override of default.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    valp = sub.add_parser("validate", help="Validate a route JSON file")
    valp.add_argument("route", help="Path to route JSON ([{numPonto, lat, lng}, ...])")

    repp = sub.add_parser("replay", help="Replay recorded samples through a navigation session")
    repp.add_argument("--route", required=True, help="Path to route JSON")
    repp.add_argument("--samples", required=True, help="Path to JSON Lines sample recording")

    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    log_cfg = cfg.get("logging") or {}
    logger = setup_logging(
        args.log_level or str(log_cfg.get("level", "INFO")),
        to_file=bool(log_cfg.get("to_file", False)),
        log_dir=log_cfg.get("log_dir"),
    )

    if args.cmd == "validate":
        return _cmd_validate(args)
    return _cmd_replay(args, cfg, logger)


if __name__ == "__main__":
    sys.exit(main())
