from __future__ import annotations

import os
from typing import Optional

import yaml

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), "default.yaml")


def load_yaml(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(path: Optional[str] = None) -> dict:
    """Packaged defaults, with sections of ``path`` (if given) merged on top."""
    cfg = load_yaml(DEFAULT_CONFIG_PATH)
    if path:
        for key, value in load_yaml(path).items():
            if isinstance(value, dict) and isinstance(cfg.get(key), dict):
                cfg[key] = {**cfg[key], **value}
            else:
                cfg[key] = value
    return cfg
