from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

CONFIG_ENV_VAR = "THREADFORM_CONFIG"
CONFIG_DIR = Path.home() / ".threadform"
CONFIG_FILE = CONFIG_DIR / "threadform.cfg"
DEFAULT_CONFIG = {
    "_comment": (
        "Valid units: millimeters (default), meters, inches. Value is case-insensitive. "
        "slop is the radial clearance added to internal threads and bores, in model units."
    ),
    "units": "millimeters",
    "slop": 0.0,
}
_UNIT_INFO: Dict[str, Dict[str, Any]] = {
    "millimeters": {"label": "mm", "scale_to_mm": 1.0},
    "meters": {"label": "m", "scale_to_mm": 1000.0},
    "inches": {"label": "in", "scale_to_mm": 25.4},
}
_UNIT_ALIASES = {
    "millimeter": "millimeters",
    "millimeters": "millimeters",
    "mm": "millimeters",
    "meter": "meters",
    "meters": "meters",
    "m": "meters",
    "inch": "inches",
    "inches": "inches",
    "in": "inches",
}


@dataclass(frozen=True)
class UnitSettings:
    """Resolved units from threadform.cfg."""

    name: str
    label: str
    scale_to_mm: float


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return CONFIG_FILE


def ensure_user_config() -> None:
    """Ensure the user config file exists with sane defaults."""

    path = config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        return

    if path.exists():
        return

    try:
        path.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n")
    except OSError:
        return


def _load_user_config() -> Dict[str, Any]:
    ensure_user_config()
    try:
        loaded = json.loads(config_path().read_text())
    except (OSError, json.JSONDecodeError):
        return DEFAULT_CONFIG.copy()
    if not isinstance(loaded, dict):
        return DEFAULT_CONFIG.copy()
    return loaded


def _normalize_units(value: str) -> str | None:
    key = value.strip().lower()
    if key in _UNIT_INFO:
        return key
    return _UNIT_ALIASES.get(key)


def get_unit_settings() -> UnitSettings:
    """Return the configured units and the conversion to millimeters."""

    raw_config = _load_user_config()
    raw_units = str(raw_config.get("units", DEFAULT_CONFIG["units"]))
    normalized = _normalize_units(raw_units)
    if normalized is None:
        normalized = DEFAULT_CONFIG["units"]

    info = _UNIT_INFO[normalized]
    return UnitSettings(name=normalized, label=info["label"], scale_to_mm=info["scale_to_mm"])


def get_slop() -> float:
    """Return the configured radial clearance for internal threads.

    Missing, negative or non-numeric values resolve to 0.0.
    """

    raw = _load_user_config().get("slop", DEFAULT_CONFIG["slop"])
    if isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if value != value or value < 0.0:
        return 0.0
    return value
