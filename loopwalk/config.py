"""Project configuration.

Loads user-defined walk parameters from walk_config.json when available,
falling back to sensible defaults. Keep request shapes and tuning constants
centralized here.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

_REPO_ROOT = Path(__file__).resolve().parent.parent

# --- Endpoints ---

PROXY_BASE_URL = "http://localhost:8888"
PROXY_URL_ENV = "LOOPWALK_PROXY_URL"
PROXY_ROUTE_PATH = "/api/route"
PROXY_ISOCHRONE_PATH = "/api/isochrone"

ORS_DIRECTIONS_URL = "https://api.openrouteservice.org/v2/directions/{profile}/geojson"
ORS_ISOCHRONES_URL = "https://api.openrouteservice.org/v2/isochrones/{profile}"
ORS_PROFILE = "foot-walking"
ORS_ISOCHRONE_SMOOTHING = 0.9
PROXY_ERROR_DETAILS_MAX = 200
PROXY_PORT = 8888

# --- Routing provider ---

ROUTING_PROVIDER = "proxy"  # proxy | demo
ROUTING_PROVIDERS = ("proxy", "demo")

# --- Pace defaults ---

DEFAULT_PACE_UNIT = "metric"
DEFAULT_PACE_VALUE = 12.0  # min/km, roughly 5 km/h
DEFAULT_DURATION_MINUTES = 30.0
HOME_LOCATION: Optional[Tuple[float, float]] = None

# --- Sampling ---

ISOCHRONE_MIN_POINTS = 4
ISOCHRONE_MAX_SAMPLES = 12
ISOCHRONE_MIN_SAMPLES = 6
ISOCHRONE_JITTER_DEG = 0.001
RADIUS_WAYPOINT_COUNT = 12
RADIUS_VARIATION_MIN = 0.7
RADIUS_VARIATION_MAX = 1.3
KM_PER_DEGREE = 111.0

# --- Deduplication and scoring ---

SEGMENT_HASH_DECIMALS = 4
SEGMENT_HASH_LENGTH = 16
SEGMENT_WINDOW = 10
VARIETY_RECENCY_DECAY = 0.7
VARIETY_WEIGHT = 0.3
RECENT_HISTORY_LIMIT = 5

# --- Synthetic provider ---

SYNTHETIC_PACE_MIN_PER_KM = 12.0
SYNTHETIC_WALK_SPEED_KMH = 5.0
SYNTHETIC_ISOCHRONE_POINTS = 16
SYNTHETIC_NOISE_DEG = 0.002
SYNTHETIC_TURN_PROBABILITY = 0.3

# --- Budgets ---

MAX_ROUTE_REQUESTS_PER_RUN = 60
MAX_ISOCHRONE_REQUESTS_PER_RUN = 2

# --- HTTP ---

HTTP_TIMEOUT_SECONDS = 20
HTTP_RETRY_MAX = 3
HTTP_BACKOFF_BASE = 0.5
HTTP_BACKOFF_MAX = 8.0

# --- Storage and outputs ---

DB_PATH = "routes.db"
STORE_COMMIT_EVERY = 1


def load_walk_config(path: Optional[str] = None) -> bool:
    """Load walk configuration from a JSON file.

    Updates module-level globals with values from the config file.
    Returns True if config was loaded, False if file not found.
    """
    if path is None:
        path = str(_REPO_ROOT / "walk_config.json")

    config_path = Path(path)
    if not config_path.exists():
        return False

    with open(config_path, "r", encoding="utf-8") as f:
        data: Dict[str, Any] = json.load(f)

    globals_ref = globals()

    home = data.get("home", {})
    home_lat = home.get("lat")
    home_lon = home.get("lon")
    if home_lat is not None and home_lon is not None:
        globals_ref["HOME_LOCATION"] = (float(home_lat), float(home_lon))

    pace = data.get("pace", {})
    unit = pace.get("unit")
    if unit is not None:
        if unit not in ("metric", "imperial"):
            raise ValueError(f"Unknown pace unit in {config_path}: {unit}")
        globals_ref["DEFAULT_PACE_UNIT"] = unit
    if pace.get("value") is not None:
        globals_ref["DEFAULT_PACE_VALUE"] = float(pace["value"])

    if data.get("duration_minutes") is not None:
        globals_ref["DEFAULT_DURATION_MINUTES"] = float(data["duration_minutes"])

    provider = data.get("provider")
    if provider is not None:
        if provider not in ROUTING_PROVIDERS:
            raise ValueError(f"Unknown routing provider in {config_path}: {provider}")
        globals_ref["ROUTING_PROVIDER"] = provider

    if data.get("proxy_url"):
        globals_ref["PROXY_BASE_URL"] = str(data["proxy_url"]).rstrip("/")
    if data.get("profile"):
        globals_ref["ORS_PROFILE"] = str(data["profile"])

    scoring = data.get("scoring", {})
    if "variety_weight" in scoring:
        globals_ref["VARIETY_WEIGHT"] = float(scoring["variety_weight"])
    if "recency_decay" in scoring:
        globals_ref["VARIETY_RECENCY_DECAY"] = float(scoring["recency_decay"])
    if "history_limit" in scoring:
        globals_ref["RECENT_HISTORY_LIMIT"] = int(scoring["history_limit"])

    return True
