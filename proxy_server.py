"""Routing proxy server.

Accepts route and isochrone requests from the planner, attaches the
openrouteservice API key held in the environment and forwards them upstream.
Run with: python proxy_server.py [port]
"""
from __future__ import annotations

import json
import logging
import os
import sys
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable, Dict, Tuple

import requests

from loopwalk import config

logger = logging.getLogger(__name__)

API_KEY_ENV = "ORS_API_KEY"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

PostFn = Callable[..., Any]


def _valid_position(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) == 2
        and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in value)
    )


def build_directions_request(payload: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    start = payload.get("start")
    if not _valid_position(start):
        raise ValueError("Invalid start coordinates")
    waypoints = payload.get("waypoints") or []
    if not all(_valid_position(wp) for wp in waypoints):
        raise ValueError("Invalid waypoint coordinates")
    profile = payload.get("profile") or config.ORS_PROFILE
    body = {
        "coordinates": [start, *waypoints, start],
        "geometry_simplify": False,
        "instructions": True,
        "elevation": False,
    }
    return config.ORS_DIRECTIONS_URL.format(profile=profile), body


def build_isochrone_request(payload: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    start = payload.get("start")
    if not _valid_position(start):
        raise ValueError("Invalid start coordinates")
    time_seconds = payload.get("timeSeconds")
    if not isinstance(time_seconds, (int, float)) or isinstance(time_seconds, bool) or time_seconds <= 0:
        raise ValueError("Invalid time parameter")
    profile = payload.get("profile") or config.ORS_PROFILE
    body = {
        "locations": [start],
        "range": [time_seconds],
        "range_type": "time",
        "smoothing": config.ORS_ISOCHRONE_SMOOTHING,
    }
    return config.ORS_ISOCHRONES_URL.format(profile=profile), body


ROUTES = {
    config.PROXY_ROUTE_PATH: ("Routing", build_directions_request),
    config.PROXY_ISOCHRONE_PATH: ("Isochrone", build_isochrone_request),
}


def forward(
    path: str,
    payload: Dict[str, Any],
    api_key: str,
    post: PostFn = requests.post,
    timeout: int = config.HTTP_TIMEOUT_SECONDS,
) -> Tuple[int, Dict[str, Any]]:
    """Validate, forward upstream and return (status, JSON body) for the client."""
    if path not in ROUTES:
        return 404, {"error": "Not found"}
    label, build = ROUTES[path]
    try:
        url, body = build(payload)
    except ValueError as exc:
        return 400, {"error": str(exc)}
    if not api_key:
        return 500, {"error": "ORS API key not configured"}

    headers = {"Authorization": api_key, "Content-Type": "application/json"}
    try:
        resp = post(url, data=json.dumps(body), headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("%s upstream request failed: %s", label, exc)
        return 502, {"error": "Upstream request failed", "message": str(exc)}

    if not 200 <= resp.status_code < 300:
        details = (resp.text or "")[: config.PROXY_ERROR_DETAILS_MAX]
        logger.error("ORS %s error: %s %s", label.lower(), resp.status_code, details)
        return resp.status_code, {"error": f"{label} service error", "details": details}

    try:
        return 200, resp.json()
    except ValueError:
        logger.error("Non-JSON response from %s", url)
        return 502, {"error": "Upstream returned invalid JSON"}


class ProxyHandler(BaseHTTPRequestHandler):
    api_key_env = API_KEY_ENV

    def do_OPTIONS(self) -> None:
        self.send_response(200)
        for key, value in CORS_HEADERS.items():
            self.send_header(key, value)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def do_GET(self) -> None:
        self._send_json({"error": "Method not allowed"}, 405)

    def do_POST(self) -> None:
        try:
            payload = self._read_json_body()
        except ValueError:
            self._send_json({"error": "Invalid JSON body"}, 400)
            return
        if not isinstance(payload, dict):
            self._send_json({"error": "Invalid JSON body"}, 400)
            return
        api_key = (os.environ.get(self.api_key_env) or "").strip()
        status, body = forward(self.path, payload, api_key)
        self._send_json(body, status)

    def _read_json_body(self) -> Any:
        length = int(self.headers.get("Content-Length", 0))
        raw = self.rfile.read(length)
        return json.loads(raw) if raw else {}

    def _send_json(self, data: Dict[str, Any], status: int = 200) -> None:
        body = json.dumps(data).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, fmt: str, *args: Any) -> None:
        logger.info("%s %s", self.address_string(), fmt % args)


def main() -> int:
    from run import load_env

    load_env()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    port = int(sys.argv[1]) if len(sys.argv) > 1 else config.PROXY_PORT
    if not (os.environ.get(API_KEY_ENV) or "").strip():
        print(f"Warning: {API_KEY_ENV} is not set; requests will fail with 500", file=sys.stderr)

    server = HTTPServer(("", port), ProxyHandler)
    print(f"Routing proxy running at http://localhost:{port}")
    print("Press Ctrl+C to stop.\n")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down.")
    server.server_close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
