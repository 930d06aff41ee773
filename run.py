"""CLI entrypoint."""
from __future__ import annotations

import argparse
import logging
import os
import random
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from loopwalk import config
from loopwalk.geo import is_valid_coordinate
from loopwalk.http import HttpClient, RequestBudget, RequestMetrics
from loopwalk.models import PaceSetting, Route, RouteRequest
from loopwalk.planner import plan_loop
from loopwalk.reporting import (
    ensure_dir,
    render_route_summary,
    write_route_geojson,
    write_route_json,
)
from loopwalk.routing_client import ProxyRoutingClient, RoutingProvider
from loopwalk.storage import RouteStore
from loopwalk.synthetic import SyntheticRoutingProvider
from loopwalk.units import convert_distance, convert_pace, format_distance, format_time


def _repo_root() -> Path:
    return Path(__file__).resolve().parent


def load_env(path: str = ".env", root_dir: Optional[Path] = None) -> None:
    """Optionally load a repo-root .env file without overriding real env vars."""
    root = Path(root_dir) if root_dir else _repo_root()
    env_path = (root / path).resolve()
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a fresh walking loop route")
    parser.add_argument("--lat", type=float, default=None, help="Start latitude (default: stored home)")
    parser.add_argument("--lon", type=float, default=None, help="Start longitude (default: stored home)")
    parser.add_argument("--duration", type=float, default=None, help="Target walk duration in minutes")
    parser.add_argument("--pace", type=float, default=None, help="Minutes per km (metric) or per mile (imperial)")
    parser.add_argument("--unit", choices=["metric", "imperial"], default=None)
    parser.add_argument(
        "--provider",
        choices=list(config.ROUTING_PROVIDERS),
        default=None,
        help="Routing provider: proxy (openrouteservice via proxy) or demo (offline)",
    )
    parser.add_argument("--proxy-url", type=str, default=None)
    parser.add_argument("--profile", type=str, default=None, help="Routing profile (default: foot-walking)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible sampling")
    parser.add_argument(
        "--history",
        type=int,
        default=None,
        help="Number of recent routes to avoid repeating (default: 5)",
    )
    parser.add_argument("--max-workers", type=int, default=1, help="Parallel routing requests per stage")
    parser.add_argument("--db-path", type=str, default=config.DB_PATH)
    parser.add_argument("--out", type=str, default=None, help="Write the chosen route as JSON")
    parser.add_argument("--geojson", type=str, default=None, help="Write the chosen route as GeoJSON")
    parser.add_argument("--no-save", action="store_true", help="Do not store the generated route")
    parser.add_argument("--set-home", action="store_true", help="Store --lat/--lon (and --pace/--unit) and exit")
    parser.add_argument("--list-routes", action="store_true")
    parser.add_argument("--list-favorites", action="store_true")
    parser.add_argument("--favorite", type=str, default=None, metavar="ROUTE_ID")
    parser.add_argument("--name", type=str, default=None, help="Name for --favorite")
    parser.add_argument("--delete-route", type=str, default=None, metavar="ROUTE_ID")
    parser.add_argument("--log-walk", type=str, default=None, metavar="ROUTE_ID")
    parser.add_argument("--walk-minutes", type=float, default=None, help="Actual duration for --log-walk")
    parser.add_argument("--walk-notes", type=str, default=None)
    parser.add_argument("--preflight", action="store_true", help="Run offline checks only")
    return parser.parse_args(argv)


def build_provider(name: str, proxy_url: str, profile: str, rng: random.Random, metrics: RequestMetrics) -> RoutingProvider:
    if name == "demo":
        return SyntheticRoutingProvider(rng=rng)
    http_client = HttpClient(
        timeout=config.HTTP_TIMEOUT_SECONDS,
        retry_max=config.HTTP_RETRY_MAX,
        backoff_base=config.HTTP_BACKOFF_BASE,
        backoff_max=config.HTTP_BACKOFF_MAX,
    )
    budget = RequestBudget(
        max_routes=config.MAX_ROUTE_REQUESTS_PER_RUN,
        max_isochrones=config.MAX_ISOCHRONE_REQUESTS_PER_RUN,
        metrics=metrics,
    )
    return ProxyRoutingClient(http_client, base_url=proxy_url, profile=profile, budget=budget, metrics=metrics)


def _print_route_line(route: Route, unit: str) -> None:
    distance = convert_distance(route.distance_km, "metric", unit)
    star = "*" if route.is_favorite else " "
    name = f" {route.name}" if route.name else ""
    print(
        f"{star} {route.id}  {format_distance(distance, unit):>9}  "
        f"{format_time(route.duration_minutes):>7}  {route.created_at.isoformat()}{name}"
    )


def run_preflight(proxy_url: str, provider: str) -> int:
    ok = True
    print(f"Provider: {provider}")
    if provider == "proxy":
        print(f"Proxy URL: {proxy_url}")
    if config.HOME_LOCATION is not None:
        print(f"Home (config): {config.HOME_LOCATION[0]}, {config.HOME_LOCATION[1]}")
    try:
        PaceSetting(unit=config.DEFAULT_PACE_UNIT, pace=config.DEFAULT_PACE_VALUE)
        print("Pace: OK")
    except ValueError as exc:
        print(f"Pace: FAIL ({exc})")
        ok = False
    print(
        "Request caps: max_routes={max_routes}, max_isochrones={max_isochrones}".format(
            max_routes=config.MAX_ROUTE_REQUESTS_PER_RUN,
            max_isochrones=config.MAX_ISOCHRONE_REQUESTS_PER_RUN,
        )
    )
    print("Preflight: PASS" if ok else "Preflight: FAIL")
    return 0 if ok else 1


def main(argv: Optional[List[str]] = None) -> int:
    load_env()
    config.load_walk_config()
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    proxy_url = args.proxy_url or os.environ.get(config.PROXY_URL_ENV) or config.PROXY_BASE_URL

    store = RouteStore(args.db_path)
    try:
        settings = store.get_settings()
        provider_name = args.provider or settings.routing_provider or config.ROUTING_PROVIDER

        if args.preflight:
            return run_preflight(proxy_url, provider_name)

        unit = args.unit or settings.pace.unit
        if args.list_routes or args.list_favorites:
            routes = store.list_favorites() if args.list_favorites else store.list_routes()
            if not routes:
                print("No routes stored.")
            for route in routes:
                _print_route_line(route, unit)
            return 0

        if args.delete_route:
            if not store.delete_route(args.delete_route):
                print(f"Unknown route id: {args.delete_route}", file=sys.stderr)
                return 1
            print(f"Deleted {args.delete_route}")
            return 0

        if args.favorite:
            if not store.set_favorite(args.favorite, True, name=args.name):
                print(f"Unknown route id: {args.favorite}", file=sys.stderr)
                return 1
            print(f"Marked {args.favorite} as favorite")
            return 0

        if args.log_walk:
            if store.get_route(args.log_walk) is None:
                print(f"Unknown route id: {args.log_walk}", file=sys.stderr)
                return 1
            walk = store.save_walk(args.log_walk, actual_duration=args.walk_minutes, notes=args.walk_notes)
            print(f"Logged walk {walk.id} for {args.log_walk}")
            return 0

        pace_value = args.pace
        if pace_value is None:
            pace_value = convert_pace(settings.pace.pace, settings.pace.unit, unit)
        try:
            pace = PaceSetting(unit=unit, pace=pace_value)
        except ValueError as exc:
            print(f"Invalid pace: {exc}", file=sys.stderr)
            return 1

        if args.set_home:
            if args.lat is None or args.lon is None or not is_valid_coordinate((args.lat, args.lon)):
                print("--set-home requires valid --lat and --lon", file=sys.stderr)
                return 1
            store.save_setting("home_location", [args.lat, args.lon])
            store.save_setting("pace", pace.to_dict())
            if args.provider:
                store.save_setting("routing_provider", args.provider)
            print(f"Home set to {args.lat}, {args.lon}")
            return 0

        if args.lat is not None and args.lon is not None:
            start = (args.lat, args.lon)
        else:
            start = settings.home_location or config.HOME_LOCATION
        if start is None:
            print("Please set a start location (--lat/--lon or --set-home) first", file=sys.stderr)
            return 1

        history_limit = args.history if args.history is not None else config.RECENT_HISTORY_LIMIT
        duration = args.duration if args.duration is not None else config.DEFAULT_DURATION_MINUTES
        try:
            request = RouteRequest(
                start=start,
                target_duration_minutes=duration,
                pace=pace,
                recent_route_fingerprints=tuple(tuple(fps) for fps in store.recent_fingerprints(history_limit)),
            )
        except ValueError as exc:
            print(f"Invalid request: {exc}", file=sys.stderr)
            return 1

        rng = random.Random(args.seed)
        metrics = RequestMetrics()
        provider = build_provider(provider_name, proxy_url, args.profile or config.ORS_PROFILE, rng, metrics)
        result = plan_loop(
            request,
            provider,
            fallback_provider=SyntheticRoutingProvider(rng=rng),
            rng=rng,
            max_workers=max(1, args.max_workers),
        )

        if result.route is None:
            print(result.message, file=sys.stderr)
            return 1

        route = result.route
        if not args.no_save:
            store.save_route(route)
        for path, writer in ((args.out, write_route_json), (args.geojson, write_route_geojson)):
            if path:
                ensure_dir(os.path.dirname(os.path.abspath(path)))
                writer(path, route)

        print(render_route_summary(route, pace, stage=result.stage))
        if provider_name == "proxy":
            print(
                f"- requests: routes={metrics.network_routes} isochrones={metrics.network_isochrones} "
                f"failed={metrics.failed_routes + metrics.failed_isochrones}"
            )
        return 0
    finally:
        store.close()


if __name__ == "__main__":
    raise SystemExit(main())
