"""SQLite store for generated routes, walk history and user settings."""
from __future__ import annotations

import json
import random
import sqlite3
import string
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from . import config
from .models import PaceSetting, Route

SETTING_KEYS = ("home_location", "pace", "routing_provider")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def generate_walk_id() -> str:
    suffix = "".join(random.choice(string.digits + string.ascii_lowercase) for _ in range(9))
    return f"walk_{int(time.time() * 1000)}_{suffix}"


@dataclass
class StoredSettings:
    pace: PaceSetting
    routing_provider: str = config.ROUTING_PROVIDER
    home_location: Optional[Tuple[float, float]] = None


@dataclass
class WalkRecord:
    id: str
    route_id: str
    walk_date: str
    actual_duration: Optional[float] = None
    notes: Optional[str] = None


class RouteStore:
    def __init__(self, db_path: str, commit_every: int = config.STORE_COMMIT_EVERY) -> None:
        self.db_path = db_path
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row
        self._pending_writes = 0
        self._commit_every = max(1, int(commit_every))
        self._configure_conn()
        self._init_db()

    def _configure_conn(self) -> None:
        cur = self.conn.cursor()
        try:
            cur.execute("PRAGMA journal_mode=WAL")
            cur.fetchone()
        except sqlite3.DatabaseError:
            pass
        try:
            cur.execute("PRAGMA synchronous=NORMAL")
        except sqlite3.DatabaseError:
            pass

    def _init_db(self) -> None:
        cur = self.conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS routes (
                id TEXT PRIMARY KEY,
                name TEXT,
                distance_km REAL,
                duration_minutes REAL,
                coordinates_json TEXT,
                start_lat REAL,
                start_lon REAL,
                created_at TEXT,
                is_favorite INTEGER,
                fingerprints_json TEXT
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS walks (
                id TEXT PRIMARY KEY,
                route_id TEXT,
                walk_date TEXT,
                actual_duration REAL,
                notes TEXT
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value_json TEXT
            )
            """
        )
        self.conn.commit()

    def _mark_dirty(self) -> None:
        self._pending_writes += 1
        if self._pending_writes >= self._commit_every:
            self.commit()

    def commit(self) -> None:
        if self._pending_writes:
            self.conn.commit()
            self._pending_writes = 0

    def close(self) -> None:
        self.commit()
        self.conn.close()

    def __enter__(self) -> "RouteStore":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # --- routes ---

    def save_route(self, route: Route) -> None:
        cur = self.conn.cursor()
        cur.execute(
            """
            INSERT INTO routes (
                id, name, distance_km, duration_minutes, coordinates_json,
                start_lat, start_lon, created_at, is_favorite, fingerprints_json
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                distance_km = excluded.distance_km,
                duration_minutes = excluded.duration_minutes,
                coordinates_json = excluded.coordinates_json,
                start_lat = excluded.start_lat,
                start_lon = excluded.start_lon,
                created_at = excluded.created_at,
                is_favorite = excluded.is_favorite,
                fingerprints_json = excluded.fingerprints_json
            """,
            (
                route.id,
                route.name,
                route.distance_km,
                route.duration_minutes,
                json.dumps([[lat, lon] for lat, lon in route.coordinates]),
                route.start_point[0],
                route.start_point[1],
                route.created_at.isoformat(),
                1 if route.is_favorite else 0,
                json.dumps(list(route.fingerprints)),
            ),
        )
        self._mark_dirty()

    def get_route(self, route_id: str) -> Optional[Route]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM routes WHERE id = ?", (route_id,))
        row = cur.fetchone()
        if not row:
            return None
        return _row_to_route(row)

    def list_routes(self) -> List[Route]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM routes ORDER BY created_at DESC, rowid DESC")
        return [_row_to_route(row) for row in cur.fetchall()]

    def list_favorites(self) -> List[Route]:
        return [route for route in self.list_routes() if route.is_favorite]

    def delete_route(self, route_id: str) -> bool:
        cur = self.conn.cursor()
        cur.execute("DELETE FROM routes WHERE id = ?", (route_id,))
        deleted = cur.rowcount > 0
        self._mark_dirty()
        return deleted

    def set_favorite(self, route_id: str, is_favorite: bool = True, name: Optional[str] = None) -> bool:
        cur = self.conn.cursor()
        if name is None:
            cur.execute("UPDATE routes SET is_favorite = ? WHERE id = ?", (1 if is_favorite else 0, route_id))
        else:
            cur.execute(
                "UPDATE routes SET is_favorite = ?, name = ? WHERE id = ?",
                (1 if is_favorite else 0, name, route_id),
            )
        updated = cur.rowcount > 0
        self._mark_dirty()
        return updated

    def recent_fingerprints(self, limit: int = config.RECENT_HISTORY_LIMIT) -> List[List[str]]:
        """Fingerprint lists of the newest routes, most recent first."""
        if limit <= 0:
            return []
        cur = self.conn.cursor()
        cur.execute(
            "SELECT fingerprints_json FROM routes ORDER BY created_at DESC, rowid DESC LIMIT ?",
            (int(limit),),
        )
        return [json.loads(row["fingerprints_json"] or "[]") for row in cur.fetchall()]

    # --- walk history ---

    def save_walk(
        self,
        route_id: str,
        actual_duration: Optional[float] = None,
        notes: Optional[str] = None,
        walk_date: Optional[str] = None,
    ) -> WalkRecord:
        record = WalkRecord(
            id=generate_walk_id(),
            route_id=route_id,
            walk_date=walk_date or utc_now_iso(),
            actual_duration=actual_duration,
            notes=notes,
        )
        cur = self.conn.cursor()
        cur.execute(
            "INSERT INTO walks (id, route_id, walk_date, actual_duration, notes) VALUES (?, ?, ?, ?, ?)",
            (record.id, record.route_id, record.walk_date, record.actual_duration, record.notes),
        )
        self._mark_dirty()
        return record

    def list_walks(self) -> List[WalkRecord]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM walks ORDER BY walk_date DESC, rowid DESC")
        return [
            WalkRecord(
                id=row["id"],
                route_id=row["route_id"],
                walk_date=row["walk_date"],
                actual_duration=row["actual_duration"],
                notes=row["notes"],
            )
            for row in cur.fetchall()
        ]

    # --- settings ---

    def save_setting(self, key: str, value: Any) -> None:
        if key not in SETTING_KEYS:
            raise ValueError(f"Unknown setting: {key}")
        cur = self.conn.cursor()
        cur.execute(
            "INSERT OR REPLACE INTO settings (key, value_json) VALUES (?, ?)",
            (key, json.dumps(value)),
        )
        self._mark_dirty()

    def _get_setting(self, key: str) -> Any:
        cur = self.conn.cursor()
        cur.execute("SELECT value_json FROM settings WHERE key = ?", (key,))
        row = cur.fetchone()
        if not row:
            return None
        return json.loads(row["value_json"])

    def get_settings(self) -> StoredSettings:
        pace_raw: Optional[Dict[str, Any]] = self._get_setting("pace")
        home_raw = self._get_setting("home_location")
        provider = self._get_setting("routing_provider") or config.ROUTING_PROVIDER
        return StoredSettings(
            pace=PaceSetting.from_dict(pace_raw) if pace_raw else _default_pace(),
            routing_provider=provider,
            home_location=(float(home_raw[0]), float(home_raw[1])) if home_raw else None,
        )


def _row_to_route(row: sqlite3.Row) -> Route:
    created_at = datetime.fromisoformat(row["created_at"])
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return Route(
        id=row["id"],
        name=row["name"],
        distance_km=row["distance_km"],
        duration_minutes=row["duration_minutes"],
        coordinates=[(lat, lon) for lat, lon in json.loads(row["coordinates_json"] or "[]")],
        start_point=(row["start_lat"], row["start_lon"]),
        created_at=created_at,
        is_favorite=bool(row["is_favorite"]),
        fingerprints=json.loads(row["fingerprints_json"] or "[]"),
    )


def _default_pace() -> PaceSetting:
    return PaceSetting(unit=config.DEFAULT_PACE_UNIT, pace=config.DEFAULT_PACE_VALUE)
