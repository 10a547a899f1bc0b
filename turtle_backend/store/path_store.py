"""
SQLite record store for recorded paths and standalone stations.

Paths are written once and never updated. Points and stations are kept as
JSON columns since they are only ever read back whole.
"""
from __future__ import annotations

import json
import logging
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from ..models.path import PathCreate, PathRecord
from ..models.station import StationCreate, StationRecord

logger = logging.getLogger(__name__)


class PathStoreError(Exception):
    """Raised when the underlying database rejects a read or write."""


class PathStore:
    """Thread-safe SQLite store; one shared connection guarded by a lock."""

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self._db_path = str(db_path)
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        except sqlite3.Error as e:
            raise PathStoreError(f"cannot open {self._db_path}: {e}") from e
        self._conn.row_factory = sqlite3.Row
        self._init_database()
        logger.info("[store] opened %s", self._db_path)

    def _init_database(self):
        with self._lock:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS paths (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    points TEXT NOT NULL DEFAULT '[]',
                    stations TEXT NOT NULL DEFAULT '[]'
                )
            """)
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS stations (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    x REAL NOT NULL,
                    y REAL NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            self._conn.execute("CREATE INDEX IF NOT EXISTS idx_paths_created ON paths(created_at)")
            self._conn.execute("CREATE INDEX IF NOT EXISTS idx_stations_created ON stations(created_at)")
            self._conn.commit()

    # =====================================================================
    # PATHS
    # =====================================================================

    def save_path(self, path: PathCreate) -> str:
        path_id = uuid.uuid4().hex
        data = path.model_dump(mode="json")
        try:
            with self._lock:
                self._conn.execute(
                    "INSERT INTO paths (id, name, created_at, points, stations) VALUES (?, ?, ?, ?, ?)",
                    (
                        path_id,
                        path.name,
                        _now_iso(),
                        json.dumps(data["points"]),
                        json.dumps(data["stations"]),
                    ),
                )
                self._conn.commit()
        except sqlite3.Error as e:
            logger.error("[store] failed to save path %r: %s", path.name, e)
            raise PathStoreError("failed to save path") from e
        logger.info("[store] saved path %s (%r, %d points)", path_id, path.name, len(path.points))
        return path_id

    def get_path(self, path_id: str) -> Optional[PathRecord]:
        try:
            with self._lock:
                row = self._conn.execute("SELECT * FROM paths WHERE id = ?", (path_id,)).fetchone()
        except sqlite3.Error as e:
            raise PathStoreError("failed to read path") from e
        return None if row is None else _path_from_row(row)

    def list_paths(self) -> List[PathRecord]:
        """All paths, newest first."""
        try:
            with self._lock:
                rows = self._conn.execute(
                    "SELECT * FROM paths ORDER BY created_at DESC, rowid DESC"
                ).fetchall()
        except sqlite3.Error as e:
            raise PathStoreError("failed to list paths") from e
        return [_path_from_row(r) for r in rows]

    def count_paths(self) -> int:
        try:
            with self._lock:
                return self._conn.execute("SELECT COUNT(*) AS n FROM paths").fetchone()["n"]
        except sqlite3.Error as e:
            raise PathStoreError("failed to count paths") from e

    # =====================================================================
    # STATIONS
    # =====================================================================

    def save_station(self, station: StationCreate) -> str:
        station_id = uuid.uuid4().hex
        try:
            with self._lock:
                self._conn.execute(
                    "INSERT INTO stations (id, name, x, y, created_at) VALUES (?, ?, ?, ?, ?)",
                    (station_id, station.name, station.x, station.y, _now_iso()),
                )
                self._conn.commit()
        except sqlite3.Error as e:
            logger.error("[store] failed to save station %r: %s", station.name, e)
            raise PathStoreError("failed to save station") from e
        return station_id

    def list_stations(self) -> List[StationRecord]:
        try:
            with self._lock:
                rows = self._conn.execute(
                    "SELECT * FROM stations ORDER BY created_at DESC, rowid DESC"
                ).fetchall()
        except sqlite3.Error as e:
            raise PathStoreError("failed to list stations") from e
        return [
            StationRecord(id=r["id"], name=r["name"], x=r["x"], y=r["y"], created_at=r["created_at"])
            for r in rows
        ]

    def close(self):
        with self._lock:
            try:
                self._conn.close()
            except sqlite3.Error as e:
                logger.warning("[store] error closing %s: %s", self._db_path, e)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _path_from_row(row: sqlite3.Row) -> PathRecord:
    return PathRecord(
        id=row["id"],
        name=row["name"],
        created_at=row["created_at"],
        points=json.loads(row["points"]),
        stations=json.loads(row["stations"]),
    )
