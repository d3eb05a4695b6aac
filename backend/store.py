"""Lineup persistence.

A store keeps one document per lineup and replaces its roster with a
compare-and-swap on `version`, so concurrent claims on the same lineup
cannot overwrite each other.
"""

import logging
import secrets
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from psycopg2.extras import Json

from database import get_db, init_db
from errors import StaleLineupError, StorageError
from models import Lineup, Roster

logger = logging.getLogger(__name__)


def generate_lineup_id() -> str:
    return secrets.token_urlsafe(8)


class LineupStore(ABC):
    name = "abstract"

    @abstractmethod
    def create(self, lineup: Lineup) -> str:
        """Persist a new lineup and return its share id."""

    @abstractmethod
    def get(self, lineup_id: str) -> Optional[Lineup]:
        """Return an independent copy of the lineup, or None."""

    @abstractmethod
    def replace_roster(self, lineup_id: str, roster: Roster, expected_version: int) -> bool:
        """Store `roster` if the lineup is still at `expected_version`.

        Returns False when the lineup no longer exists and raises
        StaleLineupError when another write got there first.
        """

    @abstractmethod
    def purge_expired(self, now: datetime) -> int:
        """Delete lineups whose link expired before `now`; return how many."""


class MemoryLineupStore(LineupStore):
    name = "memory"

    def __init__(self):
        self._lineups: dict[str, Lineup] = {}
        self._lock = threading.Lock()

    def create(self, lineup: Lineup) -> str:
        with self._lock:
            lineup_id = generate_lineup_id()
            while lineup_id in self._lineups:
                lineup_id = generate_lineup_id()
            self._lineups[lineup_id] = lineup.model_copy(update={"id": lineup_id}, deep=True)
            return lineup_id

    def get(self, lineup_id: str) -> Optional[Lineup]:
        with self._lock:
            lineup = self._lineups.get(lineup_id)
            return lineup.model_copy(deep=True) if lineup else None

    def replace_roster(self, lineup_id: str, roster: Roster, expected_version: int) -> bool:
        with self._lock:
            current = self._lineups.get(lineup_id)
            if current is None:
                return False
            if current.version != expected_version:
                raise StaleLineupError(lineup_id, expected_version)
            self._lineups[lineup_id] = current.model_copy(
                update={"roster": roster.model_copy(deep=True), "version": expected_version + 1}
            )
            return True

    def purge_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [lineup_id for lineup_id, lineup in self._lineups.items() if lineup.expires_at < now]
            for lineup_id in expired:
                del self._lineups[lineup_id]
            return len(expired)


class PostgresLineupStore(LineupStore):
    name = "postgres"

    def __init__(self, database_url: str = ""):
        self.database_url = database_url

    def init_schema(self):
        init_db(self.database_url)

    def create(self, lineup: Lineup) -> str:
        lineup_id = generate_lineup_id()
        with get_db(self.database_url) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO lineups (id, team_a_name, team_b_name, team_a_color, team_b_color, players_count, positions, roster, version, created_at, expires_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            """, (
                lineup_id,
                lineup.team_a_name,
                lineup.team_b_name,
                lineup.team_a_color,
                lineup.team_b_color,
                lineup.players_count,
                Json(lineup.positions),
                Json(lineup.roster.model_dump(mode="json", by_alias=True)),
                lineup.version,
                lineup.created_at,
                lineup.expires_at,
            ))
        return lineup_id

    def get(self, lineup_id: str) -> Optional[Lineup]:
        with get_db(self.database_url) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM lineups WHERE id = %s", (lineup_id,))
            row = cursor.fetchone()
        if not row:
            return None
        data = dict(row)
        data["roster"] = Roster.model_validate(data["roster"])
        return Lineup(**data)

    def replace_roster(self, lineup_id: str, roster: Roster, expected_version: int) -> bool:
        with get_db(self.database_url) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                UPDATE lineups SET roster = %s, version = version + 1
                WHERE id = %s AND version = %s
            """, (Json(roster.model_dump(mode="json", by_alias=True)), lineup_id, expected_version))
            if cursor.rowcount == 1:
                return True

            cursor.execute("SELECT 1 FROM lineups WHERE id = %s", (lineup_id,))
            if cursor.fetchone() is None:
                return False
        raise StaleLineupError(lineup_id, expected_version)

    def purge_expired(self, now: datetime) -> int:
        with get_db(self.database_url) as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM lineups WHERE expires_at < %s", (now,))
            return cursor.rowcount


def build_store(backend: str, database_url: str) -> LineupStore:
    """Pick the lineup store for this process.

    "auto" uses PostgreSQL when DATABASE_URL is set and reachable and falls
    back to memory otherwise; "postgres" fails loudly instead of falling back.
    """
    if backend == "memory":
        return MemoryLineupStore()

    if backend == "postgres":
        store = PostgresLineupStore(database_url)
        store.init_schema()
        return store

    if backend != "auto":
        raise ValueError(f"Unknown STORAGE_BACKEND '{backend}'. Use postgres, memory or auto")

    if not database_url:
        logger.warning("DATABASE_URL not set, using in-memory lineup store only")
        return MemoryLineupStore()

    store = PostgresLineupStore(database_url)
    try:
        store.init_schema()
    except StorageError:
        logger.exception("PostgreSQL init failed, falling back to in-memory lineup store")
        return MemoryLineupStore()
    logger.info("PostgreSQL lineup store ready")
    return store
