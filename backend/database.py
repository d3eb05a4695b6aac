import psycopg2
from psycopg2.extras import RealDictCursor
from contextlib import contextmanager
from config import get_db_config
from errors import StorageError

@contextmanager
def get_db(database_url: str = ""):
    """Get a database connection with automatic commit/rollback.

    psycopg2 failures surface as StorageError so callers can tell an
    unreachable database apart from a missing lineup.
    """
    config = get_db_config(database_url)
    try:
        conn = psycopg2.connect(
            host=config["host"],
            port=config["port"],
            database=config["database"],
            user=config["user"],
            password=config["password"],
            cursor_factory=RealDictCursor
        )
    except psycopg2.Error as exc:
        raise StorageError(f"could not connect to database: {exc}") from exc

    try:
        yield conn
        conn.commit()
    except psycopg2.Error as exc:
        conn.rollback()
        raise StorageError(str(exc)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(database_url: str = ""):
    """Initialize database schema."""
    with get_db(database_url) as conn:
        cursor = conn.cursor()

        # One row per lineup; the roster is replaced as a whole under a version check
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS lineups (
                id TEXT PRIMARY KEY,
                team_a_name TEXT NOT NULL,
                team_b_name TEXT NOT NULL,
                team_a_color TEXT NOT NULL,
                team_b_color TEXT NOT NULL,
                players_count INTEGER NOT NULL CHECK(players_count BETWEEN 7 AND 11),
                positions JSONB,
                roster JSONB NOT NULL,
                version INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMPTZ NOT NULL,
                expires_at TIMESTAMPTZ NOT NULL
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_lineups_expires_at ON lineups (expires_at)
        """)

        conn.commit()


if __name__ == "__main__":
    init_db()
    print("Database initialized successfully")
