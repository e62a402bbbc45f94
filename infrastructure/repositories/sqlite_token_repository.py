import json
import logging
import sqlite3
from datetime import datetime
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

DEFAULT_SLOT = "current"


class SQLiteTokenRepository:
    """Durable storage of the OAuth2 token and the last used platform."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _conn(self):
        return sqlite3.connect(self.db_path)

    def _get_current_version(self, conn) -> int:
        version_row = conn.execute("SELECT version FROM schema_info").fetchone()
        if version_row:
            return version_row[0]
        return 0

    def _migrate_v1(self, conn):
        """Baseline schema (v1)."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS tokens (
                slot TEXT PRIMARY KEY,
                token_json TEXT NOT NULL,
                saved_at TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS startup (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)

    def _migrate_v2(self, conn):
        """Saved platform keyed per token slot."""
        conn.execute("UPDATE startup SET key = 'platform:current' WHERE key = 'platform'")

    def init_db(self):
        MIGRATIONS = [self._migrate_v1, self._migrate_v2]

        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_info (
                    version INTEGER NOT NULL
                )
            """)
            current_version = self._get_current_version(conn)
            has_version_row = conn.execute("SELECT COUNT(*) FROM schema_info").fetchone()[0] > 0
            if not has_version_row:
                conn.execute("INSERT INTO schema_info (version) VALUES (?)", (current_version,))

            for i in range(current_version, len(MIGRATIONS)):
                target_version = i + 1
                try:
                    MIGRATIONS[i](conn)
                    conn.execute("UPDATE schema_info SET version = ?", (target_version,))
                except Exception as e:
                    raise RuntimeError(f"Database migration to v{target_version} failed: {e}") from e

            conn.commit()

    # --- Token Store ---
    # One slot per browser device key, so tabs of different browsers never share a token.

    def save(self, token: Dict[str, Any], slot: str = DEFAULT_SLOT):
        now_iso = datetime.utcnow().isoformat()
        with self._conn() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO tokens (slot, token_json, saved_at) VALUES (?, ?, ?)",
                (slot, json.dumps(token), now_iso),
            )
            conn.commit()

    def load(self, slot: str = DEFAULT_SLOT) -> Optional[Dict[str, Any]]:
        with self._conn() as conn:
            row = conn.execute("SELECT token_json FROM tokens WHERE slot = ?", (slot,)).fetchone()
        if not row:
            return None
        try:
            return json.loads(row[0])
        except ValueError:
            log.warning("Stored token is not valid JSON, ignoring it")
            return None

    def clear(self, slot: str = DEFAULT_SLOT):
        with self._conn() as conn:
            conn.execute("DELETE FROM tokens WHERE slot = ?", (slot,))
            conn.commit()

    # --- Startup info ---

    def save_platform(self, platform_name: str, slot: str = DEFAULT_SLOT):
        with self._conn() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO startup (key, value) VALUES (?, ?)",
                (f"platform:{slot}", platform_name),
            )
            conn.commit()

    def load_platform(self, slot: str = DEFAULT_SLOT) -> Optional[str]:
        with self._conn() as conn:
            row = conn.execute("SELECT value FROM startup WHERE key = ?", (f"platform:{slot}",)).fetchone()
        return row[0] if row else None
