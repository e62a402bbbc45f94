import sqlite3
import json
from typing import Optional, Dict, Any, List, Tuple
from datetime import datetime
import logging
from enum import Enum

log = logging.getLogger(__name__)


class TrackingCategory(str, Enum):
    AUTH = "Auth"
    PROFILE = "Profile"


class TrackingAction(str, Enum):
    LOGIN = "LOGIN"
    LOGIN_ERROR = "LOGIN ERROR"
    RESTORE = "RESTORE"
    RESTORE_ERROR = "RESTORE ERROR"
    ACTIVATE = "ACTIVATE"
    LOGOUT = "LOGOUT"
    CHANGE_PASSWORD = "CHANGE PASSWORD"
    CHANGE_PASSWORD_ERROR = "CHANGE PASSWORD ERROR"


ALLOWED_METADATA_KEYS = {
    "platform", "scenario", "error_code", "force_change", "remember_me",
}


class SQLiteTrackingRepository:
    """Fire-and-forget analytics sink. Failures are logged, never raised."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _conn(self):
        return sqlite3.connect(self.db_path)

    def init_db(self):
        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS tracking_events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    ts TEXT NOT NULL,
                    category TEXT NOT NULL,
                    action TEXT NOT NULL,
                    label TEXT,
                    metadata_json TEXT
                )
            """)
            conn.commit()

    def track_event(
        self,
        category: Any,
        action: Any,
        label: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        try:
            meta_str = None
            if metadata is not None:
                safe_meta = {}
                for k, v in metadata.items():
                    if k in ALLOWED_METADATA_KEYS and "password" not in str(v).lower() and "token" not in str(v).lower():
                        safe_meta[k] = v
                try:
                    meta_str = json.dumps(safe_meta)[:2000]
                except (TypeError, ValueError):
                    meta_str = "{\"error\": \"unserializable\"}"

            ts = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")
            category_val = category.value if hasattr(category, "value") else str(category)[:50]
            action_val = action.value if hasattr(action, "value") else str(action)[:50]
            label_val = None
            if label is not None:
                label_val = label.value if hasattr(label, "value") else str(label)[:100]

            with self._conn() as conn:
                conn.execute("""
                    INSERT INTO tracking_events (ts, category, action, label, metadata_json)
                    VALUES (?, ?, ?, ?, ?)
                """, (ts, category_val, action_val, label_val, meta_str))
                conn.commit()
        except Exception as e:
            # Tracking must never break an auth flow
            log.error(f"Tracking failed for {category}/{action}: {e}", exc_info=True)

    def get_events(self, limit: int = 100, action_filter: Optional[str] = None) -> List[Tuple]:
        try:
            with self._conn() as conn:
                query = "SELECT id, ts, category, action, label, metadata_json FROM tracking_events WHERE 1=1"
                params: List[Any] = []
                if action_filter:
                    query += " AND action = ?"
                    params.append(action_filter)
                query += " ORDER BY id DESC LIMIT ?"
                params.append(limit)
                return conn.execute(query, tuple(params)).fetchall()
        except Exception as e:
            log.error(f"Failed to fetch tracking events: {e}", exc_info=True)
            return []
