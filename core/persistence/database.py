"""SQLite database manager for persisted settings."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Optional, Union

from core.config import get_data_dir


class Database:
    """Database manager for the settings store."""

    SCHEMA = """
    -- Settings
    CREATE TABLE IF NOT EXISTS settings (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        category TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    CREATE INDEX IF NOT EXISTS idx_settings_category ON settings(category);
    """

    # Bumped when SCHEMA or the stored key layout changes
    SCHEMA_VERSION = 1

    def __init__(self, db_path: Optional[Union[Path, str]] = None):
        if db_path is None:
            db_path = get_data_dir() / "settings.db"
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._local = threading.local()
        self._init_schema()

    def _init_schema(self) -> None:
        conn = self.get_connection()
        conn.executescript(self.SCHEMA)
        self._apply_migrations(conn)
        conn.commit()

    def _apply_migrations(self, conn: sqlite3.Connection) -> None:
        version = conn.execute("PRAGMA user_version").fetchone()[0]
        if version > self.SCHEMA_VERSION:
            raise sqlite3.DatabaseError(
                f"Settings database {self.db_path} has schema version {version}, "
                f"newer than supported version {self.SCHEMA_VERSION}"
            )
        if version < self.SCHEMA_VERSION:
            conn.execute(f"PRAGMA user_version = {int(self.SCHEMA_VERSION)}")

    def get_connection(self) -> sqlite3.Connection:
        """Get or create a database connection for the current thread."""
        if not hasattr(self._local, "connection") or self._local.connection is None:
            self._local.connection = sqlite3.connect(str(self.db_path))
            self._local.connection.row_factory = sqlite3.Row
            self._local.connection.execute("PRAGMA journal_mode=WAL")
        return self._local.connection

    def close(self) -> None:
        """Close the database connection for the current thread."""
        if hasattr(self._local, "connection") and self._local.connection is not None:
            self._local.connection.close()
            self._local.connection = None
