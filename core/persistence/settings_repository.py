"""Settings repository implementation."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.models import Setting
from .database import Database


_UPSERT = """
    INSERT INTO settings (key, value, category, updated_at)
    VALUES (?, ?, ?, ?)
    ON CONFLICT(key) DO UPDATE SET
        value = excluded.value,
        category = excluded.category,
        updated_at = excluded.updated_at
"""


class SettingsRepository:
    """Key-value access to the settings table."""

    def __init__(self, database: Database):
        self._db = database

    @staticmethod
    def _row_to_setting(row) -> Setting:
        return Setting(
            key=row["key"],
            value=row["value"],
            category=row["category"],
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def get(self, key: str) -> Optional[Setting]:
        conn = self._db.get_connection()
        cursor = conn.execute(
            "SELECT key, value, category, updated_at FROM settings WHERE key = ?",
            (key,),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return self._row_to_setting(row)

    def has(self, key: str) -> bool:
        conn = self._db.get_connection()
        cursor = conn.execute("SELECT 1 FROM settings WHERE key = ?", (key,))
        return cursor.fetchone() is not None

    def set(self, key: str, value: str, category: str) -> Setting:
        conn = self._db.get_connection()
        now = datetime.now()
        conn.execute(_UPSERT, (key, value, category, now.isoformat()))
        conn.commit()
        return Setting(key=key, value=value, category=category, updated_at=now)

    def set_many(self, values: dict[str, str], category: str) -> None:
        """Write several keys in one transaction; all or none are stored."""
        conn = self._db.get_connection()
        now = datetime.now().isoformat()
        with conn:
            conn.executemany(
                _UPSERT,
                [(key, value, category, now) for key, value in values.items()],
            )

    def get_value(self, key: str, default: str = "") -> str:
        setting = self.get(key)
        return setting.value if setting else default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get_value(key, str(default))
        try:
            return int(value)
        except (TypeError, ValueError):
            return default
