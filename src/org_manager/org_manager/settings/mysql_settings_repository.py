from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import Setting
from .repository import SettingsRepository


def _row_to_setting(r: dict) -> Setting:
    return Setting(
        key=r["setting_key"],
        value=load_json(r.get("value")),
        description=r.get("description") or "",
        updated_by=r.get("updated_by"),
        updated_at=r.get("updated_at"),
    )


class MySQLSettingsRepository(SettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[Setting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT setting_key, value, description, updated_by, updated_at FROM settings WHERE setting_key=%s",
                (key,),
            )
            r = fetchone(cur)
            return _row_to_setting(r) if r else None

    def list_all(self) -> Sequence[Setting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT setting_key, value, description, updated_by, updated_at FROM settings ORDER BY setting_key"
            )
            return [_row_to_setting(r) for r in fetchall(cur)]

    def upsert_many(
        self,
        values: Mapping[str, Any],
        *,
        descriptions: Mapping[str, str],
        updated_by: int,
        updated_at: datetime,
    ) -> int:
        if not values:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO settings(setting_key, value, description, updated_by, updated_at)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    value=VALUES(value),
                    description=VALUES(description),
                    updated_by=VALUES(updated_by),
                    updated_at=VALUES(updated_at)
                """,
                [
                    (key, dump_json(value), descriptions.get(key, ""), int(updated_by), updated_at)
                    for key, value in values.items()
                ],
            )
            return len(values)
