from __future__ import annotations

from datetime import timedelta
from typing import Sequence

from ..core.enums import AuditAction, ReferenceKind, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, dump_json, fetchall, fetchone, load_json
from .model import AuditEntry, NewAuditEntry
from .repository import AuditFilter, AuditRepository


def _where(filters: AuditFilter):
    return build_where(
        [
            ("action=%s", filters.action.value if filters.action else None),
            ("resource_kind=%s", filters.resource_kind.value if filters.resource_kind else None),
            ("resource_id=%s", filters.resource_id),
            ("performed_by=%s", filters.performed_by),
            ("created_at>=%s", filters.date_from),
            # date_to is inclusive of the whole day
            ("created_at<%s", (filters.date_to + timedelta(days=1)) if filters.date_to else None),
        ]
    )


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, entry: NewAuditEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(
                    performed_by, performed_role, action, resource_kind, resource_id,
                    description, changes, ip_address
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.performed_by,
                    entry.performed_role.value if entry.performed_role else None,
                    entry.action.value,
                    entry.resource_kind.value,
                    entry.resource_id,
                    entry.description[:255],
                    dump_json(entry.changes),
                    entry.ip_address,
                ),
            )
            return int(cur.lastrowid)

    def search(self, *, filters: AuditFilter, offset: int = 0, limit: int = 50) -> Sequence[AuditEntry]:
        where, params = _where(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT audit_id, performed_by, performed_role, action, resource_kind, resource_id,
                       description, changes, ip_address, created_at
                FROM audit_logs
                WHERE {where}
                ORDER BY created_at DESC, audit_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            out: list[AuditEntry] = []
            for r in fetchall(cur):
                out.append(
                    AuditEntry(
                        audit_id=int(r["audit_id"]),
                        action=AuditAction(r["action"]),
                        resource_kind=ReferenceKind(r["resource_kind"]),
                        description=r["description"],
                        created_at=r["created_at"],
                        resource_id=r.get("resource_id"),
                        performed_by=r.get("performed_by"),
                        performed_role=Role(r["performed_role"]) if r.get("performed_role") else None,
                        changes=load_json(r.get("changes")),
                        ip_address=r.get("ip_address"),
                    )
                )
            return out

    def count(self, *, filters: AuditFilter) -> int:
        where, params = _where(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM audit_logs WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0
