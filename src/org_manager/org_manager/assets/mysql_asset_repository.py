from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..core.enums import AssetCategory, AssetCondition, AssetStatus, AssignmentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import Asset, AssetAssignment, AssetDraft, AssetWrite, AssignmentClosing, NewAssignment
from .repository import AssetRepository
from .status import format_asset_code

logger = logging.getLogger(__name__)

_ASSET_COLUMNS = """
    asset_id, asset_code, name, category, brand, model, serial_number, specifications,
    purchase_date, purchase_price, vendor, warranty_expiry, status, `condition`,
    quantity, quantity_assigned, location, notes, is_active, version,
    created_by, modified_by, created_at, updated_at
"""

_ASSIGNMENT_COLUMNS = """
    assignment_id, asset_id, employee_id, room, quantity, assigned_date, assigned_by,
    condition_at_assignment, notes, status, return_date, returned_by,
    condition_at_return, return_notes
"""

# Columns a direct edit may touch (the ledger owns quantity_assigned).
_UPDATABLE = {
    "name", "category", "brand", "model", "serial_number", "specifications",
    "purchase_date", "purchase_price", "vendor", "warranty_expiry", "status",
    "condition", "quantity", "location", "notes",
}


def _row_to_asset(r: dict) -> Asset:
    return Asset(
        asset_id=int(r["asset_id"]),
        asset_code=r.get("asset_code") or format_asset_code(int(r["asset_id"])),
        name=r["name"],
        category=AssetCategory(r["category"]),
        status=AssetStatus(r["status"]),
        condition=AssetCondition(r["condition"]),
        quantity=int(r["quantity"]),
        quantity_assigned=int(r["quantity_assigned"]),
        created_by=int(r["created_by"]),
        brand=r.get("brand"),
        model=r.get("model"),
        serial_number=r.get("serial_number"),
        specifications=r.get("specifications"),
        purchase_date=r.get("purchase_date"),
        purchase_price=r.get("purchase_price"),
        vendor=r.get("vendor"),
        warranty_expiry=r.get("warranty_expiry"),
        location=r.get("location"),
        notes=r.get("notes"),
        is_active=bool(r.get("is_active", True)),
        version=int(r.get("version") or 0),
        modified_by=r.get("modified_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _row_to_assignment(r: dict) -> AssetAssignment:
    return AssetAssignment(
        assignment_id=int(r["assignment_id"]),
        asset_id=int(r["asset_id"]),
        quantity=int(r["quantity"]),
        assigned_date=r["assigned_date"],
        assigned_by=int(r["assigned_by"]),
        condition_at_assignment=AssetCondition(r["condition_at_assignment"]),
        status=AssignmentStatus(r["status"]),
        employee_id=r.get("employee_id"),
        room=r.get("room"),
        notes=r.get("notes"),
        return_date=r.get("return_date"),
        returned_by=r.get("returned_by"),
        condition_at_return=AssetCondition(r["condition_at_return"]) if r.get("condition_at_return") else None,
        return_notes=r.get("return_notes"),
    )


def _column_value(value):
    return value.value if hasattr(value, "value") else value


class MySQLAssetRepository(AssetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Asset records --------
    def get(self, asset_id: int) -> Optional[Asset]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ASSET_COLUMNS} FROM assets WHERE asset_id=%s", (int(asset_id),))
            r = fetchone(cur)
            return _row_to_asset(r) if r else None

    def list_assets(
        self,
        *,
        status: Optional[AssetStatus] = None,
        category: Optional[AssetCategory] = None,
        search: Optional[str] = None,
        limit: Optional[int] = 500,
    ) -> Sequence[Asset]:
        like = f"%{search.strip()}%" if search and search.strip() else None
        where, params = build_where(
            [
                ("status=%s", status.value if status else None),
                ("category=%s", category.value if category else None),
                ("(asset_code LIKE %s OR name LIKE %s)", like),
            ]
        )
        if like is not None:
            params.append(like)
        limit_sql = ""
        if limit is not None:
            limit_sql = " LIMIT %s"
            params.append(int(limit))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ASSET_COLUMNS}
                FROM assets
                WHERE is_active=1 AND {where}
                ORDER BY created_at DESC, asset_id DESC{limit_sql}
                """,
                tuple(params),
            )
            return [_row_to_asset(r) for r in fetchall(cur)]

    @staticmethod
    def _insert(cur, draft: AssetDraft, created_by: int) -> int:
        cur.execute(
            """
            INSERT INTO assets(
                name, category, brand, model, serial_number, specifications,
                purchase_date, purchase_price, vendor, warranty_expiry,
                status, `condition`, quantity, quantity_assigned, location, notes, created_by
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0,%s,%s,%s)
            """,
            (
                draft.name,
                draft.category.value,
                draft.brand,
                draft.model,
                draft.serial_number,
                draft.specifications,
                draft.purchase_date,
                draft.purchase_price,
                draft.vendor,
                draft.warranty_expiry,
                draft.status.value,
                draft.condition.value,
                int(draft.quantity),
                draft.location,
                draft.notes,
                int(created_by),
            ),
        )
        asset_id = int(cur.lastrowid)
        cur.execute("UPDATE assets SET asset_code=%s WHERE asset_id=%s", (format_asset_code(asset_id), asset_id))
        return asset_id

    def create(self, draft: AssetDraft, *, created_by: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._insert(cur, draft, created_by)

    def create_many(self, drafts: Sequence[AssetDraft], *, created_by: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            return [self._insert(cur, d, created_by) for d in drafts]

    def update(self, asset_id: int, *, changes: dict, expected_version: int, modified_by: int) -> bool:
        unknown = set(changes) - _UPDATABLE
        if unknown:
            raise ValueError(f"Not updatable: {sorted(unknown)}")
        sets = [f"`{col}`=%s" for col in changes]
        params = [_column_value(v) for v in changes.values()]
        sets += ["modified_by=%s", "version=version+1"]
        params += [int(modified_by), int(asset_id), int(expected_version)]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE assets SET {', '.join(sets)} WHERE asset_id=%s AND version=%s AND is_active=1",
                tuple(params),
            )
            return cur.rowcount > 0

    def soft_delete(self, asset_id: int, *, modified_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE assets SET is_active=0, modified_by=%s, version=version+1 WHERE asset_id=%s AND is_active=1",
                (int(modified_by), int(asset_id)),
            )
            return cur.rowcount > 0

    # -------- Assignment ledger --------
    def get_assignment(self, assignment_id: int) -> Optional[AssetAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ASSIGNMENT_COLUMNS} FROM asset_assignments WHERE assignment_id=%s",
                (int(assignment_id),),
            )
            r = fetchone(cur)
            return _row_to_assignment(r) if r else None

    @staticmethod
    def _apply_write(cur, write: AssetWrite) -> bool:
        cur.execute(
            """
            UPDATE assets
            SET quantity_assigned=%s, status=%s, `condition`=%s, modified_by=%s, version=version+1
            WHERE asset_id=%s AND version=%s
            """,
            (
                int(write.quantity_assigned),
                write.status.value,
                write.condition.value,
                int(write.modified_by),
                int(write.asset_id),
                int(write.expected_version),
            ),
        )
        return cur.rowcount > 0

    def assign(self, write: AssetWrite, assignment: NewAssignment) -> Optional[int]:
        with db_cursor(self._conn_factory) as (conn, cur):
            if not self._apply_write(cur, write):
                conn.rollback()
                logger.debug("Asset %s version %s is stale", write.asset_id, write.expected_version)
                return None
            cur.execute(
                """
                INSERT INTO asset_assignments(
                    asset_id, employee_id, room, quantity, assigned_date, assigned_by,
                    condition_at_assignment, notes, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(assignment.asset_id),
                    assignment.employee_id,
                    assignment.room,
                    int(assignment.quantity),
                    assignment.assigned_date,
                    int(assignment.assigned_by),
                    assignment.condition_at_assignment.value,
                    assignment.notes,
                    AssignmentStatus.ACTIVE.value,
                ),
            )
            return int(cur.lastrowid)

    def close_assignment(self, write: AssetWrite, *, assignment_id: int, closing: AssignmentClosing) -> bool:
        with db_cursor(self._conn_factory) as (conn, cur):
            cur.execute(
                """
                UPDATE asset_assignments
                SET status=%s, return_date=%s, returned_by=%s, condition_at_return=%s, return_notes=%s
                WHERE assignment_id=%s AND status=%s
                """,
                (
                    closing.status.value,
                    closing.return_date,
                    int(closing.returned_by),
                    closing.condition_at_return.value,
                    closing.return_notes,
                    int(assignment_id),
                    AssignmentStatus.ACTIVE.value,
                ),
            )
            if cur.rowcount == 0 or not self._apply_write(cur, write):
                conn.rollback()
                return False
            return True

    def list_history(self, asset_id: int) -> Sequence[AssetAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ASSIGNMENT_COLUMNS}
                FROM asset_assignments
                WHERE asset_id=%s
                ORDER BY assigned_date DESC, assignment_id DESC
                """,
                (int(asset_id),),
            )
            return [_row_to_assignment(r) for r in fetchall(cur)]

    def list_active_assignments(self, *, employee_id: Optional[int] = None) -> Sequence[AssetAssignment]:
        where, params = build_where([("employee_id=%s", employee_id)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ASSIGNMENT_COLUMNS}
                FROM asset_assignments
                WHERE status=%s AND {where}
                ORDER BY assigned_date DESC, assignment_id DESC
                """,
                tuple([AssignmentStatus.ACTIVE.value] + params),
            )
            return [_row_to_assignment(r) for r in fetchall(cur)]
