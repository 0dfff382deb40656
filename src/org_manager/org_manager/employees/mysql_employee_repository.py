from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, employee_code, name, email, password_hash, role,
    department, biometric_id, is_active, created_by, created_at
"""


def _row_to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        employee_code=row["employee_code"],
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        department=row.get("department"),
        biometric_id=row.get("biometric_id"),
        is_active=bool(row.get("is_active", True)),
        created_by=row.get("created_by"),
        created_at=row.get("created_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE {where}", params)
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self._get_one("employee_id=%s", (int(employee_id),))

    def get_by_email(self, email: str) -> Optional[Employee]:
        return self._get_one("email=%s", (email.strip().lower(),))

    def get_by_biometric_id(self, biometric_id: str) -> Optional[Employee]:
        return self._get_one("biometric_id=%s AND is_active=1", (str(biometric_id).strip(),))

    def get_many(self, employee_ids: Iterable[int]) -> Mapping[int, Employee]:
        ids = sorted({int(i) for i in employee_ids})
        if not ids:
            return {}
        placeholders = ", ".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id IN ({placeholders})", tuple(ids))
            return {int(r["employee_id"]): _row_to_employee(r) for r in fetchall(cur)}

    def list_ids_by_role(self, role: Role) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_id FROM employees WHERE role=%s AND is_active=1", (role.value,))
            return [int(r["employee_id"]) for r in fetchall(cur)]

    def list_ids_created_by(self, creator_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT employee_id FROM employees WHERE created_by=%s", (int(creator_id),))
            return [int(r["employee_id"]) for r in fetchall(cur)]

    def list_employees(
        self,
        *,
        role: Optional[Role] = None,
        created_by: Optional[int] = None,
        search: Optional[str] = None,
        limit: int = 500,
    ) -> Sequence[Employee]:
        like = f"%{search.strip()}%" if search and search.strip() else None
        where, params = build_where(
            [
                ("role=%s", role.value if role else None),
                ("created_by=%s", created_by),
                ("(name LIKE %s OR email LIKE %s OR employee_code LIKE %s)", like),
            ]
        )
        # the search clause has three placeholders for one value
        if like is not None:
            params.extend([like, like])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE {where} ORDER BY name LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_row_to_employee(r) for r in fetchall(cur)]

    def count_active(self, *, exclude_role: Optional[Role] = None) -> int:
        where, params = build_where([("role<>%s", exclude_role.value if exclude_role else None)])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM employees WHERE is_active=1 AND {where}", tuple(params))
            row = fetchone(cur)
            return int(row["total"]) if row else 0

    def create(
        self,
        *,
        employee_code: str,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: Optional[str],
        biometric_id: Optional[str],
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(employee_code, name, email, password_hash, role, department, biometric_id, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (employee_code, name, email, password_hash, role.value, department, biometric_id, created_by),
            )
            return int(cur.lastrowid)
