from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import TodoStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Todo
from .repository import TodoRepository

_COLUMNS = "todo_id, employee_id, description, status, completed_at, created_at, updated_at"


def _row_to_todo(r: dict) -> Todo:
    return Todo(
        todo_id=int(r["todo_id"]),
        employee_id=int(r["employee_id"]),
        description=r["description"],
        status=TodoStatus(r["status"]),
        completed_at=r.get("completed_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLTodoRepository(TodoRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_owned(self, todo_id: int, *, employee_id: int) -> Optional[Todo]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM todos WHERE todo_id=%s AND employee_id=%s",
                (int(todo_id), int(employee_id)),
            )
            r = fetchone(cur)
            return _row_to_todo(r) if r else None

    def list_for(self, employee_id: int, *, search: Optional[str] = None) -> Sequence[Todo]:
        sql = f"SELECT {_COLUMNS} FROM todos WHERE employee_id=%s"
        params: list = [int(employee_id)]
        if search:
            sql += " AND description LIKE %s"
            params.append(f"%{search}%")
        sql += " ORDER BY created_at DESC, todo_id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_todo(r) for r in fetchall(cur)]

    def create(self, *, employee_id: int, description: str, created_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO todos(employee_id, description, status, created_at, updated_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(employee_id), description, TodoStatus.PENDING.value, created_at, created_at),
            )
            return int(cur.lastrowid)

    def update(
        self,
        todo_id: int,
        *,
        employee_id: int,
        description: str,
        status: TodoStatus,
        completed_at: Optional[datetime],
        updated_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE todos
                SET description=%s, status=%s, completed_at=%s, updated_at=%s
                WHERE todo_id=%s AND employee_id=%s
                """,
                (description, status.value, completed_at, updated_at, int(todo_id), int(employee_id)),
            )
            return cur.rowcount > 0

    def delete(self, todo_id: int, *, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM todos WHERE todo_id=%s AND employee_id=%s", (int(todo_id), int(employee_id)))
            return cur.rowcount > 0
