from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_USERS = (
    # (code, name, email, password, role, department, biometric_id, created_by_email)
    ("EMP0001", "Super Admin", "admin@org.local", "admin123", "superAdmin", "Management", None, None),
    ("EMP0002", "Attendance Desk", "attendance@org.local", "attend123", "attendanceDepartment", "HR", "2", "admin@org.local"),
    ("EMP0003", "Demo Employee", "employee@org.local", "employee123", "employee", "Engineering", "3", "attendance@org.local"),
)


def _connect(db_config: dict, *, with_database: bool = True):
    target = DBConfig.from_dict(db_config)
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_database_statements(sql: str) -> str:
    # The target database comes from config, not from the file.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    return re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)


def _split_statements(sql: str) -> Iterable[str]:
    # Splits on ';' outside of quoted literals; "--" comment lines are dropped.
    sql = "\n".join(line for line in sql.splitlines() if not line.lstrip().startswith("--"))
    buf: list[str] = []
    quote: Optional[str] = None
    escaped = False

    for ch in sql:
        buf.append(ch)
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_file(db_config: dict, path: str | Path) -> int:
    sql = _strip_database_statements(Path(path).read_text(encoding="utf-8"))
    conn = _connect(db_config)
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _split_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    name = DBConfig.from_dict(db_config).database
    conn = _connect(db_config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_file(db_config, schema_path)
    logger.info("Applied %d schema statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_file(db_config, seed_path)
    logger.info("Applied %d seed statements from %s", count, seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Insert or refresh the demo accounts (one per role) with hashed passwords."""
    conn = _connect(db_config)
    try:
        cur = conn.cursor(dictionary=True)
        for code, name, email, password, role, department, biometric_id, creator_email in DEMO_USERS:
            created_by = None
            if creator_email:
                cur.execute("SELECT employee_id FROM employees WHERE email=%s", (creator_email,))
                row = cur.fetchone()
                created_by = int(row["employee_id"]) if row else None

            password_hash = generate_password_hash(password)
            cur.execute(
                """
                INSERT INTO employees
                    (employee_code, name, email, password_hash, role, department, biometric_id, created_by)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name), password_hash=VALUES(password_hash), role=VALUES(role),
                    department=VALUES(department), biometric_id=VALUES(biometric_id),
                    created_by=VALUES(created_by), is_active=1
                """,
                (code, name, email, password_hash, role, department, biometric_id, created_by),
            )
        conn.commit()
        logger.info("Demo users ensured (%d accounts)", len(DEMO_USERS))
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(db_config)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
