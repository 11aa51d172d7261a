from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..core.enums import Role
from ..core.exceptions import DuplicateManifestError
from .connection import DatabaseConnection, DBConfig
from .mysql_base import db_cursor, fetchall

logger = logging.getLogger(__name__)

# (name, email, password, role) mirrored by the demo bus/students in seed.sql
DEMO_USERS = (
    ("John Driver", "john.driver@example.com", "driver123", Role.DRIVER),
    ("Mike Driver", "mike.driver@example.com", "driver123", Role.DRIVER),
    ("Alice Assistant", "alice.assistant@example.com", "assistant123", Role.ASSISTANT),
    ("Bob Assistant", "bob.assistant@example.com", "assistant123", Role.ASSISTANT),
)

# (student name, status, latitude, longitude)
DEMO_SCANS = (
    ("Emma Student", "CHECKED_IN", -1.2921, 36.8219),
    ("Emma Student", "CHECKED_OUT", -1.2922, 36.8220),
    ("Liam Student", "CHECKED_IN", -1.3000, 36.8200),
    ("Sophia Student", "CHECKED_IN", -1.3100, 36.8300),
)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in _strip_comments(sql):
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> int:
    count = 0
    for stmt in iter_sql_statements(sql):
        cur.execute(stmt)
        count += 1
    return count


def _factory(db_config: dict) -> DatabaseConnection:
    # Bootstrap runs before (or outside) the app container; never reuse its singleton.
    return DatabaseConnection(DBConfig.from_dict(db_config))


def ensure_database_exists(db_config: dict) -> None:
    factory = _factory(db_config)
    conn = factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))
    with db_cursor(_factory(db_config), dictionary=False) as (_, cur):
        count = _exec_sql(cur, sql)
    logger.info("applied schema %s (%d statements)", schema_path, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    sql = _strip_create_db_and_use(Path(seed_path).read_text(encoding="utf-8"))
    with db_cursor(_factory(db_config), dictionary=False) as (_, cur):
        count = _exec_sql(cur, sql)
    logger.info("applied seed %s (%d statements)", seed_path, count)


def ensure_demo_users(db_config: dict) -> None:
    with db_cursor(_factory(db_config)) as (_, cur):
        for name, email, password, role in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    "UPDATE users SET name=%s, password_hash=%s, role=%s WHERE email=%s",
                    (name, password_hash, role.value, email),
                )
            else:
                cur.execute(
                    "INSERT INTO users (name, email, password_hash, role) VALUES (%s, %s, %s, %s)",
                    (name, email, password_hash, role.value),
                )


def ensure_demo_manifests(db_config: dict, ledger) -> int:
    """Record the demo scans for today through the ledger.

    Scans that already exist for today are skipped, so this is safe to rerun.
    Returns the number of new records.
    """
    with db_cursor(_factory(db_config)) as (_, cur):
        cur.execute(
            """
            SELECT s.student_id, s.name, s.bus_id, b.assistant_id
            FROM students s
            JOIN buses b ON b.bus_id = s.bus_id
            """
        )
        students = {r["name"]: r for r in fetchall(cur)}

    created = 0
    for student_name, status, latitude, longitude in DEMO_SCANS:
        row = students.get(student_name)
        if not row or row.get("assistant_id") is None:
            logger.warning("demo student %s has no bus assistant; skipped", student_name)
            continue
        record = ledger.record_check_in if status == "CHECKED_IN" else ledger.record_check_out
        try:
            record(
                student_id=int(row["student_id"]),
                bus_id=int(row["bus_id"]),
                assistant_id=int(row["assistant_id"]),
                latitude=latitude,
                longitude=longitude,
            )
            created += 1
        except DuplicateManifestError:
            continue
    return created


def list_tables(db_config: dict) -> list[str]:
    with db_cursor(_factory(db_config), dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
