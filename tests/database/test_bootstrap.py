from __future__ import annotations

from pathlib import Path

import pytest

from src.bus_manifest.bus_manifest.core.enums import ManifestStatus
from src.bus_manifest.bus_manifest.database import bootstrap
from src.bus_manifest.bus_manifest.database.bootstrap import (
    _strip_create_db_and_use,
    ensure_demo_manifests,
    iter_sql_statements,
)

DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"


def test_splitter_keeps_semicolons_inside_quotes():
    sql = "INSERT INTO t VALUES ('a;b');\n-- note; ignored\nSELECT \"x;y\";"

    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", 'SELECT "x;y"']


def test_strip_create_database_and_use():
    sql = "CREATE DATABASE IF NOT EXISTS x;\nUSE x;\nCREATE TABLE t (id INT);"

    assert list(iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (id INT)"]


def test_schema_enforces_one_scan_per_student_status_day():
    statements = list(iter_sql_statements(_strip_create_db_and_use((DATABASE_DIR / "schema.sql").read_text(encoding="utf-8"))))
    manifests = next(s for s in statements if "CREATE TABLE IF NOT EXISTS manifests" in s)

    assert len(statements) == 5
    assert "UNIQUE KEY uq_manifest_student_status_day (student_id, status, scan_day)" in manifests


def test_seed_file_parses():
    statements = list(iter_sql_statements((DATABASE_DIR / "seed.sql").read_text(encoding="utf-8")))

    assert statements[0] == "DELETE FROM manifests"
    assert sum(s.startswith("INSERT INTO students") for s in statements) == 3


class StudentRowsCursor:
    def __init__(self, rows):
        self._rows = rows
        self.executed = []

    def execute(self, sql, params=None):
        self.executed.append(" ".join(sql.split()))

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class StudentRowsConnection:
    def __init__(self, rows):
        self.cursor_obj = StudentRowsCursor(rows)

    def cursor(self, dictionary=False):
        return self.cursor_obj

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


@pytest.fixture
def student_rows(monkeypatch):
    rows = [
        {"student_id": 1, "name": "Emma Student", "bus_id": 7, "assistant_id": 3},
        {"student_id": 2, "name": "Liam Student", "bus_id": 7, "assistant_id": 3},
        {"student_id": 3, "name": "Sophia Student", "bus_id": 7, "assistant_id": 3},
    ]

    class Factory:
        def connect(self):
            return StudentRowsConnection(rows)

    monkeypatch.setattr(bootstrap, "_factory", lambda db_config: Factory())
    return rows


def test_demo_manifests_are_recorded_once_per_day(student_rows, ledger, manifests_repo):
    assert ensure_demo_manifests({}, ledger) == 4
    assert ensure_demo_manifests({}, ledger) == 0

    recorded = sorted((r.student_id, r.status) for r in manifests_repo.records)
    assert recorded == [
        (1, ManifestStatus.CHECKED_IN),
        (1, ManifestStatus.CHECKED_OUT),
        (2, ManifestStatus.CHECKED_IN),
        (3, ManifestStatus.CHECKED_IN),
    ]


def test_demo_student_without_assistant_is_skipped(student_rows, ledger, manifests_repo):
    student_rows[1]["assistant_id"] = None

    assert ensure_demo_manifests({}, ledger) == 3
    assert {r.student_id for r in manifests_repo.records} == {1, 3}
