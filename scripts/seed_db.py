"""Reset demo data: drivers, assistants, one bus, three students and today's scans."""
from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.bus_manifest.bus_manifest.container import build_container
from src.bus_manifest.bus_manifest.database.bootstrap import (
    apply_schema,
    apply_seed_sql,
    ensure_demo_manifests,
    ensure_demo_users,
)


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    ensure_demo_users(db_config)
    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")

    container = build_container(
        db_config=db_config,
        jwt_secret=settings.JWT_SECRET,
        timezone_name=getattr(settings, "TIMEZONE", None),
    )
    created = ensure_demo_manifests(db_config, container.manifest_ledger)
    print(f"OK: seeded demo data ({created} manifests for today)")


if __name__ == "__main__":
    main()
