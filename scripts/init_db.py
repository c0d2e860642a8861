from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "camp_watch"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from dotenv import load_dotenv

from config import get_settings_module

from camp_watch.database.bootstrap import apply_schema, list_tables
from camp_watch.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_dict(dict(settings.DB_CONFIG)))
    try:
        apply_schema(conn)
        tables = list_tables(conn)
    finally:
        conn.close()
    print(f"OK: schema applied -> {conn.config.describe()} (tables={len(tables)})")


if __name__ == "__main__":
    main()
