"""Create the household tables in Postgres.

    python -m kinship.schema --database-url postgresql://...
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

import psycopg

log = logging.getLogger(__name__)

DEFAULT_SCHEMA_SQL = Path(__file__).resolve().parents[1] / "sql" / "schema.sql"

# Reverse dependency order, for --reset.
_TABLES = [
    "named_relationship",
    "union_child",
    "union_partner",
    "family_union",
]


def apply_schema(conn: psycopg.Connection, schema_sql_path: Path = DEFAULT_SCHEMA_SQL, *, reset: bool = False) -> None:
    """Run ``schema.sql``; with ``reset`` the union/edge tables are dropped first.

    ``person`` is never dropped: it belongs to family administration.
    """

    sql = schema_sql_path.read_text(encoding="utf-8")
    with conn.cursor() as cur:
        if reset:
            for t in _TABLES:
                cur.execute(f"DROP TABLE IF EXISTS {t} CASCADE;")
            log.info("Dropped tables: %s", ", ".join(_TABLES))
        cur.execute(sql)
    log.info("Applied schema from %s", schema_sql_path)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the household kinship tables")
    parser.add_argument(
        "--database-url",
        default=os.environ.get("DATABASE_URL") or "",
        help="Postgres URL (or set DATABASE_URL env var)",
    )
    parser.add_argument("--schema-sql", default=str(DEFAULT_SCHEMA_SQL), help="Path to schema.sql")
    parser.add_argument("--reset", action="store_true", help="Drop union and relationship tables first")

    args = parser.parse_args()
    if not args.database_url:
        raise SystemExit("Missing --database-url (or set DATABASE_URL)")

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    with psycopg.connect(args.database_url) as conn:
        apply_schema(conn, Path(args.schema_sql), reset=args.reset)
        conn.commit()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
