#!/usr/bin/env python3
"""Database initialization script.

Creates the classification and keyword tables. It can be run standalone or
as part of the setup process.
"""

import sys

from sqlalchemy import inspect

from payee_core.config import get_config
from payee_core.database.schema import init_database

EXPECTED_TABLES = ["payee_classifications", "exclusion_keywords"]


def main():
    """Initialize database and verify setup."""
    print("=" * 50)
    print("Database Initialization")
    print("=" * 50)

    try:
        db_path = get_config().database_path
        print(f"Database path: {db_path}")

        engine = init_database(db_path, echo=False)
        print("Database schema initialized")

        tables = inspect(engine).get_table_names()
        print(f"Found {len(tables)} table(s):")
        for table in sorted(tables):
            marker = "ok" if table in EXPECTED_TABLES else "??"
            print(f"  [{marker}] {table}")

        missing_tables = [t for t in EXPECTED_TABLES if t not in tables]
        if missing_tables:
            print(f"Warning: expected tables are missing: {missing_tables}")
            return 1

        print("Database initialization completed successfully")
        return 0

    except Exception as e:
        print(f"Error initializing database: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
