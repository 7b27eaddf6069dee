#!/usr/bin/env python3
"""Quick script to check if the pairing tables exist in the database"""

import sys
from typing import List, Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

REQUIRED_TABLES = ["seed_designation", "pair_history", "pair"]


def missing_tables(engine: Engine) -> List[str]:
    existing = set(inspect(engine).get_table_names())
    return [table for table in REQUIRED_TABLES if table not in existing]


def check_tables(engine: Optional[Engine] = None) -> bool:
    """Check if required pairing tables exist"""
    if engine is None:
        from arena_pairing.database import engine

    print("Checking for required pairing tables...")
    print(f"Database: {engine.url}")
    print()

    missing = missing_tables(engine)
    for table in REQUIRED_TABLES:
        if table in missing:
            print(f"✗ {table} MISSING")
        else:
            print(f"✓ {table} exists")

    print()
    if missing:
        print("ERROR: Missing tables detected!")
        print("Run migrations with: alembic upgrade head")
        return False
    print("All required tables exist!")
    return True


if __name__ == "__main__":
    try:
        success = check_tables()
        sys.exit(0 if success else 1)
    except Exception as e:
        print(f"Error checking tables: {e}")
        import traceback

        traceback.print_exc()
        sys.exit(1)
