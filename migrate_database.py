#!/usr/bin/env python3
"""
Migration script for the games table.
Creates the table if it is missing and adds the nullable ``note`` and
``beaten_on`` columns to tables created before they existed.
"""

import argparse
import sys
import os

# Add the parent directory to the path so we can import database module
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import database
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

# Column name -> DDL type for columns added after the first release.
NULLABLE_COLUMNS = {
    'note': 'TEXT',
    'beaten_on': 'DATE',
}


def games_table_exists():
    """Check if the games table exists."""
    return inspect(database.engine).has_table('games')


def missing_columns():
    """Return the nullable columns the games table does not have yet."""
    columns = {col['name'] for col in inspect(database.engine).get_columns('games')}
    return [name for name in NULLABLE_COLUMNS if name not in columns]


def ensure_games_table():
    """Create the games table if it doesn't exist."""
    if games_table_exists():
        print("✓ Games table already exists")
        return True
    print("Creating games table...")
    if not database.init_db():
        print("✗ Error creating games table")
        return False
    print("✓ Successfully created games table")
    return True


def add_missing_columns():
    """Add any missing nullable columns to the games table."""
    try:
        missing = missing_columns()
        if not missing:
            print("✓ Note and beaten_on columns already exist in games table")
            return True

        with database.engine.begin() as conn:
            for name in missing:
                print(f"Adding {name} column to games table...")
                conn.execute(text(
                    f"ALTER TABLE games ADD COLUMN {name} {NULLABLE_COLUMNS[name]}"
                ))

        print(f"✓ Successfully added {', '.join(missing)} to games table")
        return True

    except SQLAlchemyError as e:
        print(f"✗ Error adding columns: {e}")
        return False


def main(argv=None):
    parser = argparse.ArgumentParser(description='Beaten Games database migration')
    parser.add_argument('--database-url', default=None,
                        help='SQLAlchemy URL (default: DATABASE_URL or sqlite:///beaten_games.db)')
    args = parser.parse_args(argv)

    print("=" * 60)
    print("Beaten Games Database Migration")
    print("=" * 60)
    print()

    try:
        database.configure(args.database_url)
    except SQLAlchemyError as e:
        print("✗ Error: Cannot create database engine")
        print(f"  {e}")
        return 1

    print(f"Database URL: {database.engine.url.render_as_string(hide_password=True)}")
    print()

    if not ensure_games_table():
        return 1
    if not add_missing_columns():
        return 1

    print()
    print("=" * 60)
    print("Migration Complete!")
    print("=" * 60)
    print()

    return 0


if __name__ == '__main__':
    sys.exit(main())
