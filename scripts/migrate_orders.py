"""Script to import orders from the legacy JSON snapshot."""
import argparse
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rugtrack.config import settings
from rugtrack.database import SessionLocal, engine, Base
from rugtrack.services.migration import migrate_file


def main():
    """Run the migration and print a summary."""
    parser = argparse.ArgumentParser(description="Import orders from a JSON snapshot")
    parser.add_argument("path", nargs="?", default=settings.MIGRATION_SOURCE, help="Snapshot file")
    args = parser.parse_args()

    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(levelname)s %(message)s")

    if not os.path.exists(args.path):
        print(f"No snapshot found at {args.path}. Skipping migration.")
        return 0

    # Create tables
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        result = migrate_file(db, args.path)
    finally:
        db.close()

    print(f"Migrated: {result.migrated}")
    print(f"Skipped:  {result.skipped}")
    if result.errors:
        print("Errors:")
        for error in result.errors:
            print(f"  {error}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
