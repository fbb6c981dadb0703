"""Script to delete every order and rug. Use with caution."""
import argparse
import logging
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from rugtrack.config import settings
from rugtrack.database import SessionLocal, engine, Base
from rugtrack.services.store import purge


def clear_db(assume_yes=False):
    """Purge all orders after confirmation."""
    if not assume_yes:
        answer = input(f"Delete ALL orders from {settings.DATABASE_URL}? [y/N] ")
        if answer.strip().lower() != "y":
            print("Aborted.")
            return

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        counts = purge(db)
        print(f"Deleted {counts['items_deleted']} items.")
        print(f"Deleted {counts['orders_deleted']} orders.")
        print("Database cleared successfully.")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Delete every order and rug")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    args = parser.parse_args()
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(levelname)s %(message)s")
    clear_db(assume_yes=args.yes)
