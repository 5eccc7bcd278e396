"""
Create any missing CampusConnect tables; existing tables and data are untouched.
Usage: python -m app.scripts.ensure_tables
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from app.database import ensure_tables_exist
from app.logging_config import setup_logging


def main() -> int:
    setup_logging()
    created = ensure_tables_exist()
    if created:
        print(f"Created {len(created)} table(s): {', '.join(created)}")
    else:
        print("Schema is up to date; no tables created.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
