"""
Insert the default FREE / PRO / BUSINESS billing plans when missing.
Stripe price ids are attached later from the Stripe dashboard.
Usage: python -m app.scripts.seed_plans
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from app.database import ensure_tables_exist, session_scope
from app.repos.billing_repo import seed_default_plans


def main():
    ensure_tables_exist()
    with session_scope() as db:
        created = seed_default_plans(db)
        if created:
            print(f"Created {len(created)} plan(s): {', '.join(p.name for p in created)}")
        else:
            print("Default plans already exist.")


if __name__ == "__main__":
    main()
