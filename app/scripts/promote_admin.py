"""
Grant (or with --revoke, remove) admin rights for an account, by email.
Usage: python -m app.scripts.promote_admin user@example.com [--revoke]
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from app.database import ensure_tables_exist, session_scope
from app.repos.profile_repo import get_by_user_id as get_profile_by_user_id
from app.repos.user_repo import get_by_email, update


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Grant or revoke CampusConnect admin rights.")
    parser.add_argument("email")
    parser.add_argument("--revoke", action="store_true", help="remove admin rights instead of granting them")
    args = parser.parse_args(argv)

    email = args.email.strip().lower()
    make_admin = not args.revoke
    ensure_tables_exist()
    with session_scope() as db:
        user = get_by_email(db, email)
        if not user:
            print(f"User not found: {email}")
            return 1
        if bool(user.is_admin) == make_admin:
            print(f"{email} is already {'an admin' if make_admin else 'not an admin'}.")
            return 0
        update(db, user.id, is_admin=make_admin)
        profile = get_profile_by_user_id(db, user.id)
        who = f"{profile.full_name} ({profile.role})" if profile else "no profile yet"
        print(f"{'Promoted' if make_admin else 'Revoked admin for'} {email}: {who}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
