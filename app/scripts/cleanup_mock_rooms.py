"""
Delete accepted call requests whose room id is a locally generated mock room,
so the participants can request a fresh call with a real 100ms room.

Usage: python -m app.scripts.cleanup_mock_rooms [--dry-run]
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from app.database import session_scope
from app.repos.call_request_repo import delete_many, list_accepted_with_room
from app.services.hms_service import is_mock_room_id


def find_mock_room_requests(db) -> list:
    return [cr for cr in list_accepted_with_room(db) if is_mock_room_id(cr.room_id)]


def _describe(cr) -> str:
    job_title = cr.job.title if getattr(cr, "job", None) is not None else cr.job_id
    requester = cr.requester.full_name if getattr(cr, "requester", None) is not None else cr.requester_id
    receiver = cr.receiver.full_name if getattr(cr, "receiver", None) is not None else cr.receiver_id
    return f'Job "{job_title}" | {requester} -> {receiver} | room {cr.room_id}'


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Remove call requests that point at mock video rooms.")
    parser.add_argument("--dry-run", action="store_true", help="List matching call requests without deleting")
    args = parser.parse_args(argv)

    with session_scope() as db:
        mock_requests = find_mock_room_requests(db)
        if not mock_requests:
            print("No mock room ids found. All accepted calls use real rooms.")
            return 0
        print(f"Found {len(mock_requests)} call request(s) with mock room ids:")
        for i, cr in enumerate(mock_requests, start=1):
            print(f"{i}. {_describe(cr)}")
        if args.dry_run:
            print("Dry run: nothing deleted.")
            return 0
        deleted = delete_many(db, mock_requests)
        print(f"Deleted {deleted} call request(s).")
        return 0


if __name__ == "__main__":
    sys.exit(main())
