"""
Promote a user to admin by username. Use it to bootstrap the first admin,
since the HTTP promotion route itself requires one.
Usage: python -m jobboard.scripts.promote_admin <username>
"""
import sys

from jobboard.core.exceptions import NotFoundOrAlreadyAdminError
from jobboard.database import SessionLocal, ensure_tables_exist
from jobboard.repos.user_repo import get_by_username, promote_to_admin


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Usage: python -m jobboard.scripts.promote_admin <username>")
        return 1
    username = argv[0].strip()
    ensure_tables_exist()
    db = SessionLocal()
    try:
        user = get_by_username(db, username)
        if not user:
            print(f"User not found: {username}")
            return 1
        try:
            promote_to_admin(db, user.id)
        except NotFoundOrAlreadyAdminError:
            print(f"{username} is already an admin.")
            return 0
        print(f"Promoted {username} to admin.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
