import argparse
import logging

from exam_api.database import SessionLocal, init_db
from exam_api.logging_setup import setup_console_logging
from exam_api.models.db.user import UserRole
from exam_api.seed import seed_demo_catalog
from exam_api.services.attempt_service import count_open_attempts, finalize_expired_attempts
from exam_api.services.auth_service import create_user, get_user_by_username

setup_console_logging()
logger = logging.getLogger("cli")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Test series service maintenance")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create all database tables")
    sub.add_parser("seed-demo", help="Insert a demo test series with one mock test")
    sub.add_parser("sweep", help="Finalize attempts whose time is up")

    admin = sub.add_parser("create-admin", help="Create an admin user")
    admin.add_argument("username", type=str)
    admin.add_argument("email", type=str)
    admin.add_argument("password", type=str)
    admin.add_argument("--full-name", type=str, default="Administrator")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    init_db()
    if args.command == "init-db":
        print("Database initialized")
        return

    db = SessionLocal()
    try:
        if args.command == "seed-demo":
            series = seed_demo_catalog(db)
            print(f"Seeded test series {series.id} ({len(series.tests)} tests)")
        elif args.command == "sweep":
            open_before = count_open_attempts(db)
            finalized = finalize_expired_attempts(db)
            print(f"Finalized {finalized} of {open_before} open attempts")
        elif args.command == "create-admin":
            if get_user_by_username(db, args.username):
                logger.error(f"User '{args.username}' already exists")
                raise SystemExit(1)
            user = create_user(
                db,
                args.username,
                args.email,
                args.password,
                full_name=args.full_name,
                role=UserRole.ADMIN,
            )
            print(f"Created admin user {user.id}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
