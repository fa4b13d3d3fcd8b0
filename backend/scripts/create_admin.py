import argparse
import getpass
import logging

import sqlalchemy as sa

from app.core.logging import configure_logging
from app.core.security import hash_password
from app.db.session import SessionLocal
from app.models.user import User

logger = logging.getLogger("scripts.create_admin")


def main():
    parser = argparse.ArgumentParser(description="Create an admin user or reset its password.")
    parser.add_argument("username")
    parser.add_argument("--password", help="read from the terminal when omitted")
    args = parser.parse_args()

    configure_logging()
    password = args.password or getpass.getpass("Password: ")
    if not password:
        raise SystemExit("password cannot be empty")

    db = SessionLocal()
    try:
        user = db.execute(sa.select(User).where(User.username == args.username)).scalar_one_or_none()
        if user is None:
            user = User(username=args.username, password_hash=hash_password(password), status="active")
            db.add(user)
            action = "created"
        else:
            user.password_hash = hash_password(password)
            user.status = "active"
            action = "password reset"
        db.commit()
        logger.info("ok: admin %s %s (id=%s)", args.username, action, user.id)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
