import logging

from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.services.players import update_ranks

logger = logging.getLogger("scripts.update_ranks")


def main():
    configure_logging()
    db = SessionLocal()
    try:
        ranked = update_ranks(db)
        logger.info("ok: ranks recomputed (active=%d)", ranked)
    finally:
        db.close()


if __name__ == "__main__":
    main()
