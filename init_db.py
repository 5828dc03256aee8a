"""Create the forum tables and, when configured, the bootstrap admin."""

from loguru import logger

from models.config import settings
from models.exceptions import DomainException
from repositories.database import Base, SessionLocal, engine
from repositories import db_models  # noqa: F401
from scripts.create_admin import create_admin
from services import search  # noqa: F401  (question search index DDL events)


def init_db() -> bool:
    """
    Create tables, then the admin from ``ADMIN_EMAIL``/``ADMIN_PASSWORD``.

    Returns:
        True when initialization completed without errors.
    """
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set; skipping admin bootstrap")
        return True

    db = SessionLocal()
    try:
        _, created = create_admin(
            db, settings.ADMIN_EMAIL.strip().lower(), "admin", settings.ADMIN_PASSWORD
        )
        if created:
            logger.info(f"Admin user created: {settings.ADMIN_EMAIL}")
            logger.warning("Change the bootstrap admin password in production!")
        return True
    except DomainException as e:
        logger.error(f"Error initializing database: {e.message}")
        db.rollback()
        return False
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
