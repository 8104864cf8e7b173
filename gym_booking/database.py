"""
Local SQLite store for client settings (the saved endpoint URL).

The booking data itself lives in the sheet; this file only holds what the
client must remember between restarts.
"""
import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from gym_booking.config import get_config
from gym_booking.db_models import ClientSetting  # noqa: F401 - registers the table

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


def get_engine(db_file: Optional[str] = None) -> Engine:
    """
    Engine for the settings database, created on first use.

    Args:
        db_file: SQLite path; defaults to DB_FILE from configuration.
            Only honoured when the engine does not exist yet.
    """
    global _engine
    if _engine is None:
        path = db_file or get_config().db_file
        # The bot touches SQLite from handler callbacks on more than one thread
        _engine = create_engine(
            f"sqlite:///{path}", connect_args={"check_same_thread": False}
        )
        logger.info(f"Opened settings database at {path}")
    return _engine


def init_database(db_file: Optional[str] = None) -> None:
    """Create the settings table if it is missing"""
    SQLModel.metadata.create_all(get_engine(db_file))
    logger.info("Settings database ready")


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Session that commits on clean exit and rolls back on error.

    Usage:
        with get_session() as session:
            SettingsRepository(session).set_api_url(url)
    """
    with Session(get_engine()) as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


def close_database() -> None:
    """Dispose the engine; the next get_engine() opens a fresh one"""
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Settings database closed")
