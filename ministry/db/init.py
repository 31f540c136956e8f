"""Initialize database tables."""
import logging

from sqlmodel import SQLModel
from sqlalchemy.engine import Engine

from ministry.models.recurring_event import RecurringEvent  # noqa: F401 (registers the table)
from ministry.models.event import Event  # noqa: F401 (registers the table)
from ministry.db.config import engine as default_engine

logger = logging.getLogger(__name__)


def init_db(engine: Engine = None):
    """Create all tables in the database."""
    logger.info("[DB INIT] Creating all tables...")
    SQLModel.metadata.create_all(engine or default_engine)
    logger.info("[DB INIT] Tables created successfully.")


if __name__ == "__main__":
    init_db()
