import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

log = logging.getLogger(__name__)

Base = declarative_base()


def create_session_factory(database_url: str):
    """Create a session factory bound to ``database_url``."""
    log.info("Initializing database connection: %s", database_url)

    engine = create_engine(database_url, future=True, echo=False)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
