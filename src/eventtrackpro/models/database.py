"""Database configuration and session helpers"""

import logging
import os

from sqlalchemy import create_engine
from sqlmodel import Session, SQLModel

from eventtrackpro.config import config

logger = logging.getLogger(__name__)

# Database URL from config
DATABASE_URL = config["database_url"]

# Validate DATABASE_URL exists
if not DATABASE_URL:
    raise ValueError(
        "DATABASE_URL environment variable is not set. "
        "Set DATABASE_URL in the environment or local .env file."
    )

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# Create engine
engine = create_engine(
    DATABASE_URL,
    echo=os.getenv("DEBUG", "false").lower() == "true",
    connect_args=connect_args,
)


def get_db():
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db(bind=None):
    """Create all tables. Schema migrations are out of scope for this service."""
    # Import models so they are registered on SQLModel.metadata
    import eventtrackpro.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
    logger.info("Database tables ensured")
