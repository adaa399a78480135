"""
Default engine and session factory.

Connection settings come from the ``database`` section of config.yaml;
DATABASE_URL overrides the URL. Units of work open their sessions through
SessionLocal unless given another factory (see database.uow).
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.config_loader import load_config

_db_config = load_config().database

DATABASE_URL = _db_config.url

engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    pool_size=_db_config.pool_size,
    max_overflow=_db_config.max_overflow,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
