#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.app_context import AppContext
from core.assignments.service import AssignmentService
from core.fit.service import FitScoreCalculator
from core.rates.service import RateService
from .config import get_config


class DatabaseManager:
    """Manages the database engine and session factory."""

    def __init__(self):
        config = get_config()
        self.engine = create_engine(
            config.database.url,
            pool_pre_ping=True,  # Verify connections before using
            pool_size=config.database.pool_size,
            max_overflow=config.database.max_overflow
        )
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine
        )


@lru_cache()
def get_app_context() -> AppContext:
    """
    Build the wired services once per process.

    Tests replace this through app.dependency_overrides.
    """
    db_manager = DatabaseManager()
    return AppContext.build(get_config(), db_manager.SessionLocal)


def get_rate_service() -> RateService:
    return get_app_context().rate_service


def get_fit_calculator() -> FitScoreCalculator:
    return get_app_context().fit_calculator


def get_assignment_service() -> AssignmentService:
    return get_app_context().assignment_service
