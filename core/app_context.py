from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, ContextManager, Optional

from sqlalchemy.orm import Session

from core.assignments.activity import ActivityLogger
from core.assignments.service import AssignmentService
from core.config_loader import AppConfig
from core.fit.service import FitScoreCalculator
from core.rates.service import RateService
from database.uow import staffing_uow


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Services hold no session; each operation opens its own unit of work
    through ``uow``.
    """
    config: AppConfig
    uow: Callable[[], ContextManager[Any]]
    rate_service: RateService
    fit_calculator: FitScoreCalculator
    assignment_service: AssignmentService

    @classmethod
    def build(cls, config: AppConfig, session_factory: Optional[Callable[[], Session]] = None) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            session_factory: Session factory to open units of work with;
                defaults to database.database.SessionLocal

        Returns:
            Fully wired AppContext instance
        """
        uow = partial(staffing_uow, session_factory)
        activity = ActivityLogger(uow)

        return cls(
            config=config,
            uow=uow,
            rate_service=RateService(uow, config.rates),
            fit_calculator=FitScoreCalculator(uow, config),
            assignment_service=AssignmentService(uow, config, activity),
        )
