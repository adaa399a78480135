"""
Rate Service - resolves one rate inside its own unit of work.
"""

import logging
from typing import Any, Callable, ContextManager, Optional

from core.config_loader import RatesConfig
from core.rates.models import RateResolution, TargetingContext
from core.rates.resolver import build_rate_resolver

logger = logging.getLogger(__name__)


class RateService:

    def __init__(self, uow: Callable[[], ContextManager[Any]], config: Optional[RatesConfig] = None):
        self.uow = uow
        self.config = config or RatesConfig()

    def resolve(self, context: TargetingContext) -> RateResolution:
        with self.uow() as repo:
            return build_rate_resolver(repo, self.config).resolve(context)
