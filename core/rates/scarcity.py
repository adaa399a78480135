"""
Scarcity multiplier.

Demand for a role is the number of open staffing requests that use its
template. Every ``requests_per_step`` open requests add ``step`` to the
multiplier, up to ``cap``. With ``use_supply`` the demand is first divided
by the number of active people whose base role is the template.
"""

import logging
from decimal import Decimal
from typing import Optional

from core.config_loader import ScarcityConfig
from core.rates.currency import MONEY_CONTEXT, ONE
from core.rates.interfaces import ScarcitySignalSource
from core.rates.models import TargetingContext, to_decimal

logger = logging.getLogger(__name__)

_QUANTUM = Decimal("0.0001")


class ScarcityModel:

    def __init__(self, signals: Optional[ScarcitySignalSource], config: Optional[ScarcityConfig] = None):
        self.signals = signals
        self.config = config or ScarcityConfig()

    @property
    def version(self) -> Optional[str]:
        return self.config.version if self.config.enabled else None

    def multiplier(self, context: TargetingContext) -> Decimal:
        if not self.config.enabled or self.signals is None or context.role_template_id is None:
            return ONE

        demand = self.signals.open_request_count(context.org_id, context.role_template_id)
        if demand <= 0:
            return ONE

        pressure = Decimal(demand)
        if self.config.use_supply:
            supply = max(self.signals.active_supply_count(context.org_id, context.role_template_id), 1)
            pressure = MONEY_CONTEXT.divide(pressure, Decimal(supply))

        per_step = to_decimal(self.config.requests_per_step)
        if per_step <= 0:
            return ONE

        step = to_decimal(self.config.step)
        cap = to_decimal(self.config.cap)
        raw = ONE + MONEY_CONTEXT.multiply(step, MONEY_CONTEXT.divide(pressure, per_step))
        value = max(min(raw, cap), Decimal(0))
        result = value.quantize(_QUANTUM, context=MONEY_CONTEXT)

        logger.debug(
            "Scarcity for role_template=%s: demand=%s pressure=%s multiplier=%s",
            context.role_template_id, demand, pressure, result,
        )
        return result
