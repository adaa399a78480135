"""
Rate collaborator interfaces.

The resolver only talks to storage through these, so it can be exercised
against in-memory fakes as well as the SQLAlchemy repositories.
"""
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from core.rates.models import FxQuote, PrecedenceTier, RateOverride


class RateOverrideStore(ABC):
    """Read-only, org-scoped source of rate overrides."""

    @abstractmethod
    def find_overrides(
        self,
        org_id: int,
        tier: PrecedenceTier,
        scope_keys: Iterable[str],
        as_of: date,
    ) -> List[RateOverride]:
        """
        Return overrides for ``org_id`` at ``tier`` whose scope_key is one of
        ``scope_keys`` and whose effective window may contain ``as_of``.

        Callers still filter on the window themselves; implementations may
        return a superset.
        """
        pass


class FxRateSource(ABC):
    """Point-in-time FX quotes."""

    @abstractmethod
    def latest_rate(self, base_currency: str, quote_currency: str, as_of: date) -> Optional[Tuple[Decimal, date]]:
        """
        Return (rate, effective_date) of the newest quote for the pair with
        effective_date <= as_of, or None.
        """
        pass


class ScarcitySignalSource(ABC):
    """Supply/demand counts feeding the scarcity multiplier."""

    @abstractmethod
    def open_request_count(self, org_id: int, role_template_id: int) -> int:
        pass

    @abstractmethod
    def active_supply_count(self, org_id: int, role_template_id: int) -> int:
        pass


class CurrencyConverter(ABC):
    """Converts money between currencies as of a date."""

    @abstractmethod
    def quote(self, from_currency: str, to_currency: str, as_of: date) -> FxQuote:
        """Raise CurrencyUnavailableError when no usable rate exists."""
        pass

    @abstractmethod
    def convert(self, amount: Decimal, from_currency: str, to_currency: str, as_of: date) -> Decimal:
        pass
