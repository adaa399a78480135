"""
Currency handling - decimal context, minor-unit rounding and FX conversion.
"""

import logging
from datetime import date
from decimal import Decimal, Context, ROUND_HALF_UP, ROUND_HALF_EVEN
from typing import Mapping, Optional

from core.config_loader import FxConfig
from core.exceptions import CurrencyUnavailableError
from core.rates.interfaces import CurrencyConverter, FxRateSource
from core.rates.models import FxQuote

logger = logging.getLogger(__name__)

# Working precision for all intermediate money arithmetic. Rounding to minor
# units happens exactly once, in round_money().
MONEY_CONTEXT = Context(prec=34, rounding=ROUND_HALF_EVEN)

DEFAULT_MINOR_UNITS = 2

ONE = Decimal(1)


def minor_units(currency: str, table: Optional[Mapping[str, int]] = None) -> int:
    if table and currency in table:
        return int(table[currency])
    return DEFAULT_MINOR_UNITS


def round_money(amount: Decimal, currency: str, table: Optional[Mapping[str, int]] = None) -> Decimal:
    """Round half-up to the currency's minor-unit precision."""
    exponent = Decimal(1).scaleb(-minor_units(currency, table))
    return amount.quantize(exponent, rounding=ROUND_HALF_UP, context=MONEY_CONTEXT)


class FxRateConverter(CurrencyConverter):
    """
    Converts amounts using the newest quote on or before the as-of date.

    Falls back to the reciprocal of the reverse pair when allowed, and treats
    quotes older than ``max_age_days`` as unavailable.
    """

    def __init__(self, source: FxRateSource, config: Optional[FxConfig] = None):
        self.source = source
        self.config = config or FxConfig()

    def quote(self, from_currency: str, to_currency: str, as_of: date) -> FxQuote:
        if from_currency == to_currency:
            return FxQuote(from_currency, to_currency, ONE, as_of)

        direct = self._usable(self.source.latest_rate(from_currency, to_currency, as_of), as_of)
        if direct is not None:
            rate, effective = direct
            return FxQuote(from_currency, to_currency, rate, effective)

        if self.config.allow_inverse:
            reverse = self._usable(self.source.latest_rate(to_currency, from_currency, as_of), as_of)
            if reverse is not None:
                rate, effective = reverse
                logger.debug("Using inverse FX %s->%s (%s) as of %s", to_currency, from_currency, rate, effective)
                return FxQuote(from_currency, to_currency, MONEY_CONTEXT.divide(ONE, rate), effective, inverted=True)

        raise CurrencyUnavailableError(from_currency, to_currency, as_of)

    def convert(self, amount: Decimal, from_currency: str, to_currency: str, as_of: date) -> Decimal:
        quote = self.quote(from_currency, to_currency, as_of)
        return MONEY_CONTEXT.multiply(amount, quote.rate)

    def _usable(self, found, as_of: date):
        if found is None:
            return None
        rate, effective = found
        if rate is None or rate <= 0:
            return None
        max_age = self.config.max_age_days
        if max_age is not None and (as_of - effective).days > max_age:
            logger.info("Ignoring stale FX quote from %s (as of %s, max age %d days)", effective, as_of, max_age)
            return None
        return rate, effective
