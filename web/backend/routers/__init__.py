"""API route handlers."""

from .rates import router as rates_router
from .ranking import router as ranking_router
from .assignments import router as assignments_router
