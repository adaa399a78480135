from core.fit.models import CandidateFit, FitReason
from core.fit.service import FitScoreCalculator

__all__ = ['CandidateFit', 'FitReason', 'FitScoreCalculator']
