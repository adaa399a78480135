from database.repositories.base import BaseRepository
from database.repositories.rates import RateOverrideRepository, FxRateRepository
from database.repositories.people import PersonRepository
from database.repositories.staffing import StaffingRequestRepository
from database.repositories.assignment import AssignmentRepository
from database.repositories.activity import ActivityLogRepository

__all__ = [
    'BaseRepository',
    'RateOverrideRepository',
    'FxRateRepository',
    'PersonRepository',
    'StaffingRequestRepository',
    'AssignmentRepository',
    'ActivityLogRepository',
]
