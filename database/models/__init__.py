from .base import Base
from .tenant import Org
from .people import Skill, Person, PersonSkill
from .staffing import RoleTemplate, StaffingRequest
from .rates import RateOverride, RatePremium, FxRate
from .assignment import Assignment, SNAPSHOT_COLUMNS
from .activity import ActivityLog

__all__ = [
    'Base',
    'Org',
    'Skill',
    'Person',
    'PersonSkill',
    'RoleTemplate',
    'StaffingRequest',
    'RateOverride',
    'RatePremium',
    'FxRate',
    'Assignment',
    'SNAPSHOT_COLUMNS',
    'ActivityLog',
]
