from core.assignments.models import UNSET, AssignmentCreate, AssignmentRecord, AssignmentUpdate
from core.assignments.activity import ActivityLogger
from core.assignments.service import AssignmentService

__all__ = [
    'UNSET',
    'ActivityLogger',
    'AssignmentCreate',
    'AssignmentRecord',
    'AssignmentService',
    'AssignmentUpdate',
]
