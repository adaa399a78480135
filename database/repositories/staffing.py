from typing import Optional

from sqlalchemy import select, func

from core.rates.interfaces import ScarcitySignalSource
from database.models import Person, RoleTemplate, StaffingRequest
from database.repositories.base import BaseRepository

OPEN_STATUSES = ('open',)


class StaffingRequestRepository(BaseRepository, ScarcitySignalSource):

    def get_request(self, org_id: int, request_id: int) -> Optional[StaffingRequest]:
        stmt = select(StaffingRequest).where(
            StaffingRequest.id == request_id,
            StaffingRequest.org_id == org_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_role_template(self, org_id: int, role_template_id: int) -> Optional[RoleTemplate]:
        stmt = select(RoleTemplate).where(
            RoleTemplate.id == role_template_id,
            RoleTemplate.org_id == org_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def open_request_count(self, org_id: int, role_template_id: int) -> int:
        stmt = select(func.count(StaffingRequest.id)).where(
            StaffingRequest.org_id == org_id,
            StaffingRequest.role_template_id == role_template_id,
            StaffingRequest.status.in_(OPEN_STATUSES),
        )
        return int(self.db.execute(stmt).scalar_one() or 0)

    def active_supply_count(self, org_id: int, role_template_id: int) -> int:
        stmt = select(func.count(Person.id)).where(
            Person.org_id == org_id,
            Person.base_role_template_id == role_template_id,
            Person.is_active.is_(True),
        )
        return int(self.db.execute(stmt).scalar_one() or 0)
