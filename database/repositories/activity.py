from typing import Any, Dict, List

from sqlalchemy import select

from database.models import ActivityLog
from database.repositories.base import BaseRepository


class ActivityLogRepository(BaseRepository):

    def append(self, org_id: int, entity_type: str, entity_id: int, action: str, payload: Dict[str, Any]) -> ActivityLog:
        entry = ActivityLog(
            org_id=org_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            payload=payload,
        )
        self.db.add(entry)
        return entry

    def list_for_entity(self, entity_type: str, entity_id: int) -> List[ActivityLog]:
        stmt = (
            select(ActivityLog)
            .where(ActivityLog.entity_type == entity_type, ActivityLog.entity_id == entity_id)
            .order_by(ActivityLog.id)
        )
        return list(self.db.execute(stmt).scalars().all())
