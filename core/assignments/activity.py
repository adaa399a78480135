"""
Activity logging for assignment lifecycle events.

Entries are written after the business transaction commits, in their own
unit of work. A failure to log is reported and swallowed so it can never
undo or fail the operation it describes.
"""

import logging
from typing import Any, Callable, ContextManager, Dict, Optional

logger = logging.getLogger(__name__)


class ActivityLogger:

    def __init__(self, uow: Callable[[], ContextManager[Any]]):
        self.uow = uow

    def record(
        self,
        org_id: int,
        entity_type: str,
        entity_id: int,
        action: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            with self.uow() as repo:
                repo.activity.append(org_id, entity_type, entity_id, action, payload or {})
        except Exception as e:
            logger.warning(
                "Failed to record activity %s for %s %s: %s",
                action, entity_type, entity_id, e,
            )
