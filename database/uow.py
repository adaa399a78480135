import contextlib
import logging
from typing import Callable, Iterator, Optional

from sqlalchemy.orm import Session

from database.database import SessionLocal
from database.repository import StaffingRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def staffing_uow(session_factory: Optional[Callable[[], Session]] = None) -> Iterator[StaffingRepository]:
    """Per-unit-of-work transaction scope.

    Yields a StaffingRepository bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with staffing_uow() as repo:
            person = repo.people.get_person(org_id, person_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    session = (session_factory or SessionLocal)()
    try:
        repo = StaffingRepository(session)
        yield repo
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
