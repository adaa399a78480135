from sqlalchemy.orm import Session


class BaseRepository:
    """Shares the caller's Session; transaction boundaries belong to the unit of work."""

    def __init__(self, db: Session):
        self.db = db

    def flush(self) -> None:
        self.db.flush()
