from typing import Dict, Iterable, Iterator, List, Optional

from sqlalchemy import select

from database.models import Person, PersonSkill
from database.repositories.base import BaseRepository


class PersonRepository(BaseRepository):

    def get_person(self, org_id: int, person_id: int) -> Optional[Person]:
        stmt = select(Person).where(Person.id == person_id, Person.org_id == org_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def iter_active_people(self, org_id: int, person_ids: Optional[Iterable[int]] = None) -> Iterator[Person]:
        stmt = select(Person).where(Person.org_id == org_id, Person.is_active.is_(True))
        if person_ids is not None:
            stmt = stmt.where(Person.id.in_(list(person_ids)))
        stmt = stmt.order_by(Person.id)
        yield from self.db.execute(stmt).scalars()

    def get_skills_for_people(self, person_ids: Iterable[int]) -> Dict[int, List[PersonSkill]]:
        ids = list(person_ids)
        if not ids:
            return {}
        stmt = select(PersonSkill).where(PersonSkill.person_id.in_(ids))
        skills: Dict[int, List[PersonSkill]] = {}
        for row in self.db.execute(stmt).scalars():
            skills.setdefault(row.person_id, []).append(row)
        return skills
