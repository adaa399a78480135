#!/usr/bin/env python3
"""
Tests for AssignmentService: creation, activation, updates, cancellation
and the frozen rate snapshot.
"""

import contextlib
import unittest
from datetime import date
from decimal import Decimal
from unittest.mock import Mock

import pytest

from core.assignments import AssignmentCreate, AssignmentService, AssignmentUpdate
from core.assignments.activity import ActivityLogger
from core.assignments.models import ACTIVE, PROPOSED
from core.config_loader import AppConfig, RatesConfig, ScarcityConfig
from core.exceptions import ConflictError, NotFoundError, ResolutionError, ValidationError
from core.rates.models import PrecedenceTier
from database.models import Assignment, RateOverride
from tests import create_test_database, drop_test_database, make_uow
from tests.fixtures.staffing_fixtures import REQUEST_END, REQUEST_START, seed_staffing_org


def _config():
    return AppConfig(rates=RatesConfig(scarcity=ScarcityConfig(enabled=False)))


@pytest.mark.db
class TestAssignmentService(unittest.TestCase):

    def setUp(self):
        self.engine, self.session_factory = create_test_database()
        with self.session_factory() as session:
            self.seed = seed_staffing_org(session)
            session.commit()
        self.uow = make_uow(self.session_factory)
        self.service = AssignmentService(self.uow, _config())

        with self.uow() as repo:
            self.org_default_id = repo.rates.create_override(
                self.seed.org_id, PrecedenceTier.ORG_DEFAULT, str(self.seed.org_id),
                Decimal("100"), date(2026, 1, 1),
            ).id
            self.template_override_id = repo.rates.create_override(
                self.seed.org_id, PrecedenceTier.ROLE_TEMPLATE, str(self.seed.role_template_id),
                Decimal("120"), date(2026, 1, 1),
                premiums=[
                    {"kind": "absolute", "amount": Decimal("10"), "label": "on-call"},
                    {"kind": "percentage", "amount": Decimal("20"), "label": "rush"},
                ],
            ).id

    def tearDown(self):
        drop_test_database(self.engine)

    def _create(self, person="alice", **kwargs):
        values = dict(
            org_id=self.seed.org_id,
            person_id=self.seed.people[person],
            engagement_id=500,
            role_template_id=self.seed.role_template_id,
            start_date=REQUEST_START,
            end_date=REQUEST_END,
            alloc_pct=Decimal("50"),
        )
        values.update(kwargs)
        return self.service.create(AssignmentCreate(**values))

    def _reprice_template(self, amount):
        with self.uow() as repo:
            repo.rates.get_override(self.template_override_id).base_amount = Decimal(amount)

    def _drop_org_default(self):
        with self.session_factory() as session:
            session.delete(session.get(RateOverride, self.org_default_id))
            session.commit()

    def _count_for(self, person):
        with self.session_factory() as session:
            return session.query(Assignment).filter(Assignment.person_id == self.seed.people[person]).count()

    def _activity(self, assignment_id):
        with self.uow() as repo:
            return [entry.action for entry in repo.activity.list_for_entity("assignment", assignment_id)]

    def test_create_defaults_to_active_and_freezes_snapshot(self):
        record = self._create()

        self.assertEqual(record.status, ACTIVE)
        self.assertEqual(record.bill_rate, Decimal("156.00"))
        self.assertEqual(record.currency, "USD")
        self.assertEqual(record.rate_snapshot.base_tier, PrecedenceTier.ROLE_TEMPLATE)
        self.assertEqual(record.rate_snapshot.as_of_date, REQUEST_START)
        self.assertEqual(record.rate_as_of, REQUEST_START)
        self.assertEqual(record.level, "L3")
        self.assertEqual(record.cost_rate, Decimal("60"))
        self.assertEqual(record.cost_currency, "USD")
        self.assertIsNotNone(record.snapshot_taken_at)

    def test_snapshot_survives_rate_card_changes(self):
        record = self._create()

        self._reprice_template("200")

        stored = self.service.get(self.seed.org_id, record.id)
        self.assertEqual(stored.bill_rate, Decimal("156.00"))
        self.assertEqual(stored.rate_snapshot.base_amount, Decimal("120"))
        self.assertEqual(stored.rate_snapshot.to_dict(), record.rate_snapshot.to_dict())

    def test_reads_keep_minor_units(self):
        record = self._create()

        stored = self.service.get(self.seed.org_id, record.id)

        self.assertEqual(str(stored.bill_rate), "156.00")
        self.assertEqual(stored.to_dict()["bill_rate"], record.to_dict()["bill_rate"])

    def test_reads_keep_zero_decimal_currencies(self):
        with self.uow() as repo:
            repo.fx.add_rate("USD", "JPY", Decimal("150"), date(2026, 3, 1))
        record = self._create(target_currency="jpy")

        stored = self.service.get(self.seed.org_id, record.id)

        self.assertEqual(stored.currency, "JPY")
        self.assertEqual(str(stored.bill_rate), "23400")

    def test_create_proposed_freezes_snapshot(self):
        record = self._create(status=PROPOSED)

        self.assertEqual(record.status, PROPOSED)
        self.assertEqual(record.bill_rate, Decimal("156.00"))
        self.assertIsNotNone(record.rate_snapshot)
        self.assertEqual(self._activity(record.id), ["created"])

    def test_create_uses_given_level(self):
        record = self._create(level=" l5 ")
        self.assertEqual(record.level, "L5")

    def test_create_validation(self):
        with self.assertRaises(ValidationError) as ctx:
            self._create(start_date=REQUEST_END, end_date=REQUEST_START)
        self.assertEqual(ctx.exception.field, "end_date")

        with self.assertRaises(ValidationError):
            self._create(alloc_pct=Decimal("150"))

        with self.assertRaises(ValidationError):
            self._create(status="completed")

    def test_create_rejects_malformed_values(self):
        with self.assertRaises(ValidationError) as ctx:
            self._create(alloc_pct="half")
        self.assertEqual(ctx.exception.field, "alloc_pct")

        with self.assertRaises(ValidationError) as ctx:
            self._create(start_date="2026-03-02")
        self.assertEqual(ctx.exception.field, "start_date")

        self.assertEqual(self._count_for("alice"), 0)

    def test_create_unknown_person(self):
        with self.assertRaises(NotFoundError):
            self._create(person="outsider")

    def test_create_without_org_default_persists_nothing(self):
        self._drop_org_default()

        for status in (ACTIVE, PROPOSED):
            with self.subTest(status=status):
                with self.assertRaises(ResolutionError) as ctx:
                    self._create(status=status)

                self.assertEqual(ctx.exception.reason, ResolutionError.NO_ORG_DEFAULT)
                self.assertEqual(self._count_for("alice"), 0)

    def test_activate_keeps_creation_snapshot(self):
        proposed = self._create(status=PROPOSED)
        self._reprice_template("200")

        active = self.service.activate(self.seed.org_id, proposed.id)

        self.assertEqual(active.status, ACTIVE)
        self.assertEqual(active.bill_rate, Decimal("156.00"))
        self.assertEqual(active.rate_snapshot.to_dict(), proposed.rate_snapshot.to_dict())
        self.assertEqual(self._activity(proposed.id), ["created", "activated"])

        with self.assertRaises(ConflictError):
            self.service.activate(self.seed.org_id, proposed.id)

    def test_activate_row_without_snapshot_resolves_once(self):
        with self.session_factory() as session:
            row = Assignment(
                org_id=self.seed.org_id,
                person_id=self.seed.people["bob"],
                engagement_id=500,
                role_template_id=self.seed.role_template_id,
                level="L3",
                start_date=REQUEST_START,
                end_date=REQUEST_END,
                alloc_pct=Decimal("50"),
                status=PROPOSED,
            )
            session.add(row)
            session.commit()
            assignment_id = row.id

        active = self.service.activate(self.seed.org_id, assignment_id)

        self.assertEqual(active.bill_rate, Decimal("156.00"))
        self.assertIsNone(active.cost_rate)

    def test_update_non_pricing_fields(self):
        record = self._create(notes="first")

        updated = self.service.update(self.seed.org_id, record.id, AssignmentUpdate(
            alloc_pct=Decimal("80"), end_date=date(2026, 4, 30),
        ))

        self.assertEqual(updated.alloc_pct, Decimal("80"))
        self.assertEqual(updated.end_date, date(2026, 4, 30))
        self.assertEqual(updated.notes, "first")
        self.assertEqual(updated.bill_rate, Decimal("156.00"))

    def test_update_notes_none_clears(self):
        record = self._create(notes="keep me?")

        updated = self.service.update(self.seed.org_id, record.id, AssignmentUpdate.from_mapping({"notes": None}))

        self.assertIsNone(updated.notes)

    def test_update_pricing_field_rejected(self):
        record = self._create()

        with self.assertRaises(ValidationError) as ctx:
            self.service.update(self.seed.org_id, record.id, AssignmentUpdate(level="L5"))

        self.assertEqual(ctx.exception.field, "level")
        self.assertEqual(self.service.get(self.seed.org_id, record.id).level, "L3")

    def test_update_invalid_window(self):
        record = self._create()
        with self.assertRaises(ValidationError):
            self.service.update(self.seed.org_id, record.id, AssignmentUpdate(end_date=date(2026, 1, 1)))

    def test_update_rejects_malformed_values(self):
        record = self._create()

        with self.assertRaises(ValidationError) as ctx:
            self.service.update(self.seed.org_id, record.id, AssignmentUpdate.from_mapping({"alloc_pct": "lots"}))
        self.assertEqual(ctx.exception.field, "alloc_pct")

        with self.assertRaises(ValidationError) as ctx:
            self.service.update(self.seed.org_id, record.id, AssignmentUpdate.from_mapping({"end_date": "2026-04-30"}))
        self.assertEqual(ctx.exception.field, "end_date")

        self.assertEqual(self.service.get(self.seed.org_id, record.id).alloc_pct, Decimal("50"))

    def test_update_status_to_active(self):
        record = self._create(status=PROPOSED)

        updated = self.service.update(self.seed.org_id, record.id, AssignmentUpdate(status=ACTIVE))

        self.assertEqual(updated.status, ACTIVE)
        self.assertEqual(updated.bill_rate, Decimal("156.00"))

    def test_completed_assignment_cannot_be_updated(self):
        record = self._create()
        completed = self.service.update(self.seed.org_id, record.id, AssignmentUpdate(status="completed"))
        self.assertEqual(completed.status, "completed")

        with self.assertRaises(ConflictError):
            self.service.update(self.seed.org_id, record.id, AssignmentUpdate(notes="late edit"))
        with self.assertRaises(ConflictError):
            self.service.cancel(self.seed.org_id, record.id)

    def test_update_cannot_cancel(self):
        record = self._create()
        with self.assertRaises(ConflictError):
            self.service.update(self.seed.org_id, record.id, AssignmentUpdate(status="cancelled"))

    def test_cancel_active(self):
        record = self._create()

        cancelled = self.service.cancel(self.seed.org_id, record.id, reason="client paused")

        self.assertEqual(cancelled.status, "cancelled")
        self.assertIsNotNone(cancelled.cancelled_at)
        self.assertEqual(cancelled.bill_rate, Decimal("156.00"))
        self.assertEqual(self._activity(record.id), ["created", "cancelled"])

        with self.assertRaises(ConflictError):
            self.service.cancel(self.seed.org_id, record.id)

    def test_cancel_proposed(self):
        record = self._create(status=PROPOSED)

        cancelled = self.service.cancel(self.seed.org_id, record.id, reason="lost the bid")

        self.assertEqual(cancelled.status, "cancelled")
        self.assertIsNotNone(cancelled.cancelled_at)
        self.assertEqual(cancelled.rate_snapshot.to_dict(), record.rate_snapshot.to_dict())
        with self.assertRaises(ConflictError):
            self.service.activate(self.seed.org_id, record.id)

    def test_unknown_assignment(self):
        with self.assertRaises(NotFoundError):
            self.service.cancel(self.seed.org_id, 424242)
        with self.assertRaises(NotFoundError):
            self.service.get(self.seed.org_id, 424242)

    def test_assignment_is_org_scoped(self):
        record = self._create()
        with self.assertRaises(NotFoundError):
            self.service.get(self.seed.other_org_id, record.id)

    def test_activity_failure_does_not_fail_operation(self):
        @contextlib.contextmanager
        def broken_uow():
            raise RuntimeError("activity store down")
            yield

        service = AssignmentService(self.uow, _config(), activity=ActivityLogger(broken_uow))
        record = service.create(AssignmentCreate(
            org_id=self.seed.org_id, person_id=self.seed.people["bob"], engagement_id=1,
            role_template_id=self.seed.role_template_id,
            start_date=REQUEST_START, end_date=REQUEST_END,
        ))

        self.assertEqual(service.get(self.seed.org_id, record.id).id, record.id)
        self.assertEqual(self._activity(record.id), [])


class TestAssignmentInput(unittest.TestCase):

    def _create_request(self, **kwargs):
        values = dict(org_id=1, person_id=2, engagement_id=3, role_template_id=4,
                      start_date=date(2026, 3, 2), end_date=date(2026, 3, 31))
        values.update(kwargs)
        return AssignmentCreate(**values)

    def test_default_status_is_active(self):
        self.assertEqual(self._create_request().status, ACTIVE)

    def test_alloc_must_be_numeric(self):
        for value in ("abc", "NaN", "Infinity", [50]):
            with self.subTest(value=value):
                with self.assertRaises(ValidationError) as ctx:
                    self._create_request(alloc_pct=value).validate()
                self.assertEqual(ctx.exception.field, "alloc_pct")

    def test_dates_must_be_dates(self):
        with self.assertRaises(ValidationError) as ctx:
            self._create_request(end_date="2026-03-31").validate()
        self.assertEqual(ctx.exception.field, "end_date")

    def test_unset_versus_none(self):
        update = AssignmentUpdate.from_mapping({"notes": None})
        self.assertEqual(update.provided(), {"notes": None})
        self.assertEqual(update.pricing_changes(), {})

    def test_unknown_field(self):
        with self.assertRaises(ValidationError) as ctx:
            AssignmentUpdate.from_mapping({"bill_rate": "1"})
        self.assertEqual(ctx.exception.field, "bill_rate")

    def test_pricing_changes(self):
        update = AssignmentUpdate(skills=[1, 2], alloc_pct=50)
        self.assertEqual(update.pricing_changes(), {"skills": [1, 2]})

    def test_bad_input_rejected_before_touching_storage(self):
        uow = Mock()
        service = AssignmentService(uow, activity=Mock())

        for changes in (AssignmentUpdate(person_id=2), AssignmentUpdate(alloc_pct="x"), AssignmentUpdate(start_date=5)):
            with self.subTest(changes=changes):
                with self.assertRaises(ValidationError):
                    service.update(1, 1, changes)

        uow.assert_not_called()


if __name__ == '__main__':
    unittest.main()
