# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import tempfile
import unittest
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

from ayurtrack.documents import Collections, SqliteDocumentStore
from ayurtrack.errors import NotFoundError
from ayurtrack.meal_tracking.models import MealTrackingCreateRequest
from ayurtrack.meal_tracking.storage import MealTrackingStorage

DAY = date(2024, 3, 1)


def scheduled(meal_type: str = "lunch", when: datetime | None = None) -> MealTrackingCreateRequest:
    return MealTrackingCreateRequest(
        patient_id="p1",
        diet_plan_id="plan-1",
        meal_id="meal-1",
        meal_type=meal_type,
        scheduled_date=when or datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc),
    )


class TestMealTracking(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="ayurtrack-test-"))
        self.store = SqliteDocumentStore(self._tmp / "docs.db", building_indexes={Collections.MEAL_TRACKING})
        self.storage = MealTrackingStorage(self.store)

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    async def test_new_records_start_scheduled(self) -> None:
        record = await self.storage.create_record(scheduled())
        self.assertEqual(record.status, "scheduled")
        self.assertIsNone(record.given_at)

    async def test_given_then_eaten(self) -> None:
        record = await self.storage.create_record(scheduled())

        given = await self.storage.mark_as_given(record.id, "staff-7")
        self.assertEqual(given.status, "given")
        self.assertEqual(given.given_by, "staff-7")
        self.assertIsNotNone(given.given_at)

        eaten = await self.storage.mark_as_eaten(record.id, "patient", "half")
        self.assertEqual(eaten.status, "eaten")
        self.assertEqual(eaten.quantity, "half")
        self.assertEqual(eaten.given_by, "staff-7")

    async def test_quantity_none_means_skipped(self) -> None:
        record = await self.storage.create_record(scheduled())
        await self.storage.mark_as_given(record.id, "staff-7")
        skipped = await self.storage.mark_as_eaten(record.id, "not_eaten", "none")
        self.assertEqual(skipped.status, "skipped")

    async def test_eaten_without_given_is_accepted(self) -> None:
        record = await self.storage.create_record(scheduled())
        eaten = await self.storage.mark_as_eaten(record.id, "family")
        self.assertEqual(eaten.status, "eaten")
        self.assertIsNone(eaten.quantity)

    async def test_modified_records_substitution(self) -> None:
        record = await self.storage.create_record(scheduled())
        modified = await self.storage.mark_as_modified(record.id, "Served khichdi instead of rice", "staff-2")
        self.assertEqual(modified.status, "modified")
        self.assertEqual(modified.notes, "Served khichdi instead of rice")
        self.assertEqual(modified.given_by, "staff-2")

    async def test_transitions_on_missing_record_raise(self) -> None:
        with self.assertRaises(NotFoundError):
            await self.storage.mark_as_given("missing", "staff-7")

    async def test_today_and_range_queries_use_fallback(self) -> None:
        base = datetime(2024, 3, 1, tzinfo=timezone.utc)
        await self.storage.create_record(scheduled("breakfast", base + timedelta(hours=8)))
        await self.storage.create_record(scheduled("dinner", base + timedelta(hours=19)))
        await self.storage.create_record(scheduled("lunch", base + timedelta(days=1, hours=12)))
        await self.storage.create_record(scheduled("lunch", base - timedelta(days=3)))

        today = await self.storage.list_today("p1", on=DAY)
        self.assertEqual(sorted(r.meal_type for r in today), ["breakfast", "dinner"])

        window = await self.storage.list_by_date_range("p1", base, base + timedelta(days=2))
        self.assertEqual([r.meal_type for r in window], ["lunch", "dinner", "breakfast"])

        self.assertEqual(len(await self.storage.list_by_patient("p1")), 4)
        self.assertEqual(await self.storage.list_by_patient("p2"), [])

    async def test_subscribe_sees_status_changes(self) -> None:
        record = await self.storage.create_record(scheduled())
        store = SqliteDocumentStore(self._tmp / "docs.db")
        storage = MealTrackingStorage(store)
        seen = []
        unsubscribe = storage.subscribe("p1", lambda records: seen.append([r.status for r in records]))

        await storage.mark_as_given(record.id, "staff-7")
        unsubscribe()

        self.assertEqual(seen, [["scheduled"], ["given"]])
