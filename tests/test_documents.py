# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
import shutil
import tempfile
import threading
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from ayurtrack.documents import (
    Collections,
    Limit,
    OrderBy,
    SqliteDocumentStore,
    Where,
    coerce_datetime,
    query_with_index_fallback,
)
from ayurtrack.errors import IndexNotReadyError, NotFoundError
from ayurtrack.vitals.models import VitalsCreateRequest
from ayurtrack.vitals.storage import VitalsStorage

T0 = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


class TestCoerceDatetime(unittest.TestCase):
    def test_accepts_common_shapes(self) -> None:
        self.assertEqual(coerce_datetime("2024-03-01T08:00:00Z"), T0)
        self.assertEqual(coerce_datetime({"seconds": T0.timestamp(), "nanoseconds": 0}), T0)
        self.assertEqual(coerce_datetime(T0.timestamp()), T0)
        self.assertEqual(coerce_datetime(datetime(2024, 3, 1, 8, 0)), T0)

    def test_rejects_garbage(self) -> None:
        self.assertIsNone(coerce_datetime("not a date"))
        self.assertIsNone(coerce_datetime(None))
        self.assertIsNone(coerce_datetime(True))


class TestSqliteDocumentStore(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="ayurtrack-test-"))
        self.store = SqliteDocumentStore(self._tmp / "docs.db")

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    async def test_create_assigns_fresh_ids_and_timestamps(self) -> None:
        a = await self.store.create("things", {"id": "caller-chosen", "name": "a"})
        b = await self.store.create("things", {"name": "b"})

        self.assertNotEqual(a["id"], "caller-chosen")
        self.assertNotEqual(a["id"], b["id"])
        self.assertEqual(a["createdAt"], a["updatedAt"])

        loaded = await self.store.get_by_id("things", a["id"])
        self.assertEqual(loaded["name"], "a")
        self.assertEqual(loaded["id"], a["id"])
        self.assertIsInstance(loaded["createdAt"], datetime)

    async def test_get_missing_returns_none(self) -> None:
        self.assertIsNone(await self.store.get_by_id("things", "nope"))

    async def test_update_merges_and_advances_updated_at(self) -> None:
        doc = await self.store.create("things", {"name": "a", "size": 1})
        await self.store.update("things", doc["id"], {"size": 2})
        first = await self.store.get_by_id("things", doc["id"])
        await self.store.update("things", doc["id"], {"colour": "red"})
        second = await self.store.get_by_id("things", doc["id"])

        self.assertEqual(second["name"], "a")
        self.assertEqual(second["size"], 2)
        self.assertEqual(second["colour"], "red")
        self.assertEqual(second["createdAt"], doc["createdAt"])
        self.assertGreater(first["updatedAt"], doc["createdAt"])
        self.assertGreater(second["updatedAt"], first["updatedAt"])

    async def test_update_missing_raises(self) -> None:
        with self.assertRaises(NotFoundError):
            await self.store.update("things", "nope", {"x": 1})

    async def test_filters_order_and_limit(self) -> None:
        for i, owner in enumerate(["p1", "p2", "p1", "p1"]):
            await self.store.create("things", {"owner": owner, "at": T0 + timedelta(days=i)})

        docs = await self.store.get_all("things", [Where("owner", "==", "p1"), OrderBy("at"), Limit(2)])
        self.assertEqual([d["at"] for d in docs], [T0 + timedelta(days=3), T0 + timedelta(days=2)])

    async def test_subscribe_delivers_initial_and_updated_snapshots(self) -> None:
        snapshots = []
        await self.store.create("things", {"owner": "p1"})
        unsubscribe = self.store.subscribe("things", [Where("owner", "==", "p1")], snapshots.append)

        await self.store.create("things", {"owner": "p1"})
        await self.store.create("things", {"owner": "p2"})
        unsubscribe()
        await self.store.create("things", {"owner": "p1"})
        unsubscribe()

        self.assertEqual([len(s) for s in snapshots], [1, 2, 2])

    async def test_subscribe_reports_query_errors(self) -> None:
        store = SqliteDocumentStore(self._tmp / "building.db", building_indexes={"things"})
        errors = []
        store.subscribe(
            "things",
            [Where("owner", "==", "p1"), OrderBy("at")],
            lambda docs: self.fail("no snapshot expected"),
            errors.append,
        )
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], IndexNotReadyError)

    async def test_subscribe_document_follows_one_document(self) -> None:
        snapshots = []
        doc = await self.store.create("things", {"name": "a"})
        unsubscribe = self.store.subscribe_document("things", doc["id"], snapshots.append)

        await self.store.update("things", doc["id"], {"name": "b"})
        await self.store.create("things", {"name": "other"})
        await self.store.delete("things", doc["id"])
        unsubscribe()
        await self.store.create("things", {"name": "later"})

        self.assertEqual([s["name"] if s else None for s in snapshots], ["a", "b", None])
        self.assertEqual(snapshots[0]["id"], doc["id"])

    async def test_subscribe_document_starts_with_none_when_missing(self) -> None:
        snapshots = []
        unsubscribe = self.store.subscribe_document("things", "nope", snapshots.append)
        unsubscribe()
        self.assertEqual(snapshots, [None])


class ThreadRecordingStore(SqliteDocumentStore):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.io_threads = set()

    def _load(self, collection, doc_id):
        self.io_threads.add(threading.get_ident())
        return super()._load(collection, doc_id)

    def _query(self, collection, constraints):
        self.io_threads.add(threading.get_ident())
        return super()._query(collection, constraints)

    def _insert(self, collection, data):
        self.io_threads.add(threading.get_ident())
        return super()._insert(collection, data)

    def _merge(self, collection, doc_id, data):
        self.io_threads.add(threading.get_ident())
        return super()._merge(collection, doc_id, data)


class TestSqliteThreading(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="ayurtrack-test-"))
        self.store = ThreadRecordingStore(self._tmp / "docs.db")

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    async def test_file_io_runs_off_the_event_loop(self) -> None:
        loop_thread = threading.get_ident()
        doc = await self.store.create("things", {"name": "a"})
        await self.store.update("things", doc["id"], {"name": "b"})
        await self.store.get_by_id("things", doc["id"])
        await self.store.get_all("things", [Where("name", "==", "b")])

        self.assertTrue(self.store.io_threads)
        self.assertNotIn(loop_thread, self.store.io_threads)

    async def test_listeners_are_called_on_the_event_loop(self) -> None:
        callback_threads = []
        self.store.subscribe("things", [], lambda docs: callback_threads.append(threading.get_ident()))
        await self.store.create("things", {"name": "a"})

        self.assertEqual(callback_threads, [threading.get_ident()] * 2)

    async def test_concurrent_updates_keep_every_field(self) -> None:
        doc = await self.store.create("things", {"name": "a"})
        await asyncio.gather(
            *(self.store.update("things", doc["id"], {f"field{i}": i}) for i in range(10))
        )
        merged = await self.store.get_by_id("things", doc["id"])
        self.assertEqual({merged[f"field{i}"] for i in range(10)}, set(range(10)))


class TestIndexFallback(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="ayurtrack-test-"))
        self.indexed = SqliteDocumentStore(self._tmp / "indexed.db")
        self.building = SqliteDocumentStore(self._tmp / "building.db", building_indexes={Collections.VITALS})

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    async def _seed(self, store: SqliteDocumentStore) -> None:
        storage = VitalsStorage(store)
        for offset in (2, 0, 5, 1):
            await storage.create_record(
                VitalsCreateRequest(
                    patient_id="p1",
                    recorded_by="nurse-1",
                    date=T0 + timedelta(days=offset),
                    blood_pressure={"systolic": 120 + offset, "diastolic": 80},
                    weight=70,
                    height=175,
                )
            )
        await storage.create_record(
            VitalsCreateRequest(
                patient_id="p2",
                recorded_by="nurse-1",
                date=T0 + timedelta(days=9),
                blood_pressure={"systolic": 140, "diastolic": 90},
                weight=80,
                height=170,
            )
        )

    async def test_building_index_raises_for_composite_queries_only(self) -> None:
        with self.assertRaises(IndexNotReadyError):
            await self.building.get_all(Collections.VITALS, [Where("patientId", "==", "p1"), OrderBy("date")])
        self.assertEqual(await self.building.get_all(Collections.VITALS, [Where("patientId", "==", "p1")]), [])

    async def test_fallback_matches_indexed_results(self) -> None:
        await self._seed(self.indexed)
        await self._seed(self.building)

        expected = await VitalsStorage(self.indexed).list_by_patient("p1")
        with self.assertLogs("ayurtrack.documents.base", level="WARNING"):
            actual = await VitalsStorage(self.building).list_by_patient("p1")

        self.assertEqual([v.date for v in actual], [v.date for v in expected])
        self.assertEqual([v.date.day for v in actual], [6, 3, 2, 1])

        latest = await VitalsStorage(self.building).get_latest("p1")
        self.assertEqual(latest.blood_pressure.systolic, 125)
        self.assertAlmostEqual(latest.bmi, 22.9, places=1)

    async def test_fallback_sorts_unparseable_dates_last(self) -> None:
        await self.building.create("notes", {"patientId": "p1", "date": "garbage"})
        await self.building.create("notes", {"patientId": "p1", "date": T0})
        store = SqliteDocumentStore(self._tmp / "building.db", building_indexes={"notes"})

        docs = await query_with_index_fallback(store, "notes", [Where("patientId", "==", "p1"), OrderBy("date")])
        self.assertEqual([d["date"] for d in docs], [T0, "garbage"])
