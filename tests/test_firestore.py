# -*- coding: utf-8 -*-

from __future__ import annotations

import unittest
from datetime import datetime, timezone
from unittest import mock

from google.api_core import exceptions as google_exceptions

from ayurtrack.documents import OrderBy, Where, query_with_index_fallback
from ayurtrack.documents.firestore import FirestoreDocumentStore
from ayurtrack.errors import IndexNotReadyError, NotFoundError


def snapshot(doc_id: str, data: dict | None = None, exists: bool = True) -> mock.Mock:
    snap = mock.Mock(id=doc_id, exists=exists)
    snap.to_dict.return_value = data
    return snap


class TestFirestoreQueries(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.client = mock.MagicMock()
        self.collection = self.client.collection.return_value
        # where(...) alone is the equality-only query; where(...).order_by(...) needs a composite index.
        self.equality = self.collection.where.return_value
        self.indexed = self.equality.order_by.return_value
        self.store = FirestoreDocumentStore(self.client)

    async def test_missing_index_raises_index_not_ready(self) -> None:
        self.indexed.stream.side_effect = google_exceptions.FailedPrecondition(
            "The query requires an index. You can create it here: https://console.firebase.google.com/..."
        )
        with self.assertRaises(IndexNotReadyError):
            await self.store.get_all("vitals", [Where("patientId", "==", "p1"), OrderBy("date")])
        self.client.collection.assert_called_with("vitals")

    async def test_other_failed_preconditions_propagate(self) -> None:
        self.indexed.stream.side_effect = google_exceptions.FailedPrecondition("Transaction aborted")
        with self.assertLogs("ayurtrack.documents.firestore", level="ERROR"):
            with self.assertRaises(google_exceptions.FailedPrecondition):
                await self.store.get_all("vitals", [Where("patientId", "==", "p1"), OrderBy("date")])

    async def test_fallback_sorts_equality_results(self) -> None:
        self.indexed.stream.side_effect = google_exceptions.FailedPrecondition("The query requires an index.")
        self.equality.stream.return_value = [
            snapshot("old", {"patientId": "p1", "date": datetime(2024, 3, 1, tzinfo=timezone.utc)}),
            snapshot("bad", {"patientId": "p1", "date": "not a date"}),
            snapshot("new", {"patientId": "p1", "date": datetime(2024, 3, 5, tzinfo=timezone.utc)}),
        ]

        with self.assertLogs("ayurtrack.documents.base", level="WARNING"):
            docs = await query_with_index_fallback(
                self.store, "vitals", [Where("patientId", "==", "p1"), OrderBy("date")]
            )

        self.assertEqual([d["id"] for d in docs], ["new", "old", "bad"])
        self.assertEqual(self.collection.where.call_count, 2)

    async def test_get_by_id_missing_returns_none(self) -> None:
        document = self.collection.document.return_value
        document.get.return_value = snapshot("gone", exists=False)
        self.assertIsNone(await self.store.get_by_id("patients", "gone"))

        document.get.return_value = snapshot("p1", {"name": "Asha"})
        self.assertEqual(await self.store.get_by_id("patients", "p1"), {"name": "Asha", "id": "p1"})


class TestFirestoreWrites(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.client = mock.MagicMock()
        self.collection = self.client.collection.return_value
        self.store = FirestoreDocumentStore(self.client)

    async def test_create_uses_generated_id_and_stamps_times(self) -> None:
        self.collection.add.return_value = (None, mock.Mock(id="generated"))

        doc = await self.store.create("patients", {"id": "caller-chosen", "name": "Asha"})

        self.assertEqual(doc["id"], "generated")
        sent = self.collection.add.call_args.args[0]
        self.assertNotIn("id", sent)
        self.assertEqual(sent["createdAt"], sent["updatedAt"])

    async def test_update_of_missing_document_raises_not_found(self) -> None:
        self.collection.document.return_value.update.side_effect = google_exceptions.NotFound("No document to update")

        with self.assertRaises(NotFoundError):
            await self.store.update("dietPlans", "nope", {"title": "T"})
        self.collection.document.assert_called_with("nope")

    async def test_update_strips_id_and_stamps_updated_at(self) -> None:
        await self.store.update("dietPlans", "d1", {"id": "other", "title": "T"})
        payload = self.collection.document.return_value.update.call_args.args[0]
        self.assertEqual(payload["title"], "T")
        self.assertNotIn("id", payload)
        self.assertIn("updatedAt", payload)


class TestFirestoreListeners(unittest.TestCase):
    def setUp(self) -> None:
        self.client = mock.MagicMock()
        self.collection = self.client.collection.return_value
        self.store = FirestoreDocumentStore(self.client)

    def test_subscribe_forwards_snapshots_and_returns_unsubscribe(self) -> None:
        query = self.collection.where.return_value
        received = []

        unsubscribe = self.store.subscribe("mealTracking", [Where("patientId", "==", "p1")], received.append)
        on_snapshot = query.on_snapshot.call_args.args[0]
        on_snapshot([snapshot("m1", {"status": "given"})], [], None)

        self.assertEqual(received, [[{"status": "given", "id": "m1"}]])
        self.assertIs(unsubscribe, query.on_snapshot.return_value.unsubscribe)

    def test_callback_errors_go_to_on_error(self) -> None:
        errors = []

        def explode(_docs):
            raise RuntimeError("listener failed")

        self.store.subscribe("mealTracking", [], explode, errors.append)
        on_snapshot = self.collection.on_snapshot.call_args.args[0]
        with self.assertLogs("ayurtrack.documents.firestore", level="ERROR"):
            on_snapshot([snapshot("m1", {})], [], None)

        self.assertEqual([str(e) for e in errors], ["listener failed"])

    def test_subscribe_document_reports_missing_as_none(self) -> None:
        document = self.collection.document.return_value
        received = []

        unsubscribe = self.store.subscribe_document("patients", "p1", received.append)
        on_snapshot = document.on_snapshot.call_args.args[0]
        on_snapshot([snapshot("p1", {"name": "Asha"})], [], None)
        on_snapshot([snapshot("p1", None, exists=False)], [], None)

        self.assertEqual(received, [{"name": "Asha", "id": "p1"}, None])
        self.collection.document.assert_called_with("p1")
        self.assertIs(unsubscribe, document.on_snapshot.return_value.unsubscribe)
