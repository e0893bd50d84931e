# -*- coding: utf-8 -*-
"""Cloud Firestore document store."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, List, Optional, Sequence

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2 import service_account

from ..config import Settings
from ..errors import IndexNotReadyError, NotFoundError
from .base import (
    Constraint,
    Document,
    DocumentCallback,
    DocumentStore,
    ErrorCallback,
    Limit,
    OrderBy,
    SnapshotCallback,
    Unsubscribe,
    Where,
    utc_now,
)

logger = logging.getLogger(__name__)


_FIRESTORE_OPS = {"array_contains": "array-contains", "array_contains_any": "array-contains-any"}


def _is_missing_index(exc: Exception) -> bool:
    return isinstance(exc, google_exceptions.FailedPrecondition) and "index" in str(exc).lower()


class FirestoreDocumentStore(DocumentStore):
    """Wraps the synchronous Firestore client; blocking calls run in worker threads."""

    def __init__(self, client: firestore.Client) -> None:
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirestoreDocumentStore":
        if settings.firebase_service_account_key:
            try:
                info = json.loads(settings.firebase_service_account_key)
            except json.JSONDecodeError:
                logger.error("Failed to parse FIREBASE_SERVICE_ACCOUNT_KEY as JSON")
                raise
            credentials = service_account.Credentials.from_service_account_info(info)
            project = settings.firebase_project_id or info.get("project_id")
            logger.info("Firestore initialized with service account for project %s", project)
            return cls(firestore.Client(project=project, credentials=credentials))
        logger.warning("No service account key found, using default credentials")
        return cls(firestore.Client(project=settings.firebase_project_id))

    def _query(self, collection: str, constraints: Sequence[Constraint]) -> Any:
        query: Any = self.client.collection(collection)
        for constraint in constraints:
            if isinstance(constraint, Where):
                op = _FIRESTORE_OPS.get(constraint.op, constraint.op)
                query = query.where(filter=FieldFilter(constraint.field, op, constraint.value))
            elif isinstance(constraint, OrderBy):
                direction = firestore.Query.DESCENDING if constraint.descending else firestore.Query.ASCENDING
                query = query.order_by(constraint.field, direction=direction)
            elif isinstance(constraint, Limit):
                query = query.limit(constraint.count)
        return query

    async def create(self, collection: str, data: Document) -> Document:
        now = utc_now()
        doc = {k: v for k, v in data.items() if k != "id"}
        doc["createdAt"] = now
        doc["updatedAt"] = now
        try:
            _, ref = await asyncio.to_thread(self.client.collection(collection).add, doc)
        except Exception as exc:
            logger.error("Error creating document in %s: %s", collection, exc)
            raise
        return {**doc, "id": ref.id}

    async def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        try:
            snap = await asyncio.to_thread(self.client.collection(collection).document(doc_id).get)
        except Exception as exc:
            logger.error("Error getting document %s from %s: %s", doc_id, collection, exc)
            raise
        if not snap.exists:
            return None
        return {**(snap.to_dict() or {}), "id": snap.id}

    async def get_all(self, collection: str, constraints: Sequence[Constraint] = ()) -> List[Document]:
        query = self._query(collection, constraints)
        try:
            snaps = await asyncio.to_thread(lambda: list(query.stream()))
        except Exception as exc:
            if _is_missing_index(exc):
                raise IndexNotReadyError(collection, str(exc)) from exc
            logger.error("Error getting documents from %s: %s", collection, exc)
            raise
        return [{**(s.to_dict() or {}), "id": s.id} for s in snaps]

    async def update(self, collection: str, doc_id: str, data: Document) -> None:
        payload = {k: v for k, v in data.items() if k != "id"}
        payload["updatedAt"] = utc_now()
        ref = self.client.collection(collection).document(doc_id)
        try:
            await asyncio.to_thread(ref.update, payload)
        except google_exceptions.NotFound as exc:
            raise NotFoundError(collection, doc_id) from exc
        except Exception as exc:
            logger.error("Error updating document %s in %s: %s", doc_id, collection, exc)
            raise

    async def delete(self, collection: str, doc_id: str) -> None:
        try:
            await asyncio.to_thread(self.client.collection(collection).document(doc_id).delete)
        except Exception as exc:
            logger.error("Error deleting document %s from %s: %s", doc_id, collection, exc)
            raise

    def subscribe(
        self,
        collection: str,
        constraints: Sequence[Constraint],
        callback: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        # on_snapshot callbacks arrive on the client's watch thread.
        def on_snapshot(snapshots, _changes, _read_time) -> None:
            try:
                callback([{**(s.to_dict() or {}), "id": s.id} for s in snapshots])
            except Exception as exc:
                logger.error("Error in real-time listener for %s: %s", collection, exc)
                if on_error is not None:
                    on_error(exc)

        watch = self._query(collection, constraints).on_snapshot(on_snapshot)
        return watch.unsubscribe

    def subscribe_document(
        self,
        collection: str,
        doc_id: str,
        callback: DocumentCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        def on_snapshot(snapshots, _changes, _read_time) -> None:
            try:
                snap = snapshots[0] if snapshots else None
                if snap is None or not snap.exists:
                    callback(None)
                else:
                    callback({**(snap.to_dict() or {}), "id": snap.id})
            except Exception as exc:
                logger.error("Error in document listener for %s/%s: %s", collection, doc_id, exc)
                if on_error is not None:
                    on_error(exc)

        watch = self.client.collection(collection).document(doc_id).on_snapshot(on_snapshot)
        return watch.unsubscribe

    async def close(self) -> None:
        await asyncio.to_thread(self.client.close)
