# -*- coding: utf-8 -*-
"""SQLite-backed document store for local development and tests.

Documents are stored as JSON blobs keyed by (collection, id). Queries load a
collection and evaluate constraints in memory. File I/O runs in worker
threads; subscriptions are served by in-process listeners that re-run their
query after every write and are called back on the event loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from itertools import count
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence
from uuid import uuid4

from ..errors import IndexNotReadyError, NotFoundError
from .base import (
    Constraint,
    Document,
    DocumentCallback,
    DocumentStore,
    ErrorCallback,
    SnapshotCallback,
    Unsubscribe,
    apply_constraints,
    coerce_datetime,
    needs_composite_index,
    utc_now,
)

logger = logging.getLogger(__name__)

_DATETIME_TAG = "$datetime"


def connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_documents_db(db_path: Path) -> None:
    conn = connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS documents (
                collection TEXT NOT NULL,
                id TEXT NOT NULL,
                data TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (collection, id)
            );
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS idx_documents_collection_created ON documents(collection, created_at DESC);"
        )
        conn.commit()
    finally:
        conn.close()


@contextmanager
def db_conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    conn = connect(db_path)
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def _encode_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return {_DATETIME_TAG: coerce_datetime(value).isoformat()}
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode_hook(obj: Dict[str, Any]) -> Any:
    if len(obj) == 1 and _DATETIME_TAG in obj:
        return datetime.fromisoformat(obj[_DATETIME_TAG])
    return obj


def _dumps(data: Document) -> str:
    return json.dumps(data, default=_encode_default, ensure_ascii=False)


def _loads(raw: str) -> Document:
    return json.loads(raw, object_hook=_decode_hook)


@dataclass
class _Listener:
    collection: str
    constraints: Sequence[Constraint]
    callback: Callable[[Any], None]
    on_error: Optional[ErrorCallback]
    doc_id: Optional[str] = None


class SqliteDocumentStore(DocumentStore):
    """Document store on a single SQLite file.

    ``building_indexes`` names collections whose composite-index queries fail
    with IndexNotReadyError, the way a hosted database behaves while an index
    is still being built.
    """

    def __init__(self, db_path: Path, *, building_indexes: Iterable[str] = ()) -> None:
        self.db_path = db_path
        self.building_indexes = set(building_indexes)
        self._listeners: Dict[int, _Listener] = {}
        self._listener_ids = count(1)
        self._write_lock = threading.Lock()
        init_documents_db(db_path)

    def _row_to_doc(self, row: sqlite3.Row) -> Document:
        return {**_loads(row["data"]), "id": row["id"]}

    def _load(self, collection: str, doc_id: str) -> Optional[Document]:
        with db_conn(self.db_path) as conn:
            row = conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            ).fetchone()
        return self._row_to_doc(row) if row else None

    def _query(self, collection: str, constraints: Sequence[Constraint]) -> List[Document]:
        if collection in self.building_indexes and needs_composite_index(constraints):
            raise IndexNotReadyError(collection, "The query requires an index.")
        with db_conn(self.db_path) as conn:
            rows = conn.execute(
                "SELECT id, data FROM documents WHERE collection = ? ORDER BY rowid ASC",
                (collection,),
            ).fetchall()
        return apply_constraints([self._row_to_doc(r) for r in rows], constraints)

    def _insert(self, collection: str, data: Document) -> Document:
        doc_id = uuid4().hex
        now = utc_now()
        doc = {k: v for k, v in data.items() if k != "id"}
        doc["createdAt"] = now
        doc["updatedAt"] = now
        with self._write_lock, db_conn(self.db_path) as conn:
            conn.execute(
                "INSERT INTO documents (collection, id, data, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (collection, doc_id, _dumps(doc), now.isoformat(), now.isoformat()),
            )
        return {**doc, "id": doc_id}

    def _merge(self, collection: str, doc_id: str, data: Document) -> None:
        with self._write_lock:
            existing = self._load(collection, doc_id)
            if existing is None:
                raise NotFoundError(collection, doc_id)
            now = utc_now()
            previous = coerce_datetime(existing.get("updatedAt"))
            if previous is not None and now <= previous:
                now = previous + timedelta(microseconds=1)
            merged = {k: v for k, v in existing.items() if k != "id"}
            merged.update({k: v for k, v in data.items() if k != "id"})
            merged["updatedAt"] = now
            with db_conn(self.db_path) as conn:
                conn.execute(
                    "UPDATE documents SET data = ?, updated_at = ? WHERE collection = ? AND id = ?",
                    (_dumps(merged), now.isoformat(), collection, doc_id),
                )

    def _remove(self, collection: str, doc_id: str) -> None:
        with self._write_lock, db_conn(self.db_path) as conn:
            conn.execute("DELETE FROM documents WHERE collection = ? AND id = ?", (collection, doc_id))

    async def create(self, collection: str, data: Document) -> Document:
        doc = await asyncio.to_thread(self._insert, collection, data)
        await self._notify(collection, doc["id"])
        return doc

    async def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        return await asyncio.to_thread(self._load, collection, doc_id)

    async def get_all(self, collection: str, constraints: Sequence[Constraint] = ()) -> List[Document]:
        return await asyncio.to_thread(self._query, collection, constraints)

    async def update(self, collection: str, doc_id: str, data: Document) -> None:
        await asyncio.to_thread(self._merge, collection, doc_id, data)
        await self._notify(collection, doc_id)

    async def delete(self, collection: str, doc_id: str) -> None:
        await asyncio.to_thread(self._remove, collection, doc_id)
        await self._notify(collection, doc_id)

    def subscribe(
        self,
        collection: str,
        constraints: Sequence[Constraint],
        callback: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        return self._listen(_Listener(collection, list(constraints), callback, on_error))

    def subscribe_document(
        self,
        collection: str,
        doc_id: str,
        callback: DocumentCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        return self._listen(_Listener(collection, [], callback, on_error, doc_id=doc_id))

    def _listen(self, listener: _Listener) -> Unsubscribe:
        listener_id = next(self._listener_ids)
        self._listeners[listener_id] = listener
        self._deliver(listener)

        def unsubscribe() -> None:
            self._listeners.pop(listener_id, None)

        return unsubscribe

    def _snapshot(self, listener: _Listener) -> Any:
        if listener.doc_id is not None:
            return self._load(listener.collection, listener.doc_id)
        return self._query(listener.collection, listener.constraints)

    def _deliver(self, listener: _Listener) -> None:
        try:
            snapshot = self._snapshot(listener)
        except Exception as exc:
            self._report(listener, exc)
            return
        listener.callback(snapshot)

    def _report(self, listener: _Listener, exc: Exception) -> None:
        logger.error("Error in listener for %s: %s", listener.collection, exc)
        if listener.on_error is not None:
            listener.on_error(exc)

    async def _notify(self, collection: str, doc_id: str) -> None:
        for listener_id, listener in list(self._listeners.items()):
            if listener.collection != collection:
                continue
            if listener.doc_id is not None and listener.doc_id != doc_id:
                continue
            try:
                snapshot = await asyncio.to_thread(self._snapshot, listener)
            except Exception as exc:
                self._report(listener, exc)
                continue
            # Unsubscribed while the query ran.
            if listener_id in self._listeners:
                listener.callback(snapshot)
