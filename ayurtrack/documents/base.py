# -*- coding: utf-8 -*-
"""Document store interface, query constraints and client-side query helpers."""

from __future__ import annotations

import abc
import logging
import operator
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..errors import IndexNotReadyError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
SnapshotCallback = Callable[[List[Document]], None]
DocumentCallback = Callable[[Optional[Document]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
RANGE_OPS = {"<", "<=", ">", ">=", "!=", "not-in"}

_COMPARATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


@dataclass(frozen=True)
class Where:
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = True


@dataclass(frozen=True)
class Limit:
    count: int


Constraint = Union[Where, OrderBy, Limit]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """UTC midnight of `day` and of the following day."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Best-effort conversion of stored date values to aware UTC datetimes.

    Accepts datetimes, dates, ISO strings, epoch seconds and Firestore-style
    ``{"seconds": ..., "nanoseconds": ...}`` mappings. Returns None otherwise.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, dict) and "seconds" in value:
        try:
            seconds = float(value["seconds"]) + float(value.get("nanoseconds") or 0) / 1e9
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (TypeError, ValueError, OverflowError):
            return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
    if isinstance(value, str) and value.strip():
        try:
            return coerce_datetime(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
        except ValueError:
            return None
    return None


def sort_by_date_desc(docs: Iterable[Document], field: str) -> List[Document]:
    """Newest first; missing or unparseable dates sort as the epoch."""
    return sorted(docs, key=lambda d: coerce_datetime(d.get(field)) or EPOCH, reverse=True)


def needs_composite_index(constraints: Sequence[Constraint]) -> bool:
    """Whether a query shape needs a server-side composite index.

    That is the case when results are ordered by a field that is not filtered
    on, or when a range filter is combined with a filter on another field.
    """
    wheres = [c for c in constraints if isinstance(c, Where)]
    if not wheres:
        return False
    filtered = {w.field for w in wheres}
    orders = [c for c in constraints if isinstance(c, OrderBy)]
    if any(o.field not in filtered for o in orders):
        return True
    range_fields = {w.field for w in wheres if w.op in RANGE_OPS}
    return bool(range_fields) and bool(filtered - range_fields)


def _comparable(actual: Any, expected: Any) -> tuple[Any, Any]:
    if isinstance(expected, (datetime, date)) or isinstance(actual, (datetime, date)):
        return coerce_datetime(actual), coerce_datetime(expected)
    return actual, expected


def matches(doc: Document, where: Where) -> bool:
    actual = doc.get(where.field)
    op = where.op
    if op == "array_contains":
        return isinstance(actual, list) and where.value in actual
    if op == "array_contains_any":
        return isinstance(actual, list) and any(v in actual for v in where.value)
    if op == "in":
        return actual in where.value
    if op == "not-in":
        return where.field in doc and actual not in where.value
    a, b = _comparable(actual, where.value)
    if op == "==":
        return a == b
    if op == "!=":
        return where.field in doc and a != b
    comparator = _COMPARATORS.get(op)
    if comparator is None:
        raise ValueError(f"Unsupported filter operator: {op}")
    if a is None or b is None:
        return False
    try:
        return comparator(a, b)
    except TypeError:
        return False


def _order_key(value: Any) -> tuple:
    # Roughly the cross-type ordering document databases use.
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, float(value))
    if isinstance(value, (datetime, date)):
        return (3, coerce_datetime(value).timestamp())
    if isinstance(value, str):
        return (4, value)
    return (5, str(value))


def apply_constraints(docs: Iterable[Document], constraints: Sequence[Constraint]) -> List[Document]:
    """Evaluate filters, ordering and limit in memory."""
    result = [d for d in docs if all(matches(d, c) for c in constraints if isinstance(c, Where))]
    for order in reversed([c for c in constraints if isinstance(c, OrderBy)]):
        result.sort(key=lambda d: _order_key(d.get(order.field)), reverse=order.descending)
    limits = [c.count for c in constraints if isinstance(c, Limit)]
    if limits:
        result = result[: min(limits)]
    return result


class DocumentStore(abc.ABC):
    """CRUD + subscribe over named collections of schema-less documents.

    Returned documents always carry their ``id``; ``createdAt`` and
    ``updatedAt`` are assigned here, never by the caller.
    """

    @abc.abstractmethod
    async def create(self, collection: str, data: Document) -> Document:
        ...

    @abc.abstractmethod
    async def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        ...

    @abc.abstractmethod
    async def get_all(self, collection: str, constraints: Sequence[Constraint] = ()) -> List[Document]:
        ...

    @abc.abstractmethod
    async def update(self, collection: str, doc_id: str, data: Document) -> None:
        """Merge ``data`` into the document; raises NotFoundError if it does not exist."""

    @abc.abstractmethod
    async def delete(self, collection: str, doc_id: str) -> None:
        ...

    @abc.abstractmethod
    def subscribe(
        self,
        collection: str,
        constraints: Sequence[Constraint],
        callback: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        """Deliver the current result set, then a fresh one after every change."""

    @abc.abstractmethod
    def subscribe_document(
        self,
        collection: str,
        doc_id: str,
        callback: DocumentCallback,
        on_error: ErrorCallback | None = None,
    ) -> Unsubscribe:
        """Deliver one document (None while it does not exist), then again after every change."""

    async def close(self) -> None:
        return None


async def query_with_index_fallback(
    store: DocumentStore,
    collection: str,
    constraints: Sequence[Constraint],
) -> List[Document]:
    """Run an indexed query, falling back to equality filters plus client-side work.

    When the database reports that the composite index is still building, the
    equality filters are sent on their own and the remaining filters, the
    ordering (newest first, unparseable dates as epoch) and the limit are
    applied here.
    """
    try:
        return await store.get_all(collection, constraints)
    except IndexNotReadyError:
        logger.warning("%s index is building, using fallback query", collection)

    equality = [c for c in constraints if isinstance(c, Where) and c.op == "=="]
    docs = await store.get_all(collection, equality)
    docs = [d for d in docs if all(matches(d, c) for c in constraints if isinstance(c, Where))]
    for order in reversed([c for c in constraints if isinstance(c, OrderBy)]):
        docs = sorted(
            docs,
            key=lambda d: coerce_datetime(d.get(order.field)) or EPOCH,
            reverse=order.descending,
        )
    limits = [c.count for c in constraints if isinstance(c, Limit)]
    if limits:
        docs = docs[: min(limits)]
    return docs
