# -*- coding: utf-8 -*-
"""Shared pydantic base classes and the document <-> model boundary."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated, Any, ClassVar, Dict, FrozenSet, Iterable, List, Optional, Type, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from .errors import DocumentShapeError

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """camelCase on the wire and in the store, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UpdateRequest(CamelModel):
    """Partial update; only the fields the caller sends are merged.

    Fields named in `nullable` may be sent as null to clear them. Any other
    field sent as null is rejected, since the stored entity requires it.
    """

    nullable: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_required_nulls(self) -> "UpdateRequest":
        cleared = sorted(
            name for name in self.model_fields_set
            if getattr(self, name) is None and name not in self.nullable
        )
        if cleared:
            raise ValueError("cannot be null: " + ", ".join(to_camel(name) for name in cleared))
        return self


class StoredDocument(CamelModel):
    id: str
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None

    def to_public(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


M = TypeVar("M", bound=BaseModel)

_READONLY_FIELDS = {"id", "createdAt", "updatedAt"}


def to_document(model: BaseModel, *, partial: bool = False) -> Dict[str, Any]:
    """Dump a request model into store fields.

    Partial dumps keep only fields the caller sent, for merge updates.
    """
    if partial:
        data = model.model_dump(by_alias=True, exclude_unset=True)
    else:
        data = model.model_dump(by_alias=True, exclude_none=True)
    return {k: v for k, v in data.items() if k not in _READONLY_FIELDS}


def parse_document(model: Type[M], doc: Dict[str, Any], collection: str) -> M:
    try:
        return model.model_validate(doc)
    except ValidationError as exc:
        raise DocumentShapeError(
            f"Document {doc.get('id')} in {collection} does not match {model.__name__}"
        ) from exc


def parse_cached(model: Type[M], value: Any) -> Optional[M]:
    """Validate a cache entry; None when it no longer matches the model."""
    try:
        return model.model_validate(value)
    except ValidationError:
        return None


def parse_cached_list(model: Type[M], value: Any) -> Optional[List[M]]:
    if not isinstance(value, list):
        return None
    items = [parse_cached(model, item) for item in value]
    if any(item is None for item in items):
        return None
    return items


def parse_documents(model: Type[M], docs: Iterable[Dict[str, Any]], collection: str) -> List[M]:
    out: List[M] = []
    for doc in docs:
        try:
            out.append(model.model_validate(doc))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed %s document %s (%d errors)",
                collection,
                doc.get("id"),
                exc.error_count(),
            )
    return out
