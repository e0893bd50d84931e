# -*- coding: utf-8 -*-
"""Vitals — document storage."""

from __future__ import annotations

from typing import List, Optional

from ..documents import Collections, DocumentStore, Limit, OrderBy, Where, query_with_index_fallback
from ..errors import NotFoundError
from ..schema import parse_document, parse_documents, to_document
from .models import Vitals, VitalsCreateRequest, VitalsUpdateRequest, compute_bmi


class VitalsStorage:
    collection = Collections.VITALS

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def list_by_patient(self, patient_id: str) -> List[Vitals]:
        docs = await query_with_index_fallback(
            self.store,
            self.collection,
            [Where("patientId", "==", patient_id), OrderBy("date")],
        )
        return parse_documents(Vitals, docs, self.collection)

    async def get_latest(self, patient_id: str) -> Optional[Vitals]:
        docs = await query_with_index_fallback(
            self.store,
            self.collection,
            [Where("patientId", "==", patient_id), OrderBy("date"), Limit(1)],
        )
        records = parse_documents(Vitals, docs, self.collection)
        return records[0] if records else None

    async def get_record(self, vitals_id: str) -> Optional[Vitals]:
        doc = await self.store.get_by_id(self.collection, vitals_id)
        return parse_document(Vitals, doc, self.collection) if doc else None

    async def create_record(self, request: VitalsCreateRequest) -> Vitals:
        doc = await self.store.create(self.collection, to_document(request))
        return parse_document(Vitals, doc, self.collection)

    async def update_record(self, vitals_id: str, request: VitalsUpdateRequest) -> Vitals:
        data = to_document(request, partial=True)
        if ("weight" in data or "height" in data) and "bmi" not in data:
            current = await self.get_record(vitals_id)
            if current is None:
                raise NotFoundError(self.collection, vitals_id)
            data["bmi"] = compute_bmi(data.get("weight", current.weight), data.get("height", current.height))
        await self.store.update(self.collection, vitals_id, data)
        record = await self.get_record(vitals_id)
        if record is None:
            raise NotFoundError(self.collection, vitals_id)
        return record

    async def delete_record(self, vitals_id: str) -> None:
        await self.store.delete(self.collection, vitals_id)
