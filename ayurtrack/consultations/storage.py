# -*- coding: utf-8 -*-
"""Consultations — document storage."""

from __future__ import annotations

from typing import List, Optional

from ..documents import Collections, DocumentStore, OrderBy, Where, query_with_index_fallback
from ..errors import NotFoundError
from ..schema import parse_document, parse_documents, to_document
from .models import Consultation, ConsultationCreateRequest, ConsultationStatus, ConsultationUpdateRequest


class ConsultationStorage:
    collection = Collections.CONSULTATIONS

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def list_consultations(self) -> List[Consultation]:
        docs = await self.store.get_all(self.collection, [OrderBy("date")])
        return parse_documents(Consultation, docs, self.collection)

    async def list_by_patient(self, patient_id: str) -> List[Consultation]:
        docs = await query_with_index_fallback(
            self.store,
            self.collection,
            [Where("patientId", "==", patient_id), OrderBy("date")],
        )
        return parse_documents(Consultation, docs, self.collection)

    async def list_by_dietitian(self, dietitian_id: str) -> List[Consultation]:
        docs = await query_with_index_fallback(
            self.store,
            self.collection,
            [Where("dietitianId", "==", dietitian_id), OrderBy("date")],
        )
        return parse_documents(Consultation, docs, self.collection)

    async def get_consultation(self, consultation_id: str) -> Optional[Consultation]:
        doc = await self.store.get_by_id(self.collection, consultation_id)
        return parse_document(Consultation, doc, self.collection) if doc else None

    async def create_consultation(self, request: ConsultationCreateRequest) -> Consultation:
        doc = await self.store.create(self.collection, to_document(request))
        return parse_document(Consultation, doc, self.collection)

    async def _write(self, consultation_id: str, data: dict) -> Consultation:
        await self.store.update(self.collection, consultation_id, data)
        consultation = await self.get_consultation(consultation_id)
        if consultation is None:
            raise NotFoundError(self.collection, consultation_id)
        return consultation

    async def update_consultation(self, consultation_id: str, request: ConsultationUpdateRequest) -> Consultation:
        return await self._write(consultation_id, to_document(request, partial=True))

    async def set_status(self, consultation_id: str, status: ConsultationStatus) -> Consultation:
        return await self._write(consultation_id, {"status": status})

    async def delete_consultation(self, consultation_id: str) -> None:
        await self.store.delete(self.collection, consultation_id)
