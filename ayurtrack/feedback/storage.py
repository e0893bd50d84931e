# -*- coding: utf-8 -*-
"""Patient feedback — document storage."""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, List, Optional

from ..documents import (
    Collections,
    DocumentStore,
    OrderBy,
    Unsubscribe,
    Where,
    day_bounds,
    query_with_index_fallback,
    utc_now,
)
from ..errors import NotFoundError
from ..schema import parse_document, parse_documents, to_document
from .models import FeedbackCreateRequest, FeedbackUpdateRequest, PatientFeedback


class FeedbackStorage:
    collection = Collections.PATIENT_FEEDBACK

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def _query(self, constraints: list) -> List[PatientFeedback]:
        docs = await query_with_index_fallback(self.store, self.collection, constraints)
        return parse_documents(PatientFeedback, docs, self.collection)

    async def list_by_patient(self, patient_id: str) -> List[PatientFeedback]:
        return await self._query([Where("patientId", "==", patient_id), OrderBy("date")])

    async def list_by_date_range(self, patient_id: str, start: datetime, end: datetime) -> List[PatientFeedback]:
        return await self._query(
            [
                Where("patientId", "==", patient_id),
                Where("date", ">=", start),
                Where("date", "<=", end),
                OrderBy("date"),
            ]
        )

    async def list_today(self, patient_id: str, *, on: Optional[date] = None) -> List[PatientFeedback]:
        start, end = day_bounds(on or utc_now().date())
        return await self._query(
            [
                Where("patientId", "==", patient_id),
                Where("date", ">=", start),
                Where("date", "<", end),
            ]
        )

    async def get_feedback(self, feedback_id: str) -> Optional[PatientFeedback]:
        doc = await self.store.get_by_id(self.collection, feedback_id)
        return parse_document(PatientFeedback, doc, self.collection) if doc else None

    async def create_feedback(self, request: FeedbackCreateRequest) -> PatientFeedback:
        data = to_document(request)
        data.setdefault("date", utc_now())
        doc = await self.store.create(self.collection, data)
        return parse_document(PatientFeedback, doc, self.collection)

    async def update_feedback(self, feedback_id: str, request: FeedbackUpdateRequest) -> PatientFeedback:
        await self.store.update(self.collection, feedback_id, to_document(request, partial=True))
        feedback = await self.get_feedback(feedback_id)
        if feedback is None:
            raise NotFoundError(self.collection, feedback_id)
        return feedback

    async def delete_feedback(self, feedback_id: str) -> None:
        await self.store.delete(self.collection, feedback_id)

    def subscribe(
        self,
        patient_id: str,
        callback: Callable[[List[PatientFeedback]], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Unsubscribe:
        return self.store.subscribe(
            self.collection,
            [Where("patientId", "==", patient_id), OrderBy("date")],
            lambda docs: callback(parse_documents(PatientFeedback, docs, self.collection)),
            on_error,
        )
