# -*- coding: utf-8 -*-
"""Patients — document storage with a cache-aside read path."""

from __future__ import annotations

import logging
import secrets
import string
from typing import Callable, List, Optional

from ..cache import CacheService
from ..documents import Collections, DocumentStore, Unsubscribe, Where
from ..errors import ConflictError, DocumentShapeError, NotFoundError
from ..schema import parse_cached, parse_document, parse_documents, to_document
from .models import Patient, PatientCreateRequest, PatientLinkRequest, PatientUpdateRequest

logger = logging.getLogger(__name__)

_CODE_ALPHABET = string.ascii_uppercase + string.digits
_CODE_ATTEMPTS = 5


def generate_patient_code() -> str:
    return "AYU-" + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(6))


class PatientStorage:
    collection = Collections.PATIENTS

    def __init__(self, store: DocumentStore, cache: CacheService) -> None:
        self.store = store
        self.cache = cache

    async def list_patients(
        self,
        *,
        dietitian_id: Optional[str] = None,
        hospital_id: Optional[str] = None,
    ) -> List[Patient]:
        constraints = []
        if dietitian_id:
            constraints.append(Where("dietitianId", "==", dietitian_id))
        if hospital_id:
            constraints.append(Where("hospitalId", "==", hospital_id))
        docs = await self.store.get_all(self.collection, constraints)
        return parse_documents(Patient, docs, self.collection)

    async def get_patient(self, patient_id: str) -> Optional[Patient]:
        cached = await self.cache.get_cached_patient(patient_id)
        if cached is not None:
            patient = parse_cached(Patient, cached)
            if patient is not None:
                return patient
            logger.warning("Dropping stale cache entry for patient %s", patient_id)
            await self.cache.invalidate_patient(patient_id)
        doc = await self.store.get_by_id(self.collection, patient_id)
        if doc is None:
            return None
        patient = parse_document(Patient, doc, self.collection)
        await self.cache.cache_patient(patient_id, patient.to_public())
        return patient

    async def get_by_code(self, code: str) -> Optional[Patient]:
        docs = await self.store.get_all(self.collection, [Where("code", "==", code.strip().upper())])
        patients = parse_documents(Patient, docs, self.collection)
        return patients[0] if patients else None

    async def _unique_code(self) -> str:
        for _ in range(_CODE_ATTEMPTS):
            code = generate_patient_code()
            if await self.get_by_code(code) is None:
                return code
        raise ConflictError("Could not allocate a unique patient code")

    async def create_patient(self, request: PatientCreateRequest) -> Patient:
        data = to_document(request)
        if request.code:
            code = request.code.strip().upper()
            if await self.get_by_code(code) is not None:
                raise ConflictError(f"Patient code {code} is already in use")
        else:
            code = await self._unique_code()
        data["code"] = code
        doc = await self.store.create(self.collection, data)
        if "registrationDate" not in doc:
            await self.store.update(self.collection, doc["id"], {"registrationDate": doc["createdAt"]})
            doc["registrationDate"] = doc["createdAt"]
        return parse_document(Patient, doc, self.collection)

    async def _write(self, patient_id: str, data: dict) -> Patient:
        await self.store.update(self.collection, patient_id, data)
        await self.cache.invalidate_patient(patient_id)
        doc = await self.store.get_by_id(self.collection, patient_id)
        if doc is None:
            raise NotFoundError(self.collection, patient_id)
        return parse_document(Patient, doc, self.collection)

    async def update_patient(self, patient_id: str, request: PatientUpdateRequest) -> Patient:
        return await self._write(patient_id, to_document(request, partial=True))

    async def link_patient(self, patient_id: str, request: PatientLinkRequest) -> Patient:
        return await self._write(patient_id, to_document(request, partial=True))

    async def delete_patient(self, patient_id: str) -> None:
        await self.store.delete(self.collection, patient_id)
        await self.cache.invalidate_patient(patient_id)

    def subscribe(
        self,
        callback: Callable[[List[Patient]], None],
        *,
        dietitian_id: Optional[str] = None,
    ) -> Unsubscribe:
        constraints = [Where("dietitianId", "==", dietitian_id)] if dietitian_id else []
        return self.store.subscribe(
            self.collection,
            constraints,
            lambda docs: callback(parse_documents(Patient, docs, self.collection)),
        )

    def watch_patient(
        self,
        patient_id: str,
        callback: Callable[[Optional[Patient]], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Unsubscribe:
        """Follow one patient; the callback gets None while the record does not exist."""

        def on_document(doc: Optional[dict]) -> None:
            if doc is None:
                callback(None)
                return
            try:
                patient = parse_document(Patient, doc, self.collection)
            except DocumentShapeError as exc:
                if on_error is None:
                    raise
                on_error(exc)
                return
            callback(patient)

        return self.store.subscribe_document(self.collection, patient_id, on_document, on_error)
