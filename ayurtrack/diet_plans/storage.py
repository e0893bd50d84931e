# -*- coding: utf-8 -*-
"""Diet plans — document storage with a cache-aside read path.

Single plans and the three list views (all, per patient, per dietitian) are
cached for 30 minutes; every write drops the plan and the lists it appears in.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional

from ..cache import CacheService
from ..documents import Collections, DocumentStore, OrderBy, Where, query_with_index_fallback
from ..errors import NotFoundError
from ..schema import parse_cached, parse_cached_list, parse_document, parse_documents, to_document
from .models import DietPlan, DietPlanCreateRequest, DietPlanUpdateRequest

logger = logging.getLogger(__name__)


def _list_scopes(patient_id: Optional[str], dietitian_id: Optional[str]) -> List[str]:
    return ["all", f"patient:{patient_id}", f"dietitian:{dietitian_id}"]


class DietPlanStorage:
    collection = Collections.DIET_PLANS

    def __init__(self, store: DocumentStore, cache: CacheService) -> None:
        self.store = store
        self.cache = cache

    async def _cached_list(self, scope: str, load: Callable[[], Awaitable[List[DietPlan]]]) -> List[DietPlan]:
        cached = await self.cache.get_cached_diet_plan_list(scope)
        if cached is not None:
            plans = parse_cached_list(DietPlan, cached)
            if plans is not None:
                return plans
            logger.warning("Dropping stale diet plan list cache entry %s", scope)
            await self.cache.invalidate_diet_plan_lists(scope)
        plans = await load()
        await self.cache.cache_diet_plan_list(scope, [p.to_public() for p in plans])
        return plans

    async def list_plans(self) -> List[DietPlan]:
        async def load() -> List[DietPlan]:
            docs = await self.store.get_all(self.collection, [OrderBy("createdAt")])
            return parse_documents(DietPlan, docs, self.collection)

        return await self._cached_list("all", load)

    async def get_plan(self, plan_id: str) -> Optional[DietPlan]:
        cached = await self.cache.get_cached_diet_plan(plan_id)
        if cached is not None:
            plan = parse_cached(DietPlan, cached)
            if plan is not None:
                return plan
            logger.warning("Dropping stale cache entry for diet plan %s", plan_id)
            await self.cache.invalidate_diet_plan(plan_id)
        doc = await self.store.get_by_id(self.collection, plan_id)
        if doc is None:
            return None
        plan = parse_document(DietPlan, doc, self.collection)
        await self.cache.cache_diet_plan(plan_id, plan.to_public())
        return plan

    async def _list_by(self, field: str, value: str) -> List[DietPlan]:
        docs = await query_with_index_fallback(
            self.store,
            self.collection,
            [Where(field, "==", value), OrderBy("createdAt")],
        )
        return parse_documents(DietPlan, docs, self.collection)

    async def list_by_patient(self, patient_id: str) -> List[DietPlan]:
        return await self._cached_list(
            f"patient:{patient_id}", lambda: self._list_by("patientId", patient_id)
        )

    async def list_by_dietitian(self, dietitian_id: str) -> List[DietPlan]:
        return await self._cached_list(
            f"dietitian:{dietitian_id}", lambda: self._list_by("dietitianId", dietitian_id)
        )

    async def get_current_plan(self, patient_id: str) -> Optional[DietPlan]:
        # Newest active plan wins; older active plans are left untouched.
        for plan in await self.list_by_patient(patient_id):
            if plan.is_active:
                return plan
        return None

    async def create_plan(self, request: DietPlanCreateRequest) -> DietPlan:
        doc = await self.store.create(self.collection, to_document(request))
        plan = parse_document(DietPlan, doc, self.collection)
        await self.cache.invalidate_diet_plan_lists(*_list_scopes(plan.patient_id, plan.dietitian_id))
        return plan

    async def update_plan(self, plan_id: str, request: DietPlanUpdateRequest) -> DietPlan:
        await self.store.update(self.collection, plan_id, to_document(request, partial=True))
        await self.cache.invalidate_diet_plan(plan_id)
        doc = await self.store.get_by_id(self.collection, plan_id)
        if doc is None:
            raise NotFoundError(self.collection, plan_id)
        plan = parse_document(DietPlan, doc, self.collection)
        await self.cache.invalidate_diet_plan_lists(*_list_scopes(plan.patient_id, plan.dietitian_id))
        return plan

    async def delete_plan(self, plan_id: str) -> None:
        doc = await self.store.get_by_id(self.collection, plan_id)
        await self.store.delete(self.collection, plan_id)
        await self.cache.invalidate_diet_plan(plan_id)
        if doc is not None:
            await self.cache.invalidate_diet_plan_lists(*_list_scopes(doc.get("patientId"), doc.get("dietitianId")))
