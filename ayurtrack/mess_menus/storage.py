# -*- coding: utf-8 -*-
"""Mess menus — document storage and the active-menu switch.

Switching the active menu is two steps (deactivate every active menu, then
activate the target) and is not atomic: a crash in between, or two concurrent
switches for the same hospital, can leave zero or several menus active.
`reconcile_active_menu` repairs that state after the fact.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from ..documents import (
    Collections,
    DocumentStore,
    OrderBy,
    Where,
    coerce_datetime,
    day_bounds,
    query_with_index_fallback,
    utc_now,
)
from ..errors import ConflictError, NotFoundError
from ..schema import parse_document, parse_documents, to_document
from .models import MessMenu, MessMenuCreateRequest, MessMenuUpdateRequest

logger = logging.getLogger(__name__)


class MessMenuStorage:
    collection = Collections.MESS_MENUS

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def get_menu(self, menu_id: str) -> Optional[MessMenu]:
        doc = await self.store.get_by_id(self.collection, menu_id)
        return parse_document(MessMenu, doc, self.collection) if doc else None

    async def list_by_hospital(self, hospital_id: str) -> List[MessMenu]:
        docs = await query_with_index_fallback(
            self.store,
            self.collection,
            [Where("hospitalId", "==", hospital_id), OrderBy("date")],
        )
        return parse_documents(MessMenu, docs, self.collection)

    async def get_today_menus(self, hospital_id: str, *, on: Optional[date] = None) -> List[MessMenu]:
        start, end = day_bounds(on or utc_now().date())
        docs = await query_with_index_fallback(
            self.store,
            self.collection,
            [
                Where("hospitalId", "==", hospital_id),
                Where("date", ">=", start),
                Where("date", "<", end),
                Where("isActive", "==", True),
            ],
        )
        return parse_documents(MessMenu, docs, self.collection)

    async def list_active(self, hospital_id: str) -> List[MessMenu]:
        docs = await self.store.get_all(
            self.collection,
            [Where("hospitalId", "==", hospital_id), Where("isActive", "==", True)],
        )
        return parse_documents(MessMenu, docs, self.collection)

    async def create_menu(self, request: MessMenuCreateRequest) -> MessMenu:
        doc = await self.store.create(self.collection, to_document(request))
        return parse_document(MessMenu, doc, self.collection)

    async def update_menu(self, menu_id: str, request: MessMenuUpdateRequest) -> MessMenu:
        await self.store.update(self.collection, menu_id, to_document(request, partial=True))
        menu = await self.get_menu(menu_id)
        if menu is None:
            raise NotFoundError(self.collection, menu_id)
        return menu

    async def delete_menu(self, menu_id: str) -> None:
        await self.store.delete(self.collection, menu_id)

    async def set_active_menu(self, hospital_id: str, menu_id: str) -> MessMenu:
        target = await self.get_menu(menu_id)
        if target is None:
            raise NotFoundError(self.collection, menu_id)
        if target.hospital_id != hospital_id:
            raise ConflictError(f"Menu {menu_id} does not belong to hospital {hospital_id}")

        active = await self.list_active(hospital_id)
        await asyncio.gather(
            *(self.store.update(self.collection, m.id, {"isActive": False}) for m in active)
        )
        await self.store.update(self.collection, menu_id, {"isActive": True})
        activated = await self.get_menu(menu_id)
        if activated is None:
            raise NotFoundError(self.collection, menu_id)
        return activated

    async def reconcile_active_menu(self, hospital_id: str) -> Optional[MessMenu]:
        """Keep the most recently updated active menu and deactivate the rest."""
        active = await self.list_active(hospital_id)
        if len(active) <= 1:
            return active[0] if active else None
        active.sort(key=lambda m: coerce_datetime(m.updated_at) or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        keep, extra = active[0], active[1:]
        logger.warning(
            "Hospital %s had %d active menus; keeping %s",
            hospital_id,
            len(active),
            keep.id,
        )
        await asyncio.gather(
            *(self.store.update(self.collection, m.id, {"isActive": False}) for m in extra)
        )
        return keep
