# -*- coding: utf-8 -*-
"""Mess menus — API endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import get_store
from ..documents import DocumentStore
from ..envelope import ok
from .models import MessMenuCreateRequest, MessMenuUpdateRequest
from .storage import MessMenuStorage

router = APIRouter(prefix="/api/mess-menus", tags=["Mess menus"])


def get_mess_menu_storage(store: DocumentStore = Depends(get_store)) -> MessMenuStorage:
    return MessMenuStorage(store)


@router.get("/hospital/{hospital_id}", summary="List a hospital's menus, newest first")
async def list_hospital_menus(hospital_id: str, storage: MessMenuStorage = Depends(get_mess_menu_storage)):
    return ok([m.to_public() for m in await storage.list_by_hospital(hospital_id)])


@router.get("/hospital/{hospital_id}/today", summary="Active menu(s) dated today")
async def today_menus(
    hospital_id: str,
    on: date | None = Query(default=None, description="YYYY-MM-DD, defaults to today (UTC)"),
    storage: MessMenuStorage = Depends(get_mess_menu_storage),
):
    return ok([m.to_public() for m in await storage.get_today_menus(hospital_id, on=on)])


@router.post("/hospital/{hospital_id}/activate/{menu_id}", summary="Make a menu the hospital's active menu")
async def activate_menu(
    hospital_id: str,
    menu_id: str,
    storage: MessMenuStorage = Depends(get_mess_menu_storage),
):
    menu = await storage.set_active_menu(hospital_id, menu_id)
    return ok(menu.to_public(), "Menu activated")


@router.post("/hospital/{hospital_id}/reconcile", summary="Repair multiple active menus")
async def reconcile_menus(hospital_id: str, storage: MessMenuStorage = Depends(get_mess_menu_storage)):
    menu = await storage.reconcile_active_menu(hospital_id)
    return ok(menu.to_public() if menu else None)


@router.get("/{menu_id}", summary="Get a mess menu")
async def get_menu(menu_id: str, storage: MessMenuStorage = Depends(get_mess_menu_storage)):
    menu = await storage.get_menu(menu_id)
    if not menu:
        raise HTTPException(status_code=404, detail="Mess menu not found")
    return ok(menu.to_public())


@router.post("", status_code=201, summary="Create a mess menu")
async def create_menu(request: MessMenuCreateRequest, storage: MessMenuStorage = Depends(get_mess_menu_storage)):
    menu = await storage.create_menu(request)
    if request.is_active:
        menu = await storage.set_active_menu(menu.hospital_id, menu.id)
    return ok(menu.to_public(), "Mess menu created")


@router.put("/{menu_id}", summary="Update a mess menu")
async def update_menu(
    menu_id: str,
    request: MessMenuUpdateRequest,
    storage: MessMenuStorage = Depends(get_mess_menu_storage),
):
    menu = await storage.update_menu(menu_id, request)
    return ok(menu.to_public(), "Mess menu updated")


@router.delete("/{menu_id}", summary="Delete a mess menu")
async def delete_menu(menu_id: str, storage: MessMenuStorage = Depends(get_mess_menu_storage)):
    await storage.delete_menu(menu_id)
    return ok(None, "Mess menu deleted")
