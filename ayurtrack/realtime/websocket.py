# -*- coding: utf-8 -*-
"""
Realtime WebSocket module

Pushes live snapshots of a patient record and of the patient's meal tracking
and feedback records.
Store listeners may fire on another thread, so snapshots are handed to the
event loop through a queue.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional, Union

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from ..cache import CacheService
from ..deps import get_cache, get_store
from ..documents import DocumentStore, Unsubscribe, utc_now
from ..feedback.storage import FeedbackStorage
from ..meal_tracking.storage import MealTrackingStorage
from ..patients.storage import PatientStorage
from ..schema import StoredDocument

logger = logging.getLogger(__name__)

SubscribeFn = Callable[
    [Callable[[Any], None], Optional[Callable[[Exception], None]]],
    Unsubscribe,
]

router = APIRouter(prefix="/api/ws", tags=["Realtime"])


def _public(snapshot: Union[None, StoredDocument, List[StoredDocument]]) -> Any:
    if snapshot is None:
        return None
    if isinstance(snapshot, list):
        return [r.to_public() for r in snapshot]
    return snapshot.to_public()


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def stream_snapshots(websocket: WebSocket, channel: str, patient_id: str, subscribe: SubscribeFn) -> None:
    """Accept the socket and forward every snapshot until the client leaves."""
    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def on_snapshot(snapshot: Any) -> None:
        payload = {"type": "snapshot", "data": _public(snapshot)}
        loop.call_soon_threadsafe(queue.put_nowait, payload)

    def on_error(exc: Exception) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, {"type": "error", "message": str(exc)})

    await websocket.send_json(
        {"type": "connected", "channel": channel, "patientId": patient_id, "timestamp": utc_now().isoformat()}
    )
    unsubscribe = subscribe(on_snapshot, on_error)
    logger.info("WebSocket subscribed: %s/%s", channel, patient_id)

    reader = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({getter, reader}, return_when=asyncio.FIRST_COMPLETED)
            if reader in done:
                getter.cancel()
                break
            message: dict[str, Any] = getter.result()
            message.update(channel=channel, patientId=patient_id, timestamp=utc_now().isoformat())
            await websocket.send_json(message)
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        reader.cancel()
        logger.info("WebSocket disconnected: %s/%s", channel, patient_id)


@router.websocket("/meal-tracking/{patient_id}")
async def meal_tracking_websocket(websocket: WebSocket, patient_id: str, store: DocumentStore = Depends(get_store)):
    storage = MealTrackingStorage(store)
    await stream_snapshots(
        websocket,
        "meal-tracking",
        patient_id,
        lambda callback, on_error: storage.subscribe(patient_id, callback, on_error),
    )


@router.websocket("/feedback/{patient_id}")
async def feedback_websocket(websocket: WebSocket, patient_id: str, store: DocumentStore = Depends(get_store)):
    storage = FeedbackStorage(store)
    await stream_snapshots(
        websocket,
        "feedback",
        patient_id,
        lambda callback, on_error: storage.subscribe(patient_id, callback, on_error),
    )


@router.websocket("/patients/{patient_id}")
async def patient_websocket(
    websocket: WebSocket,
    patient_id: str,
    store: DocumentStore = Depends(get_store),
    cache: CacheService = Depends(get_cache),
):
    storage = PatientStorage(store, cache)
    await stream_snapshots(
        websocket,
        "patient",
        patient_id,
        lambda callback, on_error: storage.watch_patient(patient_id, callback, on_error),
    )
