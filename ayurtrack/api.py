# -*- coding: utf-8 -*-
"""
AyurTrack backend API

Patient records, vitals, mess menus, diet plans, meal tracking, feedback and
AI-drafted diet content for Ayurvedic hospital kitchens.
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .ai.api import router as ai_router
from .ai.client import ChatModel
from .ai.service import AIDraftingService
from .cache import CacheService
from .config import Settings, settings as default_settings
from .consultations.api import router as consultations_router
from .diet_plans.api import router as diet_plans_router
from .documents import DocumentStore, create_document_store, utc_now
from .envelope import install_exception_handlers
from .feedback.api import router as feedback_router
from .foods.api import router as foods_router
from .meal_tracking.api import router as meal_tracking_router
from .mess_menus.api import router as mess_menus_router
from .patients.api import router as patients_router
from .realtime import router as realtime_router
from .vitals.api import router as vitals_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[DocumentStore] = None,
    cache: Optional[CacheService] = None,
    ai: Optional[AIDraftingService] = None,
) -> FastAPI:
    """Build the application.

    Clients passed in are used as-is and left open on shutdown; anything not
    passed is created from settings in the lifespan and closed with it.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with AsyncExitStack() as owned:
            if app.state.store is None:
                app.state.store = create_document_store(settings)
                owned.push_async_callback(app.state.store.close)
            if app.state.cache is None:
                app.state.cache = CacheService.from_url(settings.redis_url)
                owned.push_async_callback(app.state.cache.close)
            if not await app.state.cache.connect() and settings.is_production:
                raise RuntimeError("Redis is required in production")
            if app.state.ai is None:
                app.state.ai = AIDraftingService(ChatModel.from_settings(settings), app.state.cache)
                owned.push_async_callback(app.state.ai.aclose)
            logger.info("AyurTrack Backend API starting (env=%s, store=%s)", settings.env, settings.document_backend)
            yield
            logger.info("AyurTrack Backend API shutting down")

    app = FastAPI(
        title="AyurTrack Backend API",
        description="Ayurvedic diet planning, meal tracking and AI-drafted diet charts",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.cache = cache
    app.state.ai = ai

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_exception_handlers(app, settings)

    @app.get("/health", tags=["Health"])
    async def health() -> dict:
        return {
            "status": "OK",
            "timestamp": utc_now().isoformat(),
            "service": "AyurTrack Backend API",
        }

    app.include_router(patients_router)
    app.include_router(diet_plans_router)
    app.include_router(mess_menus_router)
    app.include_router(vitals_router)
    app.include_router(consultations_router)
    app.include_router(meal_tracking_router)
    app.include_router(feedback_router)
    app.include_router(foods_router)
    app.include_router(ai_router)
    app.include_router(realtime_router)
    return app


logging.basicConfig(
    level=getattr(logging, default_settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    uvicorn.run("ayurtrack.api:app", host=default_settings.host, port=default_settings.port, reload=False)
