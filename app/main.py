"""
FastAPI application entry point.

Run:  uvicorn app.main:app --reload --port 8000
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from app.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s  %(name)s  %(levelname)s  %(message)s",
)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.component_service import ComponentService
from infrastructure import InMemoryComponentStore
from app.routes import router, init_service

logger = logging.getLogger(__name__)

service = ComponentService(
    InMemoryComponentStore(),
    debounce_seconds=settings.autosave_debounce_seconds,
)
init_service(service)


async def _autosave_loop(svc: ComponentService, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await asyncio.to_thread(svc.flush_autosaves)
        except Exception:
            logger.exception("Autosave pass failed")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    task = asyncio.create_task(_autosave_loop(service, settings.autosave_poll_seconds))
    try:
        yield
    finally:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


app = FastAPI(title=settings.app_title, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(router)


@app.get("/health")
def health():
    return {"status": "ok"}
