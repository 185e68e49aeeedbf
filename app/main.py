# app/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.api_router import api_router
from app.core.config import settings
from app.core.dependencies import get_renderer
from app.db import init_db
from app.db.session import SessionLocal
from app.services.autosave import AutoSaveRegistry, CaseStoreWriter
import logging
from app.core.logging import configure_logging

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.info("Starting up: initializing DB...")
    init_db.init_db()
    app.state.renderer = get_renderer()
    app.state.autosave = AutoSaveRegistry(CaseStoreWriter(SessionLocal))
    logging.info("PDF renderer: %s", app.state.renderer.status()["message"])
    logging.info("Startup complete")
    yield
    # flush whatever the open editing sessions still hold
    await app.state.autosave.close_all()


app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok", "version": settings.VERSION}
