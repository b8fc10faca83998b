"""Mindplan FastAPI application entry point."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mindplan.db.connection import Database
from mindplan.projects.router import get_project_service
from mindplan.projects.router import router as projects_router
from mindplan.projects.service import ProjectService

# Load .env from backend/ directory before reading any settings
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage database lifecycle and service wiring."""
    logging.basicConfig(
        level=os.environ.get("MINDPLAN_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db_path = os.environ.get("MINDPLAN_DB_PATH", "mindplan.db")
    db = await Database.connect(db_path)
    logger.info("Opened database at %s", db_path)

    service = ProjectService(db)
    app.dependency_overrides[get_project_service] = lambda: service

    app.state.db = db
    yield

    await db.close()


app = FastAPI(
    title="Mindplan",
    description="Project mind maps with completion that rolls up through the node tree",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.environ.get("MINDPLAN_CORS_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    ],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(projects_router)


@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "version": "0.1.0"}
