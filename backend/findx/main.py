"""
FindX Profile API - Main Application Entry Point

This module initializes the FastAPI application with:
- Database schema creation and domain catalog seeding
- Background scheduler for registry reconciliation and reset-code cleanup
- CORS middleware for frontend communication
- Prometheus metrics and uniform error responses
- API router registration

Architecture:
    FastAPI App
    ├── Lifespan Management (startup/shutdown)
    ├── CORS Middleware (settings.cors_origins)
    ├── Prometheus Middleware (/metrics)
    └── API Router
        ├── /auth - Accounts, password reset, profile updates
        ├── /domains - Work domain catalog and membership
        └── /resumes - Resume uploads and management
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from findx.api import api_router
from findx.config import get_settings
from findx.database import async_session, init_db
from findx.errors import register_exception_handlers
from findx.middleware import setup_metrics
from findx.scheduler import start_scheduler, stop_scheduler
from findx.services.domains import seed_domains

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle events.

    Startup:
        1. Create database tables
        2. Upsert the work domain catalog
        3. Start the background scheduler

    Shutdown:
        1. Stop the scheduler
    """
    await init_db()
    async with async_session() as db:
        await seed_domains(db)
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="FindX Profile API",
    description="Job-seeker accounts, profiles, work domains and resumes",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_metrics(app)
register_exception_handlers(app)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
