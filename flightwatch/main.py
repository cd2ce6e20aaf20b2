# flightwatch/main.py
"""
FlightWatch - Main Application

Weather-safety monitoring for scheduled training flights: checks weather
along each flight path against the pilot's certification minima, flags
flights for rescheduling and finds safe departure windows.
"""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .api import monitoring_router, paths_router, reschedule_router
from .db.engine import check_connection
from .logging import configure_logging, get_logger
from .settings import settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup checks and shutdown logging."""
    configure_logging(settings.log_level, json_output=settings.log_json)
    logger.info("flightwatch_starting")

    if not check_connection():
        logger.warning("database_connection_failed")
    else:
        logger.info("database_connection_ok")

    yield

    logger.info("flightwatch_stopping")


app = FastAPI(
    title="FlightWatch",
    description="""
    Flight-path weather safety for training flights.

    - Waypoints with a climb/cruise/descent altitude profile along the great circle
    - Per-checkpoint scoring against certification minima
    - Hourly monitoring with color transitions and a 24h alert cooldown
    - Safe departure window search across the 5-day forecast
    """,
    version="0.1.0",
    lifespan=lifespan,
)

allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:8000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

app.include_router(monitoring_router)
app.include_router(reschedule_router)
app.include_router(paths_router)


@app.get("/health")
async def health_check():
    """Basic health check."""
    return {"status": "ok", "service": "flightwatch"}


@app.get("/health/db")
async def db_health_check():
    """Database health check."""
    if check_connection():
        return {"status": "ok", "database": "connected"}
    raise HTTPException(status_code=503, detail="Database connection failed")


def run():
    """Run the server (entry point for CLI)."""
    import uvicorn
    uvicorn.run(
        "flightwatch.main:app",
        host=settings.api_host,
        port=settings.api_port,
    )


if __name__ == "__main__":
    run()
