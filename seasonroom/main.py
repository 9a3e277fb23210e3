"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from seasonroom.api import calendar, guests, reservations, session
from seasonroom.core.config import settings
from seasonroom.services.crew_client import crew_client

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Season Room reservations")
    logger.info(f"Crew backend: {settings.API_BASE_URL}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    yield

    logger.info("Shutting down Season Room reservations")
    await crew_client.close()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Season Room Reservations",
        description="Crew season-room calendar, availability and reservation commands",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, specify exact origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(session.router)
    app.include_router(calendar.router)
    app.include_router(reservations.router)
    app.include_router(guests.router)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
