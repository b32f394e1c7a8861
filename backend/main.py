"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import accounts, checkr
from config import settings
from database import init_db
from logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup and warn about missing Checkr settings."""
    init_db()
    if not settings.checkr_oauth_configured:
        logger.warning(
            "CHECKR_OAUTH_CLIENT_ID / CHECKR_OAUTH_CLIENT_SECRET not set: "
            "token exchange will fail and every webhook will be rejected"
        )
    logger.info("Using Checkr API at %s", settings.CHECKR_API_URL)
    yield


app = FastAPI(
    title="Checkr Connect",
    description="Checkr OAuth connection and webhook handling for partner accounts",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(accounts.router)
app.include_router(checkr.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
