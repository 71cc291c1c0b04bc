"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from deck_analytics.api import analytics, tournament
from deck_analytics.core.config import get_settings
from deck_analytics.core.logging_config import setup_logging
from deck_analytics.middleware.logging_middleware import RequestLoggingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(log_level=settings.log_level, enable_file=settings.log_to_file)
    yield


app = FastAPI(
    title="Deck Analytics API",
    description="Deck analytics, meta-game and tournament preparation engine",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for local frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
app.include_router(tournament.router, prefix="/tournament", tags=["tournament"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Deck Analytics API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
