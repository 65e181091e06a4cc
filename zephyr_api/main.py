"""
Zephyr API - FastAPI Application Entry Point

A request composer that executes arbitrary HTTP requests outside the
browser sandbox and keeps a bounded, persistent history of them.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import configure_logging
from .database import SessionLocal, init_db
from .exceptions import register_exception_handlers
from .routers import execute, history
from .services.execution_session import ExecutionSession
from .services.history_store import HistoryStore
from .services.storage import SqlKeyValueStorage


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    configure_logging()
    # Startup: Initialize database and load history once
    init_db()
    history_store = HistoryStore(SqlKeyValueStorage(SessionLocal))
    app.state.history_store = history_store
    app.state.execution_session = ExecutionSession(history=history_store)
    logger.info("Zephyr API started with %d history entries", len(history_store))
    yield
    # Shutdown: drop any outstanding result
    app.state.execution_session.cancel()


app = FastAPI(
    title="Zephyr API",
    description="A breath of fresh air for API testing",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Configure CORS middleware
# Allow all origins for development; restrict in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure specific origins in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register global exception handlers
register_exception_handlers(app)


@app.get("/")
async def root():
    """Root endpoint returning API information."""
    return {
        "name": "Zephyr API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Register routers
app.include_router(execute.router)
app.include_router(history.router)
