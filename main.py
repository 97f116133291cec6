"""
FastAPI Application for the Ambulance Waiting List service.

Composition root: builds the MongoDB document store and the waiting list
reconciler explicitly and hands them to the API routes.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError

from config import settings
from core.data import DocumentStore
from core.mongo_store import MongoDocumentStore
from shared.mongo_config import MongoServiceConfig
from use_cases.ambulance import Ambulance, AmbulanceApi, WaitingListReconciler
from use_cases.ambulance.api import error_response

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Reduce MongoDB driver logging verbosity
logging.getLogger("pymongo").setLevel(logging.WARNING)

API_VERSION = "1.0.0"


def create_app(
    store: Optional[DocumentStore[Ambulance]] = None,
    reconciler: Optional[WaitingListReconciler] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        store: Ambulance document store (MongoDB from the environment by default)
        reconciler: Waiting list reconciler (wall clock by default)
    """
    if store is None:
        store = MongoDocumentStore(Ambulance, MongoServiceConfig())
    if reconciler is None:
        reconciler = WaitingListReconciler()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager - handles startup and shutdown."""
        logger.info("Starting Ambulance Waiting List API...")
        yield
        logger.info("Shutting down...")
        store.disconnect()

    app = FastAPI(
        title="Ambulance Waiting List",
        description="Waiting list management for ambulances with estimated start times",
        version=API_VERSION,
        lifespan=lifespan,
        debug=settings.debug,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.debug(f"Rejected request to {request.url.path}: {exc}")
        return error_response(400, "Invalid request body", str(exc))

    app.include_router(AmbulanceApi(store, reconciler).router)

    @app.get("/openapi", include_in_schema=False)
    async def openapi_document():
        """Serve the OpenAPI document of this service."""
        return app.openapi()

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": API_VERSION,
            "environment": settings.environment,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=False,
        log_level=settings.log_level.lower()
    )
