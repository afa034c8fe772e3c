"""
FastAPI Application Factory

Creates the report API consumed by the dashboard.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from superstore.analytics.records import RecordSet
from superstore.config import get_settings
from superstore.exceptions import ReportComputationError, SuperstoreError
from superstore.ingestion import load_records
from superstore.serving.api.middleware import RequestLoggingMiddleware
from superstore.serving.api.routes import health_router, reports_router

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the record extract once unless the app was built with records."""
    if app.state.records is None:
        source = get_settings().data.source_path
        try:
            app.state.records = load_records(source)
            logger.info("Records loaded for serving", records=len(app.state.records), source=source)
        except SuperstoreError as e:
            logger.error("Records could not be loaded; serving 503 until restart", error=str(e))

    yield

    logger.info("Shutting down")


async def report_error_handler(request: Request, exc: ReportComputationError) -> JSONResponse:
    logger.error("Report computation failed", report=exc.report, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "report_failed", "report": exc.report},
    )


def create_app(records: Optional[RecordSet] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        records: Already loaded record set; when omitted the configured
            extract is loaded at startup

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Superstore Profitability API",
        description="Discount, product, category, customer and geographic profitability reports",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.records = records

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(ReportComputationError, report_error_handler)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])

    return app


app = create_app()
